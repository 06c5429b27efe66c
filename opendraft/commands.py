import click
import random
from datetime import datetime, timedelta
from flask.cli import with_appcontext
from opendraft.extensions import db
from opendraft.models.auth import User
from opendraft.models.taxonomy import Category, Tag
from opendraft.models.content import Content, SeoMeta, CONTENT_TYPES
from opendraft.models.media import Media
from opendraft.utils.slug import slugify
from opendraft.utils.fake_gen import fake, OpenDraftProvider


@click.command('status')
@with_appcontext
def status():
    """
    [验证指令] 查看当前数据库中的数据统计。
    """
    click.echo(click.style('📊 OpenDraft 数据库状态:', fg='cyan', bold=True))

    try:
        u_count = User.query.count()
        c_count = Content.query.count()
        p_count = Content.query.filter_by(status='published').count()
        cat_count = Category.query.count()
        t_count = Tag.query.count()
        m_count = Media.query.count()

        click.echo(f" - 用户 (Users): \t{u_count}")
        click.echo(f" - 内容 (Contents): \t{c_count} (已发布 {p_count})")
        click.echo(f" - 分类 (Categories): \t{cat_count}")
        click.echo(f" - 标签 (Tags): \t{t_count}")
        click.echo(f" - 媒体 (Media): \t{m_count}")

        if u_count > 0:
            click.echo(click.style('✔ 数据库连接正常，数据已存在。', fg='green'))
        else:
            click.echo(click.style('⚠ 数据库为空，请运行 flask forge 生成数据。', fg='yellow'))

    except Exception as e:
        click.echo(click.style(f'✘ 数据库读取失败: {str(e)}', fg='red'))
        click.echo("请检查是否执行了 'flask db upgrade'")


@click.command('forge')
@click.option('--count', default=30, help='生成的内容条数 (默认30)')
@with_appcontext
def forge(count):
    """
    [演示数据] 重建数据库并填充演示内容。
    警告：这将清除数据库中的现有数据！
    """
    click.echo(click.style(f'⚡ 初始化 OpenDraft 演示数据 ({count} 条内容)...', fg='cyan', bold=True))

    # 1. 清除旧数据
    db.drop_all()
    db.create_all()

    # 2. 管理员
    click.echo('正在创建管理员...')
    admin = init_auth()

    # 3. 分类与标签
    click.echo('正在创建分类与标签...')
    categories, tags = init_taxonomy()

    # 4. 内容
    click.echo('正在发布演示内容...')
    init_contents(admin, categories, tags, count)

    click.echo(click.style('✅ 完成！管理员: admin@opendraft.local / admin123', fg='green', bold=True))


def init_auth():
    admin = User(
        email='admin@opendraft.local',
        password='admin123',
        display_name='Admin',
        bio=fake.sentence(nb_words=10),
        is_admin=True,
    )
    db.session.add(admin)
    db.session.commit()
    return admin


def init_taxonomy():
    categories = []
    for name in ('Engineering', 'Design', 'Product', 'Culture'):
        category = Category(name=name, slug=slugify(name), description=fake.sentence())
        db.session.add(category)
        categories.append(category)
    db.session.flush()

    # 二级分类
    backend = Category(name='Backend', slug='backend', parent_id=categories[0].id)
    db.session.add(backend)
    categories.append(backend)

    tags = [Tag(name=name, slug=slugify(name)) for name in OpenDraftProvider.topics]
    db.session.add_all(tags)
    db.session.commit()
    click.echo(f'  ✓ 已创建 {len(categories)} 个分类, {len(tags)} 个标签')
    return categories, tags


def init_contents(admin, categories, tags, count):
    now = datetime.utcnow()
    statuses = ['published'] * 6 + ['draft'] * 2 + ['scheduled', 'pending_review', 'archived']

    for i in range(count):
        title = fake.content_title()
        status = random.choice(statuses)
        content = Content(
            title=title,
            slug=f'{slugify(title)}-{i + 1}',
            body=fake.tiptap_doc(paragraphs=random.randint(2, 5)),
            type=random.choice(CONTENT_TYPES[:3]),
            status=status,
            visibility=random.choice(['public'] * 4 + ['private', 'members_only']),
            excerpt=fake.sentence(nb_words=16),
            is_featured=random.random() < 0.2,
            category_id=random.choice(categories).id,
            author_id=admin.id,
            published_at=now - timedelta(days=random.randint(0, 90)) if status == 'published' else None,
            scheduled_at=now + timedelta(days=random.randint(1, 30)) if status == 'scheduled' else None,
        )
        content.tags = random.sample(tags, k=min(len(tags), random.randint(0, 3)))
        db.session.add(content)
        db.session.flush()

        if random.random() < 0.5:
            db.session.add(SeoMeta(
                content_id=content.id,
                meta_title=title,
                meta_description=content.excerpt,
            ))

    db.session.commit()
    click.echo(f'  ✓ 已创建 {count} 条内容')


@click.command('create-admin')
@click.option('--email', prompt=True, help='管理员邮箱')
@click.option('--name', default='Admin', help='显示名称')
@click.password_option(help='登录密码')
@with_appcontext
def create_admin(email, name, password):
    """创建后台管理员账号"""
    email = email.strip().lower()
    if User.query.filter_by(email=email).first():
        click.echo(click.style(f'✘ 邮箱已存在: {email}', fg='red'))
        return
    user = User(email=email, password=password, display_name=name, is_admin=True)
    db.session.add(user)
    db.session.commit()
    click.echo(click.style(f'✔ 管理员已创建: {email}', fg='green'))


@click.command('prune-seo')
@click.option('--dry-run', is_flag=True, help='只统计，不删除')
@with_appcontext
def prune_seo(dry_run):
    """清理内容已被删除的 SEO 记录"""
    orphans = SeoMeta.query.filter(~SeoMeta.content_id.in_(db.select(Content.id)))
    total = orphans.count()
    if dry_run:
        click.echo(f'发现 {total} 条孤立的 SEO 记录')
        return
    orphans.delete(synchronize_session=False)
    db.session.commit()
    click.echo(click.style(f'✔ 已删除 {total} 条孤立的 SEO 记录', fg='green'))
