"""
公开只读 API 的查询服务
公开文章 = status 为 published 且 visibility 为 public 的内容
"""
import math
from sqlalchemy import or_, func
from flask import current_app

from opendraft.extensions import db
from opendraft.models.content import Content, SeoMeta, content_tags
from opendraft.models.taxonomy import Category, Tag
from opendraft.services.content_service import ilike_pattern

SORT_FIELDS = ('published_at', 'updated_at', 'created_at', 'title')
RELATED_LIMIT = 5


def _iso(value):
    return value.isoformat() if value else None


def serialize_post(post, with_body=True):
    """扁平化的公开文章结构 (作者 / 分类展开为字段，标签为列表)"""
    data = {
        'id': post.id,
        'title': post.title,
        'slug': post.slug,
        'excerpt': post.excerpt,
        'type': post.type,
        'thumbnail_url': post.thumbnail_url,
        'is_featured': bool(post.is_featured),
        'allow_comments': bool(post.allow_comments),
        'published_at': _iso(post.published_at),
        'created_at': _iso(post.created_at),
        'updated_at': _iso(post.updated_at),
        'author_name': post.author.display_name if post.author else None,
        'author_avatar': post.author.avatar_url if post.author else None,
        'category_id': post.category_id,
        'category_name': post.category.name if post.category else None,
        'category_slug': post.category.slug if post.category else None,
        'tags': [{'id': t.id, 'name': t.name, 'slug': t.slug} for t in post.tags],
    }
    if with_body:
        data['body'] = post.body
        data['body_format'] = post.body_format
    return data


def public_posts():
    return Content.query.filter(Content.status == 'published', Content.visibility == 'public')


def parse_paging(args, default_limit=10):
    """page >= 1，limit 限制在 1..API_MAX_LIMIT"""
    max_limit = current_app.config.get('API_MAX_LIMIT', 100)
    page = args.get('page', 1, type=int)
    limit = args.get('limit', default_limit, type=int)
    return max(1, page), min(max_limit, max(1, limit))


def paginate(query, page, limit, order_by):
    total = query.order_by(None).count()
    rows = query.order_by(*order_by).offset((page - 1) * limit).limit(limit).all()
    return [serialize_post(p) for p in rows], {
        'page': page,
        'limit': limit,
        'total': total,
        'totalPages': math.ceil(total / limit),
    }


class PublicService:

    @staticmethod
    def list_posts(page, limit, type=None, category=None, tag=None, featured=False,
                   sort='published_at', order='desc'):
        query = public_posts()
        if type:
            query = query.filter(Content.type == type)
        if featured:
            query = query.filter(Content.is_featured.is_(True))
        if category:
            query = query.filter(Content.category.has(Category.slug == category))
        if tag:
            query = query.filter(Content.tags.any(Tag.slug == tag))

        column = getattr(Content, sort if sort in SORT_FIELDS else 'published_at')
        direction = column.asc() if order == 'asc' else column.desc()
        return paginate(query, page, limit, (direction, Content.id.desc()))

    @staticmethod
    def get_post(slug):
        """文章详情 + SEO + 同类型的相关文章 (最多 5 篇)；不存在返回 None"""
        post = public_posts().filter(Content.slug == slug).first()
        if post is None:
            return None

        data = serialize_post(post)
        seo = SeoMeta.query.filter_by(content_id=post.id).first()
        data['seo_meta'] = seo.to_dict() if seo else None

        related = (public_posts()
                   .filter(Content.type == post.type, Content.id != post.id)
                   .order_by(Content.published_at.desc(), Content.id.desc())
                   .limit(RELATED_LIMIT).all())
        data['related_posts'] = [{
            'id': r.id,
            'title': r.title,
            'slug': r.slug,
            'excerpt': r.excerpt,
            'thumbnail_url': r.thumbnail_url,
            'published_at': _iso(r.published_at),
            'author_name': r.author.display_name if r.author else None,
        } for r in related]
        return data

    @staticmethod
    def list_categories():
        counts = dict(
            db.session.query(Content.category_id, func.count(Content.id))
            .filter(Content.status == 'published', Content.visibility == 'public',
                    Content.category_id.isnot(None))
            .group_by(Content.category_id)
            .all()
        )
        return [{
            'id': c.id,
            'name': c.name,
            'slug': c.slug,
            'description': c.description,
            'parent_id': c.parent_id,
            'post_count': counts.get(c.id, 0),
        } for c in Category.query.order_by(Category.name).all()]

    @staticmethod
    def list_tags():
        counts = dict(
            db.session.query(content_tags.c.tag_id, func.count(Content.id))
            .join(Content, Content.id == content_tags.c.content_id)
            .filter(Content.status == 'published', Content.visibility == 'public')
            .group_by(content_tags.c.tag_id)
            .all()
        )
        return [{
            'id': t.id,
            'name': t.name,
            'slug': t.slug,
            'post_count': counts.get(t.id, 0),
        } for t in Tag.query.order_by(Tag.name).all()]

    @staticmethod
    def find_category(slug):
        return Category.query.filter_by(slug=slug).first()

    @staticmethod
    def find_tag(slug):
        return Tag.query.filter_by(slug=slug).first()

    @staticmethod
    def posts_in_category(category, page, limit):
        query = public_posts().filter(Content.category_id == category.id)
        return paginate(query, page, limit, (Content.published_at.desc(), Content.id.desc()))

    @staticmethod
    def posts_with_tag(tag, page, limit):
        query = public_posts().filter(Content.tags.any(Tag.id == tag.id))
        return paginate(query, page, limit, (Content.published_at.desc(), Content.id.desc()))

    @staticmethod
    def search(q, page, limit, type=None):
        pattern = ilike_pattern(q)
        query = public_posts().filter(or_(
            Content.title.ilike(pattern, escape='\\'),
            Content.excerpt.ilike(pattern, escape='\\'),
            Content.slug.ilike(pattern, escape='\\'),
        ))
        if type:
            query = query.filter(Content.type == type)
        return paginate(query, page, limit, (Content.published_at.desc(), Content.id.desc()))
