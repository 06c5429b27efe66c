"""标签服务：标签 CRUD 与内容标签关联同步"""
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from flask import current_app

from opendraft.extensions import db
from opendraft.models.taxonomy import Tag
from opendraft.models.content import content_tags
from opendraft.exceptions import OpenDraftException, StorageError, ValidationError, translate_integrity_error
from opendraft.utils.slug import generate_slug, slugify

DUPLICATE_TAG_SLUG = "A tag with this slug already exists"


class TagService:

    @staticmethod
    def find_all_tags():
        """标签选择器用：按名称排序"""
        return [
            {'id': t.id, 'name': t.name, 'slug': t.slug}
            for t in Tag.query.order_by(Tag.name).all()
        ]

    @staticmethod
    def get_tags_with_counts():
        """标签管理列表：附带被内容引用的次数"""
        counts = dict(
            db.session.query(content_tags.c.tag_id, func.count(content_tags.c.content_id))
            .group_by(content_tags.c.tag_id)
            .all()
        )
        return [
            {**t.to_dict(), '_count': {'contents': counts.get(t.id, 0)}}
            for t in Tag.query.order_by(Tag.name).all()
        ]

    @staticmethod
    def create_tag(name, slug=None) -> Tag:
        if not name or not name.strip():
            raise ValidationError("Name is required")
        tag = Tag(name=name.strip(), slug=generate_slug(name, slug))
        try:
            db.session.add(tag)
            db.session.commit()
            return tag
        except IntegrityError as e:
            db.session.rollback()
            raise translate_integrity_error(e, DUPLICATE_TAG_SLUG) from e

    @staticmethod
    def quick_create_tag(name):
        """
        内容编辑页中即时新建标签，slug 由名称自动生成
        失败时记录日志并返回 None
        """
        try:
            tag = TagService.create_tag(name, slugify(name or ''))
        except OpenDraftException as e:
            current_app.logger.error(f'即时创建标签失败: {e.message}')
            return None
        return {'id': tag.id, 'name': tag.name, 'slug': tag.slug}

    @staticmethod
    def update_tag(tag_id, name, slug=None) -> None:
        if not name or not name.strip():
            raise ValidationError("Name is required")
        try:
            Tag.query.filter_by(id=tag_id).update(
                {'name': name.strip(), 'slug': generate_slug(name, slug)},
                synchronize_session=False,
            )
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise translate_integrity_error(e, DUPLICATE_TAG_SLUG) from e

    @staticmethod
    def delete_tag(tag_id) -> None:
        """删除标签：无前置条件，先删关联再删标签"""
        try:
            db.session.execute(content_tags.delete().where(content_tags.c.tag_id == tag_id))
            db.session.commit()
            Tag.query.filter_by(id=tag_id).delete(synchronize_session=False)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e

    @staticmethod
    def sync_content_tags(content_id, tag_ids) -> None:
        """
        全量替换内容的标签关联：先删除全部，再批量插入。
        两步分别提交，中间失败会让内容暂时没有标签，重试即可恢复。
        """
        try:
            db.session.execute(content_tags.delete().where(content_tags.c.content_id == content_id))
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e

        if not tag_ids:
            return

        try:
            db.session.execute(
                content_tags.insert(),
                [{'content_id': content_id, 'tag_id': tag_id} for tag_id in tag_ids],
            )
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e

    @staticmethod
    def find_tags_by_content_id(content_id):
        rows = db.session.execute(
            db.select(content_tags.c.tag_id)
            .where(content_tags.c.content_id == content_id)
            .order_by(content_tags.c.tag_id)
        ).scalars().all()
        return list(rows)
