"""内容持久化服务 (后台内容管理的数据访问层)"""
import math
from datetime import datetime
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from flask import current_app

from opendraft.extensions import db
from opendraft.models.content import Content, content_tags
from opendraft.exceptions import OpenDraftException, StorageError, translate_integrity_error
from opendraft.services.content_validator import parse_body, validate_content
from opendraft.services.content_builder import build_content_data
from opendraft.services.seo_service import SeoService
from opendraft.services.tag_service import TagService
from opendraft.utils.rich_text import is_empty_document

DUPLICATE_CONTENT_SLUG = "A content with this slug already exists"

# 列表页返回的字段
LIST_FIELDS = (
    'id', 'title', 'slug', 'type', 'status', 'visibility',
    'created_at', 'updated_at', 'published_at', 'author_id',
)


def ilike_pattern(term):
    """把搜索词转成 ILIKE 子串模式，转义通配符"""
    escaped = term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f'%{escaped}%'


def _isoformat(value):
    return value.isoformat() if isinstance(value, datetime) else value


def serialize_list_item(content):
    """列表行：关联的作者统一为 {display_name} 或 None"""
    item = {name: _isoformat(getattr(content, name)) for name in LIST_FIELDS}
    item['author'] = {'display_name': content.author.display_name} if content.author else None
    return item


class ContentService:

    @staticmethod
    def create_content(data: dict) -> int:
        """
        新建内容
        :return: 新内容 ID
        :raises DuplicateSlug: slug 已存在
        :raises StorageError: 其它数据库错误
        """
        try:
            content = Content(**data)
            db.session.add(content)
            db.session.commit()
            return content.id
        except IntegrityError as e:
            db.session.rollback()
            raise translate_integrity_error(e, DUPLICATE_CONTENT_SLUG) from e
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e

    @staticmethod
    def update_content(content_id: int, data: dict) -> None:
        """更新内容；ID 不存在时什么也不做 (不报错)"""
        try:
            Content.query.filter_by(id=content_id).update(data, synchronize_session=False)
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise translate_integrity_error(e, DUPLICATE_CONTENT_SLUG) from e
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e

    @staticmethod
    def find_content_by_id(content_id):
        return db.session.get(Content, content_id)

    @staticmethod
    def delete_content_by_id(content_id) -> None:
        """删除内容及其标签关联 (不删除分类 / 标签本身)"""
        try:
            db.session.execute(content_tags.delete().where(content_tags.c.content_id == content_id))
            Content.query.filter_by(id=content_id).delete(synchronize_session=False)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e

    @staticmethod
    def find_contents_with_filters(search=None, status=None, type=None, page=1, limit=10):
        """
        后台内容列表
        - search: 标题或 slug 的不区分大小写子串匹配
        - status / type: 精确匹配，'all' 表示不过滤
        - 按更新时间倒序，偏移分页
        """
        page = max(1, page or 1)
        limit = max(1, limit or 10)
        offset = (page - 1) * limit

        query = Content.query
        if search and search.strip():
            pattern = ilike_pattern(search.strip())
            query = query.filter(or_(
                Content.title.ilike(pattern, escape='\\'),
                Content.slug.ilike(pattern, escape='\\'),
            ))
        if status and status != 'all':
            query = query.filter(Content.status == status)
        if type and type != 'all':
            query = query.filter(Content.type == type)

        try:
            total = query.order_by(None).count()
            rows = (query.order_by(Content.updated_at.desc(), Content.id.desc())
                    .offset(offset).limit(limit).all())
        except SQLAlchemyError as e:
            current_app.logger.error(f'查询内容列表失败: {e}')
            return {'data': [], 'total': 0, 'page': page, 'limit': limit, 'totalPages': 0}

        return {
            'data': [serialize_list_item(c) for c in rows],
            'total': total,
            'page': page,
            'limit': limit,
            'totalPages': math.ceil(total / limit),
        }

    @staticmethod
    def bulk_delete_contents_by_ids(ids) -> int:
        """批量删除，返回删除行数"""
        if not ids:
            return 0
        try:
            db.session.execute(content_tags.delete().where(content_tags.c.content_id.in_(ids)))
            deleted = Content.query.filter(Content.id.in_(ids)).delete(synchronize_session=False)
            db.session.commit()
            return deleted
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e

    @staticmethod
    def _status_update(status, now):
        update_data = {'status': status, 'updated_at': now}
        if status == 'published':
            update_data['published_at'] = now
        return update_data

    @staticmethod
    def bulk_update_content_status(ids, status) -> int:
        """批量修改状态；发布时整批使用同一个发布时间"""
        if not ids:
            return 0
        try:
            updated = Content.query.filter(Content.id.in_(ids)).update(
                ContentService._status_update(status, datetime.utcnow()),
                synchronize_session=False,
            )
            db.session.commit()
            return updated
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e

    @staticmethod
    def update_content_status_by_id(content_id, status) -> None:
        """快速编辑：只改状态 (scheduled_at 保持原值)"""
        try:
            Content.query.filter_by(id=content_id).update(
                ContentService._status_update(status, datetime.utcnow()),
                synchronize_session=False,
            )
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e

    @staticmethod
    def update_content_visibility_by_id(content_id, visibility) -> None:
        """快速编辑：只改可见性"""
        try:
            Content.query.filter_by(id=content_id).update(
                {'visibility': visibility, 'updated_at': datetime.utcnow()},
                synchronize_session=False,
            )
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e

    @staticmethod
    def get_content(content_id):
        """
        编辑页回填数据：内容本身 + tag_ids + seo_meta
        内容不存在返回 None
        """
        content = ContentService.find_content_by_id(content_id)
        if content is None:
            return None

        data = content.to_dict()
        data['tag_ids'] = TagService.find_tags_by_content_id(content_id)
        seo = SeoService.find_seo_by_content_id(content_id)
        data['seo_meta'] = seo.to_dict() if seo else None
        return data

    @staticmethod
    def save_content(content_input, author_id, now=None):
        """
        保存内容 (新建或更新)

        流程：解析正文 -> 校验 -> 组装记录 -> 写内容 -> 同步标签 -> upsert SEO
        三步写入相互独立、不回滚；每一步都可重复执行。

        :return: {'error': str|None, 'success': bool, 'content_id': int}
        """
        body, error = parse_body(content_input.body_json)
        if error:
            return {'error': error, 'success': False}

        # 客户端的空文档标记不可信，服务端再判断一次
        content_input.body_is_empty = content_input.body_is_empty or is_empty_document(body)

        result = validate_content(content_input, now=now)
        if not result.valid:
            return {'error': result.message, 'errors': result.errors, 'success': False}

        data = build_content_data(content_input, body, author_id, now=now)

        try:
            if content_input.id:
                ContentService.update_content(content_input.id, data)
                content_id = content_input.id
            else:
                content_id = ContentService.create_content(data)
        except OpenDraftException as e:
            return {'error': e.message, 'success': False}

        try:
            TagService.sync_content_tags(content_id, content_input.tag_ids)
        except StorageError as e:
            current_app.logger.error(f'同步内容标签失败 (content_id={content_id}): {e.message}')
            return {'error': e.message, 'success': False, 'content_id': content_id}

        # SEO 为非关键数据，失败只记录日志
        SeoService.upsert_seo_meta(content_id, content_input.seo)

        current_app.logger.info(f'内容已保存: #{content_id} {data["slug"]} ({data["status"]})')
        return {'error': None, 'success': True, 'content_id': content_id}
