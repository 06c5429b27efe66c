"""
媒体库服务
上传顺序：先写存储，再写元数据行；写行失败时删除已上传的文件。
删除顺序：先删存储文件 (失败只记日志)，再删行。
"""
import math
import os
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from flask import current_app

from opendraft.extensions import db
from opendraft.models.media import Media
from opendraft.exceptions import NotFound, StorageError, ValidationError
from opendraft.utils.cloud_storage import upload_file, remove_files
from opendraft.utils.file_helper import generate_filename
from opendraft.services.content_service import ilike_pattern

NO_FILE = "No file provided"
INVALID_TYPE = "Invalid file type. Only images are allowed."
TOO_LARGE = "File too large. Maximum size is 10MB."
MEDIA_NOT_FOUND = "Media not found"


def _file_size(file):
    stream = getattr(file, 'stream', file)
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def serialize_media(media):
    data = media.to_dict()
    data['uploader'] = {'display_name': media.uploader.display_name} if media.uploader else None
    return data


class MediaService:

    @staticmethod
    def find_media(search=None, type=None, page=1, limit=None):
        """媒体列表：原始文件名 / alt 文本搜索，按 MIME 大类过滤，新上传的在前"""
        limit = limit or current_app.config.get('MEDIA_PER_PAGE', 20)
        page = max(1, page or 1)

        query = Media.query
        if search and search.strip():
            pattern = ilike_pattern(search.strip())
            query = query.filter(or_(
                Media.original_name.ilike(pattern, escape='\\'),
                Media.alt_text.ilike(pattern, escape='\\'),
            ))
        if type and type != 'all':
            query = query.filter(Media.mime_type.ilike(f'{type}/%'))

        total = query.order_by(None).count()
        rows = (query.order_by(Media.created_at.desc(), Media.id.desc())
                .offset((page - 1) * limit).limit(limit).all())
        return {
            'data': [serialize_media(m) for m in rows],
            'total': total,
            'page': page,
            'limit': limit,
            'totalPages': math.ceil(total / limit),
        }

    @staticmethod
    def upload_media(file, user_id) -> Media:
        """
        上传图片到媒体库
        :raises ValidationError: 无文件 / 类型不允许 / 超过大小上限
        :raises StorageError: 存储或数据库写入失败
        """
        if file is None or not getattr(file, 'filename', None):
            raise ValidationError(NO_FILE)

        mime_type = (file.mimetype or '').lower()
        if mime_type not in current_app.config['MEDIA_ALLOWED_TYPES']:
            raise ValidationError(INVALID_TYPE)

        size = _file_size(file)
        if size > current_app.config['MEDIA_MAX_SIZE']:
            raise ValidationError(TOO_LARGE)

        filename = generate_filename(file.filename)
        storage_path = f'uploads/{user_id}/{filename}'
        url = upload_file(file, storage_path)

        media = Media(
            filename=filename,
            original_name=file.filename,
            mime_type=mime_type,
            size=size,
            url=url,
            storage_path=storage_path,
            uploaded_by=user_id,
        )
        try:
            db.session.add(media)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'媒体记录写入失败，回滚已上传文件: {storage_path}')
            remove_files([storage_path])
            raise StorageError(str(e)) from e

        current_app.logger.info(f'媒体已上传: {storage_path} ({size} bytes)')
        return media

    @staticmethod
    def update_media(media_id, alt_text=None, caption=None) -> None:
        media = db.session.get(Media, media_id)
        if media is None:
            raise NotFound(MEDIA_NOT_FOUND)
        media.alt_text = (alt_text or '').strip() or None
        media.caption = (caption or '').strip() or None
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e

    @staticmethod
    def delete_media(media_id) -> None:
        media = db.session.get(Media, media_id)
        if media is None:
            raise NotFound(MEDIA_NOT_FOUND)
        remove_files([media.storage_path])
        try:
            db.session.delete(media)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e

    @staticmethod
    def bulk_delete_media(ids) -> int:
        if not ids:
            return 0
        rows = Media.query.filter(Media.id.in_(ids)).all()
        if not rows:
            return 0
        remove_files([m.storage_path for m in rows])
        try:
            deleted = Media.query.filter(Media.id.in_([m.id for m in rows])).delete(synchronize_session=False)
            db.session.commit()
            return deleted
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e
