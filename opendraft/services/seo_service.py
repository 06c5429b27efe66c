from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError
from flask import current_app

from opendraft.extensions import db
from opendraft.models.content import SeoMeta


def _clean(value, strip=True):
    if value is None:
        return None
    value = value.strip() if strip else value
    return value or None


class SeoService:

    @staticmethod
    def upsert_seo_meta(content_id, seo) -> bool:
        """
        以 content_id 为冲突键写入 SEO 元数据。
        SEO 属于非关键数据：失败只记录日志，不影响内容保存结果。
        :return: 是否写入成功
        """
        values = {
            'meta_title': _clean(seo.meta_title),
            'meta_description': _clean(seo.meta_description),
            'og_image_url': _clean(seo.og_image_url, strip=False),
            'canonical_url': _clean(seo.canonical_url),
            'updated_at': datetime.utcnow(),
        }
        try:
            record = SeoMeta.query.filter_by(content_id=content_id).first()
            if record is None:
                record = SeoMeta(content_id=content_id)
                db.session.add(record)
            for key, value in values.items():
                setattr(record, key, value)
            db.session.commit()
            return True
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'SEO meta error (content_id={content_id}): {e}')
            return False

    @staticmethod
    def find_seo_by_content_id(content_id):
        return SeoMeta.query.filter_by(content_id=content_id).first()
