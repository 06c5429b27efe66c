"""站点设置：sys_settings 中每个 key 一行，读取时合并到默认值上"""
from dataclasses import dataclass, asdict, fields
from sqlalchemy.exc import SQLAlchemyError

from opendraft.extensions import db
from opendraft.models.sys import Setting
from opendraft.exceptions import StorageError, ValidationError


@dataclass
class SiteSettings:
    site_name: str = "My Blog"
    site_description: str = "A blog built with OpenDraft"
    site_logo: str = ""
    site_favicon: str = ""
    site_url: str = ""
    posts_per_page: int = 10
    comments_enabled: bool = False
    comments_moderation: bool = True
    social_twitter: str = ""
    social_facebook: str = ""
    social_instagram: str = ""
    social_github: str = ""

    def to_dict(self):
        return asdict(self)


SETTING_KEYS = tuple(f.name for f in fields(SiteSettings))


def _coerce(name, value, default):
    """按默认值的类型转换存储值，无法转换时回退到默认值"""
    if value is None:
        return default
    if isinstance(default, bool):
        if isinstance(value, str):
            return value.lower() in ('1', 'true', 'on', 'yes', 'y')
        return bool(value)
    if isinstance(default, int):
        try:
            return int(value)
        except (TypeError, ValueError):
            return default
    return str(value)


class SettingsService:

    @staticmethod
    def get_site_settings() -> SiteSettings:
        defaults = SiteSettings()
        stored = {s.key: s.value for s in Setting.query.filter(Setting.key.in_(SETTING_KEYS)).all()}
        values = {
            name: _coerce(name, stored.get(name), getattr(defaults, name))
            for name in SETTING_KEYS
        }
        return SiteSettings(**values)

    @staticmethod
    def update_site_settings(data: dict) -> SiteSettings:
        """
        写入提交的设置项 (未知 key 忽略)
        :raises ValidationError: 站点名为空 / 每页数量不合法
        """
        errors = []
        if 'site_name' in data and not (data.get('site_name') or '').strip():
            errors.append("Site name is required")
        if 'posts_per_page' in data:
            try:
                if int(data['posts_per_page']) < 1:
                    errors.append("Posts per page must be at least 1")
            except (TypeError, ValueError):
                errors.append("Posts per page must be a number")
        if errors:
            raise ValidationError(errors)

        defaults = SiteSettings()
        try:
            for key in SETTING_KEYS:
                if key not in data:
                    continue
                value = _coerce(key, data[key], getattr(defaults, key))
                if isinstance(value, str):
                    value = value.strip()
                record = Setting.query.filter_by(key=key).first()
                if record is None:
                    record = Setting(key=key)
                    db.session.add(record)
                record.value = value
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e

        return SettingsService.get_site_settings()
