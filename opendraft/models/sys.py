from datetime import datetime
from opendraft.extensions import db
from .base import BaseModel

class AuditLog(BaseModel):
    """系统操作审计"""
    __tablename__ = 'sys_audit_logs'

    user_id = db.Column(db.Integer, db.ForeignKey('auth_users.id'))
    module = db.Column(db.String(32))  # e.g., 'content', 'media'
    action = db.Column(db.String(64))  # e.g., 'save', 'delete'
    ip_address = db.Column(db.String(64))
    details = db.Column(db.Text)  # JSON 详情

    user = db.relationship('User')


class Setting(db.Model):
    """站点设置键值对，一个 key 一行"""
    __tablename__ = 'sys_settings'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    key = db.Column(db.String(64), unique=True, index=True, nullable=False)
    value = db.Column(db.JSON)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
