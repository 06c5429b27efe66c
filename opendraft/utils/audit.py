"""
审计日志工具模块
用于记录后台中的重要写操作
"""
import json
from flask import request, has_request_context
from flask_login import current_user
from opendraft.models.sys import AuditLog
from opendraft.extensions import db


def log_action(module, action, details=None):
    """
    记录审计日志 (仅记录已登录用户的操作)
    :param module: 模块名称 (如 'content', 'media', 'settings')
    :param action: 操作名称 (如 'save', 'delete', 'bulk_status')
    :param details: 详细信息 (dict)
    """
    if not has_request_context() or not current_user.is_authenticated:
        return
    log = AuditLog(
        user_id=current_user.id,
        module=module,
        action=action,
        ip_address=request.remote_addr,
        details=json.dumps(details, ensure_ascii=False, default=str) if details else None
    )
    db.session.add(log)
    db.session.commit()
