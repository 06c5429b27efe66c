"""
表单验证器与表单错误提取
"""
from urllib.parse import urlsplit
from flask import request
from wtforms.validators import ValidationError

from opendraft.services.content_builder import parse_tag_ids


def validate_url(form, field):
    """http(s) 绝对地址或以 / 开头的站内路径，空值放行"""
    value = (field.data or '').strip()
    if not value or value.startswith('/'):
        return
    parts = urlsplit(value)
    if parts.scheme not in ('http', 'https') or not parts.netloc:
        raise ValidationError(f'{field.label.text} must be a valid URL')


def form_errors(form):
    """按字段顺序展开 WTForms 的错误信息"""
    errors = []
    for name, messages in form.errors.items():
        for message in messages:
            if isinstance(message, str):
                errors.append(message)
            else:
                errors.extend(str(m) for m in message)
    return errors


def request_ids():
    """批量操作的 ids：JSON 数组、重复的表单字段或逗号分隔的字符串"""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return parse_tag_ids(payload.get('ids'))
    return parse_tag_ids(','.join(request.form.getlist('ids')))
