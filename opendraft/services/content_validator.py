"""
内容校验：表单输入的业务规则检查。
所有错误累积后一起返回，只有正文 JSON 解析失败会提前终止。
"""
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone

from opendraft.utils.slug import generate_slug

TITLE_REQUIRED = "Title is required"
CONTENT_REQUIRED = "Content is required to publish"
SCHEDULE_REQUIRED = "Schedule date is required for scheduled posts"
SCHEDULE_IN_PAST = "Schedule date must be in the future"
SCHEDULE_INVALID = "Schedule date is not a valid date"
SLUG_REQUIRED = "Slug could not be generated from the title, please enter a slug"
INVALID_BODY = "Invalid content format"


@dataclass
class ValidationResult:
    valid: bool
    errors: list = field(default_factory=list)

    @property
    def message(self):
        """错误信息合并为一条，便于前端提示"""
        return '; '.join(self.errors)


def parse_datetime(value):
    """
    解析 ISO 8601 时间字符串，统一转换为 naive UTC。
    空值返回 None，格式错误抛出 ValueError。
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        value = str(value).strip()
        if not value:
            return None
        # fromisoformat 在 3.11 之前不接受 Z 后缀
        if value[-1] in "Zz":
            value = value[:-1] + "+00:00"
        dt = datetime.fromisoformat(value)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def parse_body(body_json):
    """
    解析正文 JSON
    :return: (body, error)
    """
    try:
        return json.loads(body_json), None
    except (TypeError, ValueError):
        return None, INVALID_BODY


def validate_title(title):
    if not title or not title.strip():
        return TITLE_REQUIRED
    return None


def validate_slug(title, slug):
    """标题全是符号或非拉丁文字时生成的 slug 为空，需要手动填写"""
    if title and title.strip() and not generate_slug(title, slug):
        return SLUG_REQUIRED
    return None


def validate_body_for_publish(status, body_is_empty):
    if status == 'published' and body_is_empty:
        return CONTENT_REQUIRED
    return None


def validate_scheduled_date(status, scheduled_at, now=None):
    if status != 'scheduled':
        return None
    if scheduled_at is None or (isinstance(scheduled_at, str) and not scheduled_at.strip()):
        return SCHEDULE_REQUIRED
    try:
        schedule_date = parse_datetime(scheduled_at)
    except ValueError:
        return SCHEDULE_INVALID
    now = now or datetime.utcnow()
    if schedule_date <= now:
        return SCHEDULE_IN_PAST
    return None


def validate_content(content_input, now=None):
    """
    校验内容输入
    :param content_input: ContentInput
    :return: ValidationResult
    """
    errors = []

    title_error = validate_title(content_input.title)
    if title_error:
        errors.append(title_error)

    slug_error = validate_slug(content_input.title, content_input.slug)
    if slug_error:
        errors.append(slug_error)

    body_error = validate_body_for_publish(content_input.status, content_input.body_is_empty)
    if body_error:
        errors.append(body_error)

    schedule_error = validate_scheduled_date(content_input.status, content_input.scheduled_at, now=now)
    if schedule_error:
        errors.append(schedule_error)

    return ValidationResult(valid=not errors, errors=errors)
