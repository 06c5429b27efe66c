"""
内容组装：表单数据 -> ContentInput -> 持久化记录 (dict)
build_content_data 为纯函数，时钟可注入
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from opendraft.models.content import BODY_FORMAT
from opendraft.utils.slug import generate_slug
from opendraft.services.content_validator import parse_datetime


@dataclass
class SeoInput:
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    og_image_url: Optional[str] = None
    canonical_url: Optional[str] = None


@dataclass
class ContentInput:
    """内容编辑表单提交的原始输入"""
    title: str
    body_json: str = ''
    id: Optional[int] = None
    slug: Optional[str] = None
    type: str = 'post'
    status: str = 'draft'
    visibility: str = 'public'
    excerpt: Optional[str] = None
    category_id: Optional[int] = None
    thumbnail_url: Optional[str] = None
    is_featured: bool = False
    allow_comments: bool = True
    scheduled_at: Optional[str] = None
    body_is_empty: bool = False
    tag_ids: list = field(default_factory=list)
    seo: SeoInput = field(default_factory=SeoInput)


def _to_int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_tag_ids(raw):
    """逗号分隔的标签 ID，去掉空值和非数字，保持顺序去重"""
    if not raw:
        return []
    if isinstance(raw, (list, tuple)):
        parts = raw
    else:
        parts = str(raw).split(',')
    tag_ids = []
    for part in parts:
        tag_id = _to_int(str(part).strip())
        if tag_id is not None and tag_id not in tag_ids:
            tag_ids.append(tag_id)
    return tag_ids


def parse_form_data(formdata):
    """
    把提交的表单 (MultiDict) 解析为 ContentInput
    缺省值：type=post, status=draft, visibility=public, allow_comments=True
    """
    get = formdata.get
    return ContentInput(
        id=_to_int(get('id')),
        title=get('title') or '',
        slug=get('slug'),
        body_json=get('body') or '',
        type=get('type') or 'post',
        status=get('status') or 'draft',
        visibility=get('visibility') or 'public',
        excerpt=get('excerpt'),
        category_id=_to_int(get('category_id')),
        thumbnail_url=get('thumbnail_url'),
        is_featured=get('is_featured') == 'true',
        allow_comments=get('allow_comments') != 'false',
        scheduled_at=get('scheduled_at') or None,
        body_is_empty=get('body_is_empty') == 'true',
        tag_ids=parse_tag_ids(get('tag_ids')),
        seo=SeoInput(
            meta_title=get('meta_title'),
            meta_description=get('meta_description'),
            og_image_url=get('og_image_url'),
            canonical_url=get('canonical_url'),
        ),
    )


def determine_published_at(status, now):
    """每次以 published 状态保存都会刷新发布时间"""
    return now if status == 'published' else None


def build_content_data(content_input, body, author_id, now=None):
    """
    组装写入 cms_contents 的记录
    :param content_input: 已通过校验的 ContentInput
    :param body: 解析后的正文文档
    :param author_id: 当前用户 ID
    :param now: 当前时间 (测试时注入)
    """
    now = now or datetime.utcnow()
    scheduled_at = None
    if content_input.status == 'scheduled' and content_input.scheduled_at:
        scheduled_at = parse_datetime(content_input.scheduled_at)

    return {
        'title': content_input.title.strip(),
        'slug': generate_slug(content_input.title, content_input.slug),
        'body': body,
        'body_format': BODY_FORMAT,
        'type': content_input.type,
        'status': content_input.status,
        'visibility': content_input.visibility,
        'excerpt': (content_input.excerpt or '').strip() or None,
        'category_id': content_input.category_id or None,
        'thumbnail_url': content_input.thumbnail_url or None,
        'is_featured': content_input.is_featured,
        'allow_comments': content_input.allow_comments,
        'author_id': author_id,
        'published_at': determine_published_at(content_input.status, now),
        'scheduled_at': scheduled_at,
        'updated_at': now,
    }
