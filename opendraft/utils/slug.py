"""
slug 工具
标题 -> URL 安全的 slug，允许手动覆盖
"""
import re
import unicodedata

_NON_WORD = re.compile(r'[^\w\s-]')
_SEPARATORS = re.compile(r'[\s_-]+')


def slugify(text):
    """
    生成 slug：小写、去掉非单词字符、空白/下划线/连字符合并为单个连字符、去掉首尾连字符。
    非 ASCII 字符先做 NFKD 分解，无法转成 ASCII 的直接丢弃，结果只含 [a-z0-9-]。
    """
    if not text:
        return ''
    text = unicodedata.normalize('NFKD', text).encode('ascii', 'ignore').decode('ascii')
    text = _NON_WORD.sub('', text.lower().strip())
    text = _SEPARATORS.sub('-', text)
    return text.strip('-')


def generate_slug(title, custom_slug=None):
    """手动填写的 slug 只做 trim，不再规范化；否则根据标题生成"""
    if custom_slug and custom_slug.strip():
        return custom_slug.strip()
    return slugify(title)
