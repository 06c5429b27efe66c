"""
TipTap 文档工具：空文档判断与 HTML 预览渲染
"""
from markupsafe import escape

# 文本标记 -> HTML 标签
_MARK_TAGS = {
    'bold': 'strong',
    'italic': 'em',
    'strike': 's',
    'code': 'code',
    'underline': 'u',
}

# 块级节点 -> HTML 标签
_BLOCK_TAGS = {
    'paragraph': 'p',
    'blockquote': 'blockquote',
    'bulletList': 'ul',
    'orderedList': 'ol',
    'listItem': 'li',
}


def is_empty_document(body):
    """
    文档为空的三种情况：
    1. 不是合法的 doc 根节点
    2. 子节点列表为空
    3. 只有一个没有内联内容的段落
    """
    if not isinstance(body, dict) or body.get('type') != 'doc':
        return True
    children = body.get('content')
    if not isinstance(children, list) or len(children) == 0:
        return True
    if len(children) == 1:
        first = children[0] or {}
        if first.get('type') == 'paragraph' and not first.get('content'):
            return True
    return False


def _render_text(node):
    html = str(escape(node.get('text', '')))
    for mark in node.get('marks') or []:
        mark_type = mark.get('type')
        if mark_type == 'link':
            href = escape((mark.get('attrs') or {}).get('href', ''))
            html = f'<a href="{href}" rel="noopener noreferrer">{html}</a>'
        elif mark_type in _MARK_TAGS:
            tag = _MARK_TAGS[mark_type]
            html = f'<{tag}>{html}</{tag}>'
    return html


def _render_node(node):
    if not isinstance(node, dict):
        return ''
    node_type = node.get('type')
    attrs = node.get('attrs') or {}
    inner = ''.join(_render_node(child) for child in node.get('content') or [])

    if node_type == 'text':
        return _render_text(node)
    if node_type == 'doc':
        return inner
    if node_type == 'heading':
        level = attrs.get('level', 1)
        level = level if level in (1, 2, 3, 4, 5, 6) else 1
        return f'<h{level}>{inner}</h{level}>'
    if node_type == 'codeBlock':
        return f'<pre><code>{inner}</code></pre>'
    if node_type == 'image':
        src = escape(attrs.get('src', ''))
        alt = escape(attrs.get('alt') or '')
        return f'<img src="{src}" alt="{alt}">'
    if node_type == 'hardBreak':
        return '<br>'
    if node_type == 'horizontalRule':
        return '<hr>'
    if node_type in _BLOCK_TAGS:
        tag = _BLOCK_TAGS[node_type]
        return f'<{tag}>{inner}</{tag}>'
    # 未知节点只保留子内容
    return inner


def render_html(body):
    """把 TipTap JSON 文档渲染为 HTML (文本全部转义)"""
    if is_empty_document(body):
        return ''
    return _render_node(body)
