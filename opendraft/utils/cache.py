from flask import current_app
from opendraft.extensions import cache


def revalidate(*paths):
    """
    后台写操作后的缓存失效信号。
    公开 API 的响应按 query string 缓存，任何写操作都整体清空。
    """
    cache.clear()
    current_app.logger.debug(f'缓存已失效: {", ".join(paths) or "*"}')
