"""
安全工具函数
"""
from functools import wraps
from datetime import datetime, timedelta
from flask import request, current_app, jsonify

# 速率限制存储（多进程部署应改用 Redis）
_rate_limit_storage = {}

def rate_limit(max_requests=None, window=60):
    """
    公开 API 速率限制装饰器，超限返回 429 JSON

    Args:
        max_requests: 时间窗口内最大请求数 (默认读取 API_RATE_LIMIT)
        window: 时间窗口（秒）
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            limit = max_requests or current_app.config.get('API_RATE_LIMIT', 120)
            # 客户端标识（IP地址）
            key = f"{func.__name__}:{request.remote_addr}"

            now = datetime.now()

            # 清理过期记录
            _rate_limit_storage[key] = [
                timestamp for timestamp in _rate_limit_storage.get(key, [])
                if now - timestamp < timedelta(seconds=window)
            ]

            if len(_rate_limit_storage[key]) >= limit:
                return jsonify({'error': 'Too many requests'}), 429

            _rate_limit_storage[key].append(now)
            return func(*args, **kwargs)
        return wrapper
    return decorator
