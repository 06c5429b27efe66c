from functools import wraps
from flask_login import current_user
from opendraft.exceptions import PermissionDenied


def admin_required(f):
    """
    检查用户是否是管理员 (需在 login_required 之后使用)
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated or not current_user.is_admin:
            raise PermissionDenied("Admin access required")
        return f(*args, **kwargs)
    return decorated_function
