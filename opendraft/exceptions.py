from sqlalchemy.exc import IntegrityError


class OpenDraftException(Exception):
    """OpenDraft 系统基础异常类"""
    def __init__(self, message, code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['error'] = self.message
        rv['success'] = False
        return rv

class ValidationError(OpenDraftException):
    """业务规则校验失败，errors 为全部错误信息"""
    def __init__(self, errors, payload=None):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__('; '.join(self.errors), code=400, payload=payload)

class DuplicateSlug(OpenDraftException):
    """slug 唯一约束冲突"""
    def __init__(self, message="A record with this slug already exists", payload=None):
        super().__init__(message, code=409, payload=payload)

class NotFound(OpenDraftException):
    def __init__(self, message="Not found", payload=None):
        super().__init__(message, code=404, payload=payload)

class StorageError(OpenDraftException):
    """数据库或文件存储的底层错误，message 原样透传"""
    def __init__(self, message="Storage error", payload=None):
        super().__init__(message, code=500, payload=payload)

class HasContentReferences(OpenDraftException):
    """分类仍被内容引用"""
    def __init__(self, count, payload=None):
        self.count = count
        super().__init__(f"Cannot delete category with {count} content item(s)", code=409, payload=payload)

class HasChildCategories(OpenDraftException):
    """分类仍有子分类"""
    def __init__(self, count, payload=None):
        self.count = count
        super().__init__(f"Cannot delete category with {count} sub-categories", code=409, payload=payload)

class PermissionDenied(OpenDraftException):
    """权限不足"""
    def __init__(self, message="Access denied", payload=None):
        super().__init__(message, code=403, payload=payload)


# 各数据库唯一约束冲突的识别方式
_UNIQUE_MARKERS = ('UNIQUE constraint failed', 'duplicate key value', 'Duplicate entry')


def is_unique_violation(exc: IntegrityError) -> bool:
    """判断 IntegrityError 是否为唯一约束冲突 (PostgreSQL SQLSTATE 23505 / SQLite / MySQL)"""
    orig = getattr(exc, 'orig', None)
    if getattr(orig, 'pgcode', None) == '23505' or getattr(orig, 'sqlstate', None) == '23505':
        return True
    text = str(orig if orig is not None else exc)
    return any(marker in text for marker in _UNIQUE_MARKERS)


def translate_integrity_error(exc: IntegrityError, duplicate_message: str) -> OpenDraftException:
    """把 IntegrityError 翻译成 DuplicateSlug 或 StorageError"""
    if is_unique_violation(exc):
        return DuplicateSlug(duplicate_message)
    return StorageError(str(getattr(exc, 'orig', None) or exc))
