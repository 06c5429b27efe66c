# 按照依赖顺序导入
from .base import BaseModel
from .auth import User
from .taxonomy import Category, Tag
from .content import Content, SeoMeta, content_tags
from .media import Media
from .sys import AuditLog, Setting
