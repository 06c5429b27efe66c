import os
from dotenv import load_dotenv

# 加载 .env 环境变量
load_dotenv()
basedir = os.path.abspath(os.path.dirname(__file__))

class Config:
    """基础配置类"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'hard-to-guess-string'

    # 数据库配置
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_RECORD_QUERIES = True

    # 文件上传配置
    UPLOAD_FOLDER = os.path.join(basedir, 'opendraft', 'static', 'uploads')
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 请求体上限 16MB

    # 媒体库：只接受图片，单个文件最大 10MB
    MEDIA_MAX_SIZE = 10 * 1024 * 1024
    MEDIA_ALLOWED_TYPES = (
        'image/jpeg', 'image/png', 'image/gif', 'image/webp', 'image/svg+xml',
    )
    MEDIA_PER_PAGE = 20
    # 本地存储模式下文件的公开访问前缀 (由 media 蓝图提供下载)
    MEDIA_URL_PREFIX = os.environ.get('MEDIA_URL_PREFIX', '/media/files')

    # Cloudinary 云存储 (未配置时使用本地上传目录)
    CLOUDINARY_URL = os.environ.get('CLOUDINARY_URL')
    CLOUDINARY_CLOUD_NAME = os.environ.get('CLOUDINARY_CLOUD_NAME')
    CLOUDINARY_API_KEY = os.environ.get('CLOUDINARY_API_KEY')
    CLOUDINARY_API_SECRET = os.environ.get('CLOUDINARY_API_SECRET')
    USE_CLOUD_STORAGE = os.environ.get('USE_CLOUD_STORAGE', 'auto')

    # 缓存配置 (公开 API 使用，后台写操作后整体失效)
    CACHE_TYPE = "SimpleCache"
    CACHE_DEFAULT_TIMEOUT = 300

    # 公开 API
    API_RATE_LIMIT = int(os.environ.get('API_RATE_LIMIT', 120))  # 每分钟每 IP
    API_MAX_LIMIT = 100

    @staticmethod
    def init_app(app):
        # 确保上传目录存在
        os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

class DevelopmentConfig(Config):
    """开发环境配置"""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'opendraft.db')

class ProductionConfig(Config):
    """生产环境配置"""
    DEBUG = False

    DATABASE_URL = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'opendraft_prod.db')
    # PostgreSQL URL 修正（部分托管平台使用 postgres://）
    if DATABASE_URL.startswith('postgres://'):
        DATABASE_URL = DATABASE_URL.replace('postgres://', 'postgresql://', 1)

    SQLALCHEMY_DATABASE_URI = DATABASE_URL

    # 安全设置
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    @classmethod
    def init_app(cls, app):
        Config.init_app(app)

class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    CACHE_TYPE = "NullCache"
    API_RATE_LIMIT = 10000
    USE_CLOUD_STORAGE = 'false'

config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
