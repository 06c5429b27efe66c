import logging
import colorlog
from flask import Flask, jsonify
from config import config
from opendraft.extensions import db, migrate, login_manager, cache, csrf
from opendraft.exceptions import OpenDraftException
from opendraft.utils.cloud_storage import init_cloud_storage

from opendraft import commands


def create_app(config_name='default'):
    """OpenDraft 应用工厂函数"""
    app = Flask(__name__)

    # 1. 加载配置
    app.config.from_object(config[config_name])
    config[config_name].init_app(app)

    # 2. 初始化扩展
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    cache.init_app(app)
    csrf.init_app(app)

    # 3. 配置日志
    configure_logging(app)

    # 4. 存储后端 (Cloudinary / 本地)
    init_cloud_storage(app)

    # 5. 注册蓝图 (Blueprints)
    register_blueprints(app)

    # 6. 注册全局错误处理
    register_error_handlers(app)

    # 7. 注册 CLI 命令
    register_commands(app)

    return app


def register_blueprints(app):
    """注册后台模块蓝图与公开 API"""
    # 后台首页
    from opendraft.blueprints.main import main_bp
    app.register_blueprint(main_bp)

    # 认证
    from opendraft.blueprints.auth import auth_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')

    # 内容管理
    from opendraft.blueprints.content import content_bp
    app.register_blueprint(content_bp, url_prefix='/content')

    # 分类 / 标签
    from opendraft.blueprints.categories import categories_bp
    app.register_blueprint(categories_bp, url_prefix='/categories')
    from opendraft.blueprints.tags import tags_bp
    app.register_blueprint(tags_bp, url_prefix='/tags')

    # 媒体库
    from opendraft.blueprints.media import media_bp
    app.register_blueprint(media_bp, url_prefix='/media')

    # 站点设置 / 个人资料
    from opendraft.blueprints.settings import settings_bp
    app.register_blueprint(settings_bp, url_prefix='/settings')
    from opendraft.blueprints.profile import profile_bp
    app.register_blueprint(profile_bp, url_prefix='/profile')

    # 公开只读 API (无需登录，不做 CSRF 校验)
    from opendraft.blueprints.api import api_bp
    csrf.exempt(api_bp)
    app.register_blueprint(api_bp, url_prefix='/api/v1')


def register_error_handlers(app):
    @app.errorhandler(OpenDraftException)
    def handle_opendraft_exception(e):
        return jsonify(e.to_dict()), e.code

    @app.errorhandler(404)
    def page_not_found(e):
        return jsonify({'error': 'Not found', 'success': False}), 404

    @app.errorhandler(500)
    def internal_server_error(e):
        return jsonify({'error': 'Internal server error', 'success': False}), 500


def register_commands(app):
    """注册 Flask CLI 命令"""
    app.cli.add_command(commands.forge)
    app.cli.add_command(commands.status)
    app.cli.add_command(commands.create_admin)
    app.cli.add_command(commands.prune_seo)


def configure_logging(app):
    """配置彩色控制台日志，提升开发体验"""
    if app.debug:
        handler = logging.StreamHandler()
        handler.setLevel(logging.DEBUG)

        formatter = colorlog.ColoredFormatter(
            "%(log_color)s[%(asctime)s] %(levelname)-8s%(reset)s %(blue)s%(message)s",
            datefmt="%H:%M:%S",
            reset=True,
            log_colors={
                'DEBUG':    'cyan',
                'INFO':     'green',
                'WARNING':  'yellow',
                'ERROR':    'red',
                'CRITICAL': 'red,bg_white',
            },
            secondary_log_colors={},
            style='%'
        )
        handler.setFormatter(formatter)
        app.logger.addHandler(handler)
        app.logger.setLevel(logging.DEBUG)
