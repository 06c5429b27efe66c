from flask import Blueprint

# 公开只读 API，无需登录
api_bp = Blueprint('api', __name__)

from . import routes
