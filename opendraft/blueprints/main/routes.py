from flask import jsonify
from flask_login import login_required

from . import main_bp
from opendraft.services.dashboard_service import DashboardService


@main_bp.route('/')
@login_required
def index():
    """后台首页：内容统计 + 最近更新的内容"""
    return jsonify({
        'stats': DashboardService.get_stats(),
        'recent': DashboardService.get_recent_content(),
    })
