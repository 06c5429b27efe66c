from flask import jsonify
from flask_login import login_required

from . import settings_bp
from .forms import SettingsForm
from opendraft.services.settings_service import SettingsService, SETTING_KEYS
from opendraft.utils.audit import log_action
from opendraft.utils.cache import revalidate
from opendraft.utils.decorators import admin_required
from opendraft.utils.validators import form_errors


@settings_bp.route('/', methods=['GET'])
@login_required
def index():
    return jsonify({'data': SettingsService.get_site_settings().to_dict()})


@settings_bp.route('/', methods=['POST'])
@login_required
@admin_required
def update():
    """整表提交：未勾选的布尔字段视为 False"""
    form = SettingsForm()
    if not form.validate_on_submit():
        return jsonify({'error': '; '.join(form_errors(form)), 'success': False}), 400

    data = {key: getattr(form, key).data for key in SETTING_KEYS}
    if data['posts_per_page'] is None:
        data.pop('posts_per_page')
    settings = SettingsService.update_site_settings(data)

    revalidate('/', '/settings')
    log_action('settings', 'update', {'keys': sorted(data)})
    return jsonify({'error': None, 'success': True, 'data': settings.to_dict()})
