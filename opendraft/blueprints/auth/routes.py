from flask import jsonify
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf

from opendraft.models.auth import User, MAX_FAILED_LOGINS
from opendraft.blueprints.auth import auth_bp
from opendraft.blueprints.auth.forms import LoginForm
from opendraft.utils.audit import log_action
from opendraft.utils.validators import form_errors

INVALID_CREDENTIALS = "Invalid email or password"


@auth_bp.route('/csrf')
def csrf_token():
    """前端提交表单前获取 CSRF 令牌 (放在 X-CSRFToken 请求头中)"""
    return jsonify({'csrf_token': generate_csrf()})


@auth_bp.route('/login', methods=['POST'])
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return jsonify({'error': '; '.join(form_errors(form)), 'success': False}), 400

    user = User.query.filter_by(email=form.email.data.strip().lower()).first()

    # 1. 验证用户存在
    if user is None:
        return jsonify({'error': INVALID_CREDENTIALS, 'success': False}), 401

    # 2. 检查账号是否被锁定
    if user.is_locked():
        return jsonify({
            'error': f'Account locked after {MAX_FAILED_LOGINS} failed attempts. Try again in 30 minutes.',
            'success': False,
        }), 403

    # 3. 验证密码
    if not user.verify_password(form.password.data):
        user.record_failed_login()
        return jsonify({
            'error': INVALID_CREDENTIALS,
            'success': False,
            'remaining_attempts': max(0, MAX_FAILED_LOGINS - user.failed_login_attempts),
        }), 401

    # 4. 验证用户是否被停用
    if not user.is_active_user:
        return jsonify({'error': 'Account is disabled', 'success': False}), 403

    # 5. 执行登录
    login_user(user, remember=form.remember_me.data)
    user.reset_failed_attempts()
    log_action('auth', 'login_success', {'email': user.email})

    return jsonify({'error': None, 'success': True, 'user': user.profile_dict()})


@auth_bp.route('/logout')
@login_required
def logout():
    log_action('auth', 'logout', {'email': current_user.email})
    logout_user()
    return jsonify({'error': None, 'success': True})


@auth_bp.route('/me')
@login_required
def me():
    return jsonify({'user': current_user.profile_dict()})
