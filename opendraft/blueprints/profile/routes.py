from flask import jsonify
from flask_login import login_required, current_user

from . import profile_bp
from .forms import ProfileForm, AvatarForm, PasswordForm
from opendraft.services.profile_service import ProfileService
from opendraft.utils.cache import revalidate
from opendraft.utils.validators import form_errors


def _invalid(form):
    return jsonify({'error': '; '.join(form_errors(form)), 'success': False}), 400


@profile_bp.route('/', methods=['GET'])
@login_required
def view():
    """查看个人信息"""
    return jsonify({'data': current_user.profile_dict()})


@profile_bp.route('/', methods=['POST'])
@login_required
def edit():
    """编辑个人信息"""
    form = ProfileForm()
    if not form.validate_on_submit():
        return _invalid(form)

    ProfileService.update_profile(current_user, form.display_name.data, form.bio.data, form.avatar_url.data)
    revalidate('/profile')
    return jsonify({'error': None, 'success': True, 'data': current_user.profile_dict()})


@profile_bp.route('/avatar', methods=['POST'])
@login_required
def avatar():
    """上传头像 (裁剪为 200x200)"""
    form = AvatarForm()
    if not form.validate_on_submit():
        return _invalid(form)

    url = ProfileService.upload_avatar(current_user, form.avatar.data)
    revalidate('/profile')
    return jsonify({'error': None, 'success': True, 'avatar_url': url})


@profile_bp.route('/change-password', methods=['POST'])
@login_required
def change_password():
    """修改密码"""
    form = PasswordForm()
    if not form.validate_on_submit():
        return _invalid(form)

    ProfileService.change_password(
        current_user,
        form.current_password.data,
        form.new_password.data,
        form.confirm_password.data,
    )
    return jsonify({'error': None, 'success': True})
