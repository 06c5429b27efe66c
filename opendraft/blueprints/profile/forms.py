from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileAllowed, FileRequired
from wtforms import StringField, TextAreaField, PasswordField
from wtforms.validators import Optional, Length

from opendraft.utils.validators import validate_url

class ProfileForm(FlaskForm):
    """个人信息表单 (显示名称必填由服务层校验)"""
    display_name = StringField('Display name', validators=[Length(max=128)])
    bio = TextAreaField('Bio', validators=[
        Optional(),
        Length(max=500, message='Bio must be at most 500 characters')
    ])
    avatar_url = StringField('Avatar URL', validators=[Optional(), validate_url])


class AvatarForm(FlaskForm):
    avatar = FileField('Avatar', validators=[
        FileRequired(message='No file provided'),
        FileAllowed(['jpg', 'jpeg', 'png', 'gif', 'webp'], message='Invalid file type. Only images are allowed.')
    ])


class PasswordForm(FlaskForm):
    current_password = PasswordField('Current password')
    new_password = PasswordField('New password')
    confirm_password = PasswordField('Confirm password')
