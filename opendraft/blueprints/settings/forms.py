from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, IntegerField, BooleanField
from wtforms.validators import Optional, Length, NumberRange

from opendraft.utils.validators import validate_url

class SettingsForm(FlaskForm):
    """站点设置表单"""
    site_name = StringField('Site name', validators=[Length(max=128)])
    site_description = TextAreaField('Site description', validators=[Optional()])
    site_logo = StringField('Logo URL', validators=[Optional(), validate_url])
    site_favicon = StringField('Favicon URL', validators=[Optional(), validate_url])
    site_url = StringField('Site URL', validators=[Optional(), validate_url])
    posts_per_page = IntegerField('Posts per page', default=10, validators=[
        Optional(), NumberRange(min=1, max=100, message='Posts per page must be between 1 and 100')
    ])
    comments_enabled = BooleanField('Enable comments')
    comments_moderation = BooleanField('Moderate comments')
    social_twitter = StringField('Twitter', validators=[Optional(), Length(max=128)])
    social_facebook = StringField('Facebook', validators=[Optional(), Length(max=128)])
    social_instagram = StringField('Instagram', validators=[Optional(), Length(max=128)])
    social_github = StringField('GitHub', validators=[Optional(), Length(max=128)])
