from flask_wtf import FlaskForm
from wtforms import StringField, SelectField
from wtforms.validators import Optional

from opendraft.models.content import CONTENT_TYPES, CONTENT_STATUSES, CONTENT_VISIBILITIES
from opendraft.utils.validators import validate_url

TYPE_CHOICES = [(t, t.replace('_', ' ').title()) for t in CONTENT_TYPES]
STATUS_CHOICES = [(s, s.replace('_', ' ').title()) for s in CONTENT_STATUSES]
VISIBILITY_CHOICES = [(v, v.replace('_', ' ').title()) for v in CONTENT_VISIBILITIES]


def default_to(value):
    """空值过滤器：未填写的枚举字段按缺省值处理"""
    return lambda data: data or value


class ContentForm(FlaskForm):
    """
    内容编辑表单
    只校验枚举和 URL 字段，其余业务规则由内容校验器处理
    """
    type = SelectField('Type', choices=TYPE_CHOICES, default='post', filters=[default_to('post')])
    status = SelectField('Status', choices=STATUS_CHOICES, default='draft', filters=[default_to('draft')])
    visibility = SelectField('Visibility', choices=VISIBILITY_CHOICES, default='public',
                             filters=[default_to('public')])
    thumbnail_url = StringField('Thumbnail URL', validators=[Optional(), validate_url])
    og_image_url = StringField('OG image URL', validators=[Optional(), validate_url])
    canonical_url = StringField('Canonical URL', validators=[Optional(), validate_url])


class StatusForm(FlaskForm):
    status = SelectField('Status', choices=STATUS_CHOICES)


class VisibilityForm(FlaskForm):
    visibility = SelectField('Visibility', choices=VISIBILITY_CHOICES)
