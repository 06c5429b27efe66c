from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, IntegerField
from wtforms.validators import Optional, Length

class CategoryForm(FlaskForm):
    """分类表单 (名称必填由服务层校验)"""
    name = StringField('Name', validators=[Length(max=128)])
    slug = StringField('Slug', validators=[Optional(), Length(max=160)])
    description = TextAreaField('Description', validators=[Optional()])
    parent_id = IntegerField('Parent', validators=[Optional()])
