from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField
from wtforms.validators import Optional, Length

class MediaForm(FlaskForm):
    """媒体元数据编辑"""
    alt_text = StringField('Alt text', validators=[Optional(), Length(max=256)])
    caption = TextAreaField('Caption', validators=[Optional()])
