from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import Optional, Length

class TagForm(FlaskForm):
    name = StringField('Name', validators=[Length(max=64)])
    slug = StringField('Slug', validators=[Optional(), Length(max=80)])
