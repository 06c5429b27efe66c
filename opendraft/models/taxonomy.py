from datetime import datetime
from opendraft.extensions import db
from .base import BaseModel


class Category(BaseModel):
    """内容分类 (树形结构，仅禁止自己做自己的父级)"""
    __tablename__ = 'cms_categories'
    name = db.Column(db.String(128), nullable=False)
    slug = db.Column(db.String(160), unique=True, index=True, nullable=False)
    description = db.Column(db.Text)

    # 自关联：上级分类
    parent_id = db.Column(db.Integer, db.ForeignKey('cms_categories.id'), nullable=True, index=True)
    children = db.relationship('Category', backref=db.backref('parent', remote_side='Category.id'))

    def __repr__(self):
        return f'<Category {self.slug}>'


class Tag(db.Model):
    """扁平标签"""
    __tablename__ = 'cms_tags'
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(64), nullable=False)
    slug = db.Column(db.String(80), unique=True, index=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Tag {self.slug}>'
