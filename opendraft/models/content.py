from datetime import datetime
from opendraft.extensions import db
from .base import BaseModel

CONTENT_TYPES = ('post', 'page', 'documentation', 'product', 'landing_page')
CONTENT_STATUSES = ('draft', 'pending_review', 'scheduled', 'published', 'archived')
CONTENT_VISIBILITIES = ('public', 'private', 'members_only')

BODY_FORMAT = 'tiptap-json'

# 多对多：内容 <-> 标签 (无独立主键)
content_tags = db.Table('cms_content_tags',
    db.Column('content_id', db.Integer, db.ForeignKey('cms_contents.id'), primary_key=True),
    db.Column('tag_id', db.Integer, db.ForeignKey('cms_tags.id'), primary_key=True)
)


class Content(BaseModel):
    """可发布内容 (文章 / 页面 / 文档 / 产品 / 落地页)"""
    __tablename__ = 'cms_contents'

    title = db.Column(db.String(256), nullable=False)
    slug = db.Column(db.String(300), unique=True, index=True, nullable=False)
    body = db.Column(db.JSON)  # TipTap 文档树
    body_format = db.Column(db.String(32), default=BODY_FORMAT)

    type = db.Column(db.String(32), default='post', index=True)
    status = db.Column(db.String(32), default='draft', index=True)
    visibility = db.Column(db.String(32), default='public', index=True)

    excerpt = db.Column(db.Text)
    thumbnail_url = db.Column(db.String(512))
    is_featured = db.Column(db.Boolean, default=False)
    allow_comments = db.Column(db.Boolean, default=True)

    category_id = db.Column(db.Integer, db.ForeignKey('cms_categories.id'), nullable=True, index=True)
    author_id = db.Column(db.Integer, db.ForeignKey('auth_users.id'), index=True)

    published_at = db.Column(db.DateTime, nullable=True, index=True)
    scheduled_at = db.Column(db.DateTime, nullable=True)

    author = db.relationship('User')
    category = db.relationship('Category', backref=db.backref('contents', lazy='dynamic'))
    tags = db.relationship('Tag', secondary=content_tags, backref='contents', order_by='Tag.name')

    def __repr__(self):
        return f'<Content {self.slug}>'


class SeoMeta(db.Model):
    """
    内容的 SEO 元数据，每条内容至多一条，以 content_id 为冲突键 upsert。
    content_id 不设外键：删除内容时不级联删除 SEO 记录 (见 flask prune-seo)。
    """
    __tablename__ = 'cms_seo_meta'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    content_id = db.Column(db.Integer, unique=True, index=True, nullable=False)
    meta_title = db.Column(db.String(256))
    meta_description = db.Column(db.Text)
    og_image_url = db.Column(db.String(512))
    canonical_url = db.Column(db.String(512))
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'content_id': self.content_id,
            'meta_title': self.meta_title,
            'meta_description': self.meta_description,
            'og_image_url': self.og_image_url,
            'canonical_url': self.canonical_url,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
