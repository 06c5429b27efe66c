from opendraft.extensions import db
from .base import BaseModel

class Media(BaseModel):
    """媒体库文件 (存储对象 + 元数据行)"""
    __tablename__ = 'cms_media'

    filename = db.Column(db.String(256))  # 存储中的文件名
    original_name = db.Column(db.String(256))  # 上传时的原始文件名
    mime_type = db.Column(db.String(64))
    size = db.Column(db.Integer)  # 字节数
    url = db.Column(db.String(512))  # 公开访问 URL
    storage_path = db.Column(db.String(512), nullable=False)
    alt_text = db.Column(db.String(256))
    caption = db.Column(db.Text)

    uploaded_by = db.Column(db.Integer, db.ForeignKey('auth_users.id'))
    uploader = db.relationship('User')
