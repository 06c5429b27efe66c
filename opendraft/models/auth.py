from datetime import datetime, timedelta
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from opendraft.extensions import db
from .base import BaseModel

MAX_FAILED_LOGINS = 5
LOCKOUT_MINUTES = 30

class User(UserMixin, BaseModel):
    """后台用户，个人资料 (profile) 字段直接存放在用户行上"""
    __tablename__ = 'auth_users'
    email = db.Column(db.String(128), unique=True, index=True, nullable=False)
    password_hash = db.Column(db.String(256))

    # 个人资料
    display_name = db.Column(db.String(128))
    bio = db.Column(db.Text)
    avatar_url = db.Column(db.String(512))

    is_active_user = db.Column(db.Boolean, default=True)  # 封号开关
    is_admin = db.Column(db.Boolean, default=False)
    last_login = db.Column(db.DateTime)

    # 安全字段
    failed_login_attempts = db.Column(db.Integer, default=0)
    locked_until = db.Column(db.DateTime, nullable=True)

    @property
    def password(self):
        raise AttributeError('password is not readable')

    @password.setter
    def password(self, password):
        self.password_hash = generate_password_hash(password)

    def verify_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def is_locked(self):
        """检查账号是否被锁定"""
        return bool(self.locked_until and datetime.utcnow() < self.locked_until)

    def record_failed_login(self):
        """记录登录失败，连续失败达到上限后锁定"""
        self.failed_login_attempts = (self.failed_login_attempts or 0) + 1
        if self.failed_login_attempts >= MAX_FAILED_LOGINS:
            self.locked_until = datetime.utcnow() + timedelta(minutes=LOCKOUT_MINUTES)
        db.session.commit()

    def reset_failed_attempts(self):
        """登录成功后重置失败次数"""
        self.failed_login_attempts = 0
        self.locked_until = None
        self.last_login = datetime.utcnow()
        db.session.commit()

    def profile_dict(self):
        """个人资料视图 (不含敏感字段)"""
        return {
            'id': self.id,
            'email': self.email,
            'display_name': self.display_name,
            'bio': self.bio,
            'avatar_url': self.avatar_url,
            'is_admin': self.is_admin,
            'last_login': self.last_login.isoformat() if self.last_login else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    # Flask-Login 必须属性覆盖
    @property
    def is_active(self):
        return bool(self.is_active_user) and not self.is_locked()

    def __repr__(self):
        return f'<User {self.email}>'
