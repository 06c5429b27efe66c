"""个人资料服务：资料编辑、头像上传、修改密码"""
import io
from PIL import Image, UnidentifiedImageError
from sqlalchemy.exc import SQLAlchemyError
from flask import current_app

from opendraft.extensions import db
from opendraft.exceptions import StorageError, ValidationError
from opendraft.utils.cloud_storage import upload_file
from opendraft.utils.file_helper import generate_filename, get_file_extension

AVATAR_SIZE = 200
AVATAR_EXTENSIONS = ('jpg', 'jpeg', 'png', 'gif', 'webp')
MIN_PASSWORD_LENGTH = 6


def crop_avatar(file, ext):
    """
    生成 200x200 正方形头像
    :return: (BytesIO, 保存格式)
    """
    try:
        image = Image.open(file)
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ValidationError("Invalid image file") from e

    # JPEG 不支持透明通道，铺白底
    if ext in ('jpg', 'jpeg') and image.mode in ('RGBA', 'LA', 'P'):
        if image.mode == 'P':
            image = image.convert('RGBA')
        background = Image.new('RGB', image.size, (255, 255, 255))
        background.paste(image, mask=image.split()[-1] if image.mode in ('RGBA', 'LA') else None)
        image = background

    # 先居中裁成正方形再缩放
    width, height = image.size
    if width != height:
        size = min(width, height)
        left = (width - size) // 2
        top = (height - size) // 2
        image = image.crop((left, top, left + size, top + size))
    image = image.resize((AVATAR_SIZE, AVATAR_SIZE), Image.Resampling.LANCZOS)

    fmt = {'jpg': 'JPEG', 'jpeg': 'JPEG', 'png': 'PNG', 'gif': 'GIF', 'webp': 'WEBP'}[ext]
    buffer = io.BytesIO()
    if fmt == 'JPEG':
        image.save(buffer, fmt, quality=90, optimize=True)
    else:
        image.save(buffer, fmt)
    buffer.seek(0)
    return buffer, fmt


class ProfileService:

    @staticmethod
    def update_profile(user, display_name, bio=None, avatar_url=None) -> None:
        if not display_name or not display_name.strip():
            raise ValidationError("Name is required")
        user.display_name = display_name.strip()
        user.bio = (bio or '').strip() or None
        user.avatar_url = (avatar_url or '').strip() or None
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e

    @staticmethod
    def upload_avatar(user, file) -> str:
        """裁剪并上传头像，更新用户的 avatar_url，返回新 URL"""
        if file is None or not getattr(file, 'filename', None):
            raise ValidationError("No file provided")
        ext = get_file_extension(file.filename)
        if ext not in AVATAR_EXTENSIONS:
            raise ValidationError("Invalid file type. Only images are allowed.")

        buffer, _fmt = crop_avatar(getattr(file, 'stream', file), ext)
        storage_path = f'avatars/{user.id}/{generate_filename(file.filename)}'
        url = upload_file(buffer, storage_path)

        user.avatar_url = url
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e
        current_app.logger.info(f'用户 {user.email} 更新了头像: {storage_path}')
        return url

    @staticmethod
    def change_password(user, current_password, new_password, confirm_password) -> None:
        if not user.verify_password(current_password or ''):
            raise ValidationError("Current password is incorrect")
        if len(new_password or '') < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"New password must be at least {MIN_PASSWORD_LENGTH} characters")
        if new_password != confirm_password:
            raise ValidationError("Passwords do not match")

        user.password = new_password
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e
        current_app.logger.info(f'用户 {user.email} 修改了密码')
