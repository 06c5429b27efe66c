"""
存储工具模块
支持 Cloudinary 云存储，未配置时退回本地上传目录。
媒体库和头像都通过 storage_path (如 uploads/<user_id>/<filename>) 定位文件。
"""
import os
import cloudinary
import cloudinary.uploader
import cloudinary.utils
from flask import current_app

from opendraft.exceptions import StorageError

# Cloudinary 是否已配置（延迟初始化）
_cloudinary_configured = False


def init_cloud_storage(app):
    """初始化云存储配置"""
    global _cloudinary_configured

    cloudinary_url = app.config.get('CLOUDINARY_URL')
    cloud_name = app.config.get('CLOUDINARY_CLOUD_NAME')
    api_key = app.config.get('CLOUDINARY_API_KEY')
    api_secret = app.config.get('CLOUDINARY_API_SECRET')

    if cloudinary_url:
        cloudinary.config(cloudinary_url=cloudinary_url)
        _cloudinary_configured = True
    elif cloud_name and api_key and api_secret:
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True
        )
        _cloudinary_configured = True
    else:
        _cloudinary_configured = False

    if _cloudinary_configured:
        app.logger.info('✅ Cloudinary 云存储已配置')
    else:
        app.logger.info('ℹ️ 未配置云存储，使用本地文件系统')


def is_cloud_storage_enabled():
    """检查云存储是否可用"""
    use_cloud = str(current_app.config.get('USE_CLOUD_STORAGE', 'auto')).lower()

    if use_cloud in ('false', '0'):
        return False

    # true / auto：只要配置了就使用
    return _cloudinary_configured


def _public_id(storage_path):
    """storage_path 去掉扩展名后作为 Cloudinary public_id"""
    return f"opendraft/{os.path.splitext(storage_path)[0]}"


def _local_path(storage_path):
    upload_folder = current_app.config['UPLOAD_FOLDER']
    full_path = os.path.abspath(os.path.join(upload_folder, storage_path))
    # 防止 ../ 越出上传目录
    if not full_path.startswith(os.path.abspath(upload_folder) + os.sep):
        raise StorageError(f'Invalid storage path: {storage_path}')
    return full_path


def upload_file(file, storage_path, resource_type='image', transformation=None):
    """
    上传文件到存储

    Args:
        file: 文件对象 (werkzeug FileStorage / BytesIO)
        storage_path: 存储路径
        resource_type: Cloudinary 资源类型
        transformation: Cloudinary 变换参数 (可选)

    Returns:
        str: 公开 URL

    Raises:
        StorageError: 上传失败
    """
    if is_cloud_storage_enabled():
        options = {
            'public_id': _public_id(storage_path),
            'resource_type': resource_type,
            'overwrite': True,
        }
        if transformation:
            options['transformation'] = transformation
        try:
            result = cloudinary.uploader.upload(file, **options)
        except Exception as e:
            current_app.logger.error(f'❌ 云存储上传失败: {e}')
            raise StorageError(str(e)) from e
        current_app.logger.info(f'✅ 文件上传到云存储: {result.get("secure_url")}')
        return result.get('secure_url') or result.get('url')

    # 本地存储模式
    full_path = _local_path(storage_path)
    os.makedirs(os.path.dirname(full_path), exist_ok=True)
    try:
        if hasattr(file, 'save'):
            file.save(full_path)
        else:
            with open(full_path, 'wb') as fh:
                fh.write(file.read())
    except OSError as e:
        current_app.logger.error(f'❌ 本地存储写入失败: {e}')
        raise StorageError(str(e)) from e

    current_app.logger.info(f'文件已保存: {storage_path}')
    return get_public_url(storage_path)


def get_public_url(storage_path, resource_type='image'):
    """获取文件的公开 URL"""
    if is_cloud_storage_enabled():
        url, _options = cloudinary.utils.cloudinary_url(
            _public_id(storage_path), resource_type=resource_type, secure=True
        )
        return url
    prefix = current_app.config.get('MEDIA_URL_PREFIX', '/media/files').rstrip('/')
    return f'{prefix}/{storage_path}'


def remove_files(storage_paths, resource_type='image'):
    """
    从存储删除文件

    Returns:
        bool: 是否全部删除成功 (失败只记录日志)
    """
    ok = True
    for storage_path in storage_paths:
        try:
            if is_cloud_storage_enabled():
                result = cloudinary.uploader.destroy(_public_id(storage_path), resource_type=resource_type)
                if result.get('result') != 'ok':
                    current_app.logger.warning(f'⚠️ 云存储文件删除失败: {storage_path}')
                    ok = False
            else:
                full_path = _local_path(storage_path)
                if os.path.exists(full_path):
                    os.remove(full_path)
        except Exception as e:
            current_app.logger.error(f'❌ 删除存储文件失败 {storage_path}: {e}')
            ok = False
    return ok
