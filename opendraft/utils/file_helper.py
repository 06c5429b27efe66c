import time
import uuid

def get_file_extension(filename):
    """从文件名获取扩展名"""
    if not filename or '.' not in filename:
        return None
    return filename.rsplit('.', 1)[1].lower()

def generate_filename(original_filename):
    """
    生成存储用文件名: <毫秒时间戳>-<6位随机串>.<扩展名>
    没有扩展名时按 bin 处理
    """
    ext = get_file_extension(original_filename) or 'bin'
    timestamp = int(time.time() * 1000)
    return f"{timestamp}-{uuid.uuid4().hex[:6]}.{ext}"

def format_size(size):
    """将字节转换为易读格式 (KB, MB)"""
    power = 2**10
    n = 0
    power_labels = {0 : '', 1: 'K', 2: 'M', 3: 'G', 4: 'T'}
    while size > power and n < 4:
        size /= power
        n += 1
    return f"{size:.1f} {power_labels[n]}B"
