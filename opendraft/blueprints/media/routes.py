from flask import request, jsonify, send_from_directory, current_app
from flask_login import login_required, current_user

from . import media_bp
from .forms import MediaForm
from opendraft.services.media_service import MediaService, serialize_media
from opendraft.utils.audit import log_action
from opendraft.utils.cache import revalidate
from opendraft.utils.file_helper import format_size
from opendraft.utils.validators import form_errors, request_ids


@media_bp.route('/')
@login_required
def index():
    """媒体库列表 (搜索 / MIME 大类过滤，每页 20 个)"""
    result = MediaService.find_media(
        search=request.args.get('search', '', type=str),
        type=request.args.get('type', 'all', type=str),
        page=request.args.get('page', 1, type=int),
    )
    for item in result['data']:
        item['size_label'] = format_size(item['size'] or 0)
    return jsonify(result)


@media_bp.route('/upload', methods=['POST'])
@login_required
def upload():
    media = MediaService.upload_media(request.files.get('file'), current_user.id)
    revalidate('/media')
    return jsonify({'error': None, 'success': True, 'data': serialize_media(media)})


@media_bp.route('/<int:id>/update', methods=['POST'])
@login_required
def update(id):
    form = MediaForm()
    if not form.validate_on_submit():
        return jsonify({'error': '; '.join(form_errors(form)), 'success': False}), 400

    MediaService.update_media(id, form.alt_text.data, form.caption.data)
    revalidate('/media')
    return jsonify({'error': None, 'success': True})


@media_bp.route('/<int:id>/delete', methods=['POST'])
@login_required
def delete(id):
    MediaService.delete_media(id)
    revalidate('/media')
    log_action('media', 'delete', {'media_id': id})
    return jsonify({'error': None, 'success': True})


@media_bp.route('/bulk-delete', methods=['POST'])
@login_required
def bulk_delete():
    ids = request_ids()
    if not ids:
        return jsonify({'error': 'No media selected', 'success': False}), 400

    deleted = MediaService.bulk_delete_media(ids)
    revalidate('/media')
    log_action('media', 'bulk_delete', {'ids': ids, 'deleted': deleted})
    return jsonify({'error': None, 'success': True, 'deleted': deleted})


@media_bp.route('/files/<path:filename>')
def files(filename):
    """本地存储模式下提供上传文件的访问"""
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)
