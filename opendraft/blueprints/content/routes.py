from flask import request, jsonify
from flask_login import login_required, current_user

from . import content_bp
from .forms import ContentForm, StatusForm, VisibilityForm
from opendraft.services.content_service import ContentService
from opendraft.services.content_builder import parse_form_data
from opendraft.services.content_validator import parse_body, INVALID_BODY
from opendraft.services.taxonomy_service import CategoryService
from opendraft.services.tag_service import TagService
from opendraft.utils.audit import log_action
from opendraft.utils.cache import revalidate
from opendraft.utils.rich_text import render_html
from opendraft.utils.validators import form_errors, request_ids


def _invalid(form):
    return jsonify({'error': '; '.join(form_errors(form)), 'success': False}), 400


@content_bp.route('/')
@login_required
def index():
    """内容列表 (搜索 / 状态 / 类型过滤，分页)"""
    result = ContentService.find_contents_with_filters(
        search=request.args.get('search', '', type=str),
        status=request.args.get('status', 'all', type=str),
        type=request.args.get('type', 'all', type=str),
        page=request.args.get('page', 1, type=int),
        limit=request.args.get('limit', 10, type=int),
    )
    return jsonify(result)


@content_bp.route('/options')
@login_required
def options():
    """编辑表单的分类 / 标签选项"""
    return jsonify({
        'categories': CategoryService.find_all_categories(),
        'tags': TagService.find_all_tags(),
    })


@content_bp.route('/save', methods=['POST'])
@login_required
def save():
    """保存内容：无 id 时新建，否则更新"""
    form = ContentForm()
    if not form.validate_on_submit():
        return _invalid(form)

    content_input = parse_form_data(request.form)
    result = ContentService.save_content(content_input, current_user.id)
    if not result['success']:
        return jsonify(result), 400

    content_id = result['content_id']
    revalidate('/content', f'/content/{content_id}')
    log_action('content', 'save', {
        'content_id': content_id,
        'status': content_input.status,
        'created': content_input.id is None,
    })
    return jsonify(result)


@content_bp.route('/<int:id>')
@login_required
def detail(id):
    """编辑页数据"""
    content = ContentService.get_content(id)
    if content is None:
        return jsonify({'error': 'Content not found', 'success': False}), 404
    return jsonify({'data': content})


@content_bp.route('/<int:id>/delete', methods=['POST'])
@login_required
def delete(id):
    ContentService.delete_content_by_id(id)
    revalidate('/content')
    log_action('content', 'delete', {'content_id': id})
    return jsonify({'error': None, 'success': True})


@content_bp.route('/bulk-delete', methods=['POST'])
@login_required
def bulk_delete():
    ids = request_ids()
    if not ids:
        return jsonify({'error': 'No content selected', 'success': False}), 400

    deleted = ContentService.bulk_delete_contents_by_ids(ids)
    revalidate('/content')
    log_action('content', 'bulk_delete', {'ids': ids, 'deleted': deleted})
    return jsonify({'error': None, 'success': True, 'deleted': deleted})


@content_bp.route('/bulk-status', methods=['POST'])
@login_required
def bulk_status():
    form = StatusForm()
    if not form.validate_on_submit():
        return _invalid(form)
    ids = request_ids()
    if not ids:
        return jsonify({'error': 'No content selected', 'success': False}), 400

    updated = ContentService.bulk_update_content_status(ids, form.status.data)
    revalidate('/content')
    log_action('content', 'bulk_status', {'ids': ids, 'status': form.status.data})
    return jsonify({'error': None, 'success': True, 'updated': updated})


@content_bp.route('/<int:id>/status', methods=['POST'])
@login_required
def update_status(id):
    """快速编辑：状态"""
    form = StatusForm()
    if not form.validate_on_submit():
        return _invalid(form)

    ContentService.update_content_status_by_id(id, form.status.data)
    revalidate('/content', f'/content/{id}')
    return jsonify({'error': None, 'success': True})


@content_bp.route('/<int:id>/visibility', methods=['POST'])
@login_required
def update_visibility(id):
    """快速编辑：可见性"""
    form = VisibilityForm()
    if not form.validate_on_submit():
        return _invalid(form)

    ContentService.update_content_visibility_by_id(id, form.visibility.data)
    revalidate('/content', f'/content/{id}')
    return jsonify({'error': None, 'success': True})


@content_bp.route('/preview', methods=['POST'])
@login_required
def preview():
    """把正文文档渲染为 HTML 预览"""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict) and isinstance(payload.get('body'), dict):
        body = payload['body']
    else:
        body, error = parse_body(request.form.get('body'))
        if error:
            return jsonify({'error': INVALID_BODY, 'success': False}), 400
    return jsonify({'html': render_html(body)})
