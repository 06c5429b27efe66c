from flask import jsonify
from flask_login import login_required

from . import tags_bp
from .forms import TagForm
from opendraft.services.tag_service import TagService
from opendraft.utils.audit import log_action
from opendraft.utils.cache import revalidate
from opendraft.utils.validators import form_errors


def _invalid(form):
    return jsonify({'error': '; '.join(form_errors(form)), 'success': False}), 400


@tags_bp.route('/')
@login_required
def index():
    return jsonify({'data': TagService.get_tags_with_counts()})


@tags_bp.route('/create', methods=['POST'])
@login_required
def create():
    form = TagForm()
    if not form.validate_on_submit():
        return _invalid(form)

    tag = TagService.create_tag(form.name.data, form.slug.data)
    revalidate('/tags')
    return jsonify({'error': None, 'success': True, 'data': tag.to_dict()})


@tags_bp.route('/quick-create', methods=['POST'])
@login_required
def quick_create():
    """内容编辑页即时新建标签，失败时 data 为 null"""
    form = TagForm()
    if not form.validate_on_submit():
        return _invalid(form)

    tag = TagService.quick_create_tag(form.name.data)
    if tag is None:
        return jsonify({'error': 'Failed to create tag', 'success': False, 'data': None}), 400
    revalidate('/tags')
    return jsonify({'error': None, 'success': True, 'data': tag})


@tags_bp.route('/<int:id>/update', methods=['POST'])
@login_required
def update(id):
    form = TagForm()
    if not form.validate_on_submit():
        return _invalid(form)

    TagService.update_tag(id, form.name.data, form.slug.data)
    revalidate('/tags')
    return jsonify({'error': None, 'success': True})


@tags_bp.route('/<int:id>/delete', methods=['POST'])
@login_required
def delete(id):
    TagService.delete_tag(id)
    revalidate('/tags')
    log_action('tags', 'delete', {'tag_id': id})
    return jsonify({'error': None, 'success': True})
