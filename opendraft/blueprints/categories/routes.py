from flask import jsonify
from flask_login import login_required

from . import categories_bp
from .forms import CategoryForm
from opendraft.services.taxonomy_service import CategoryService
from opendraft.utils.audit import log_action
from opendraft.utils.cache import revalidate
from opendraft.utils.validators import form_errors


def _invalid(form):
    return jsonify({'error': '; '.join(form_errors(form)), 'success': False}), 400


@categories_bp.route('/')
@login_required
def index():
    return jsonify({'data': CategoryService.get_categories_with_counts()})


@categories_bp.route('/create', methods=['POST'])
@login_required
def create():
    form = CategoryForm()
    if not form.validate_on_submit():
        return _invalid(form)

    category = CategoryService.create_category(
        form.name.data, form.slug.data, form.description.data, form.parent_id.data
    )
    revalidate('/categories')
    return jsonify({'error': None, 'success': True, 'data': category.to_dict()})


@categories_bp.route('/<int:id>/update', methods=['POST'])
@login_required
def update(id):
    form = CategoryForm()
    if not form.validate_on_submit():
        return _invalid(form)

    CategoryService.update_category(
        id, form.name.data, form.slug.data, form.description.data, form.parent_id.data
    )
    revalidate('/categories')
    return jsonify({'error': None, 'success': True})


@categories_bp.route('/<int:id>/delete', methods=['POST'])
@login_required
def delete(id):
    """有内容或子分类时拒绝删除 (409)"""
    CategoryService.delete_category(id)
    revalidate('/categories')
    log_action('categories', 'delete', {'category_id': id})
    return jsonify({'error': None, 'success': True})
