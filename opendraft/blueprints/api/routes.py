"""
公开只读 API (/api/v1)
响应按完整 URL (含 query string) 缓存，后台写操作后整体失效
"""
from flask import request, jsonify

from . import api_bp
from opendraft.extensions import cache
from opendraft.services.public_service import PublicService, parse_paging
from opendraft.services.settings_service import SettingsService
from opendraft.utils.security import rate_limit


def _default_limit():
    return SettingsService.get_site_settings().posts_per_page


@api_bp.route('/posts')
@rate_limit()
@cache.cached(query_string=True)
def posts():
    page, limit = parse_paging(request.args, _default_limit())
    data, pagination = PublicService.list_posts(
        page, limit,
        type=request.args.get('type') or None,
        category=request.args.get('category') or None,
        tag=request.args.get('tag') or None,
        featured=request.args.get('featured') == 'true',
        sort=request.args.get('sort', 'published_at'),
        order='asc' if request.args.get('order') == 'asc' else 'desc',
    )
    return jsonify({'data': data, 'pagination': pagination})


@api_bp.route('/posts/<slug>')
@rate_limit()
@cache.cached()
def post_detail(slug):
    post = PublicService.get_post(slug)
    if post is None:
        return jsonify({'error': 'Post not found'}), 404
    return jsonify({'data': post})


@api_bp.route('/categories')
@rate_limit()
@cache.cached()
def categories():
    return jsonify({'data': PublicService.list_categories()})


@api_bp.route('/categories/<slug>/posts')
@rate_limit()
@cache.cached(query_string=True)
def category_posts(slug):
    category = PublicService.find_category(slug)
    if category is None:
        return jsonify({'error': 'Category not found'}), 404

    page, limit = parse_paging(request.args, _default_limit())
    data, pagination = PublicService.posts_in_category(category, page, limit)
    return jsonify({
        'data': data,
        'category': {'id': category.id, 'name': category.name, 'slug': category.slug},
        'pagination': pagination,
    })


@api_bp.route('/tags')
@rate_limit()
@cache.cached()
def tags():
    return jsonify({'data': PublicService.list_tags()})


@api_bp.route('/tags/<slug>/posts')
@rate_limit()
@cache.cached(query_string=True)
def tag_posts(slug):
    tag = PublicService.find_tag(slug)
    if tag is None:
        return jsonify({'error': 'Tag not found'}), 404

    page, limit = parse_paging(request.args, _default_limit())
    data, pagination = PublicService.posts_with_tag(tag, page, limit)
    return jsonify({
        'data': data,
        'tag': {'id': tag.id, 'name': tag.name, 'slug': tag.slug},
        'pagination': pagination,
    })


@api_bp.route('/search')
@rate_limit()
@cache.cached(query_string=True)
def search():
    q = (request.args.get('q') or '').strip()
    if not q:
        return jsonify({'error': 'Search query is required'}), 400

    page, limit = parse_paging(request.args, _default_limit())
    data, pagination = PublicService.search(q, page, limit, type=request.args.get('type') or None)
    return jsonify({'data': data, 'query': q, 'pagination': pagination})
