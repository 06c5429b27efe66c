from datetime import datetime, timedelta

import pytest

from opendraft.exceptions import DuplicateSlug
from opendraft.models import Content, SeoMeta, Tag, User
from opendraft.services.content_builder import ContentInput, SeoInput, build_content_data
from opendraft.services.content_service import ContentService, DUPLICATE_CONTENT_SLUG
from opendraft.services.content_validator import INVALID_BODY, CONTENT_REQUIRED
from opendraft.services.tag_service import TagService
from tests.conftest import doc, doc_json


def make_content(author_id=None, **overrides):
    content_input = ContentInput(title=overrides.pop('title', 'Hello World'), **overrides)
    return ContentService.create_content(build_content_data(content_input, doc('body'), author_id))


def make_tags(db, *names):
    tags = [Tag(name=name, slug=name.lower()) for name in names]
    db.session.add_all(tags)
    db.session.commit()
    return [t.id for t in tags]


def test_create_then_find_round_trip(ctx):
    content_id = make_content(title='Round Trip', type='page', status='draft')
    content = ContentService.find_content_by_id(content_id)
    assert content.title == 'Round Trip'
    assert content.slug == 'round-trip'
    assert content.type == 'page'
    assert content.status == 'draft'


def test_duplicate_slug(ctx):
    make_content(title='Same')
    with pytest.raises(DuplicateSlug) as exc:
        make_content(title='Same')
    assert exc.value.message == DUPLICATE_CONTENT_SLUG


def test_update_unknown_id_is_noop(ctx):
    data = build_content_data(ContentInput(title='Ghost'), doc('x'), None)
    ContentService.update_content(9999, data)
    assert Content.query.count() == 0


def test_find_missing_returns_none(ctx):
    assert ContentService.find_content_by_id(42) is None
    assert ContentService.get_content(42) is None


def test_delete_removes_tag_associations(ctx):
    tag_ids = make_tags(ctx, 'a', 'b')
    content_id = make_content()
    TagService.sync_content_tags(content_id, tag_ids)

    ContentService.delete_content_by_id(content_id)

    assert ContentService.find_content_by_id(content_id) is None
    assert TagService.find_tags_by_content_id(content_id) == []
    assert Tag.query.count() == 2


def test_filters_search_status_type(ctx):
    make_content(title='Flask Tips', status='published', type='post')
    make_content(title='Django Notes', status='draft', type='post')
    make_content(title='About', slug='about-flask', status='published', type='page')

    result = ContentService.find_contents_with_filters(search='FLASK', status='all', type='all')
    assert result['total'] == 2
    assert {row['title'] for row in result['data']} == {'Flask Tips', 'About'}

    result = ContentService.find_contents_with_filters(search='flask', status='published', type='page')
    assert [row['title'] for row in result['data']] == ['About']

    result = ContentService.find_contents_with_filters(status='draft')
    assert [row['title'] for row in result['data']] == ['Django Notes']


def test_filters_pagination_and_order(ctx):
    ids = [make_content(title=f'Post {i}') for i in range(5)]
    base = datetime(2030, 1, 1)
    for offset, content_id in enumerate(ids):
        Content.query.filter_by(id=content_id).update({'updated_at': base + timedelta(minutes=offset)})
    ctx.session.commit()

    page1 = ContentService.find_contents_with_filters(page=1, limit=2)
    page3 = ContentService.find_contents_with_filters(page=3, limit=2)
    assert page1['total'] == 5
    assert page1['totalPages'] == 3
    assert [row['title'] for row in page1['data']] == ['Post 4', 'Post 3']
    assert [row['title'] for row in page3['data']] == ['Post 0']


def test_filters_escape_wildcards(ctx):
    make_content(title='100% done')
    make_content(title='Other')
    result = ContentService.find_contents_with_filters(search='%')
    assert [row['title'] for row in result['data']] == ['100% done']


def test_list_rows_normalize_author(ctx, admin):
    make_content(author_id=admin['id'], title='With Author')
    make_content(title='Orphan')
    rows = {row['title']: row for row in ContentService.find_contents_with_filters()['data']}
    assert rows['With Author']['author'] == {'display_name': 'Admin'}
    assert rows['Orphan']['author'] is None


def test_bulk_update_status_publishes_batch(ctx):
    first = make_content(title='One')
    second = make_content(title='Two')
    untouched = make_content(title='Three')
    before = datetime.utcnow()

    updated = ContentService.bulk_update_content_status([first, second], 'published')

    assert updated == 2
    ctx.session.expire_all()
    rows = [ContentService.find_content_by_id(i) for i in (first, second)]
    assert all(row.status == 'published' for row in rows)
    assert all(row.published_at >= before for row in rows)
    assert rows[0].published_at == rows[1].published_at
    assert ContentService.find_content_by_id(untouched).status == 'draft'


def test_bulk_delete(ctx):
    ids = [make_content(title=f'Post {i}') for i in range(3)]
    assert ContentService.bulk_delete_contents_by_ids(ids[:2]) == 2
    assert Content.query.count() == 1
    assert ContentService.bulk_delete_contents_by_ids([]) == 0


def test_quick_edit_keeps_scheduled_at(ctx):
    when = (datetime.utcnow() + timedelta(days=3)).replace(microsecond=0)
    content_id = make_content(status='scheduled', scheduled_at=when.isoformat())

    ContentService.update_content_status_by_id(content_id, 'published')
    ContentService.update_content_visibility_by_id(content_id, 'private')

    ctx.session.expire_all()
    content = ContentService.find_content_by_id(content_id)
    assert content.status == 'published'
    assert content.visibility == 'private'
    assert content.published_at is not None
    assert content.scheduled_at == when


def test_get_content_merges_tags_and_seo(ctx):
    tag_ids = make_tags(ctx, 'x', 'y')
    content_id = make_content()
    TagService.sync_content_tags(content_id, tag_ids)

    data = ContentService.get_content(content_id)
    assert data['tag_ids'] == sorted(tag_ids)
    assert data['seo_meta'] is None
    assert data['title'] == 'Hello World'


def test_save_content_pipeline(ctx, admin):
    tag_ids = make_tags(ctx, 'a', 'b', 'c')
    a, b, c = tag_ids

    result = ContentService.save_content(ContentInput(
        title='Pipeline',
        body_json=doc_json('hello'),
        status='published',
        tag_ids=[a, b],
        seo=SeoInput(meta_title='  Meta  ', meta_description=''),
    ), admin['id'])
    assert result['success'] is True
    assert result['error'] is None
    content_id = result['content_id']

    saved = ContentService.get_content(content_id)
    assert saved['published_at'] is not None
    assert saved['author_id'] == admin['id']
    assert saved['tag_ids'] == [a, b]
    assert saved['seo_meta']['meta_title'] == 'Meta'
    assert saved['seo_meta']['meta_description'] is None

    # 再次保存：标签替换为 b, c
    result = ContentService.save_content(ContentInput(
        id=content_id,
        title='Pipeline',
        body_json=doc_json('hello again'),
        status='published',
        tag_ids=[b, c],
        seo=SeoInput(meta_title='Updated'),
    ), admin['id'])
    assert result['success'] is True
    assert set(TagService.find_tags_by_content_id(content_id)) == {b, c}
    assert SeoMeta.query.filter_by(content_id=content_id).count() == 1
    assert SeoMeta.query.filter_by(content_id=content_id).first().meta_title == 'Updated'


def test_save_content_invalid_body_short_circuits(ctx):
    result = ContentService.save_content(ContentInput(title='', body_json='{broken'), None)
    assert result == {'error': INVALID_BODY, 'success': False}
    assert Content.query.count() == 0


def test_save_content_rechecks_empty_body(ctx):
    empty = '{"type": "doc", "content": [{"type": "paragraph"}]}'
    result = ContentService.save_content(
        ContentInput(title='Empty', body_json=empty, status='published', body_is_empty=False), None
    )
    assert result['success'] is False
    assert result['error'] == CONTENT_REQUIRED


def test_save_content_duplicate_slug(ctx):
    ContentService.save_content(ContentInput(title='Twin', body_json=doc_json('a')), None)
    result = ContentService.save_content(ContentInput(title='Twin', body_json=doc_json('b')), None)
    assert result == {'error': DUPLICATE_CONTENT_SLUG, 'success': False}


def test_user_relationship_loaded(ctx, admin):
    content_id = make_content(author_id=admin['id'])
    content = ContentService.find_content_by_id(content_id)
    assert isinstance(content.author, User)
