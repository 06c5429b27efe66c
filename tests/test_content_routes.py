from datetime import datetime, timedelta

from opendraft.extensions import db
from opendraft.models import AuditLog, Category, Content, Tag
from opendraft.services.content_validator import TITLE_REQUIRED, SCHEDULE_REQUIRED, SLUG_REQUIRED
from tests.conftest import doc, doc_json


def save(client, **fields):
    data = {'title': 'Hello', 'body': doc_json('text'), 'status': 'draft'}
    data.update(fields)
    return client.post('/content/save', data=data)


def make_taxonomy(app):
    with app.app_context():
        category = Category(name='News', slug='news')
        tags = [Tag(name='A', slug='a'), Tag(name='B', slug='b'), Tag(name='C', slug='c')]
        db.session.add(category)
        db.session.add_all(tags)
        db.session.commit()
        return category.id, [t.id for t in tags]


def test_save_creates_and_updates(app, auth_client):
    category_id, (a, b, c) = make_taxonomy(app)

    resp = save(auth_client, title='First Post', status='published', category_id=category_id,
                tag_ids=f'{a},{b}', meta_title='SEO title')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['success'] is True
    content_id = body['content_id']

    resp = save(auth_client, id=content_id, title='First Post', status='draft', tag_ids=f'{b},{c}')
    assert resp.get_json()['success'] is True

    data = auth_client.get(f'/content/{content_id}').get_json()['data']
    assert data['status'] == 'draft'
    assert data['published_at'] is None
    assert data['tag_ids'] == [b, c]
    assert data['seo_meta']['meta_title'] is None

    with app.app_context():
        assert AuditLog.query.filter_by(module='content', action='save').count() == 2


def test_save_validation_errors(auth_client):
    resp = save(auth_client, title='', status='scheduled')
    assert resp.status_code == 400
    body = resp.get_json()
    assert body['success'] is False
    assert body['error'] == f'{TITLE_REQUIRED}; {SCHEDULE_REQUIRED}'


def test_save_rejects_unknown_status(auth_client):
    resp = save(auth_client, status='deleted')
    assert resp.status_code == 400
    assert resp.get_json()['success'] is False


def test_save_scheduled(auth_client):
    when = (datetime.utcnow() + timedelta(days=2)).replace(microsecond=0)
    resp = save(auth_client, status='scheduled', scheduled_at=when.isoformat() + '+00:00')
    content_id = resp.get_json()['content_id']
    data = auth_client.get(f'/content/{content_id}').get_json()['data']
    assert data['scheduled_at'] == when.isoformat()



def test_save_blank_enum_fields_use_defaults(auth_client):
    resp = save(auth_client, type='', status='', visibility='')
    assert resp.status_code == 200
    content_id = resp.get_json()['content_id']
    data = auth_client.get(f'/content/{content_id}').get_json()['data']
    assert (data['type'], data['status'], data['visibility']) == ('post', 'draft', 'public')


def test_save_scheduled_with_z_suffix(auth_client):
    when = (datetime.utcnow() + timedelta(days=2)).replace(microsecond=0)
    resp = save(auth_client, status='scheduled', scheduled_at=when.isoformat() + '.000Z')
    assert resp.status_code == 200
    content_id = resp.get_json()['content_id']
    data = auth_client.get(f'/content/{content_id}').get_json()['data']
    assert data['scheduled_at'] == when.isoformat()


def test_save_symbol_only_title_needs_slug(app, auth_client):
    resp = save(auth_client, title='!!!')
    assert resp.status_code == 400
    assert resp.get_json()['error'] == SLUG_REQUIRED

    resp = save(auth_client, title='???', slug='questions')
    assert resp.status_code == 200
    with app.app_context():
        assert [c.slug for c in Content.query.all()] == ['questions']


def test_save_duplicate_slug(auth_client):
    save(auth_client, title='Twin')
    resp = save(auth_client, title='Twin')
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'A content with this slug already exists'


def test_detail_not_found(auth_client):
    resp = auth_client.get('/content/999')
    assert resp.status_code == 404
    assert resp.get_json()['error'] == 'Content not found'


def test_list_filters(auth_client):
    save(auth_client, title='Alpha', status='published')
    save(auth_client, title='Beta')
    resp = auth_client.get('/content/?search=alp&status=all&type=all')
    body = resp.get_json()
    assert body['total'] == 1
    assert body['data'][0]['title'] == 'Alpha'
    assert body['data'][0]['author'] == {'display_name': 'Admin'}


def test_delete(app, auth_client):
    content_id = save(auth_client).get_json()['content_id']
    assert auth_client.post(f'/content/{content_id}/delete').get_json()['success'] is True
    with app.app_context():
        assert Content.query.count() == 0


def test_bulk_status_and_delete(app, auth_client):
    ids = [save(auth_client, title=f'Post {i}').get_json()['content_id'] for i in range(3)]

    resp = auth_client.post('/content/bulk-status', json={'ids': ids[:2], 'status': 'published'})
    assert resp.get_json() == {'error': None, 'success': True, 'updated': 2}

    resp = auth_client.post('/content/bulk-delete', data={'ids': [str(i) for i in ids[1:]]})
    assert resp.get_json()['deleted'] == 2

    with app.app_context():
        remaining = Content.query.all()
        assert [c.id for c in remaining] == [ids[0]]
        assert remaining[0].status == 'published'


def test_bulk_requires_ids(auth_client):
    resp = auth_client.post('/content/bulk-delete', json={'ids': []})
    assert resp.status_code == 400


def test_quick_edit(app, auth_client):
    content_id = save(auth_client).get_json()['content_id']

    assert auth_client.post(f'/content/{content_id}/status', data={'status': 'archived'}).status_code == 200
    assert auth_client.post(f'/content/{content_id}/visibility', data={'visibility': 'members_only'}).status_code == 200
    assert auth_client.post(f'/content/{content_id}/visibility', data={'visibility': 'secret'}).status_code == 400

    with app.app_context():
        content = db.session.get(Content, content_id)
        assert content.status == 'archived'
        assert content.visibility == 'members_only'


def test_options(app, auth_client):
    make_taxonomy(app)
    body = auth_client.get('/content/options').get_json()
    assert [c['slug'] for c in body['categories']] == ['news']
    assert [t['slug'] for t in body['tags']] == ['a', 'b', 'c']


def test_preview(auth_client):
    resp = auth_client.post('/content/preview', json={'body': doc('Hello <b>')})
    assert resp.get_json()['html'] == '<p>Hello &lt;b&gt;</p>'

    resp = auth_client.post('/content/preview', data={'body': '{oops'})
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Invalid content format'


def test_dashboard(auth_client):
    save(auth_client, title='One', status='published')
    save(auth_client, title='Two')
    body = auth_client.get('/').get_json()
    assert body['stats']['totalPosts'] == 2
    assert body['stats']['published'] == 1
    assert body['stats']['drafts'] == 1
    assert len(body['recent']) == 2
    assert body['recent'][0]['author'] == {'display_name': 'Admin'}
