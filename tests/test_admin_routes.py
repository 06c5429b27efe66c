from opendraft.extensions import db
from opendraft.models import Category, Content, Media, User
from tests.conftest import image_bytes


class TestCategoryRoutes:

    def test_crud(self, auth_client):
        resp = auth_client.post('/categories/create', data={'name': 'News', 'description': 'Latest'})
        assert resp.get_json()['data']['slug'] == 'news'
        category_id = resp.get_json()['data']['id']

        resp = auth_client.post(f'/categories/{category_id}/update', data={'name': 'Updates'})
        assert resp.get_json()['success'] is True

        rows = auth_client.get('/categories/').get_json()['data']
        assert rows[0]['name'] == 'Updates'
        assert rows[0]['_count'] == {'contents': 0}

        assert auth_client.post(f'/categories/{category_id}/delete').get_json()['success'] is True
        assert auth_client.get('/categories/').get_json()['data'] == []

    def test_duplicate_and_required(self, auth_client):
        auth_client.post('/categories/create', data={'name': 'News'})
        resp = auth_client.post('/categories/create', data={'name': 'News'})
        assert resp.status_code == 409
        assert resp.get_json() == {'error': 'A category with this slug already exists', 'success': False}

        resp = auth_client.post('/categories/create', data={'name': ''})
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Name is required'

    def test_self_parent(self, auth_client):
        category_id = auth_client.post('/categories/create', data={'name': 'News'}).get_json()['data']['id']
        resp = auth_client.post(f'/categories/{category_id}/update',
                                data={'name': 'News', 'parent_id': str(category_id)})
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Category cannot be its own parent'

    def test_delete_guard(self, app, auth_client, admin):
        with app.app_context():
            category = Category(name='Busy', slug='busy')
            db.session.add(category)
            db.session.flush()
            db.session.add(Content(title='X', slug='x', category_id=category.id, author_id=admin['id']))
            db.session.commit()
            category_id = category.id

        resp = auth_client.post(f'/categories/{category_id}/delete')
        assert resp.status_code == 409
        assert resp.get_json()['error'] == 'Cannot delete category with 1 content item(s)'


class TestTagRoutes:

    def test_crud(self, auth_client):
        tag_id = auth_client.post('/tags/create', data={'name': 'Python'}).get_json()['data']['id']
        assert auth_client.post(f'/tags/{tag_id}/update', data={'name': 'Py', 'slug': 'py'}).get_json()['success']

        rows = auth_client.get('/tags/').get_json()['data']
        assert [(row['name'], row['slug']) for row in rows] == [('Py', 'py')]

        assert auth_client.post(f'/tags/{tag_id}/delete').get_json()['success'] is True
        assert auth_client.get('/tags/').get_json()['data'] == []

    def test_quick_create(self, auth_client):
        resp = auth_client.post('/tags/quick-create', json={'name': 'Web Dev'})
        assert resp.get_json()['data']['slug'] == 'web-dev'

        resp = auth_client.post('/tags/quick-create', json={'name': 'Web Dev'})
        assert resp.status_code == 400
        assert resp.get_json()['data'] is None


class TestMediaRoutes:

    def test_upload_list_update_delete(self, app, auth_client):
        resp = auth_client.post(
            '/media/upload',
            data={'file': (image_bytes(), 'cover.png', 'image/png')},
            content_type='multipart/form-data',
        )
        assert resp.status_code == 200
        media = resp.get_json()['data']
        assert media['original_name'] == 'cover.png'

        # 本地存储模式下可以直接访问文件
        assert auth_client.get(media['url']).status_code == 200

        resp = auth_client.post(f"/media/{media['id']}/update", data={'alt_text': 'Cover image'})
        assert resp.get_json()['success'] is True

        listing = auth_client.get('/media/?search=cover').get_json()
        assert listing['total'] == 1
        assert listing['data'][0]['alt_text'] == 'Cover image'
        assert listing['data'][0]['size_label'].endswith('B')

        assert auth_client.post(f"/media/{media['id']}/delete").get_json()['success'] is True
        with app.app_context():
            assert Media.query.count() == 0

    def test_upload_errors(self, auth_client):
        resp = auth_client.post('/media/upload', data={}, content_type='multipart/form-data')
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'No file provided'

        resp = auth_client.post(
            '/media/upload',
            data={'file': (image_bytes(), 'doc.pdf', 'application/pdf')},
            content_type='multipart/form-data',
        )
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Invalid file type. Only images are allowed.'

    def test_delete_missing(self, auth_client):
        resp = auth_client.post('/media/999/delete')
        assert resp.status_code == 404
        assert resp.get_json()['error'] == 'Media not found'


class TestSettingsRoutes:

    def test_get_defaults(self, auth_client):
        data = auth_client.get('/settings/').get_json()['data']
        assert data['site_name'] == 'My Blog'
        assert data['posts_per_page'] == 10

    def test_update(self, auth_client):
        resp = auth_client.post('/settings/', data={
            'site_name': 'Notebook',
            'posts_per_page': '20',
            'comments_enabled': 'y',
            'site_url': 'https://example.com',
        })
        data = resp.get_json()['data']
        assert data['site_name'] == 'Notebook'
        assert data['posts_per_page'] == 20
        assert data['comments_enabled'] is True
        assert data['comments_moderation'] is False

    def test_site_name_required(self, auth_client):
        resp = auth_client.post('/settings/', data={'site_name': ''})
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Site name is required'

    def test_invalid_url(self, auth_client):
        resp = auth_client.post('/settings/', data={'site_name': 'X', 'site_url': 'not a url'})
        assert resp.status_code == 400

    def test_requires_admin(self, app, client):
        with app.app_context():
            db.session.add(User(email='editor@example.com', password='editor123', display_name='Ed'))
            db.session.commit()
        client.post('/auth/login', data={'email': 'editor@example.com', 'password': 'editor123'})

        resp = client.post('/settings/', data={'site_name': 'Hijack'})
        assert resp.status_code == 403
        assert resp.get_json()['success'] is False


class TestProfileRoutes:

    def test_view_and_edit(self, auth_client):
        assert auth_client.get('/profile/').get_json()['data']['display_name'] == 'Admin'

        resp = auth_client.post('/profile/', data={'display_name': 'Ada', 'bio': 'Writer'})
        assert resp.get_json()['data']['display_name'] == 'Ada'

        resp = auth_client.post('/profile/', data={'display_name': ' '})
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Name is required'

    def test_avatar(self, auth_client):
        resp = auth_client.post(
            '/profile/avatar',
            data={'avatar': (image_bytes(size=(300, 500)), 'me.jpg', 'image/jpeg')},
            content_type='multipart/form-data',
        )
        assert resp.status_code == 200
        assert auth_client.get('/profile/').get_json()['data']['avatar_url'] == resp.get_json()['avatar_url']

    def test_change_password(self, client, auth_client, admin):
        resp = auth_client.post('/profile/change-password', data={
            'current_password': admin['password'],
            'new_password': 'brandnew1',
            'confirm_password': 'brandnew1',
        })
        assert resp.get_json()['success'] is True

        auth_client.get('/auth/logout')
        resp = client.post('/auth/login', data={'email': admin['email'], 'password': 'brandnew1'})
        assert resp.status_code == 200
