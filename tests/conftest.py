import io
import json
import pytest
from PIL import Image

from opendraft import create_app
from opendraft.extensions import db as _db
from opendraft.models import User
from opendraft.utils import security

ADMIN_EMAIL = 'admin@example.com'
ADMIN_PASSWORD = 'secret123'


@pytest.fixture
def app(tmp_path):
    """测试应用：内存 SQLite，关闭 CSRF，上传目录指向临时目录"""
    app = create_app('testing')
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')
    with app.app_context():
        _db.create_all()
    yield app
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def ctx(app):
    """服务层测试：在应用上下文中直接调用服务"""
    with app.app_context():
        yield _db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(app):
    with app.app_context():
        user = User(email=ADMIN_EMAIL, password=ADMIN_PASSWORD, display_name='Admin', is_admin=True)
        _db.session.add(user)
        _db.session.commit()
        return {'id': user.id, 'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD}


@pytest.fixture
def auth_client(client, admin):
    resp = client.post('/auth/login', data={'email': admin['email'], 'password': admin['password']})
    assert resp.status_code == 200
    return client


def doc(*paragraphs):
    """构造 TipTap 文档"""
    return {
        'type': 'doc',
        'content': [
            {'type': 'paragraph', 'content': [{'type': 'text', 'text': p}]} for p in paragraphs
        ],
    }


def doc_json(*paragraphs):
    return json.dumps(doc(*paragraphs))


def image_bytes(fmt='PNG', size=(32, 16), color=(200, 30, 30)):
    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, fmt)
    buffer.seek(0)
    return buffer


@pytest.fixture(autouse=True)
def reset_rate_limit():
    security._rate_limit_storage.clear()
    yield
