import os

import pytest
from PIL import Image
from werkzeug.datastructures import FileStorage

from opendraft.exceptions import ValidationError
from opendraft.models import Setting, User
from opendraft.services.profile_service import ProfileService
from opendraft.services.settings_service import SettingsService, SiteSettings
from tests.conftest import image_bytes


class TestSettings:

    def test_defaults(self, ctx):
        settings = SettingsService.get_site_settings()
        assert settings == SiteSettings()
        assert settings.site_name == 'My Blog'
        assert settings.posts_per_page == 10
        assert settings.comments_moderation is True

    def test_stored_values_merge_over_defaults(self, ctx):
        ctx.session.add_all([
            Setting(key='site_name', value='Field Notes'),
            Setting(key='posts_per_page', value='25'),
            Setting(key='comments_enabled', value='true'),
            Setting(key='unknown_key', value='ignored'),
        ])
        ctx.session.commit()

        settings = SettingsService.get_site_settings()
        assert settings.site_name == 'Field Notes'
        assert settings.posts_per_page == 25
        assert settings.comments_enabled is True
        assert settings.site_description == 'A blog built with OpenDraft'

    def test_update(self, ctx):
        settings = SettingsService.update_site_settings({
            'site_name': '  Renamed  ',
            'posts_per_page': 5,
            'comments_enabled': True,
        })
        assert settings.site_name == 'Renamed'
        assert settings.posts_per_page == 5
        assert settings.comments_enabled is True
        assert Setting.query.count() == 3

        SettingsService.update_site_settings({'site_name': 'Again'})
        assert Setting.query.count() == 3
        assert SettingsService.get_site_settings().site_name == 'Again'

    def test_site_name_required(self, ctx):
        with pytest.raises(ValidationError) as exc:
            SettingsService.update_site_settings({'site_name': '  '})
        assert exc.value.message == 'Site name is required'


class TestProfile:

    def test_update_profile(self, ctx, admin):
        user = ctx.session.get(User, admin['id'])
        ProfileService.update_profile(user, '  New Name ', bio='  ', avatar_url='https://cdn.example.com/a.png')
        ctx.session.expire_all()
        user = ctx.session.get(User, admin['id'])
        assert user.display_name == 'New Name'
        assert user.bio is None
        assert user.avatar_url == 'https://cdn.example.com/a.png'

    def test_name_required(self, ctx, admin):
        user = ctx.session.get(User, admin['id'])
        with pytest.raises(ValidationError) as exc:
            ProfileService.update_profile(user, '')
        assert exc.value.message == 'Name is required'

    def test_change_password(self, ctx, admin):
        user = ctx.session.get(User, admin['id'])
        with pytest.raises(ValidationError):
            ProfileService.change_password(user, 'wrong', 'newpass1', 'newpass1')
        with pytest.raises(ValidationError):
            ProfileService.change_password(user, admin['password'], 'short', 'short')
        with pytest.raises(ValidationError):
            ProfileService.change_password(user, admin['password'], 'newpass1', 'newpass2')

        ProfileService.change_password(user, admin['password'], 'newpass1', 'newpass1')
        assert user.verify_password('newpass1')

    def test_upload_avatar_is_cropped(self, app, ctx, admin):
        user = ctx.session.get(User, admin['id'])
        file = FileStorage(stream=image_bytes(size=(400, 300)), filename='me.png', content_type='image/png')

        url = ProfileService.upload_avatar(user, file)

        assert url.startswith(f"/media/files/avatars/{admin['id']}/")
        storage_path = url[len('/media/files/'):]
        with Image.open(os.path.join(app.config['UPLOAD_FOLDER'], storage_path)) as image:
            assert image.size == (200, 200)
        assert ctx.session.get(User, admin['id']).avatar_url == url
