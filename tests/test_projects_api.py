"""
Admin project API tests: auth gate, slug allocation through the create and
edit flows, categories, image upload and cleanup.
"""

import io
import os
import sqlite3

import pytest

from buildfolio.core.slugs import LookupResult


API = '/admin/projects/api'
ADMIN_PASSWORD = 'admin123'


def _upload(client, payload=b'\x89PNG fake', filename='site photo.png',
            mimetype='image/png', **fields):
    data = {'file': (io.BytesIO(payload), filename, mimetype)}
    data.update({k: str(v) for k, v in fields.items()})
    return client.post('/admin/projects/upload-image', data=data,
                       content_type='multipart/form-data')


def _stored_path(app, url):
    return os.path.join(app.static_folder, url[len('/static/'):])


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class TestAdminAuth:

    def test_api_requires_login(self, client):
        assert client.get(f'{API}/projects').status_code == 401
        assert client.post(f'{API}/projects', json={'title': 'Gedung A'}).status_code == 401
        assert client.get('/admin/stats').status_code == 401

    def test_wrong_password_rejected(self, client):
        response = client.post('/admin/login', json={'password': 'nope'})
        assert response.status_code == 401
        assert client.get('/admin/session').get_json() == {'authenticated': False}

    def test_missing_password_rejected(self, client):
        assert client.post('/admin/login', json={}).status_code == 400

    def test_login_unconfigured(self, app, client):
        app.config['ADMIN_PASSWORD'] = ''
        app.config['ADMIN_PASSWORD_HASH'] = ''
        response = client.post('/admin/login', json={'password': ADMIN_PASSWORD})
        assert response.status_code == 503

    def test_login_with_hash(self, app, client):
        from buildfolio.modules.dashboard.routes import hash_password
        app.config['ADMIN_PASSWORD'] = ''
        app.config['ADMIN_PASSWORD_HASH'] = hash_password('s3cret').upper()
        assert client.post('/admin/login', json={'password': 's3cret'}).status_code == 200

    def test_login_logout_cycle(self, client):
        assert client.post('/admin/login', data={'password': ADMIN_PASSWORD}).status_code == 200
        assert client.get('/admin/session').get_json() == {'authenticated': True}
        assert client.get(f'{API}/projects').status_code == 200

        client.post('/admin/logout')
        assert client.get('/admin/session').get_json() == {'authenticated': False}
        assert client.get(f'{API}/projects').status_code == 401


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

class TestCreateProject:

    def test_slug_from_title(self, create_project):
        body = create_project(title='Jembatan  Merah!!')
        assert body['success'] is True
        assert body['slug'] == 'jembatan-merah'
        assert body['project']['slug'] == 'jembatan-merah'

    def test_duplicate_titles_get_suffixes(self, create_project):
        slugs = [create_project(title='Gedung A')['slug'] for _ in range(3)]
        assert slugs == ['gedung-a', 'gedung-a-1', 'gedung-a-2']

    def test_typed_slug_is_normalized_and_disambiguated(self, create_project):
        create_project(title='Menara Utama')
        body = create_project(title='Another', slug='Menara Utama')
        assert body['slug'] == 'menara-utama-1'

    def test_degenerate_title_gets_fallback(self, create_project):
        body = create_project(title='!!!')
        assert body['slug'].startswith('project-')
        assert len(body['slug']) == len('project-') + 8

    def test_fields_are_stored(self, create_project):
        body = create_project(
            title='Gedung A',
            description='Office tower',
            client_name='PT Maju',
            location='Jakarta',
            completion_date='2023-08-17',
            is_featured=True,
            status='ongoing',
        )
        project = body['project']
        assert project['client_name'] == 'PT Maju'
        assert project['completion_date'] == '2023-08-17'
        assert project['is_featured'] is True
        assert project['status'] == 'ongoing'
        assert project['category'] is None
        assert project['images'] == []

    @pytest.mark.parametrize("payload", [
        {},
        {'title': ''},
        {'title': 'A', 'status': 'demolished'},
        {'title': 'A', 'completion_date': 'yesterday'},
    ])
    def test_invalid_form_rejected(self, admin_client, payload):
        response = admin_client.post(f'{API}/projects', json=payload)
        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_unknown_category_rejected(self, admin_client):
        response = admin_client.post(f'{API}/projects', json={'title': 'A', 'category_id': 999})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Category not found'

    def test_concurrent_duplicate_is_rejected(self, admin_client, monkeypatch):
        # Both saves see the slug as free; the unique column rejects the second
        monkeypatch.setattr('buildfolio.modules.projects.routes.slug_lookup',
                            lambda *args, **kwargs: LookupResult.not_found())

        first = admin_client.post(f'{API}/projects', json={'title': 'Gedung A'})
        second = admin_client.post(f'{API}/projects', json={'title': 'Gedung A'})

        assert first.status_code == 200
        assert second.status_code == 409
        assert 'gedung-a' in second.get_json()['error']

    def test_lookup_failure_blocks_create(self, admin_client, monkeypatch):
        failure = sqlite3.OperationalError('database is locked')
        monkeypatch.setattr('buildfolio.modules.projects.routes.slug_lookup',
                            lambda *args, **kwargs: LookupResult.failed(failure))

        response = admin_client.post(f'{API}/projects', json={'title': 'Gedung A'})
        assert response.status_code == 503

        monkeypatch.undo()
        assert admin_client.get(f'{API}/projects').get_json() == []

    def test_attempt_limit(self, app, admin_client, create_project):
        app.config['SLUG_MAX_ATTEMPTS'] = 2
        create_project(title='Gedung A')
        create_project(title='Gedung A')
        response = admin_client.post(f'{API}/projects', json={'title': 'Gedung A'})
        assert response.status_code == 409


# ---------------------------------------------------------------------------
# Read / update / delete
# ---------------------------------------------------------------------------

class TestEditProject:

    def test_get_and_list(self, admin_client, create_project):
        first = create_project(title='Gedung A')
        second = create_project(title='Gedung B')

        listed = admin_client.get(f'{API}/projects').get_json()
        assert [p['id'] for p in listed] == [second['id'], first['id']]

        response = admin_client.get(f"{API}/projects/{first['id']}")
        assert response.get_json()['title'] == 'Gedung A'

    def test_missing_project_404(self, admin_client):
        assert admin_client.get(f'{API}/projects/999').status_code == 404
        assert admin_client.put(f'{API}/projects/999', json={'title': 'X'}).status_code == 404
        assert admin_client.delete(f'{API}/projects/999').status_code == 404

    def test_update_keeps_slug_when_title_unchanged(self, admin_client, create_project):
        create_project(title='Gedung A')
        second = create_project(title='Gedung A')

        response = admin_client.put(f"{API}/projects/{second['id']}",
                                    json={'title': 'Gedung A', 'description': 'updated'})
        body = response.get_json()
        assert response.status_code == 200
        assert body['slug'] == 'gedung-a-1'
        assert body['project']['description'] == 'updated'

    def test_update_reallocates_on_title_change(self, admin_client, create_project):
        create_project(title='Gedung B')
        project = create_project(title='Gedung A')

        response = admin_client.put(f"{API}/projects/{project['id']}", json={'title': 'Gedung B'})
        assert response.get_json()['slug'] == 'gedung-b-1'

    def test_update_to_own_slug_does_not_collide(self, admin_client, create_project):
        project = create_project(title='Gedung A')
        response = admin_client.put(f"{API}/projects/{project['id']}",
                                    json={'title': 'Gedung A (revised)', 'slug': 'gedung-a'})
        assert response.get_json()['slug'] == 'gedung-a'

    def test_update_keeps_fallback_slug(self, admin_client, create_project):
        project = create_project(title='!!!')

        response = admin_client.put(f"{API}/projects/{project['id']}",
                                    json={'title': '!!!', 'description': 'typo fix'})

        assert response.status_code == 200
        assert response.get_json()['slug'] == project['slug']

    def test_update_keeps_suffix_after_base_deleted(self, admin_client, create_project):
        first = create_project(title='Gedung A')
        second = create_project(title='Gedung A')
        admin_client.delete(f"{API}/projects/{first['id']}")

        response = admin_client.put(f"{API}/projects/{second['id']}",
                                    json={'title': 'Gedung A', 'location': 'Bandung'})

        assert response.get_json()['slug'] == 'gedung-a-1'
        public = admin_client.get('/projects/api/projects/gedung-a-1')
        assert public.status_code == 200

    def test_update_validation(self, admin_client, create_project):
        project = create_project(title='Gedung A')
        response = admin_client.put(f"{API}/projects/{project['id']}", json={'title': ''})
        assert response.status_code == 400

    def test_delete(self, admin_client, create_project):
        project = create_project(title='Gedung A')
        assert admin_client.delete(f"{API}/projects/{project['id']}").status_code == 200
        assert admin_client.get(f"{API}/projects/{project['id']}").status_code == 404

        # The slug is free again
        assert create_project(title='Gedung A')['slug'] == 'gedung-a'

    def test_slug_preview(self, admin_client, create_project):
        project = create_project(title='Gedung A')

        preview = admin_client.get(f'{API}/slug-preview', query_string={'title': 'Gedung A'})
        assert preview.get_json() == {'slug': 'gedung-a-1'}

        own = admin_client.get(f'{API}/slug-preview',
                               query_string={'title': 'Gedung A', 'exclude_id': project['id']})
        assert own.get_json() == {'slug': 'gedung-a'}

    def test_stats(self, admin_client, create_project):
        create_project(title='A', status='completed', is_featured=True)
        create_project(title='B', status='ongoing')
        create_project(title='C', status='planning')

        stats = admin_client.get('/admin/stats').get_json()
        assert stats == {'total': 3, 'completed': 1, 'ongoing': 1, 'planning': 1, 'featured': 1}


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

class TestCategories:

    def test_create_and_list(self, admin_client):
        first = admin_client.post(f'{API}/categories', json={'name': 'Gedung Komersial'})
        second = admin_client.post(f'{API}/categories', json={'name': 'Gedung Komersial'})

        assert first.get_json()['category']['slug'] == 'gedung-komersial'
        assert second.get_json()['category']['slug'] == 'gedung-komersial-1'
        assert len(admin_client.get(f'{API}/categories').get_json()) == 2

    def test_name_required(self, admin_client):
        assert admin_client.post(f'{API}/categories', json={'name': '  '}).status_code == 400

    def test_degenerate_name_uses_category_prefix(self, admin_client):
        response = admin_client.post(f'{API}/categories', json={'name': '???'})
        assert response.get_json()['category']['slug'].startswith('category-')

    def test_project_carries_category(self, admin_client, create_project):
        category = admin_client.post(f'{API}/categories', json={'name': 'Jembatan'}).get_json()['category']
        project = create_project(title='Jembatan Merah', category_id=category['id'])['project']
        assert project['category']['slug'] == 'jembatan'


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

class TestImages:

    def test_upload_without_project(self, app, admin_client):
        response = _upload(admin_client)
        body = response.get_json()

        assert response.status_code == 200
        assert body['data']['url'].startswith('/static/project-images/')
        assert body['data']['url'].endswith('-site_photo.png')
        assert body['data']['image_id'] is None
        assert os.path.isfile(_stored_path(app, body['data']['url']))

    def test_upload_attaches_to_project(self, admin_client, create_project):
        project = create_project(title='Gedung A')

        first = _upload(admin_client, project_id=project['id'], alt_text='Front view').get_json()
        second = _upload(admin_client, project_id=project['id']).get_json()

        images = admin_client.get(f"{API}/projects/{project['id']}").get_json()['images']
        assert [i['id'] for i in images] == [first['data']['image_id'], second['data']['image_id']]
        assert images[0]['alt_text'] == 'Front view'
        assert images[1]['alt_text'] == 'site photo.png'
        assert [i['sort_order'] for i in images] == [0, 1]

    def test_upload_requires_auth(self, client):
        assert _upload(client).status_code == 401

    def test_upload_rejects_type(self, admin_client):
        response = _upload(admin_client, filename='notes.txt', mimetype='text/plain')
        assert response.status_code == 400

    def test_upload_rejects_size(self, app, admin_client):
        app.config['MAX_UPLOAD_BYTES'] = 10
        response = _upload(admin_client, payload=b'x' * 11)
        assert response.status_code == 400
        assert 'too large' in response.get_json()['error']

    def test_oversized_body_refused_before_reading(self, app, admin_client):
        response = _upload(admin_client, payload=b'x' * (app.config['MAX_CONTENT_LENGTH'] + 1))
        assert response.status_code == 413

    def test_upload_unknown_project(self, admin_client):
        assert _upload(admin_client, project_id=999).status_code == 404

    def test_missing_file(self, admin_client):
        response = admin_client.post('/admin/projects/upload-image', data={},
                                     content_type='multipart/form-data')
        assert response.status_code == 400

    def test_delete_image_removes_file(self, app, admin_client, create_project):
        project = create_project(title='Gedung A')
        data = _upload(admin_client, project_id=project['id']).get_json()['data']
        path = _stored_path(app, data['url'])

        assert admin_client.delete(f"{API}/images/{data['image_id']}").status_code == 200
        assert not os.path.exists(path)
        assert admin_client.get(f"{API}/projects/{project['id']}").get_json()['images'] == []
        assert admin_client.delete(f"{API}/images/{data['image_id']}").status_code == 404

    def test_delete_project_removes_files(self, app, admin_client, create_project):
        project = create_project(title='Gedung A')
        data = _upload(admin_client, project_id=project['id']).get_json()['data']
        path = _stored_path(app, data['url'])
        assert os.path.isfile(path)

        admin_client.delete(f"{API}/projects/{project['id']}")
        assert not os.path.exists(path)
