"""
Shared fixtures: a Buildfolio app on a throwaway directory with local storage.
Install test dependencies with: pip install -e ".[dev]"
"""

import os
import shutil
import tempfile

import pytest
from flask import Flask

from buildfolio import Buildfolio

ADMIN_PASSWORD = 'admin123'


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="buildfolio-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


def make_app(tmp_db_dir, features=None):
    app = Flask(__name__, static_folder=os.path.join(tmp_db_dir, 'static'))
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = tmp_db_dir
    app.config["PROJECTS_DB"] = os.path.join(tmp_db_dir, "projects.db")
    app.config["LOGS_DB"] = os.path.join(tmp_db_dir, "app_logs.db")
    app.config["ADMIN_PASSWORD"] = ADMIN_PASSWORD
    app.config["ADMIN_PASSWORD_HASH"] = ""
    app.config["STORAGE_TYPE"] = "local"
    app.config["CORS_ORIGINS"] = ["*"]
    Buildfolio(app, {'features': features or {}})
    return app


@pytest.fixture
def app(tmp_db_dir):
    """Fully initialised Flask app with all Buildfolio modules registered."""
    return make_app(tmp_db_dir)


@pytest.fixture
def app_factory(tmp_db_dir):
    """Build an app with a custom feature map."""
    return lambda features=None: make_app(tmp_db_dir, features)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    response = client.post('/admin/login', json={'password': ADMIN_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def create_project(admin_client):
    """POST a project through the admin API and return the JSON body."""
    def _create(**fields):
        response = admin_client.post('/admin/projects/api/projects', json=fields)
        assert response.status_code == 200, response.get_json()
        return response.get_json()
    return _create
