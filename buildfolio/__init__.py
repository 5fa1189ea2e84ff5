"""
Buildfolio - Construction Portfolio Site
========================================

A Flask site for a construction company's project portfolio with:
- Public project listing, detail and featured feed (JSON)
- Password-gated admin for projects, categories and images
- Slug allocation with collision suffixes
- Health check and persisted logs

Usage:
    from flask import Flask
    from buildfolio import Buildfolio

    app = Flask(__name__)
    Buildfolio(app)
"""

import os
import logging
from datetime import timedelta

from .core.config import Config

__version__ = '0.1.0'

logger = logging.getLogger(__name__)

# Room for multipart boundaries and form fields around an upload
UPLOAD_OVERHEAD_BYTES = 64 * 1024

DEFAULT_FEATURES = {
    'dashboard': True,
    'projects': True,
    'projects_public': True,
    'ops': True,
}


class Buildfolio:
    """Flask extension that wires config, databases and blueprints."""

    def __init__(self, app=None, config=None):
        self._config = dict(config or {})
        self._registered = []
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self._apply_config_defaults(app)
        self._setup_database_dir(app)
        self._register_blueprints(app)

        with app.app_context():
            from .modules.projects.database import init_projects_db
            init_projects_db()

        app.extensions['buildfolio'] = self
        logger.info(f"Buildfolio initialised with modules: {', '.join(self._registered)}")

    def _apply_config_defaults(self, app):
        """Fill app.config from Config for anything the host app left unset"""
        host_db_dir = app.config.get('DB_DIR')
        if host_db_dir:
            # Databases follow a DB_DIR chosen by the host app
            projects_db = os.path.join(host_db_dir, 'projects.db')
            logs_db = os.path.join(host_db_dir, 'app_logs.db')
        else:
            projects_db = Config.PROJECTS_DB
            logs_db = Config.LOGS_DB

        defaults = {
            'DB_DIR': host_db_dir or Config.DB_DIR,
            'PROJECTS_DB': projects_db,
            'LOGS_DB': logs_db,
            'ADMIN_PASSWORD': Config.ADMIN_PASSWORD,
            'ADMIN_PASSWORD_HASH': Config.ADMIN_PASSWORD_HASH,
            'STORAGE_TYPE': Config.STORAGE_TYPE,
            'SPACES_REGION': Config.SPACES_REGION,
            'SPACES_NAME': Config.SPACES_NAME,
            'SPACES_KEY': Config.SPACES_KEY,
            'SPACES_SECRET': Config.SPACES_SECRET,
            'SPACES_ENDPOINT': Config.SPACES_ENDPOINT,
            'SPACES_FOLDER': Config.SPACES_FOLDER,
            'IMAGE_SUBFOLDER': Config.IMAGE_SUBFOLDER,
            'MAX_UPLOAD_BYTES': Config.MAX_UPLOAD_BYTES,
            'CORS_ORIGINS': Config.CORS_ORIGINS,
            'SLUG_MAX_ATTEMPTS': Config.SLUG_MAX_ATTEMPTS,
            'PERMANENT_SESSION_LIFETIME': timedelta(hours=12),
            'SESSION_COOKIE_HTTPONLY': True,
            'SESSION_COOKIE_SAMESITE': 'Lax',
        }
        for key, value in defaults.items():
            if app.config.get(key) is None:
                app.config[key] = value

        # Reject oversized request bodies before they are read into memory
        if app.config.get('MAX_CONTENT_LENGTH') is None:
            app.config['MAX_CONTENT_LENGTH'] = int(app.config['MAX_UPLOAD_BYTES']) + UPLOAD_OVERHEAD_BYTES

        if not app.config.get('SECRET_KEY'):
            app.config['SECRET_KEY'] = Config.SECRET_KEY
        if not app.config.get('SECRET_KEY'):
            logger.warning("No SECRET_KEY configured; admin sessions will not work")

    def _setup_database_dir(self, app):
        os.makedirs(app.config['DB_DIR'], exist_ok=True)

    def _features(self):
        features = dict(DEFAULT_FEATURES)
        features.update(self._config.get('features', {}))
        return features

    def _register_blueprints(self, app):
        features = self._features()

        # The projects admin depends on the admin session
        if features.get('projects') and not features.get('dashboard'):
            features['dashboard'] = True

        if features.get('dashboard'):
            from .modules.dashboard import dashboard_bp
            app.register_blueprint(dashboard_bp)
            self._registered.append('dashboard')

        if features.get('projects'):
            from .modules.projects import projects_bp
            app.register_blueprint(projects_bp)
            self._registered.append('projects')

        if features.get('projects_public'):
            from .modules.projects_public import home_bp, projects_public_bp
            app.register_blueprint(home_bp)
            app.register_blueprint(projects_public_bp)
            self._registered.append('projects_public')

        if features.get('ops'):
            from .modules.ops import ops_health_bp, ops_admin_bp
            app.register_blueprint(ops_health_bp)
            if features.get('dashboard'):
                app.register_blueprint(ops_admin_bp)
            self._registered.append('ops')

    def get_registered_modules(self):
        return list(self._registered)


def create_app(config=None):
    """Application factory used by the dev server and WSGI hosts"""
    from flask import Flask

    app = Flask(__name__, static_folder=Config.STATIC_FOLDER)
    app.config.update(config or {})
    Buildfolio(app)
    return app


__all__ = ['Buildfolio', 'create_app', '__version__']
