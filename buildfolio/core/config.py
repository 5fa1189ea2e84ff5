import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for the Buildfolio site.
    Deployments should provide secrets and database paths via environment variables.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    STATIC_FOLDER = os.getenv('STATIC_FOLDER', os.path.join(os.getcwd(), 'app', 'static'))

    # Database paths - use environment variables or fallback to DB_DIR
    PROJECTS_DB = os.getenv('PROJECTS_DB', os.path.join(DB_DIR, "projects.db"))
    LOGS_DB = os.getenv('LOGS_DB', os.path.join(DB_DIR, "app_logs.db"))

    # Admin gate - either a plain password or its sha256 hex digest
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD')
    ADMIN_PASSWORD_HASH = os.getenv('ADMIN_PASSWORD_HASH')

    # Storage: 'local' writes under the static folder, 'cloud' uses an S3-compatible bucket
    STORAGE_TYPE = os.getenv('STORAGE_TYPE', 'local')
    SPACES_REGION = os.getenv('SPACES_REGION')
    SPACES_NAME = os.getenv('SPACES_NAME')
    SPACES_KEY = os.getenv('SPACES_KEY')
    SPACES_SECRET = os.getenv('SPACES_SECRET')
    SPACES_ENDPOINT = os.getenv('SPACES_ENDPOINT')
    SPACES_FOLDER = os.getenv('SPACES_FOLDER', 'uploads')
    IMAGE_SUBFOLDER = os.getenv('IMAGE_SUBFOLDER', 'project-images')
    MAX_UPLOAD_BYTES = int(os.getenv('MAX_UPLOAD_BYTES', str(5 * 1024 * 1024)))

    # Public API origins allowed to read project JSON
    CORS_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGINS', '*').split(',') if o.strip()]

    # Upper bound on slug disambiguation attempts
    SLUG_MAX_ATTEMPTS = int(os.getenv('SLUG_MAX_ATTEMPTS', '100'))

    # Port for local server
    port = int(os.getenv('PORT', '5000'))


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val is not None:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val is not None:
        return val
    return os.getenv(key, default)
