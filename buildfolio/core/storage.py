"""
Storage Utility
===============

Project image storage with cloud (S3-compatible bucket) / local branching.
"""

import os
import secrets
import time
from urllib.parse import urlparse
from flask import current_app
from werkzeug.utils import secure_filename
from .config import get_config_value

ALLOWED_IMAGE_TYPES = {'image/jpeg', 'image/jpg', 'image/png', 'image/webp'}

CONTENT_TYPES = {
    'jpg': 'image/jpeg', 'jpeg': 'image/jpeg',
    'png': 'image/png', 'webp': 'image/webp',
}


def is_cloud_storage():
    """Check if using cloud storage"""
    return get_config_value('STORAGE_TYPE', 'local') == 'cloud'


def get_spaces_config():
    """Get bucket configuration"""
    region = get_config_value('SPACES_REGION')
    return {
        'region': region,
        'space_name': get_config_value('SPACES_NAME'),
        'access_key': get_config_value('SPACES_KEY'),
        'secret_key': get_config_value('SPACES_SECRET'),
        'endpoint': get_config_value('SPACES_ENDPOINT') or f"https://{region}.digitaloceanspaces.com",
    }


def _spaces_client(config):
    import boto3
    return boto3.client(
        's3',
        region_name=config['region'],
        endpoint_url=config['endpoint'],
        aws_access_key_id=config['access_key'],
        aws_secret_access_key=config['secret_key'],
    )


def validate_image_upload(filename, content_type, size):
    """Return an error message for an unacceptable upload, or None."""
    if not filename:
        return 'No file provided'

    max_bytes = int(get_config_value('MAX_UPLOAD_BYTES', 5 * 1024 * 1024))
    if size > max_bytes:
        return f'File size too large. Max {max_bytes // (1024 * 1024)}MB allowed.'

    if (content_type or '').lower() not in ALLOWED_IMAGE_TYPES:
        return 'Invalid file type. Only JPG, PNG, and WebP are allowed.'

    return None


def unique_image_name(original_name):
    """Build '<epoch-ms>-<random>-<safe name>' so uploads never overwrite each other."""
    safe_name = secure_filename(original_name or '') or 'image'
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}-{safe_name}"


def public_url(filename, subfolder):
    """Public URL for a stored file."""
    if is_cloud_storage():
        config = get_spaces_config()
        app_prefix = get_config_value('SPACES_FOLDER', 'uploads')
        return f"https://{config['space_name']}.{config['region']}.digitaloceanspaces.com/{app_prefix}/{subfolder}/{filename}"
    return f"/static/{subfolder}/{filename}"


def upload_file(file_bytes, filename, subfolder):
    """Upload file to cloud storage or local filesystem.

    Args:
        file_bytes: Raw bytes of the file.
        filename: Target filename (e.g. "1700000000000-ab12cd-site.jpg").
        subfolder: Subfolder name (e.g. "project-images").

    Returns:
        Public URL (cloud) or local path like "/static/project-images/x.jpg" (local).
    """
    if is_cloud_storage():
        return _upload_to_spaces(file_bytes, filename, subfolder)
    return _save_locally(file_bytes, filename, subfolder)


def _upload_to_spaces(file_bytes, filename, subfolder):
    """Upload to the bucket via boto3."""
    config = get_spaces_config()
    app_prefix = get_config_value('SPACES_FOLDER', 'uploads')
    object_key = f"{app_prefix}/{subfolder}/{filename}"

    ext = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''

    client = _spaces_client(config)
    client.put_object(
        Bucket=config['space_name'],
        Key=object_key,
        Body=file_bytes,
        ACL='public-read',
        ContentType=CONTENT_TYPES.get(ext, 'application/octet-stream'),
        CacheControl='max-age=3600',
    )

    return public_url(filename, subfolder)


def _save_locally(file_bytes, filename, subfolder):
    """Save to local static folder."""
    upload_dir = os.path.join(current_app.static_folder, subfolder)
    os.makedirs(upload_dir, exist_ok=True)
    filepath = os.path.join(upload_dir, filename)
    # Uploads are never overwritten
    with open(filepath, 'xb') as f:
        f.write(file_bytes)
    return public_url(filename, subfolder)


def delete_file(file_url):
    """Delete a file by its URL (cloud or local).

    Returns True when a file was removed, raises on backend failure.
    """
    if not file_url:
        return False

    if file_url.startswith('http://') or file_url.startswith('https://'):
        return _delete_cloud_file(file_url)
    return _delete_local_file(file_url)


def _delete_cloud_file(file_url):
    """Delete a file from the bucket."""
    config = get_spaces_config()
    object_key = urlparse(file_url).path.lstrip('/')

    client = _spaces_client(config)
    client.delete_object(Bucket=config['space_name'], Key=object_key)
    return True


def _delete_local_file(file_url):
    """Delete a file from local static folder."""
    # file_url looks like /static/subfolder/filename.jpg
    if not file_url.startswith('/static/'):
        return False

    static_root = os.path.realpath(current_app.static_folder)
    full_path = os.path.realpath(os.path.join(static_root, file_url[len('/static/'):]))
    if not full_path.startswith(static_root + os.sep):
        return False

    if os.path.isfile(full_path):
        os.unlink(full_path)
        return True
    return False
