"""
Ops Routes
==========

Public health endpoint and admin error feed.
"""

import os
import time

from flask import current_app, jsonify, request

from buildfolio.core.database import Database
from buildfolio.core.logging_service import LoggingService
from buildfolio.core.storage import is_cloud_storage, get_spaces_config
from buildfolio.modules.dashboard import admin_required
from . import ops_health_bp, ops_admin_bp

_STARTED_AT = time.time()


def _check_database():
    try:
        with Database.connect(Database.projects_db()) as conn:
            conn.execute('SELECT COUNT(*) FROM projects').fetchone()
        return {'status': 'ok'}
    except Exception as e:
        return {'status': 'critical', 'error': str(e)}


def _check_storage():
    if is_cloud_storage():
        config = get_spaces_config()
        missing = [k for k in ('region', 'space_name', 'access_key', 'secret_key') if not config.get(k)]
        if missing:
            return {'status': 'critical', 'type': 'cloud', 'missing': missing}
        return {'status': 'ok', 'type': 'cloud'}

    static_folder = current_app.static_folder
    if static_folder and os.path.isdir(static_folder) and not os.access(static_folder, os.W_OK):
        return {'status': 'warning', 'type': 'local', 'error': 'static folder not writable'}
    return {'status': 'ok', 'type': 'local'}


def _build_health_response():
    checks = {
        'database': _check_database(),
        'storage': _check_storage(),
        'uptime': {'status': 'ok', 'seconds': int(time.time() - _STARTED_AT)},
    }

    statuses = [c['status'] for c in checks.values()]
    if 'critical' in statuses:
        status = 'critical'
    elif 'warning' in statuses:
        status = 'warning'
    else:
        status = 'ok'

    return {'status': status, 'checks': checks}, status


# ---------------------------------------------------------------------------
# Public routes (ops_health_bp - no auth)
# ---------------------------------------------------------------------------

@ops_health_bp.route('/')
@ops_health_bp.route('')
def health_check():
    """Public health endpoint for uptime monitors."""
    data, status = _build_health_response()
    code = 503 if status == 'critical' else 200
    return jsonify(data), code


# ---------------------------------------------------------------------------
# Admin routes (ops_admin_bp - session auth)
# ---------------------------------------------------------------------------

@ops_admin_bp.route('/api/logs')
@admin_required
def api_logs():
    """Recent persisted log entries, newest first"""
    limit = max(1, min(request.args.get('limit', 50, type=int), 500))
    source = request.args.get('source') or None
    try:
        return jsonify(LoggingService.recent_logs(limit=limit, source=source))
    except Exception as e:
        return jsonify({'error': str(e)}), 500
