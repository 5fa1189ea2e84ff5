"""
Admin Dashboard Routes
======================

Single-password admin gate. The password is configured with either
ADMIN_PASSWORD or ADMIN_PASSWORD_HASH (sha256 hex); there are no admin
user accounts.
"""

import hashlib
import hmac
import logging
from functools import wraps

from flask import request, session, jsonify

from buildfolio.core.config import get_config_value
from buildfolio.core.logging_service import LoggingService
from . import dashboard_bp

logger = logging.getLogger(__name__)

ADMIN_SESSION_ID = 'admin'


def hash_password(password):
    """Simple password hashing"""
    return hashlib.sha256(password.encode()).hexdigest()


def _expected_hash():
    configured = get_config_value('ADMIN_PASSWORD_HASH')
    if configured:
        return configured.lower()
    plain = get_config_value('ADMIN_PASSWORD')
    if plain:
        return hash_password(plain)
    return None


def check_admin_password(password):
    """Constant-time comparison against the configured admin password"""
    expected = _expected_hash()
    if not expected or not password:
        return False
    return hmac.compare_digest(hash_password(password), expected)


def is_admin():
    return 'admin_id' in session


def admin_required(f):
    """Decorator to require an admin session on JSON endpoints"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not is_admin():
            return jsonify({'error': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated_function


@dashboard_bp.route('/login', methods=['POST'])
def login():
    """Admin sign-in"""
    data = request.get_json(silent=True) or request.form
    password = data.get('password', '')

    if not password:
        return jsonify({'error': 'Password is required'}), 400

    if _expected_hash() is None:
        logger.error("Admin login attempted but no admin password is configured")
        return jsonify({'error': 'Admin login is not configured'}), 503

    if not check_admin_password(password):
        LoggingService.log_security_event('Failed admin login')
        return jsonify({'error': 'Invalid password'}), 401

    session['admin_id'] = ADMIN_SESSION_ID
    session.permanent = True
    LoggingService.log_user_action('admin', 'login', user_id=ADMIN_SESSION_ID)
    return jsonify({'success': True})


@dashboard_bp.route('/logout', methods=['POST'])
def logout():
    """Admin sign-out"""
    was_logged_in = is_admin()
    session.pop('admin_id', None)
    if was_logged_in:
        LoggingService.log_user_action('admin', 'logout', user_id=ADMIN_SESSION_ID)
    return jsonify({'success': True})


@dashboard_bp.route('/session', methods=['GET'])
def session_status():
    """Whether the current browser holds an admin session"""
    return jsonify({'authenticated': is_admin()})


@dashboard_bp.route('/stats', methods=['GET'])
@admin_required
def stats():
    """Portfolio counts for the admin dashboard"""
    from buildfolio.modules.projects.database import project_stats

    try:
        return jsonify(project_stats())
    except Exception as e:
        logger.error(f"Error getting project stats: {e}")
        return jsonify({'error': str(e)}), 500
