"""
Dashboard Module
================

Password-gated admin session for Buildfolio.

Provides:
- Admin sign-in / sign-out
- Session check for the admin UI
- Portfolio statistics

This is the foundation module that the projects admin plugs into.
"""

from flask import Blueprint

# Blueprint name is 'admin' so other modules can refer to 'admin.login'
dashboard_bp = Blueprint(
    'admin',
    __name__,
    url_prefix='/admin'
)

# Import routes after blueprint is created
from . import routes
from .routes import admin_required

__all__ = ['dashboard_bp', 'admin_required']
