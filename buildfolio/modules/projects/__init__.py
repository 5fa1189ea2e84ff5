"""
Projects Admin Module
=====================

Admin API for the construction portfolio.
Plugs into the admin dashboard module.

Provides:
- Project creation, editing and deletion
- Slug allocation with collision suffixes
- Category management
- Image upload for projects
"""

from flask import Blueprint

projects_bp = Blueprint(
    'projects_admin',
    __name__,
    url_prefix='/admin/projects'
)

from . import routes

__all__ = ['projects_bp']
