"""
Projects Public Module
======================

Public, read-only portfolio data for the marketing site.

Provides:
- / - featured completed projects for the home page
- /projects/api/projects - filtered, sorted listing with status counts
- /projects/api/projects/<slug> - project detail and related projects
- /projects/api/categories - category list for the filter
"""

from flask import Blueprint

# Home feed lives at the site root
home_bp = Blueprint(
    'home',
    __name__
)

projects_public_bp = Blueprint(
    'projects',
    __name__,
    url_prefix='/projects'
)

from . import routes

__all__ = ['home_bp', 'projects_public_bp']
