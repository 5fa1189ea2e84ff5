"""
Buildfolio Modules
==================

Flask blueprint modules for the public site and the admin.
"""

__all__ = ['dashboard', 'ops', 'projects', 'projects_public']
