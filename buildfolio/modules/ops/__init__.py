"""
Ops Module
==========

Health check and error feed.

Usage:
    from buildfolio.modules.ops import ops_health_bp, ops_admin_bp

    # Public health check (no auth)
    app.register_blueprint(ops_health_bp)  # Registers at /health

    # Admin error feed (session auth)
    app.register_blueprint(ops_admin_bp)   # Registers at /admin/ops
"""

from flask import Blueprint

# Public health endpoint (no auth, for uptime monitors)
ops_health_bp = Blueprint(
    'ops_health',
    __name__,
    url_prefix='/health'
)

# Admin error feed (session auth)
ops_admin_bp = Blueprint(
    'ops_admin',
    __name__,
    url_prefix='/admin/ops'
)

from . import routes
