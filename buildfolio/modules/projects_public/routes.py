"""
Projects Public Routes
======================

Public-facing project portfolio API. Cross-origin reads are allowed for
the origins in CORS_ORIGINS so a separately hosted frontend can fetch them.
"""

import logging

from flask import jsonify, request
from flask_cors import cross_origin

from buildfolio.modules.projects.database import (
    get_project_by_slug,
    list_categories,
    list_projects,
)
from . import home_bp, projects_public_bp
from .listing import filter_and_sort_projects, related_projects, status_counts

logger = logging.getLogger(__name__)


@home_bp.route('/')
@cross_origin()
def home():
    """Featured, completed projects for the home page"""
    try:
        featured = list_projects(featured=True, status='completed')
        return jsonify({'featured': featured})
    except Exception as e:
        logger.error(f"Error fetching featured projects: {e}")
        return jsonify({'featured': [], 'error': 'Failed to fetch projects'}), 500


# ===== API Routes =====

@projects_public_bp.route('/api/projects', methods=['GET'])
@cross_origin()
def get_projects():
    """Project listing with ?search=&category=&sort= applied"""
    search = request.args.get('search', '')
    category = request.args.get('category', 'all')
    sort_by = request.args.get('sort', 'newest')

    try:
        projects = filter_and_sort_projects(list_projects(), search, category, sort_by)
    except Exception as e:
        logger.error(f"Error fetching projects: {e}")
        return jsonify({'data': None, 'error': 'Failed to fetch projects'}), 500

    return jsonify({
        'data': projects,
        'counts': status_counts(projects),
        'error': None
    })


@projects_public_bp.route('/api/projects/<slug>', methods=['GET'])
@cross_origin()
def get_project(slug):
    """Single project plus up to three related projects"""
    try:
        project = get_project_by_slug(slug)
        if not project:
            return jsonify({'data': None, 'error': 'Project not found'}), 404

        related = related_projects(project, list_projects())
    except Exception as e:
        logger.error(f"Error fetching project {slug}: {e}")
        return jsonify({'data': None, 'error': 'Failed to fetch project'}), 500

    return jsonify({'data': project, 'related': related, 'error': None})


@projects_public_bp.route('/api/categories', methods=['GET'])
@cross_origin()
def get_categories():
    try:
        return jsonify({'data': list_categories(), 'error': None})
    except Exception as e:
        logger.error(f"Error fetching categories: {e}")
        return jsonify({'data': None, 'error': 'Failed to fetch categories'}), 500
