"""
Projects Admin Routes
=====================

JSON API behind the admin project form.
- Slugs are allocated server-side from the submitted slug or title
- Images go to the configured storage and are attached as project_images rows
"""

import logging

from flask import request, jsonify

from buildfolio.core.config import get_config_value
from buildfolio.core.logging_service import LoggingService
from buildfolio.core.slugs import (
    allocate_slug,
    SlugAllocationError,
    SlugConflictError,
    SlugLookupError,
)
from buildfolio.core import storage
from buildfolio.modules.dashboard import admin_required
from . import projects_bp
from .database import (
    add_project_image,
    category_slug_lookup,
    create_category,
    create_project,
    delete_project,
    delete_project_image,
    get_category,
    get_project,
    get_project_image,
    list_categories,
    list_projects,
    slug_lookup,
    update_project,
)
from .forms import FormValidationError, ProjectForm, submit_create, submit_update

logger = logging.getLogger(__name__)


def _max_attempts():
    return int(get_config_value('SLUG_MAX_ATTEMPTS', 100))


def _excluding_lookup(candidate, exclude_id):
    return slug_lookup(candidate, exclude_id=exclude_id)


def _remove_stored_files(urls):
    """Best-effort cleanup of stored images whose rows are already gone"""
    for url in urls:
        try:
            storage.delete_file(url)
        except Exception as e:
            LoggingService.warning('storage', f"Could not delete stored image: {url}", {'error': str(e)})


# ===== Projects =====

@projects_bp.route('/api/projects', methods=['GET'])
@admin_required
def get_projects():
    """Get all projects"""
    try:
        return jsonify(list_projects())
    except Exception as e:
        logger.error(f"Error getting projects: {e}")
        return jsonify({'error': str(e)}), 500


@projects_bp.route('/api/projects/<int:project_id>', methods=['GET'])
@admin_required
def get_project_route(project_id):
    """Get single project"""
    try:
        project = get_project(project_id)
        if project:
            return jsonify(project)
        return jsonify({'error': 'Project not found'}), 404
    except Exception as e:
        logger.error(f"Error getting project: {e}")
        return jsonify({'error': str(e)}), 500


@projects_bp.route('/api/projects', methods=['POST'])
@admin_required
def create_project_route():
    """Create new project"""
    try:
        form = ProjectForm.from_mapping(request.get_json(silent=True))
        project_id, slug = submit_create(form, slug_lookup, create_project, _max_attempts())

        LoggingService.log_user_action('projects', 'project created', details={'id': project_id, 'slug': slug})
        return jsonify({
            'success': True,
            'id': project_id,
            'slug': slug,
            'project': get_project(project_id)
        })
    except FormValidationError as e:
        return jsonify({'error': str(e)}), 400
    except SlugLookupError as e:
        LoggingService.log_error_with_traceback('projects', e)
        return jsonify({'error': 'Could not check slug availability, try again'}), 503
    except (SlugConflictError, SlugAllocationError) as e:
        return jsonify({'error': str(e)}), 409
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Error creating project: {e}")
        LoggingService.log_error_with_traceback('projects', e)
        return jsonify({'error': str(e)}), 500


@projects_bp.route('/api/projects/<int:project_id>', methods=['PUT'])
@admin_required
def update_project_route(project_id):
    """Update project"""
    try:
        current = get_project(project_id)
        if not current:
            return jsonify({'error': 'Project not found'}), 404

        form = ProjectForm.from_mapping(request.get_json(silent=True))
        success, slug = submit_update(form, current, _excluding_lookup, update_project, _max_attempts())

        if not success:
            return jsonify({'error': 'Project not found'}), 404

        LoggingService.log_user_action('projects', 'project updated', details={'id': project_id, 'slug': slug})
        return jsonify({
            'success': True,
            'slug': slug,
            'project': get_project(project_id)
        })
    except FormValidationError as e:
        return jsonify({'error': str(e)}), 400
    except SlugLookupError as e:
        LoggingService.log_error_with_traceback('projects', e)
        return jsonify({'error': 'Could not check slug availability, try again'}), 503
    except (SlugConflictError, SlugAllocationError) as e:
        return jsonify({'error': str(e)}), 409
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Error updating project: {e}")
        LoggingService.log_error_with_traceback('projects', e)
        return jsonify({'error': str(e)}), 500


@projects_bp.route('/api/projects/<int:project_id>', methods=['DELETE'])
@admin_required
def delete_project_route(project_id):
    """Delete project and its stored images"""
    try:
        image_urls = delete_project(project_id)
        if image_urls is None:
            return jsonify({'error': 'Project not found'}), 404

        _remove_stored_files(image_urls)
        LoggingService.log_user_action('projects', 'project deleted', details={'id': project_id})
        return jsonify({'success': True})
    except Exception as e:
        logger.error(f"Error deleting project: {e}")
        return jsonify({'error': str(e)}), 500


@projects_bp.route('/api/slug-preview', methods=['GET'])
@admin_required
def slug_preview():
    """Slug the form would get for a title, shown while typing"""
    title = request.args.get('title', '')
    exclude_id = request.args.get('exclude_id', type=int)

    try:
        slug = allocate_slug(
            title,
            lambda candidate: slug_lookup(candidate, exclude_id=exclude_id),
            _max_attempts()
        )
        return jsonify({'slug': slug})
    except SlugLookupError:
        return jsonify({'error': 'Could not check slug availability'}), 503
    except SlugAllocationError as e:
        return jsonify({'error': str(e)}), 409


# ===== Categories =====

@projects_bp.route('/api/categories', methods=['GET'])
@admin_required
def get_categories():
    try:
        return jsonify(list_categories())
    except Exception as e:
        logger.error(f"Error getting categories: {e}")
        return jsonify({'error': str(e)}), 500


@projects_bp.route('/api/categories', methods=['POST'])
@admin_required
def create_category_route():
    """Create a category; its slug comes from the name"""
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    description = (data.get('description') or '').strip() or None

    if not name:
        return jsonify({'error': 'Category name is required'}), 400

    try:
        slug = allocate_slug(name, category_slug_lookup, _max_attempts(), fallback_prefix='category')
        category_id = create_category(name, slug, description)
        return jsonify({'success': True, 'category': get_category(category_id)})
    except SlugLookupError:
        return jsonify({'error': 'Could not check slug availability, try again'}), 503
    except (SlugConflictError, SlugAllocationError) as e:
        return jsonify({'error': str(e)}), 409
    except Exception as e:
        logger.error(f"Error creating category: {e}")
        return jsonify({'error': str(e)}), 500


# ===== Images =====

@projects_bp.route('/upload-image', methods=['POST'])
@admin_required
def upload_image():
    """Upload an image and optionally attach it to a project"""
    file = request.files.get('file')
    if file is None or file.filename == '':
        return jsonify({'error': 'No file provided'}), 400

    project_id = request.form.get('project_id', type=int)
    alt_text = (request.form.get('alt_text') or '').strip()

    file_bytes = file.read()
    error = storage.validate_image_upload(file.filename, file.mimetype, len(file_bytes))
    if error:
        return jsonify({'error': error}), 400

    if project_id is not None and not get_project(project_id):
        return jsonify({'error': 'Project not found'}), 404

    subfolder = get_config_value('IMAGE_SUBFOLDER', 'project-images')
    stored_name = storage.unique_image_name(file.filename)

    try:
        image_url = storage.upload_file(file_bytes, stored_name, subfolder)
    except Exception as e:
        logger.error(f"Error uploading image: {e}")
        LoggingService.log_error_with_traceback('storage', e, {'filename': file.filename})
        return jsonify({'error': 'Failed to upload file'}), 500

    image_id = None
    if project_id is not None:
        try:
            image_id = add_project_image(project_id, image_url, file.filename, alt_text or file.filename)
        except Exception as e:
            # The file is stored; report it and let the admin re-attach
            logger.error(f"Error saving image row: {e}")
            LoggingService.error('projects', 'Uploaded image not attached to project',
                                 {'project_id': project_id, 'url': image_url, 'error': str(e)})

    return jsonify({
        'success': True,
        'data': {
            'url': image_url,
            'fileName': file.filename,
            'size': len(file_bytes),
            'image_id': image_id
        }
    })


@projects_bp.route('/api/images/<int:image_id>', methods=['DELETE'])
@admin_required
def delete_image(image_id):
    """Detach an image from its project and remove the stored file"""
    try:
        image = get_project_image(image_id)
        if not image:
            return jsonify({'error': 'Image not found'}), 404

        delete_project_image(image_id)
        _remove_stored_files([image['image_url']])
        return jsonify({'success': True})
    except Exception as e:
        logger.error(f"Error deleting image: {e}")
        return jsonify({'error': str(e)}), 500

