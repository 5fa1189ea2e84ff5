"""
Project Form
============

Immutable snapshot of the admin create/edit form and the submit handlers
that turn it into a stored record. Persistence is passed in, so the
handlers hold no state of their own.
"""

from dataclasses import dataclass, asdict, replace
from datetime import datetime
from typing import Optional

from buildfolio.core.slugs import allocate_slug, normalize_slug, MAX_SLUG_ATTEMPTS
from .database import PROJECT_STATUSES

TRUE_VALUES = {'true', '1', 'on', 'yes'}


class FormValidationError(ValueError):
    """Submitted form data is unusable."""


def _text(data, key):
    value = data.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _flag(value):
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUE_VALUES


@dataclass(frozen=True)
class ProjectForm:
    title: str
    slug: Optional[str] = None
    description: Optional[str] = None
    client_name: Optional[str] = None
    location: Optional[str] = None
    completion_date: Optional[str] = None
    category_id: Optional[int] = None
    is_featured: bool = False
    status: str = 'completed'

    @classmethod
    def from_mapping(cls, data):
        """Build a validated form from request JSON or form fields."""
        if data is None:
            raise FormValidationError('No data provided')

        title = _text(data, 'title')
        if not title:
            raise FormValidationError('Title is required')

        status = _text(data, 'status') or 'completed'
        if status not in PROJECT_STATUSES:
            raise FormValidationError(f'Status must be one of: {", ".join(PROJECT_STATUSES)}')

        completion_date = _text(data, 'completion_date')
        if completion_date:
            try:
                datetime.strptime(completion_date, '%Y-%m-%d')
            except ValueError:
                raise FormValidationError('Completion date must be YYYY-MM-DD')

        category_id = _text(data, 'category_id')
        if category_id is not None:
            try:
                category_id = int(category_id)
            except ValueError:
                raise FormValidationError('Category must be a number')

        return cls(
            title=title,
            slug=_text(data, 'slug'),
            description=_text(data, 'description'),
            client_name=_text(data, 'client_name'),
            location=_text(data, 'location'),
            completion_date=completion_date,
            category_id=category_id,
            is_featured=_flag(data.get('is_featured')),
            status=status,
        )

    def slug_source(self):
        """Admin-typed slug wins over the title"""
        return self.slug or self.title

    def to_record(self, slug):
        return asdict(replace(self, slug=slug))


def submit_create(form, exists_by_slug, insert, max_attempts=MAX_SLUG_ATTEMPTS):
    """Allocate a slug for a new project and persist it.

    Returns (project_id, slug).
    """
    slug = allocate_slug(form.slug_source(), exists_by_slug, max_attempts)
    project_id = insert(form.to_record(slug))
    return project_id, slug


def slug_changed(form, current):
    """Whether an edit asks for a new slug.

    A typed slug counts when it normalizes to something other than the
    stored one; otherwise only a changed title does. Suffixed and fallback
    slugs stay put across unrelated edits.
    """
    if form.slug:
        return normalize_slug(form.slug) != current['slug']
    return form.title != current['title']


def submit_update(form, current, exists_by_slug, update, max_attempts=MAX_SLUG_ATTEMPTS):
    """Persist an edit of *current*, re-allocating the slug only if it changed.

    exists_by_slug receives (candidate, exclude_id) so the project never
    collides with itself. Returns (updated, slug).
    """
    slug = current['slug']
    if slug_changed(form, current):
        slug = allocate_slug(
            form.slug_source(),
            lambda candidate: exists_by_slug(candidate, current['id']),
            max_attempts,
        )
    return update(current['id'], form.to_record(slug)), slug
