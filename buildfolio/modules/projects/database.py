"""
Projects Database
=================

SQLite persistence for projects, categories and project images.
The unique constraint on projects.slug is the final guard against two
admins allocating the same slug at once.
"""

import logging
import sqlite3

from buildfolio.core.database import Database
from buildfolio.core.slugs import LookupResult, SlugConflictError

logger = logging.getLogger(__name__)

PROJECT_STATUSES = ('completed', 'ongoing', 'planning')

# Columns written from a project form
PROJECT_FIELDS = ('title', 'slug', 'description', 'client_name', 'location',
                  'completion_date', 'category_id', 'is_featured', 'status')


def init_projects_db():
    """Initialize projects database"""
    projects_db = Database.projects_db()
    Database.ensure_dir(projects_db)

    with Database.connect(projects_db) as conn:
        cursor = conn.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS categories (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                slug TEXT NOT NULL UNIQUE,
                description TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS projects (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                slug TEXT NOT NULL UNIQUE,
                description TEXT,
                client_name TEXT,
                location TEXT,
                completion_date TEXT,
                category_id INTEGER REFERENCES categories(id) ON DELETE SET NULL,
                is_featured BOOLEAN DEFAULT 0,
                status TEXT NOT NULL DEFAULT 'completed'
                    CHECK (status IN ('completed', 'ongoing', 'planning')),
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS project_images (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                project_id INTEGER NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
                image_url TEXT NOT NULL,
                image_name TEXT,
                alt_text TEXT,
                sort_order INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        cursor.execute('CREATE INDEX IF NOT EXISTS idx_projects_status ON projects(status)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_projects_featured ON projects(is_featured)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_project_images_project ON project_images(project_id)')

        conn.commit()


def _raise_integrity(error, slug):
    message = str(error)
    if 'slug' in message:
        raise SlugConflictError(slug) from error
    if 'FOREIGN KEY' in message:
        raise ValueError('Category not found') from error
    raise error


# ===== Slug lookups =====

def slug_lookup(slug, exclude_id=None):
    """Point lookup on projects.slug. Store failures come back as LOOKUP_ERROR."""
    try:
        with Database.connect(Database.projects_db()) as conn:
            if exclude_id is None:
                row = conn.execute('SELECT id FROM projects WHERE slug = ?', (slug,)).fetchone()
            else:
                row = conn.execute('SELECT id FROM projects WHERE slug = ? AND id != ?',
                                   (slug, exclude_id)).fetchone()
    except sqlite3.Error as e:
        logger.error(f"Slug lookup failed for '{slug}': {e}")
        return LookupResult.failed(e)

    return LookupResult.found() if row else LookupResult.not_found()


def category_slug_lookup(slug):
    try:
        with Database.connect(Database.projects_db()) as conn:
            row = conn.execute('SELECT id FROM categories WHERE slug = ?', (slug,)).fetchone()
    except sqlite3.Error as e:
        logger.error(f"Category slug lookup failed for '{slug}': {e}")
        return LookupResult.failed(e)

    return LookupResult.found() if row else LookupResult.not_found()


# ===== Projects =====

def _project_dict(row):
    d = dict(row)
    d['is_featured'] = bool(d.get('is_featured'))
    return d


def _attach_details(conn, projects):
    """Nest category and images into each project dict"""
    if not projects:
        return projects

    categories = {row['id']: dict(row) for row in conn.execute('SELECT * FROM categories')}

    ids = [p['id'] for p in projects]
    placeholders = ','.join('?' for _ in ids)
    images = {}
    for row in conn.execute(
        f'SELECT * FROM project_images WHERE project_id IN ({placeholders}) ORDER BY sort_order, id',
        ids
    ):
        images.setdefault(row['project_id'], []).append(dict(row))

    for p in projects:
        p['category'] = categories.get(p['category_id'])
        p['images'] = images.get(p['id'], [])
    return projects


def list_projects(featured=None, status=None):
    """All projects newest first, with category and images."""
    conditions = []
    params = []
    if featured is not None:
        conditions.append('is_featured = ?')
        params.append(1 if featured else 0)
    if status:
        conditions.append('status = ?')
        params.append(status)

    where = f' WHERE {" AND ".join(conditions)}' if conditions else ''

    with Database.connect(Database.projects_db()) as conn:
        rows = conn.execute(
            f'SELECT * FROM projects{where} ORDER BY created_at DESC, id DESC', params
        ).fetchall()
        return _attach_details(conn, [_project_dict(row) for row in rows])


def get_project(project_id):
    """Get single project by ID"""
    with Database.connect(Database.projects_db()) as conn:
        row = conn.execute('SELECT * FROM projects WHERE id = ?', (project_id,)).fetchone()
        if not row:
            return None
        return _attach_details(conn, [_project_dict(row)])[0]


def get_project_by_slug(slug):
    """Get single project by slug"""
    with Database.connect(Database.projects_db()) as conn:
        row = conn.execute('SELECT * FROM projects WHERE slug = ?', (slug,)).fetchone()
        if not row:
            return None
        return _attach_details(conn, [_project_dict(row)])[0]


def _values(record):
    values = []
    for field in PROJECT_FIELDS:
        value = record.get(field)
        if field == 'is_featured':
            value = 1 if value else 0
        values.append(value)
    return values


def create_project(record):
    """Insert a project and return its new id. record must carry an allocated slug."""
    columns = ', '.join(PROJECT_FIELDS)
    placeholders = ', '.join('?' for _ in PROJECT_FIELDS)

    try:
        with Database.connect(Database.projects_db()) as conn:
            cursor = conn.execute(
                f'INSERT INTO projects ({columns}) VALUES ({placeholders})', _values(record)
            )
            conn.commit()
            return cursor.lastrowid
    except sqlite3.IntegrityError as e:
        _raise_integrity(e, record.get('slug'))


def update_project(project_id, record):
    """Overwrite a project's form fields. Returns False if it doesn't exist."""
    assignments = ', '.join(f'{field} = ?' for field in PROJECT_FIELDS)

    try:
        with Database.connect(Database.projects_db()) as conn:
            cursor = conn.execute(
                f'UPDATE projects SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?',
                _values(record) + [project_id]
            )
            conn.commit()
            return cursor.rowcount > 0
    except sqlite3.IntegrityError as e:
        _raise_integrity(e, record.get('slug'))


def delete_project(project_id):
    """Delete a project and its image rows.

    Returns the image URLs that belonged to it, or None if it didn't exist.
    """
    with Database.connect(Database.projects_db()) as conn:
        urls = [row['image_url'] for row in conn.execute(
            'SELECT image_url FROM project_images WHERE project_id = ?', (project_id,)
        )]
        cursor = conn.execute('DELETE FROM projects WHERE id = ?', (project_id,))
        conn.commit()
        if cursor.rowcount == 0:
            return None
        return urls


def project_stats():
    """Counts shown on the admin dashboard"""
    with Database.connect(Database.projects_db()) as conn:
        row = conn.execute('''
            SELECT COUNT(*) AS total,
                   COALESCE(SUM(status = 'completed'), 0) AS completed,
                   COALESCE(SUM(status = 'ongoing'), 0) AS ongoing,
                   COALESCE(SUM(status = 'planning'), 0) AS planning,
                   COALESCE(SUM(is_featured = 1), 0) AS featured
            FROM projects
        ''').fetchone()
        return dict(row)


# ===== Categories =====

def list_categories():
    with Database.connect(Database.projects_db()) as conn:
        return [dict(row) for row in conn.execute('SELECT * FROM categories ORDER BY name')]


def get_category(category_id):
    with Database.connect(Database.projects_db()) as conn:
        row = conn.execute('SELECT * FROM categories WHERE id = ?', (category_id,)).fetchone()
        return Database.row_to_dict(row)


def create_category(name, slug, description=None):
    """Insert a category with an already-allocated slug"""
    try:
        with Database.connect(Database.projects_db()) as conn:
            cursor = conn.execute(
                'INSERT INTO categories (name, slug, description) VALUES (?, ?, ?)',
                (name, slug, description)
            )
            conn.commit()
            return cursor.lastrowid
    except sqlite3.IntegrityError as e:
        _raise_integrity(e, slug)


# ===== Images =====

def next_image_sort_order(project_id):
    with Database.connect(Database.projects_db()) as conn:
        row = conn.execute(
            'SELECT MAX(sort_order) FROM project_images WHERE project_id = ?', (project_id,)
        ).fetchone()
        return 0 if row[0] is None else row[0] + 1


def add_project_image(project_id, image_url, image_name=None, alt_text=None, sort_order=None):
    """Attach an uploaded image to a project. Appends to the end by default."""
    if sort_order is None:
        sort_order = next_image_sort_order(project_id)

    try:
        with Database.connect(Database.projects_db()) as conn:
            cursor = conn.execute('''
                INSERT INTO project_images (project_id, image_url, image_name, alt_text, sort_order)
                VALUES (?, ?, ?, ?, ?)
            ''', (project_id, image_url, image_name, alt_text, sort_order))
            conn.commit()
            return cursor.lastrowid
    except sqlite3.IntegrityError as e:
        raise ValueError('Project not found') from e


def get_project_image(image_id):
    with Database.connect(Database.projects_db()) as conn:
        row = conn.execute('SELECT * FROM project_images WHERE id = ?', (image_id,)).fetchone()
        return Database.row_to_dict(row)


def delete_project_image(image_id):
    with Database.connect(Database.projects_db()) as conn:
        cursor = conn.execute('DELETE FROM project_images WHERE id = ?', (image_id,))
        conn.commit()
        return cursor.rowcount > 0
