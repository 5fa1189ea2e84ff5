"""
Listing helpers for the public project pages: search, category filter,
sorting, status counts and related projects. All operate on the
in-memory list returned by the projects database.
"""

SORT_OPTIONS = ('newest', 'oldest', 'name', 'client')
SEARCH_FIELDS = ('title', 'description', 'client_name', 'location')


def matches_search(project, term):
    """Case-insensitive substring match on the searchable text fields"""
    term = term.casefold()
    return any(term in (project.get(field) or '').casefold() for field in SEARCH_FIELDS)


def _category_slug(project):
    category = project.get('category') or {}
    return category.get('slug')


def _created_key(project):
    return (project.get('created_at') or '', project.get('id') or 0)


def filter_and_sort_projects(projects, search=None, category='all', sort_by='newest'):
    """Return a new list filtered by search text and category slug, then sorted.

    Unknown sort keys fall back to newest first.
    """
    filtered = list(projects)

    search = (search or '').strip()
    if search:
        filtered = [p for p in filtered if matches_search(p, search)]

    if category and category != 'all':
        filtered = [p for p in filtered if _category_slug(p) == category]

    if sort_by == 'oldest':
        filtered.sort(key=_created_key)
    elif sort_by == 'name':
        filtered.sort(key=lambda p: (p.get('title') or '').casefold())
    elif sort_by == 'client':
        filtered.sort(key=lambda p: (p.get('client_name') or '').casefold())
    else:
        filtered.sort(key=_created_key, reverse=True)

    return filtered


def status_counts(projects):
    counts = {'total': len(projects), 'completed': 0, 'ongoing': 0, 'planning': 0}
    for p in projects:
        if p.get('status') in counts:
            counts[p['status']] += 1
    return counts


def related_projects(project, projects, limit=3):
    """Other projects, same category first, each group newest first"""
    others = [p for p in projects if p['id'] != project['id']]
    others.sort(key=_created_key, reverse=True)

    category_id = project.get('category_id')
    if category_id is None:
        return others[:limit]

    same = [p for p in others if p.get('category_id') == category_id]
    rest = [p for p in others if p.get('category_id') != category_id]
    return (same + rest)[:limit]
