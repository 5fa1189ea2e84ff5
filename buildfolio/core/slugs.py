"""
Slug Allocation
===============

Derives URL-safe slugs from titles and disambiguates them against the
slugs already stored:

    base, base-1, base-2, ...

The existence check is supplied by the caller so the same allocator
serves projects and categories. A lookup that fails is never read as
"slug available".
"""

import re
import secrets

MAX_SLUG_ATTEMPTS = 100
FALLBACK_PREFIX = 'project'

FOUND = 'found'
NOT_FOUND = 'not_found'
LOOKUP_ERROR = 'lookup_error'


class SlugLookupError(Exception):
    """The existence check could not be completed."""


class SlugAllocationError(Exception):
    """Every candidate up to the attempt limit is already taken."""


class SlugConflictError(Exception):
    """A write hit the unique constraint on a slug column."""

    def __init__(self, slug):
        super().__init__(f"Slug already in use: {slug}")
        self.slug = slug


class LookupResult:
    """Outcome of a single slug existence check."""

    __slots__ = ('status', 'error')

    def __init__(self, status, error=None):
        if status not in (FOUND, NOT_FOUND, LOOKUP_ERROR):
            raise ValueError(f"Unknown lookup status: {status}")
        self.status = status
        self.error = error

    @classmethod
    def found(cls):
        return cls(FOUND)

    @classmethod
    def not_found(cls):
        return cls(NOT_FOUND)

    @classmethod
    def failed(cls, error):
        return cls(LOOKUP_ERROR, error)

    @property
    def is_found(self):
        return self.status == FOUND

    @property
    def is_error(self):
        return self.status == LOOKUP_ERROR

    def __eq__(self, other):
        if not isinstance(other, LookupResult):
            return NotImplemented
        return self.status == other.status and self.error is other.error

    def __repr__(self):
        if self.error is not None:
            return f"LookupResult({self.status!r}, {self.error!r})"
        return f"LookupResult({self.status!r})"


def normalize_slug(title):
    """Lowercase, drop anything outside [a-z0-9 -], hyphenate whitespace, tidy hyphens."""
    slug = (title or '').lower()
    slug = re.sub(r'[^a-z0-9 -]', '', slug)
    slug = re.sub(r'\s+', '-', slug)
    slug = re.sub(r'-+', '-', slug)
    return slug.strip('-')


def fallback_slug(prefix=FALLBACK_PREFIX):
    """Token used when a title has nothing left after normalization."""
    return f"{prefix}-{secrets.token_hex(4)}"


def _check(exists_by_slug, candidate):
    try:
        result = exists_by_slug(candidate)
    except Exception as e:
        result = LookupResult.failed(e)

    if isinstance(result, LookupResult):
        return result
    return LookupResult.found() if result else LookupResult.not_found()


def allocate_slug(title, exists_by_slug, max_attempts=MAX_SLUG_ATTEMPTS,
                  fallback_prefix=FALLBACK_PREFIX):
    """Return the first unused slug for *title*.

    Args:
        title: Human-entered title (or an admin-typed slug).
        exists_by_slug: Callable taking a candidate and returning a
            LookupResult or a bool. Exceptions count as lookup failures.
        max_attempts: Number of candidates tried before giving up.
        fallback_prefix: Prefix of the random base used when the title
            normalizes to nothing.

    Raises:
        SlugLookupError: an existence check failed.
        SlugAllocationError: all candidates within max_attempts are taken.
    """
    base = normalize_slug(title) or fallback_slug(fallback_prefix)

    candidate = base
    for counter in range(1, max_attempts + 1):
        result = _check(exists_by_slug, candidate)
        if result.is_error:
            raise SlugLookupError(f"Could not check slug '{candidate}'") from result.error
        if not result.is_found:
            return candidate
        candidate = f"{base}-{counter}"

    raise SlugAllocationError(
        f"No free slug for '{base}' after {max_attempts} attempts"
    )
