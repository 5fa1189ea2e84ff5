"""
Buildfolio Core
===============

Core utilities and shared functionality for Buildfolio modules.
"""

from .config import Config, get_config_value
from .database import Database
from .logging_service import LoggingService
from .slugs import (
    LookupResult,
    SlugAllocationError,
    SlugConflictError,
    SlugLookupError,
    allocate_slug,
    normalize_slug,
)

__all__ = [
    'Config', 'get_config_value', 'Database', 'LoggingService',
    'LookupResult', 'SlugAllocationError', 'SlugConflictError', 'SlugLookupError',
    'allocate_slug', 'normalize_slug',
]
