"""
Core infrastructure package for the Callboard backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL connectivity via asyncpg
- The error hierarchy raised by the import pipeline

FastAPI dependencies live in callboard.core.dependencies and are imported from
there directly; they depend on the service layer, which itself imports from
this package.

    from callboard.core import get_settings, MissingColumnError
"""

from callboard.core.config import Settings, get_settings
from callboard.core.database import init_db, close_db, get_db_pool, is_pool_ready
from callboard.core.exceptions import CallboardError, MissingColumnError, WriteError

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    'is_pool_ready',
    # Errors (from exceptions.py)
    'CallboardError',
    'MissingColumnError',
    'WriteError',
]
