"""
FastAPI dependency injection module for the Callboard backend.

Provides reusable dependencies so route handlers never reach for module-level
state directly:

- get_settings_dependency / SettingsDep: the cached Settings singleton
- get_repository / RepositoryDep: a CallRecordRepository bound to the pool

Tests override these through ``app.dependency_overrides``.

Usage:
    @router.get("/reports/daily")
    async def daily_report(repository: RepositoryDep, settings: SettingsDep):
        snapshot = await repository.fetch_snapshot(day, day)
        ...
"""

from typing import Annotated

from fastapi import Depends

from callboard.core.config import Settings, get_settings
from callboard.core.database import get_db_pool
from callboard.services.upsert import CallRecordRepository


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can do:

        app.dependency_overrides[get_settings_dependency] = lambda: mock_settings
    """
    return get_settings()


# =============================================================================
# Repository Dependency
# =============================================================================

async def get_repository() -> CallRecordRepository:
    """Return a CallRecordRepository bound to the shared connection pool."""
    pool = await get_db_pool()
    return CallRecordRepository(pool)


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

RepositoryDep = Annotated[CallRecordRepository, Depends(get_repository)]
