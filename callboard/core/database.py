"""
Async PostgreSQL connection pool module.

This module owns the asyncpg connection pool shared by the repository layer
(callboard.services.upsert.CallRecordRepository) and the FastAPI dependencies.

Key Components:
- Global connection pool singleton (_pool)
- init_db(): Initialize the connection pool at application startup
- get_db_pool(): Get the pool instance (initializes if needed)
- is_pool_ready(): Whether the pool is currently open (reported by /health)
- close_db(): Gracefully close the pool at application shutdown

Connection Pool Configuration:
- min_size: 2 (minimum idle connections kept in pool)
- max_size: 10 (maximum connections in pool)
- command_timeout: 60 seconds (query timeout)

Usage:
    # At application startup (in FastAPI lifespan)
    await init_db()

    # In services or endpoints
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch("SELECT * FROM agents")

    # At application shutdown
    await close_db()
"""

import logging
from typing import Optional

import asyncpg
from asyncpg import Pool

from callboard.core.config import get_settings


logger = logging.getLogger(__name__)


# =============================================================================
# Global Pool Singleton
# =============================================================================

# None until init_db() is called
_pool: Optional[Pool] = None


# =============================================================================
# Pool Lifecycle Functions
# =============================================================================

async def init_db() -> Pool:
    """
    Initialize the database connection pool.

    Idempotent: if the pool already exists it is returned unchanged.

    Returns:
        Pool: The asyncpg connection pool instance.

    Raises:
        asyncpg.PostgresError: If connection to the database fails.
        OSError: If the database host is unreachable.
    """
    global _pool

    if _pool is None:
        settings = get_settings()
        _pool = await asyncpg.create_pool(
            dsn=settings.database_url,
            min_size=2,
            max_size=10,
            command_timeout=60,
        )
        logger.info("Created asyncpg pool")

    return _pool


async def get_db_pool() -> Pool:
    """Return the shared pool, creating it on first use."""
    return _pool if _pool is not None else await init_db()


def is_pool_ready() -> bool:
    """True once init_db() has created the pool and close_db() has not run."""
    return _pool is not None


async def close_db() -> None:
    """
    Close the database connection pool gracefully.

    Safe to call when the pool was never created. A later get_db_pool()
    creates a fresh pool.
    """
    global _pool

    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Closed asyncpg pool")
