"""
Upsert Conflict Resolver and call_data repository.

The write contract: a batch keyed on (agent_id, date, hour) where an existing
row at that key is fully replaced by the incoming row. Measures are never
merged or summed, so applying the same batch twice leaves the store
unchanged. Callers may restrict a batch to a subset of hours first; hour
buckets outside that subset are left untouched.

The pure helpers in this module (restrict_to_hours, dedupe_batch,
apply_upsert) state the contract; CallRecordRepository realizes it against
PostgreSQL with a single ``INSERT ... ON CONFLICT DO UPDATE`` batch per
import. This is the only side-effecting operation in the pipeline, and no
aggregate is updated in response to it.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import asyncpg
from asyncpg import Pool

from callboard.core.exceptions import WriteError
from callboard.models import Agent, Campaign, CallRecord, ReferenceSnapshot, Team
from callboard.sql import (
    CLEAR_CALL_DATA_QUERY,
    INSERT_AGENT_QUERY,
    INSERT_TEAM_QUERY,
    SELECT_AGENTS_QUERY,
    SELECT_CAMPAIGNS_QUERY,
    SELECT_TEAMS_QUERY,
    UPSERT_CALL_DATA_QUERY,
    get_call_data_query,
)

logger = logging.getLogger(__name__)

RecordKey = Tuple[str, date, int]

# Failures from the driver or the socket surface as WriteError
STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


# =============================================================================
# Write Contract (pure)
# =============================================================================


def restrict_to_hours(
    records: Sequence[CallRecord],
    hours: Optional[Iterable[int]] = None,
) -> List[CallRecord]:
    """
    Keep only records whose hour is in ``hours``.

    None or an empty selection means no restriction.
    """
    selected = set(hours) if hours else set()
    if not selected:
        return list(records)
    return [record for record in records if record.hour in selected]


def dedupe_batch(records: Sequence[CallRecord]) -> List[CallRecord]:
    """
    Collapse repeated keys inside one batch; the last occurrence wins.

    PostgreSQL refuses an ON CONFLICT DO UPDATE that touches the same row
    twice in one command, so batches are deduplicated before they are sent.
    First-seen key order is kept.
    """
    latest: Dict[RecordKey, CallRecord] = {}
    for record in records:
        latest[record.key] = record
    return list(latest.values())


def apply_upsert(
    existing: Dict[RecordKey, CallRecord],
    batch: Sequence[CallRecord],
) -> Dict[RecordKey, CallRecord]:
    """
    Return the store state after writing ``batch`` over ``existing``.

    Reference semantics for the repository: replace-on-key, insert otherwise.
    The input mapping is not modified.
    """
    state = dict(existing)
    for record in batch:
        state[record.key] = record
    return state


def _record_args(record: CallRecord) -> tuple:
    return (
        record.agent_id,
        record.date,
        record.hour,
        record.calls_made,
        record.total_call_time,
        record.sales_made,
    )


# =============================================================================
# Repository
# =============================================================================


class CallRecordRepository:
    """
    asyncpg-backed store for call_data and the roster tables.

    The pool is injected, so tests hand in a mock and the API layer hands in
    the shared pool from callboard.core.database.
    """

    def __init__(self, pool: Pool):
        self._pool = pool

    async def upsert_call_records(
        self,
        records: Sequence[CallRecord],
        hours: Optional[Iterable[int]] = None,
    ) -> int:
        """
        Write one batch with replace-on-key semantics.

        Args:
            records: Validated records for this import.
            hours: Optional hour selection; other hour buckets are left alone.

        Returns:
            Number of rows sent to the store (after hour restriction and
            in-batch deduplication). An empty batch returns 0 without a write.

        Raises:
            WriteError: The store rejected the batch. The whole batch is
                treated as failed and the store's message is kept verbatim.
        """
        batch = dedupe_batch(restrict_to_hours(records, hours))
        if not batch:
            return 0

        args = [_record_args(record) for record in batch]

        try:
            async with self._pool.acquire() as conn:
                await conn.executemany(UPSERT_CALL_DATA_QUERY, args)
        except STORE_ERRORS as e:
            logger.error(f"Upsert of {len(batch)} call_data rows failed: {e}")
            raise WriteError(str(e), batch_size=len(batch)) from e

        logger.info(f"Upserted {len(batch)} rows to call_data")
        return len(batch)

    async def clear_call_records(self) -> None:
        """Bulk-clear every call record. Never called by the import pipeline."""
        async with self._pool.acquire() as conn:
            status = await conn.execute(CLEAR_CALL_DATA_QUERY)
        logger.warning(f"Cleared call_data: {status}")

    async def create_teams(self, teams: Sequence[Team]) -> List[Team]:
        if not teams:
            return []
        args = [(team.id, team.name, team.color, team.campaign_id) for team in teams]
        try:
            async with self._pool.acquire() as conn:
                await conn.executemany(INSERT_TEAM_QUERY, args)
        except STORE_ERRORS as e:
            raise WriteError(str(e), batch_size=len(args)) from e
        logger.info(f"Created {len(teams)} teams")
        return list(teams)

    async def create_agents(self, agents: Sequence[Agent]) -> List[Agent]:
        if not agents:
            return []
        args = [
            (agent.id, agent.name, agent.email, agent.team_id, agent.is_active)
            for agent in agents
        ]
        try:
            async with self._pool.acquire() as conn:
                await conn.executemany(INSERT_AGENT_QUERY, args)
        except STORE_ERRORS as e:
            raise WriteError(str(e), batch_size=len(args)) from e
        logger.info(f"Created {len(agents)} agents")
        return list(agents)

    async def fetch_teams(self) -> List[Team]:
        """Read the team list alone, for roster imports that only resolve team names."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(SELECT_TEAMS_QUERY)
        return [Team(**dict(row)) for row in rows]

    async def fetch_snapshot(
        self,
        date_start: Optional[date] = None,
        date_end: Optional[date] = None,
    ) -> ReferenceSnapshot:
        """
        Read reference data and call records in one connection.

        The result is an immutable snapshot; aggregation runs against it with
        no further database access.
        """
        call_sql, call_args = get_call_data_query(date_start, date_end)

        async with self._pool.acquire() as conn:
            campaign_rows = await conn.fetch(SELECT_CAMPAIGNS_QUERY)
            team_rows = await conn.fetch(SELECT_TEAMS_QUERY)
            agent_rows = await conn.fetch(SELECT_AGENTS_QUERY)
            call_rows = await conn.fetch(call_sql, *call_args)

        return ReferenceSnapshot(
            campaigns=[Campaign(**dict(row)) for row in campaign_rows],
            teams=[Team(**dict(row)) for row in team_rows],
            agents=[Agent(**dict(row)) for row in agent_rows],
            records=[CallRecord(**dict(row)) for row in call_rows],
        )
