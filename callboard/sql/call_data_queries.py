"""
Call Data Queries Module for Callboard.

Parameterized PostgreSQL statements for the call_data fact table and the
reference tables (campaigns, teams, agents) it hangs off.

call_data is unique on (agent_id, date, hour). The upsert replaces every
measure of an existing row with the incoming values; it never sums them.
"""

from datetime import date
from typing import Any, List, Optional, Tuple


# =============================================================================
# CONSTANTS
# =============================================================================

CALL_DATA_CONFLICT_KEY: Tuple[str, str, str] = ('agent_id', 'date', 'hour')

CALL_DATA_MEASURES: Tuple[str, str, str] = ('calls_made', 'total_call_time', 'sales_made')


# =============================================================================
# WRITES
# =============================================================================

UPSERT_CALL_DATA_QUERY: str = f"""
    INSERT INTO call_data (
        agent_id, date, hour,
        calls_made, total_call_time, sales_made,
        created_at, updated_at
    ) VALUES (
        $1, $2, $3,
        $4, $5, $6,
        NOW(), NOW()
    )
    ON CONFLICT ({', '.join(CALL_DATA_CONFLICT_KEY)})
    DO UPDATE SET
        {', '.join(f'{m} = EXCLUDED.{m}' for m in CALL_DATA_MEASURES)},
        updated_at = NOW()
"""

CLEAR_CALL_DATA_QUERY: str = "DELETE FROM call_data"

INSERT_TEAM_QUERY: str = """
    INSERT INTO teams (id, name, color, campaign_id)
    VALUES ($1, $2, $3, $4)
"""

INSERT_AGENT_QUERY: str = """
    INSERT INTO agents (id, name, email, team_id, is_active)
    VALUES ($1, $2, $3, $4, $5)
"""


# =============================================================================
# READS
# =============================================================================

SELECT_CAMPAIGNS_QUERY: str = """
    SELECT id::text AS id, name, color, is_active
    FROM campaigns
    ORDER BY name
"""

SELECT_TEAMS_QUERY: str = """
    SELECT id::text AS id, name, color, campaign_id::text AS campaign_id
    FROM teams
    ORDER BY name
"""

SELECT_AGENTS_QUERY: str = """
    SELECT id::text AS id, name, email, team_id::text AS team_id, is_active
    FROM agents
    ORDER BY name
"""


def get_call_data_query(
    date_start: Optional[date] = None,
    date_end: Optional[date] = None,
) -> Tuple[str, List[Any]]:
    """
    Build the call_data snapshot query for an optional inclusive date range.

    Returns:
        (sql, args) ready for ``conn.fetch(sql, *args)``. Rows come back in
        agent/date/hour order so downstream grouping is deterministic.
    """
    conditions: List[str] = []
    args: List[Any] = []

    if date_start is not None:
        args.append(date_start)
        conditions.append(f"date >= ${len(args)}")
    if date_end is not None:
        args.append(date_end)
        conditions.append(f"date <= ${len(args)}")

    where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

    sql = f"""
    SELECT
        agent_id::text AS agent_id,
        date,
        hour,
        calls_made,
        total_call_time,
        sales_made
    FROM call_data
    {where}
    ORDER BY agent_id, date, hour
    """
    return sql, args
