"""
SQL Query Module for Callboard.

Parameterized statements for the call_data fact table and the reference
tables. Keeps SQL text out of the service layer.

    from callboard.sql import UPSERT_CALL_DATA_QUERY, get_call_data_query
"""

from callboard.sql.call_data_queries import (
    CALL_DATA_CONFLICT_KEY,
    CALL_DATA_MEASURES,
    UPSERT_CALL_DATA_QUERY,
    CLEAR_CALL_DATA_QUERY,
    INSERT_TEAM_QUERY,
    INSERT_AGENT_QUERY,
    SELECT_CAMPAIGNS_QUERY,
    SELECT_TEAMS_QUERY,
    SELECT_AGENTS_QUERY,
    get_call_data_query,
)

__all__ = [
    'CALL_DATA_CONFLICT_KEY',
    'CALL_DATA_MEASURES',
    'UPSERT_CALL_DATA_QUERY',
    'CLEAR_CALL_DATA_QUERY',
    'INSERT_TEAM_QUERY',
    'INSERT_AGENT_QUERY',
    'SELECT_CAMPAIGNS_QUERY',
    'SELECT_TEAMS_QUERY',
    'SELECT_AGENTS_QUERY',
    'get_call_data_query',
]
