"""
Package initialization file for Callboard models.

Re-exports all Pydantic schemas and enumerations so other modules can write:

    from callboard.models import CallRecord, ReferenceSnapshot, CallTimeTier
"""

# =============================================================================
# Enums
# =============================================================================

from callboard.models.enums import (
    AggregationDimension,
    CallTimeTier,
    ImportSource,
    RelativeTier,
)


# =============================================================================
# Schemas
# =============================================================================

from callboard.models.schemas import (
    # Constants
    BUSINESS_HOUR_MIN,
    BUSINESS_HOUR_MAX,
    BUSINESS_HOURS,
    # Reference data
    Campaign,
    Team,
    Agent,
    CallRecord,
    ReferenceSnapshot,
    # Parsed rows
    AgentImportRow,
    RawCallRow,
    RowError,
    # Import results
    ImportResult,
    AgentImportResult,
    MailboxImportStats,
    # Summaries
    AgentDailySummary,
    TeamSummary,
    CampaignSummary,
    HourlySummary,
    AgentHourCell,
    DailyPoint,
)


__all__ = [
    # Enums
    'AggregationDimension',
    'CallTimeTier',
    'ImportSource',
    'RelativeTier',
    # Constants
    'BUSINESS_HOUR_MIN',
    'BUSINESS_HOUR_MAX',
    'BUSINESS_HOURS',
    # Reference data
    'Campaign',
    'Team',
    'Agent',
    'CallRecord',
    'ReferenceSnapshot',
    # Parsed rows
    'AgentImportRow',
    'RawCallRow',
    'RowError',
    # Import results
    'ImportResult',
    'AgentImportResult',
    'MailboxImportStats',
    # Summaries
    'AgentDailySummary',
    'TeamSummary',
    'CampaignSummary',
    'HourlySummary',
    'AgentHourCell',
    'DailyPoint',
]
