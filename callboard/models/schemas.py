"""
Pydantic models for the Callboard backend.

Covers the reference data (campaigns, teams, agents), the persisted CallRecord,
the typed intermediate rows produced by the CSV parser, import results, and the
derived summaries returned by the aggregation engine. Summaries are never
persisted; they are recomputed from a ReferenceSnapshot on every request.

All models use Pydantic v2 syntax.
"""

from datetime import date as DateType, datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from callboard.models.enums import CallTimeTier, ImportSource, RelativeTier


# Inclusive bounds of the hourly buckets. Settings can describe the same
# window, but the persisted shape is fixed at 8..17.
BUSINESS_HOUR_MIN: int = 8
BUSINESS_HOUR_MAX: int = 17
BUSINESS_HOURS: Tuple[int, ...] = tuple(range(BUSINESS_HOUR_MIN, BUSINESS_HOUR_MAX + 1))


# =============================================================================
# Reference Data
# =============================================================================


class Campaign(BaseModel):
    """A campaign owning zero or more teams."""
    id: str
    name: str
    color: str = "#3b82f6"
    is_active: bool = True


class Team(BaseModel):
    """A team; campaign_id is None for teams not attached to any campaign."""
    id: str
    name: str
    color: str = "#3b82f6"
    campaign_id: Optional[str] = None


class Agent(BaseModel):
    """
    An agent on the roster.

    The name is the join key used by every CSV import (case-insensitive,
    whitespace-trimmed, exact match). team_id is None for orphaned agents.
    """
    id: str
    name: str
    email: Optional[str] = None
    team_id: Optional[str] = None
    is_active: bool = True


class CallRecord(BaseModel):
    """
    One agent's activity in one hourly bucket on one date.

    Uniquely identified by (agent_id, date, hour). A write to an existing key
    replaces every measure; nothing is accumulated.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "agent_id": "agent-1",
                "date": "2024-01-01",
                "hour": 9,
                "calls_made": 15,
                "total_call_time": 60,
                "sales_made": 2,
            }
        }
    )

    agent_id: str = Field(..., min_length=1)
    date: DateType
    hour: int = Field(..., ge=BUSINESS_HOUR_MIN, le=BUSINESS_HOUR_MAX)
    calls_made: int = Field(default=0, ge=0)
    total_call_time: int = Field(default=0, ge=0, description="Minutes")
    sales_made: int = Field(default=0, ge=0)

    @property
    def key(self) -> Tuple[str, DateType, int]:
        return (self.agent_id, self.date, self.hour)


class ReferenceSnapshot(BaseModel):
    """
    Immutable view of the store taken at call time.

    Every aggregation function reads one of these and nothing else.
    """
    model_config = ConfigDict(frozen=True)

    campaigns: List[Campaign] = Field(default_factory=list)
    teams: List[Team] = Field(default_factory=list)
    agents: List[Agent] = Field(default_factory=list)
    records: List[CallRecord] = Field(default_factory=list)


# =============================================================================
# Parsed CSV Rows
# =============================================================================


class AgentImportRow(BaseModel):
    """One row of an agent-import CSV with all three identifiers present."""
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    team_name: str = Field(..., min_length=1)


class RawCallRow(BaseModel):
    """
    Canonical shape of a call-data row after column resolution.

    Numeric fields are still the raw strings from the file (None when the
    column was not present); normalization coerces them.
    """
    line_number: int = Field(..., ge=1)
    agent_name: str
    calls: Optional[str] = None
    seconds: Optional[str] = None
    sales: Optional[str] = None
    hour: Optional[str] = None


class RowError(BaseModel):
    """A non-fatal, per-row problem collected during normalization."""
    line_number: Optional[int] = Field(default=None, ge=1)
    agent_name: Optional[str] = None
    message: str


# =============================================================================
# Import Results
# =============================================================================


class ImportResult(BaseModel):
    """Outcome of a single call-data import."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "source": "manual_csv",
                "rows_processed": 12,
                "records_imported": 10,
                "rows_skipped": 2,
                "errors": [{"line_number": 4, "agent_name": "Jo", "message": "Agent \"Jo\" not found"}],
                "message": "Successfully imported 10 records. Skipped 2 rows: ...",
            }
        }
    )

    success: bool
    source: ImportSource
    rows_processed: int = Field(default=0, ge=0)
    records_imported: int = Field(default=0, ge=0)
    rows_skipped: int = Field(default=0, ge=0)
    errors: List[RowError] = Field(default_factory=list)
    message: str = ""
    hour: Optional[int] = None
    skipped_reason: Optional[str] = None


class AgentImportResult(BaseModel):
    """Outcome of an agent roster import."""
    agents_created: int = Field(default=0, ge=0)
    teams_created: int = Field(default=0, ge=0)
    message: str = ""


class MailboxImportStats(BaseModel):
    """Counters for one pass over the mailbox."""
    emails_processed: int = 0
    emails_skipped: int = 0
    records_imported: int = 0
    errors: List[str] = Field(default_factory=list)
    last_check: Optional[datetime] = None


# =============================================================================
# Aggregate Summaries
# =============================================================================


class AgentDailySummary(BaseModel):
    """Totals for one agent on one date, optionally carrying display tiers."""
    agent_id: str
    agent_name: Optional[str] = None
    date: DateType
    total_calls: int = 0
    total_call_time: int = 0
    total_sales: int = 0
    average_call_time: float = 0.0
    conversion_rate: float = 0.0
    call_time_tier: Optional[CallTimeTier] = None
    calls_tier: Optional[RelativeTier] = None
    sales_tier: Optional[RelativeTier] = None


class TeamSummary(BaseModel):
    """Totals for every member agent of one team; team_id None is the no-team bucket."""
    team_id: Optional[str] = None
    team_name: str
    campaign_id: Optional[str] = None
    agent_count: int = 0
    total_calls: int = 0
    total_call_time: int = 0
    total_sales: int = 0
    average_call_time: float = 0.0
    calls_per_agent: float = 0.0
    conversion_rate: float = 0.0


class CampaignSummary(BaseModel):
    """Totals across a campaign's teams; campaign_id None is the no-campaign bucket."""
    campaign_id: Optional[str] = None
    campaign_name: str
    team_count: int = 0
    agent_count: int = 0
    total_calls: int = 0
    total_call_time: int = 0
    total_sales: int = 0
    average_call_time: float = 0.0
    calls_per_agent: float = 0.0
    conversion_rate: float = 0.0


class HourlySummary(BaseModel):
    """One of the ten fixed hourly buckets, zero-filled when empty."""
    hour: int = Field(..., ge=BUSINESS_HOUR_MIN, le=BUSINESS_HOUR_MAX)
    total_calls: int = 0
    total_call_time: int = 0
    total_sales: int = 0
    active_agents: int = 0
    average_call_time: float = 0.0


class AgentHourCell(BaseModel):
    """One cell of the agent x hour grid, optionally carrying display tiers."""
    agent_id: str
    agent_name: str
    hour: int = Field(..., ge=BUSINESS_HOUR_MIN, le=BUSINESS_HOUR_MAX)
    calls_made: int = 0
    total_call_time: int = 0
    sales_made: int = 0
    call_time_tier: Optional[CallTimeTier] = None
    calls_tier: Optional[RelativeTier] = None
    sales_tier: Optional[RelativeTier] = None


class DailyPoint(BaseModel):
    """One day of an agent's time series."""
    date: DateType
    total_calls: int = 0
    total_call_time: int = 0
    total_sales: int = 0
