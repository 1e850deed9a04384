"""
Aggregation Engine

Read-only rollups over a ReferenceSnapshot. Every function here is pure: it
takes a snapshot plus a date filter and returns fresh summary models. Nothing
is cached and nothing is written back; a new import simply means the next
call sees a new snapshot.

Rollups:
- Per-agent daily summary (one agent, one date) and the roster-wide list.
- Per-team and per-campaign summaries with member counts. Agents without a
  team are bucketed under "No Team"; teams without a campaign under
  "No Campaign". Those buckets only appear when they carry records.
- Per-hour summary: always exactly ten buckets (8..17), zero-filled.
- Agent x hour matrix for grid displays, zero-filled.
- Single-agent time series, one point per date in ascending order.

Derived metrics never divide by zero; a zero denominator yields 0.

Record sums are computed with pandas group-bys over a frame built from the
snapshot's CallRecords.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

import pandas as pd

from callboard.models import (
    BUSINESS_HOURS,
    AgentDailySummary,
    AgentHourCell,
    AggregationDimension,
    CampaignSummary,
    DailyPoint,
    HourlySummary,
    ReferenceSnapshot,
    TeamSummary,
)

logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

RECORD_COLUMNS: List[str] = [
    'agent_id',
    'date',
    'hour',
    'calls_made',
    'total_call_time',
    'sales_made',
]

MEASURES: List[str] = ['calls_made', 'total_call_time', 'sales_made']

NO_TEAM_NAME = "No Team"
NO_CAMPAIGN_NAME = "No Campaign"

# Group key for orphans; real ids are never empty
_ORPHAN_KEY = ''

Totals = Tuple[int, int, int]
_ZERO: Totals = (0, 0, 0)

T = TypeVar('T')


# =============================================================================
# Date Filter
# =============================================================================


@dataclass(frozen=True)
class DateFilter:
    """
    Inclusive date range. A None bound is open on that side.

    Use DateFilter.single(day) for the one-day views.
    """
    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self) -> None:
        if self.start and self.end and self.start > self.end:
            raise ValueError(f"Date range start {self.start} is after end {self.end}")

    @classmethod
    def single(cls, day: date) -> 'DateFilter':
        return cls(start=day, end=day)

    @property
    def is_single_day(self) -> bool:
        return self.start is not None and self.start == self.end

    def contains(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


# =============================================================================
# Derived Metrics
# =============================================================================


def average_call_time(total_call_time: int, total_calls: int) -> float:
    """Minutes of talk time per call."""
    return total_call_time / total_calls if total_calls > 0 else 0.0


def calls_per_agent(total_calls: int, agent_count: int) -> float:
    return total_calls / agent_count if agent_count > 0 else 0.0


def conversion_rate(total_sales: int, total_calls: int) -> float:
    """Sales as a percentage of calls."""
    return total_sales / total_calls * 100 if total_calls > 0 else 0.0


def rank_by_calls(items: Sequence[T], limit: Optional[int] = None) -> List[T]:
    """
    Order summaries by total_calls descending.

    Ties keep their incoming order; there is no secondary key.
    """
    ranked = sorted(items, key=lambda item: item.total_calls, reverse=True)
    return ranked if limit is None else ranked[:limit]


# =============================================================================
# Frame Helpers
# =============================================================================


def records_frame(
    snapshot: ReferenceSnapshot,
    date_filter: Optional[DateFilter] = None,
) -> pd.DataFrame:
    """Build a DataFrame of the snapshot's records that fall inside the filter."""
    rows = [
        record.model_dump()
        for record in snapshot.records
        if date_filter is None or date_filter.contains(record.date)
    ]
    if not rows:
        return pd.DataFrame(columns=RECORD_COLUMNS)
    return pd.DataFrame(rows, columns=RECORD_COLUMNS)


def _sum_by(df: pd.DataFrame, keys) -> Dict:
    """Group-by sums of the measures, as {group_key: (calls, time, sales)}."""
    if df.empty:
        return {}
    grouped = df.groupby(keys)[MEASURES].sum()
    return {
        key: (int(row['calls_made']), int(row['total_call_time']), int(row['sales_made']))
        for key, row in grouped.iterrows()
    }


def _frame_totals(df: pd.DataFrame) -> Totals:
    if df.empty:
        return _ZERO
    return (
        int(df['calls_made'].sum()),
        int(df['total_call_time'].sum()),
        int(df['sales_made'].sum()),
    )


def _team_lookup(snapshot: ReferenceSnapshot) -> Dict[str, str]:
    """agent_id -> team id, or the orphan key when the team is unknown."""
    team_ids = {team.id for team in snapshot.teams}
    return {
        agent.id: agent.team_id if agent.team_id in team_ids else _ORPHAN_KEY
        for agent in snapshot.agents
    }


def _campaign_lookup(snapshot: ReferenceSnapshot) -> Dict[str, str]:
    """team_id -> campaign id, or the orphan key when the campaign is unknown."""
    campaign_ids = {campaign.id for campaign in snapshot.campaigns}
    return {
        team.id: team.campaign_id if team.campaign_id in campaign_ids else _ORPHAN_KEY
        for team in snapshot.teams
    }


# =============================================================================
# Per-Agent
# =============================================================================


def _agent_summary(agent_id: str, agent_name: Optional[str], day: date, totals: Totals) -> AgentDailySummary:
    calls, call_time, sales = totals
    return AgentDailySummary(
        agent_id=agent_id,
        agent_name=agent_name,
        date=day,
        total_calls=calls,
        total_call_time=call_time,
        total_sales=sales,
        average_call_time=average_call_time(call_time, calls),
        conversion_rate=conversion_rate(sales, calls),
    )


def agent_daily_summary(
    snapshot: ReferenceSnapshot,
    agent_id: str,
    day: date,
) -> AgentDailySummary:
    """
    Sum one agent's records for one date.

    Example: records of (5 calls, 10 min, 1 sale) at hour 9 and
    (3 calls, 5 min, 0 sales) at hour 10 give 8 calls, 15 minutes, 1 sale
    and an average call time of 1.875 minutes.
    """
    df = records_frame(snapshot, DateFilter.single(day))
    df = df[df['agent_id'] == agent_id]
    names = {agent.id: agent.name for agent in snapshot.agents}
    return _agent_summary(agent_id, names.get(agent_id), day, _frame_totals(df))


def daily_summaries(snapshot: ReferenceSnapshot, day: date) -> List[AgentDailySummary]:
    """One summary per roster agent for the date, in roster order, zero-filled."""
    sums = _sum_by(records_frame(snapshot, DateFilter.single(day)), 'agent_id')
    return [
        _agent_summary(agent.id, agent.name, day, sums.get(agent.id, _ZERO))
        for agent in snapshot.agents
    ]


# =============================================================================
# Per-Team / Per-Campaign
# =============================================================================


def team_summaries(
    snapshot: ReferenceSnapshot,
    date_filter: DateFilter,
) -> List[TeamSummary]:
    """
    Roll records up to teams, in team order.

    agent_count is the number of roster agents on the team, whether or not
    they made calls in the window.
    """
    agent_team = _team_lookup(snapshot)
    df = records_frame(snapshot, date_filter)
    df['team_key'] = df['agent_id'].map(agent_team).fillna(_ORPHAN_KEY)

    sums = _sum_by(df, 'team_key')
    members = Counter(agent_team.values())

    def build(team_id, name, campaign_id, key) -> TeamSummary:
        calls, call_time, sales = sums.get(key, _ZERO)
        agent_count = members.get(key, 0)
        return TeamSummary(
            team_id=team_id,
            team_name=name,
            campaign_id=campaign_id,
            agent_count=agent_count,
            total_calls=calls,
            total_call_time=call_time,
            total_sales=sales,
            average_call_time=average_call_time(call_time, calls),
            calls_per_agent=calls_per_agent(calls, agent_count),
            conversion_rate=conversion_rate(sales, calls),
        )

    summaries = [build(team.id, team.name, team.campaign_id, team.id) for team in snapshot.teams]
    if _ORPHAN_KEY in sums:
        summaries.append(build(None, NO_TEAM_NAME, None, _ORPHAN_KEY))
    return summaries


def campaign_summaries(
    snapshot: ReferenceSnapshot,
    date_filter: DateFilter,
) -> List[CampaignSummary]:
    """
    Roll records up to campaigns through each agent's team, in campaign order.

    Agents without a team and teams without a campaign both land in the
    "No Campaign" bucket.
    """
    agent_team = _team_lookup(snapshot)
    team_campaign = _campaign_lookup(snapshot)
    agent_campaign = {
        agent_id: team_campaign.get(team_id, _ORPHAN_KEY)
        for agent_id, team_id in agent_team.items()
    }

    df = records_frame(snapshot, date_filter)
    df['campaign_key'] = df['agent_id'].map(agent_campaign).fillna(_ORPHAN_KEY)

    sums = _sum_by(df, 'campaign_key')
    team_counts = Counter(team_campaign.values())
    agent_counts = Counter(agent_campaign.values())

    def build(campaign_id, name, key) -> CampaignSummary:
        calls, call_time, sales = sums.get(key, _ZERO)
        agent_count = agent_counts.get(key, 0)
        return CampaignSummary(
            campaign_id=campaign_id,
            campaign_name=name,
            team_count=team_counts.get(key, 0),
            agent_count=agent_count,
            total_calls=calls,
            total_call_time=call_time,
            total_sales=sales,
            average_call_time=average_call_time(call_time, calls),
            calls_per_agent=calls_per_agent(calls, agent_count),
            conversion_rate=conversion_rate(sales, calls),
        )

    summaries = [build(c.id, c.name, c.id) for c in snapshot.campaigns]
    if _ORPHAN_KEY in sums:
        summaries.append(build(None, NO_CAMPAIGN_NAME, _ORPHAN_KEY))
    return summaries


# =============================================================================
# Per-Hour
# =============================================================================


def _campaign_agent_ids(snapshot: ReferenceSnapshot, campaign_id: str) -> set:
    team_ids = {team.id for team in snapshot.teams if team.campaign_id == campaign_id}
    return {agent.id for agent in snapshot.agents if agent.team_id in team_ids}


def hourly_summary(
    snapshot: ReferenceSnapshot,
    date_filter: DateFilter,
    campaign_id: Optional[str] = None,
) -> List[HourlySummary]:
    """
    Totals per business hour. Always returns ten buckets, 8 through 17.

    Args:
        snapshot: Store snapshot.
        date_filter: Dates to include.
        campaign_id: When set, only agents on that campaign's teams count.
    """
    df = records_frame(snapshot, date_filter)
    if campaign_id is not None:
        df = df[df['agent_id'].isin(_campaign_agent_ids(snapshot, campaign_id))]

    sums = _sum_by(df, 'hour')
    active = {} if df.empty else {
        int(hour): int(count)
        for hour, count in df.groupby('hour')['agent_id'].nunique().items()
    }

    buckets = []
    for hour in BUSINESS_HOURS:
        calls, call_time, sales = sums.get(hour, _ZERO)
        buckets.append(HourlySummary(
            hour=hour,
            total_calls=calls,
            total_call_time=call_time,
            total_sales=sales,
            active_agents=active.get(hour, 0),
            average_call_time=average_call_time(call_time, calls),
        ))
    return buckets


def agent_hour_matrix(
    snapshot: ReferenceSnapshot,
    date_filter: DateFilter,
    agent_ids: Optional[Iterable[str]] = None,
) -> List[List[AgentHourCell]]:
    """
    Agent x hour grid: one row per agent (roster order), ten cells per row.

    agent_ids narrows the rows without changing their order.
    """
    wanted = set(agent_ids) if agent_ids is not None else None
    agents = [a for a in snapshot.agents if wanted is None or a.id in wanted]

    sums = _sum_by(records_frame(snapshot, date_filter), ['agent_id', 'hour'])

    matrix = []
    for agent in agents:
        row = []
        for hour in BUSINESS_HOURS:
            calls, call_time, sales = sums.get((agent.id, hour), _ZERO)
            row.append(AgentHourCell(
                agent_id=agent.id,
                agent_name=agent.name,
                hour=hour,
                calls_made=calls,
                total_call_time=call_time,
                sales_made=sales,
            ))
        matrix.append(row)
    return matrix


# =============================================================================
# Time Series
# =============================================================================


def _daily_points(df: pd.DataFrame) -> List[DailyPoint]:
    sums = _sum_by(df, 'date')
    # ISO strings sort chronologically
    return [
        DailyPoint(date=day, total_calls=calls, total_call_time=call_time, total_sales=sales)
        for day, (calls, call_time, sales) in sorted(sums.items(), key=lambda item: item[0].isoformat())
    ]


def agent_time_series(
    snapshot: ReferenceSnapshot,
    agent_id: str,
    date_filter: DateFilter,
) -> List[DailyPoint]:
    """Per-day totals for one agent, ascending by date. Days without records are absent."""
    df = records_frame(snapshot, date_filter)
    return _daily_points(df[df['agent_id'] == agent_id])


def daily_totals(snapshot: ReferenceSnapshot, date_filter: DateFilter) -> List[DailyPoint]:
    """Per-day totals across every agent."""
    return _daily_points(records_frame(snapshot, date_filter))


# =============================================================================
# Dispatch
# =============================================================================


def summarize(
    snapshot: ReferenceSnapshot,
    dimension: AggregationDimension,
    date_filter: DateFilter,
) -> list:
    """
    Run the rollup for a grouping dimension.

    The agent dimension produces daily summaries and therefore needs a
    single-day filter.
    """
    if dimension == AggregationDimension.AGENT:
        if not date_filter.is_single_day:
            raise ValueError("Agent summaries need a single-day date filter")
        return daily_summaries(snapshot, date_filter.start)
    if dimension == AggregationDimension.TEAM:
        return team_summaries(snapshot, date_filter)
    if dimension == AggregationDimension.CAMPAIGN:
        return campaign_summaries(snapshot, date_filter)
    if dimension == AggregationDimension.HOUR:
        return hourly_summary(snapshot, date_filter)
    if dimension == AggregationDimension.DATE:
        return daily_totals(snapshot, date_filter)
    raise ValueError(f"Unsupported aggregation dimension: {dimension}")
