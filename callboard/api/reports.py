"""
FastAPI router module for reporting endpoints.

Every endpoint takes a fresh snapshot of the store and runs the pure
aggregation functions over it. There is no caching: two requests may see
different snapshots if an import lands in between.

Endpoints:
- GET /reports/daily: per-agent daily summaries with performance tiers
- GET /reports/teams: per-team rollup over a date range
- GET /reports/campaigns: per-campaign rollup over a date range, ranked by calls
- GET /reports/hourly: ten hourly buckets, optionally for one campaign
- GET /reports/matrix: agent x hour grid with performance tiers
- GET /reports/agents/{agent_id}/series: one agent's per-day totals
- GET /reports/export/daily.csv: daily report as CSV
- GET /reports/export/raw.csv: raw call records as CSV

Date parameters default to today. A range uses start/end (inclusive).
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import PlainTextResponse

from callboard.core.dependencies import RepositoryDep, SettingsDep
from callboard.models import (
    AgentDailySummary,
    AgentHourCell,
    CampaignSummary,
    DailyPoint,
    HourlySummary,
    TeamSummary,
)
from callboard.services.aggregation import (
    DateFilter,
    agent_hour_matrix,
    agent_time_series,
    campaign_summaries,
    daily_summaries,
    hourly_summary,
    rank_by_calls,
    team_summaries,
)
from callboard.services.classification import classify_daily, classify_matrix
from callboard.services.export import (
    build_daily_report,
    build_raw_export,
    export_to_csv,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _date_filter(start: Optional[date], end: Optional[date]) -> DateFilter:
    if start is None and end is None:
        return DateFilter.single(date.today())
    try:
        return DateFilter(start=start, end=end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# =============================================================================
# Summaries
# =============================================================================


@router.get("/daily", response_model=List[AgentDailySummary])
async def daily_report(
    repository: RepositoryDep,
    settings: SettingsDep,
    day: Optional[date] = Query(default=None, alias="date", description="Report date; defaults to today"),
    limit: Optional[int] = Query(default=None, ge=1, description="Return only the top N agents by calls"),
) -> List[AgentDailySummary]:
    """
    Per-agent totals for one date with call-time, calls and sales tiers.

    With ``limit`` the list is ranked by total calls and truncated; otherwise
    it is in roster order. Calls and sales tiers compare the agents returned.
    """
    day = day or date.today()
    snapshot = await repository.fetch_snapshot(day, day)
    summaries = daily_summaries(snapshot, day)
    if limit is not None:
        summaries = rank_by_calls(summaries, limit)
    return classify_daily(summaries, target=settings.call_time_target_minutes)


@router.get("/teams", response_model=List[TeamSummary])
async def team_report(
    repository: RepositoryDep,
    start: Optional[date] = Query(default=None),
    end: Optional[date] = Query(default=None),
) -> List[TeamSummary]:
    date_filter = _date_filter(start, end)
    snapshot = await repository.fetch_snapshot(date_filter.start, date_filter.end)
    return team_summaries(snapshot, date_filter)


@router.get("/campaigns", response_model=List[CampaignSummary])
async def campaign_report(
    repository: RepositoryDep,
    start: Optional[date] = Query(default=None),
    end: Optional[date] = Query(default=None),
) -> List[CampaignSummary]:
    """Campaign rollup, highest total calls first."""
    date_filter = _date_filter(start, end)
    snapshot = await repository.fetch_snapshot(date_filter.start, date_filter.end)
    return rank_by_calls(campaign_summaries(snapshot, date_filter))


@router.get("/hourly", response_model=List[HourlySummary])
async def hourly_report(
    repository: RepositoryDep,
    start: Optional[date] = Query(default=None),
    end: Optional[date] = Query(default=None),
    campaign_id: Optional[str] = Query(default=None, description="Only agents on this campaign's teams"),
) -> List[HourlySummary]:
    date_filter = _date_filter(start, end)
    snapshot = await repository.fetch_snapshot(date_filter.start, date_filter.end)
    return hourly_summary(snapshot, date_filter, campaign_id=campaign_id)


@router.get("/matrix", response_model=List[List[AgentHourCell]])
async def matrix_report(
    repository: RepositoryDep,
    settings: SettingsDep,
    day: Optional[date] = Query(default=None, alias="date"),
    team_id: Optional[str] = Query(default=None, description="Only this team's agents"),
) -> List[List[AgentHourCell]]:
    """
    Agent x hour grid for one date with call-time, calls and sales tiers.

    Calls and sales tiers compare each agent with the other agents shown for
    the same hour.
    """
    day = day or date.today()
    snapshot = await repository.fetch_snapshot(day, day)

    agent_ids = None
    if team_id is not None:
        agent_ids = [agent.id for agent in snapshot.agents if agent.team_id == team_id]

    matrix = agent_hour_matrix(snapshot, DateFilter.single(day), agent_ids=agent_ids)
    return classify_matrix(matrix, target=settings.call_time_target_minutes)


@router.get("/agents/{agent_id}/series", response_model=List[DailyPoint])
async def agent_series(
    agent_id: str,
    repository: RepositoryDep,
    start: Optional[date] = Query(default=None),
    end: Optional[date] = Query(default=None),
) -> List[DailyPoint]:
    date_filter = _date_filter(start, end)
    snapshot = await repository.fetch_snapshot(date_filter.start, date_filter.end)
    if not any(agent.id == agent_id for agent in snapshot.agents):
        raise HTTPException(status_code=404, detail=f"Agent {agent_id} not found")
    return agent_time_series(snapshot, agent_id, date_filter)


# =============================================================================
# Exports
# =============================================================================


@router.get("/export/daily.csv", response_class=PlainTextResponse)
async def export_daily_report(
    repository: RepositoryDep,
    day: Optional[date] = Query(default=None, alias="date"),
) -> PlainTextResponse:
    day = day or date.today()
    snapshot = await repository.fetch_snapshot(day, day)
    content = export_to_csv(build_daily_report(snapshot, day))
    return PlainTextResponse(
        content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="sales-report-{day.isoformat()}.csv"'},
    )


@router.get("/export/raw.csv", response_class=PlainTextResponse)
async def export_raw_data(
    repository: RepositoryDep,
    start: Optional[date] = Query(default=None),
    end: Optional[date] = Query(default=None),
) -> PlainTextResponse:
    date_filter = _date_filter(start, end)
    snapshot = await repository.fetch_snapshot(date_filter.start, date_filter.end)
    content = export_to_csv(build_raw_export(snapshot, date_filter))
    label = date_filter.start.isoformat() if date_filter.start else "all"
    return PlainTextResponse(
        content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="sales-data-{label}.csv"'},
    )
