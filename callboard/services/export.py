"""
Export formatting: CSV text for reports and display strings for the UI.

export_to_csv is deliberately plain: the header is the keys of the first row,
values are comma-joined, and nothing is quoted or escaped. A value that itself
contains a comma will shift the columns of its line.
"""

import math
from datetime import date
from typing import Any, Dict, List, Mapping, Sequence

from callboard.models import ReferenceSnapshot
from callboard.services.aggregation import (
    NO_TEAM_NAME,
    DateFilter,
    daily_summaries,
)

DAILY_REPORT_COLUMNS: List[str] = [
    'Agent ID',
    'Agent Name',
    'Team',
    'Date',
    'Total Calls',
    'Total Call Time (minutes)',
    'Total Sales',
    'Average Call Time (minutes)',
]


def _cell_text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def export_to_csv(rows: Sequence[Mapping[str, Any]]) -> str:
    """
    Render rows as CSV text.

    Returns an empty string for no rows. Keys missing from a later row
    render as empty cells.
    """
    if not rows:
        return ''

    headers = list(rows[0].keys())
    lines = [','.join(headers)]
    for row in rows:
        lines.append(','.join(_cell_text(row.get(header)) for header in headers))
    return '\n'.join(lines)


def build_daily_report(snapshot: ReferenceSnapshot, day: date) -> List[Dict[str, Any]]:
    """One report row per roster agent for the date, with display column names."""
    team_names = {team.id: team.name for team in snapshot.teams}
    agent_teams = {agent.id: agent.team_id for agent in snapshot.agents}

    report = []
    for summary in daily_summaries(snapshot, day):
        report.append({
            'Agent ID': summary.agent_id,
            'Agent Name': summary.agent_name,
            'Team': team_names.get(agent_teams.get(summary.agent_id), NO_TEAM_NAME),
            'Date': day.isoformat(),
            'Total Calls': summary.total_calls,
            'Total Call Time (minutes)': summary.total_call_time,
            'Total Sales': summary.total_sales,
            'Average Call Time (minutes)': f"{summary.average_call_time:.2f}",
        })
    return report


def build_raw_export(snapshot: ReferenceSnapshot, date_filter: DateFilter) -> List[Dict[str, Any]]:
    """The raw call records inside the filter, one dict per record."""
    return [
        record.model_dump(mode='json')
        for record in snapshot.records
        if date_filter.contains(record.date)
    ]


def format_time(minutes: float) -> str:
    """
    Minutes as "Xh Ym", or "Ym" under an hour.

    >>> format_time(65)
    '1h 5m'
    >>> format_time(45)
    '45m'
    """
    hours = int(minutes // 60)
    mins = int(math.floor(minutes % 60 + 0.5))
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def format_hour(hour: int) -> str:
    """24-hour clock hour as "9:00 AM" / "2:00 PM"."""
    period = 'PM' if hour >= 12 else 'AM'
    if hour > 12:
        display = hour - 12
    elif hour == 0:
        display = 12
    else:
        display = hour
    return f"{display}:00 {period}"


def format_hour_range(hour: int) -> str:
    """Bucket label used by the agent grid, e.g. 9 -> "09-10"."""
    return f"{hour:02d}-{hour + 1:02d}"
