"""
CSV Import Service

Wires the pipeline stages together for the three import paths:

- Manual call-data upload (header-resolved CSV, clamped hours, optional hour
  selection)
- Email call-data import (fixed-position CSV, hour taken from the subject)
- Agent roster import (creates missing teams, then the agents)

Pipeline for call data:
1. Parse the CSV text into RawCallRow values
2. Normalize rows against the roster (unknown agents become RowErrors)
3. Restrict to the selected hours, if any
4. Write the batch with one upsert

Failure modes:
- A missing required column raises MissingColumnError before anything is
  written.
- A failed write raises WriteError with the store's message; the batch is
  treated as failed as a whole.
- Everything else is per-row and comes back in ImportResult.errors.
"""

import logging
import uuid
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from callboard.models import (
    Agent,
    AgentImportResult,
    AgentImportRow,
    ImportResult,
    ImportSource,
    RowError,
    Team,
)
from callboard.services.csv_parser import (
    parse_agent_csv,
    parse_call_csv,
    parse_email_csv,
)
from callboard.services.hour_extraction import extract_hour_from_subject
from callboard.services.normalization import (
    ClampedHour,
    FixedHour,
    normalize_call_rows,
)
from callboard.services.upsert import CallRecordRepository, restrict_to_hours

logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_ERROR_PREVIEW: int = 3

TEAM_COLORS: List[str] = [
    '#3b82f6',
    '#10b981',
    '#f59e0b',
    '#ef4444',
    '#8b5cf6',
    '#06b6d4',
    '#84cc16',
    '#f97316',
]


# =============================================================================
# Messages
# =============================================================================


def format_import_message(
    records_imported: int,
    errors: Sequence[RowError],
    preview: int = DEFAULT_ERROR_PREVIEW,
) -> str:
    """
    Build the import summary line.

    Example:
        "Successfully imported 10 records. Skipped 5 rows:
        Agent "A" not found, Agent "B" not found, Agent "C" not found and 2 more"
    """
    message = f"Successfully imported {records_imported} records"
    if errors:
        shown = ', '.join(error.message for error in errors[:preview])
        message += f". Skipped {len(errors)} rows: {shown}"
        if len(errors) > preview:
            message += f" and {len(errors) - preview} more"
    return message


# =============================================================================
# Call Data Imports
# =============================================================================


async def import_call_csv(
    csv_text: str,
    agents: Sequence[Agent],
    repository: CallRecordRepository,
    record_date: date,
    hours: Optional[Iterable[int]] = None,
    now: Optional[datetime] = None,
    error_preview: int = DEFAULT_ERROR_PREVIEW,
) -> ImportResult:
    """
    Import a manually uploaded call-data CSV.

    Args:
        csv_text: Raw file contents.
        agents: Current roster used to resolve agent names.
        repository: Store for the single batched write.
        record_date: Date every record is written under.
        hours: Optional hour selection; records in other hours are discarded
            before the write.
        now: Clock used when a row has no hour column. Defaults to now.
        error_preview: Row errors spelled out in the summary message.

    Returns:
        ImportResult. success is False when nothing was written.

    Raises:
        MissingColumnError: The header lacks the agent-name or calls column.
        WriteError: The store rejected the batch.
    """
    rows = parse_call_csv(csv_text)
    normalized = normalize_call_rows(
        rows,
        agents,
        record_date,
        ClampedHour(now or datetime.now()),
    )
    batch = restrict_to_hours(normalized.records, hours)

    imported = await repository.upsert_call_records(batch) if batch else 0

    logger.info(
        f"Manual import for {record_date}: {len(rows)} rows, "
        f"{imported} records written, {len(normalized.errors)} skipped"
    )

    return ImportResult(
        success=imported > 0,
        source=ImportSource.MANUAL_CSV,
        rows_processed=len(rows),
        records_imported=imported,
        rows_skipped=len(normalized.errors),
        errors=normalized.errors,
        message=format_import_message(imported, normalized.errors, error_preview),
    )


async def import_email_csv(
    csv_text: str,
    subject: str,
    agents: Sequence[Agent],
    repository: CallRecordRepository,
    record_date: date,
    error_preview: int = DEFAULT_ERROR_PREVIEW,
) -> ImportResult:
    """
    Import a CSV attachment from an hourly report email.

    The hour comes from the subject line. When no business hour can be
    extracted the email is skipped as a whole: nothing is parsed or written
    and the result carries a skipped_reason.

    Raises:
        WriteError: The store rejected the batch.
    """
    hour = extract_hour_from_subject(subject)
    if hour is None:
        logger.info(f'Skipping email "{subject}": no valid hour found')
        return ImportResult(
            success=False,
            source=ImportSource.EMAIL_CSV,
            message=f'No valid hour found in subject "{subject}"',
            skipped_reason='no_valid_hour',
        )

    rows = parse_email_csv(csv_text)
    normalized = normalize_call_rows(rows, agents, record_date, FixedHour(hour))

    imported = 0
    if normalized.records:
        imported = await repository.upsert_call_records(normalized.records)

    logger.info(
        f'Email import "{subject}" (hour {hour}): {imported} records written, '
        f'{len(normalized.errors)} skipped'
    )

    return ImportResult(
        success=imported > 0,
        source=ImportSource.EMAIL_CSV,
        rows_processed=len(rows),
        records_imported=imported,
        rows_skipped=len(normalized.errors),
        errors=normalized.errors,
        message=format_import_message(imported, normalized.errors, error_preview),
        hour=hour,
    )


# =============================================================================
# Agent Roster Import
# =============================================================================


def plan_agent_import(
    rows: Sequence[AgentImportRow],
    teams: Sequence[Team],
) -> Tuple[List[Team], List[Agent]]:
    """
    Work out which teams and agents an agent import creates.

    Team names match exactly. Unknown team names become new teams, in first
    appearance order, coloured from TEAM_COLORS in rotation. Every row
    becomes a new active agent.

    Returns:
        (new_teams, new_agents)
    """
    teams_by_name: Dict[str, Team] = {}
    for team in teams:
        teams_by_name.setdefault(team.name, team)

    new_teams: List[Team] = []
    for row in rows:
        if row.team_name in teams_by_name:
            continue
        team = Team(
            id=str(uuid.uuid4()),
            name=row.team_name,
            color=TEAM_COLORS[len(new_teams) % len(TEAM_COLORS)],
        )
        teams_by_name[team.name] = team
        new_teams.append(team)

    new_agents = [
        Agent(
            id=str(uuid.uuid4()),
            name=row.name,
            email=row.email,
            team_id=teams_by_name[row.team_name].id,
            is_active=True,
        )
        for row in rows
    ]
    return new_teams, new_agents


async def import_agent_csv(
    csv_text: str,
    repository: CallRecordRepository,
    teams: Sequence[Team],
) -> AgentImportResult:
    """
    Import an agent roster CSV (name, email, team columns in any order).

    Teams are written before agents so every agent's team exists.

    Raises:
        MissingColumnError: The header lacks a name, email or team column.
        WriteError: The store rejected the teams or the agents.
    """
    rows = parse_agent_csv(csv_text)
    if not rows:
        return AgentImportResult(message="No valid agent rows found")

    new_teams, new_agents = plan_agent_import(rows, teams)

    await repository.create_teams(new_teams)
    await repository.create_agents(new_agents)

    logger.info(f"Agent import: {len(new_agents)} agents, {len(new_teams)} new teams")

    return AgentImportResult(
        agents_created=len(new_agents),
        teams_created=len(new_teams),
        message=f"Successfully imported {len(new_agents)} agents and {len(new_teams)} new teams",
    )
