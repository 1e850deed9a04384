"""
FastAPI router module for CSV imports.

Implements:
- POST /imports/calls: manual call-data CSV upload
- POST /imports/email: CSV attachment from an hourly report email
- POST /imports/agents: agent roster CSV upload
- DELETE /imports/calls: bulk clear of all call data

CSV files are sent as text in a JSON body. Error mapping:
- MissingColumnError -> 400 with the missing fields
- WriteError -> 502 with the store's message
- anything else -> 500
"""

import logging
from datetime import date as DateType
from typing import List, Optional

from fastapi import APIRouter, Body, HTTPException
from pydantic import BaseModel, Field, field_validator

from callboard.core.dependencies import RepositoryDep, SettingsDep
from callboard.core.exceptions import MissingColumnError, WriteError
from callboard.models import (
    BUSINESS_HOUR_MAX,
    BUSINESS_HOUR_MIN,
    AgentImportResult,
    ImportResult,
)
from callboard.services.ingestion import (
    import_agent_csv,
    import_call_csv,
    import_email_csv,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request Models
# =============================================================================


class CallImportRequest(BaseModel):
    """Manual call-data upload."""
    csv_text: str = Field(..., description="Raw CSV file contents")
    date: Optional[DateType] = Field(default=None, description="Record date; defaults to today")
    hours: Optional[List[int]] = Field(
        default=None,
        description="Only import these hours; other hour buckets are left untouched",
    )

    @field_validator('hours')
    @classmethod
    def _check_hours(cls, hours: Optional[List[int]]) -> Optional[List[int]]:
        bad = [h for h in hours or [] if not BUSINESS_HOUR_MIN <= h <= BUSINESS_HOUR_MAX]
        if bad:
            raise ValueError(f"Hours outside {BUSINESS_HOUR_MIN}-{BUSINESS_HOUR_MAX}: {bad}")
        return hours or None


class EmailImportRequest(BaseModel):
    """A report email's subject and its CSV attachment."""
    csv_text: str
    subject: str
    date: Optional[DateType] = None


class AgentImportRequest(BaseModel):
    csv_text: str


class ClearResponse(BaseModel):
    cleared: bool = True


# =============================================================================
# Error Mapping
# =============================================================================


def _http_error(error: Exception, action: str) -> HTTPException:
    if isinstance(error, MissingColumnError):
        return HTTPException(
            status_code=400,
            detail={"message": error.message, "code": error.code, "fields": error.fields},
        )
    if isinstance(error, WriteError):
        return HTTPException(
            status_code=502,
            detail={"message": error.store_message, "code": error.code},
        )
    logger.exception(f"Error during {action}")
    return HTTPException(status_code=500, detail=f"Failed to {action}: {error}")


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/calls", response_model=ImportResult)
async def import_calls(
    repository: RepositoryDep,
    settings: SettingsDep,
    request: CallImportRequest = Body(...),
) -> ImportResult:
    """
    Import a manually uploaded call-data CSV.

    Header columns are matched by name in any order. Rows for unknown agents
    are skipped and listed in the result; the rest are written in one batch.
    """
    record_date = request.date or DateType.today()
    try:
        snapshot = await repository.fetch_snapshot(record_date, record_date)
        return await import_call_csv(
            request.csv_text,
            snapshot.agents,
            repository,
            record_date,
            hours=request.hours,
            error_preview=settings.import_error_preview,
        )
    except Exception as e:
        raise _http_error(e, "import call data")


@router.post("/email", response_model=ImportResult)
async def import_email(
    repository: RepositoryDep,
    settings: SettingsDep,
    request: EmailImportRequest = Body(...),
) -> ImportResult:
    """Import an email's CSV attachment under the hour named in its subject."""
    record_date = request.date or DateType.today()
    try:
        snapshot = await repository.fetch_snapshot(record_date, record_date)
        return await import_email_csv(
            request.csv_text,
            request.subject,
            snapshot.agents,
            repository,
            record_date,
            error_preview=settings.import_error_preview,
        )
    except Exception as e:
        raise _http_error(e, "import email data")


@router.post("/agents", response_model=AgentImportResult)
async def import_agents(
    repository: RepositoryDep,
    request: AgentImportRequest = Body(...),
) -> AgentImportResult:
    """Import an agent roster, creating any teams it names that do not exist yet."""
    try:
        teams = await repository.fetch_teams()
        return await import_agent_csv(request.csv_text, repository, teams)
    except Exception as e:
        raise _http_error(e, "import agents")


@router.delete("/calls", response_model=ClearResponse)
async def clear_calls(repository: RepositoryDep) -> ClearResponse:
    """Delete every call record. Agents, teams and campaigns are kept."""
    try:
        await repository.clear_call_records()
    except Exception as e:
        raise _http_error(e, "clear call data")
    return ClearResponse()
