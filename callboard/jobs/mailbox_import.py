"""
Mailbox Import Job for Callboard.

Pulls hourly report emails from a mailbox and imports their CSV attachments
as call data for one date. The mailbox itself (OAuth, tokens, transport) lives
behind the MailboxSession protocol; this job only decides what to do with each
unread message.

Per unread message:
1. Extract the business hour from the subject. No hour: skip, leave unread.
2. Pick CSV attachments (name ends in .csv, or content type mentions csv or
   text/plain). None: skip, leave unread.
3. Download the first CSV attachment and import it for that hour.
4. Mark the message read.

A failure on one message is recorded in the run's error list and the run moves
on to the next message. Only the most recent errors are kept.

Scheduling is external: whatever polls the mailbox calls run_mailbox_import.

Usage:
    from callboard.jobs.mailbox_import import run_mailbox_import

    stats = await run_mailbox_import(session, agents, repository, date.today())
"""

import logging
from datetime import date, datetime
from typing import List, Optional, Protocol, Sequence

from pydantic import BaseModel, ConfigDict

from callboard.models import Agent, MailboxImportStats
from callboard.services.hour_extraction import extract_hour_from_subject
from callboard.services.ingestion import import_email_csv
from callboard.services.upsert import CallRecordRepository

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_ERROR_HISTORY = 20

# Errors carried over from the previous run before this run's errors
CARRIED_ERRORS = 10


# =============================================================================
# Mailbox Interface
# =============================================================================


class MailMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    subject: str


class MailAttachment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: Optional[str] = None
    content_type: Optional[str] = None

    @property
    def is_csv(self) -> bool:
        name = (self.name or '').lower()
        content_type = self.content_type or ''
        return (
            name.endswith('.csv')
            or 'csv' in content_type
            or 'text/plain' in content_type
        )


class MailboxSession(Protocol):
    """Connected mailbox. Implementations handle auth and transport."""

    async def list_unread(self) -> List[MailMessage]:
        ...

    async def list_attachments(self, message_id: str) -> List[MailAttachment]:
        ...

    async def download_attachment(self, message_id: str, attachment_id: str) -> str:
        ...

    async def mark_read(self, message_id: str) -> None:
        ...


# =============================================================================
# Job
# =============================================================================


async def _import_message(
    session: MailboxSession,
    message: MailMessage,
    agents: Sequence[Agent],
    repository: CallRecordRepository,
    record_date: date,
) -> Optional[int]:
    """Import one message. Returns records written, or None when skipped."""
    if extract_hour_from_subject(message.subject) is None:
        logger.info(f'Skipping email "{message.subject}": no valid hour found')
        return None

    attachments = await session.list_attachments(message.id)
    csv_attachments = [attachment for attachment in attachments if attachment.is_csv]
    if not csv_attachments:
        logger.info(f'No CSV attachments found in email "{message.subject}"')
        return None

    csv_text = await session.download_attachment(message.id, csv_attachments[0].id)
    result = await import_email_csv(csv_text, message.subject, agents, repository, record_date)

    await session.mark_read(message.id)
    return result.records_imported


async def run_mailbox_import(
    session: MailboxSession,
    agents: Sequence[Agent],
    repository: CallRecordRepository,
    record_date: date,
    previous: Optional[MailboxImportStats] = None,
    error_history: int = DEFAULT_ERROR_HISTORY,
) -> MailboxImportStats:
    """
    Process every unread message once.

    Args:
        session: Connected mailbox.
        agents: Roster used to resolve agent names.
        repository: Store for the upserts.
        record_date: Date the imported records are written under.
        previous: Stats from earlier runs; counters accumulate onto them.
        error_history: Maximum number of error strings kept.

    Returns:
        MailboxImportStats with cumulative counters and recent errors.
    """
    previous = previous or MailboxImportStats()
    processed = 0
    skipped = 0
    records = 0
    errors: List[str] = []

    try:
        messages = await session.list_unread()
    except Exception as e:
        logger.exception("Failed to list unread emails")
        return MailboxImportStats(
            emails_processed=previous.emails_processed,
            emails_skipped=previous.emails_skipped,
            records_imported=previous.records_imported,
            errors=(previous.errors + [f"Failed to check emails: {e}"])[-error_history:],
            last_check=datetime.now(),
        )

    for message in messages:
        try:
            imported = await _import_message(session, message, agents, repository, record_date)
        except Exception as e:
            error = f'Error processing email "{message.subject}": {e}'
            logger.error(error)
            errors.append(error)
            continue

        if imported is None:
            skipped += 1
        else:
            processed += 1
            records += imported

    logger.info(
        f"Mailbox run: {processed} processed, {skipped} skipped, "
        f"{records} records, {len(errors)} errors"
    )

    return MailboxImportStats(
        emails_processed=previous.emails_processed + processed,
        emails_skipped=previous.emails_skipped + skipped,
        records_imported=previous.records_imported + records,
        errors=(previous.errors[-CARRIED_ERRORS:] + errors)[-error_history:],
        last_check=datetime.now(),
    )
