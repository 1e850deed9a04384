"""
Background jobs for Callboard.

- mailbox_import.py: imports CSV attachments from hourly report emails

Jobs are plain async functions. Whatever schedules them (cron, a worker, a
polling loop) is outside this package; each run is safe to repeat because
call-data writes replace on (agent_id, date, hour).

Usage:
    from callboard.jobs import run_mailbox_import

    stats = await run_mailbox_import(session, agents, repository, date.today())
"""

from callboard.jobs.mailbox_import import (
    MailAttachment,
    MailboxSession,
    MailMessage,
    run_mailbox_import,
)

__all__ = [
    'MailAttachment',
    'MailboxSession',
    'MailMessage',
    'run_mailbox_import',
]
