"""
Error classes for the Callboard import pipeline.

Hierarchy:
    CallboardError
    ├── MissingColumnError   structural; aborts an import before any write
    └── WriteError           the store rejected a batch; message kept verbatim

Row-level problems (unknown agent, unparseable numbers) are not exceptions:
they are collected as RowError values and reported alongside the records
that did import.
"""

from typing import Any, Dict, List, Optional, Sequence


class CallboardError(Exception):
    """Base exception for all Callboard errors."""

    def __init__(self, message: str, code: str = "UNKNOWN", details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class MissingColumnError(CallboardError):
    """A required semantic column could not be resolved from the CSV header."""

    def __init__(self, fields: Sequence[str]):
        self.fields: List[str] = list(fields)
        names = ", ".join(self.fields)
        super().__init__(
            f"CSV is missing required column(s): {names}",
            code="MISSING_COLUMN",
            details={"fields": self.fields},
        )


class WriteError(CallboardError):
    """The persistent store rejected an upsert batch."""

    def __init__(self, store_message: str, batch_size: int = 0):
        self.store_message = store_message
        self.batch_size = batch_size
        super().__init__(
            store_message,
            code="WRITE_FAILED",
            details={"batch_size": batch_size},
        )
