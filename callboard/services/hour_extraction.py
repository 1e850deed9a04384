"""
Hour extraction from email subjects.

Hourly report emails carry the hour they cover somewhere in the subject
("Hour 9", "2 PM", "9:00", "Time 14", "9 o'clock"). The extractor returns the
business hour or None; a None means the whole email is skipped. Out-of-range
hours are rejected, never clamped.
"""

import re
from typing import List, Optional, Pattern

from callboard.models import BUSINESS_HOUR_MAX, BUSINESS_HOUR_MIN

# Tried in order; first pattern yielding an in-range hour wins
SUBJECT_HOUR_PATTERNS: List[Pattern[str]] = [
    re.compile(r"hour\s*(\d{1,2})", re.IGNORECASE),
    re.compile(r"^(\d{1,2})$"),
    re.compile(r"(\d{1,2})\s*(am|pm)", re.IGNORECASE),
    re.compile(r"(\d{1,2}):00"),
    re.compile(r"time\s*(\d{1,2})", re.IGNORECASE),
    re.compile(r"(\d{1,2})\s*o'?clock", re.IGNORECASE),
]


def _apply_meridiem(hour: int, subject_lower: str) -> int:
    if 'pm' in subject_lower and hour < 12:
        return hour + 12
    if 'am' in subject_lower and hour == 12:
        return 0
    return hour


def extract_hour_from_subject(subject: Optional[str]) -> Optional[int]:
    """
    Extract a business hour (8..17) from an email subject.

    The am/pm adjustment looks at the whole subject, not just the matched
    text: any "pm" moves hours below 12 into the afternoon and any "am" turns
    12 into 0.

    Examples:
        >>> extract_hour_from_subject("Hour 9")
        9
        >>> extract_hour_from_subject("2 PM")
        14
        >>> extract_hour_from_subject("Hour 20") is None
        True
    """
    if not subject:
        return None

    subject_lower = subject.lower()

    for pattern in SUBJECT_HOUR_PATTERNS:
        match = pattern.search(subject)
        if not match:
            continue
        hour = _apply_meridiem(int(match.group(1)), subject_lower)
        if BUSINESS_HOUR_MIN <= hour <= BUSINESS_HOUR_MAX:
            return hour

    return None
