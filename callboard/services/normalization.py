"""
Record Normalizer & Validator

Converts RawCallRow values (already resolved to canonical fields by the CSV
parser) into CallRecord candidates:

- Agent resolution by case-insensitive, whitespace-trimmed exact name match.
  Unknown agents become RowError entries; the row is dropped and processing
  continues.
- Numeric coercion is parse-or-zero and never raises.
- Talk time arrives in seconds and is stored in whole minutes, rounded to the
  nearest minute (90s -> 2, 89s -> 1).
- The hour comes from an HourPolicy. Manual uploads use ClampedHour (parse
  the hour column or take the current wall-clock hour, then clamp into
  8..17). Email imports use FixedHour, built from a subject hour that the
  extractor already accepted.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from callboard.models import (
    BUSINESS_HOUR_MAX,
    BUSINESS_HOUR_MIN,
    Agent,
    CallRecord,
    RawCallRow,
    RowError,
)

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


# =============================================================================
# Coercion Helpers
# =============================================================================


def parse_int_or_zero(value: Optional[str]) -> int:
    """
    Parse the leading integer of a value, falling back to 0.

    "12" -> 12, " 7 " -> 7, "3.9" -> 3, "12abc" -> 12, "abc" -> 0, None -> 0.
    """
    if value is None:
        return 0
    match = _LEADING_INT.match(str(value))
    if not match:
        return 0
    return int(match.group(1))


def parse_count(value: Optional[str]) -> int:
    """parse_int_or_zero, with negative counts floored at 0."""
    return max(0, parse_int_or_zero(value))


def seconds_to_minutes(seconds: int) -> int:
    """Convert seconds to whole minutes, rounding half up."""
    if seconds <= 0:
        return 0
    return (seconds + 30) // 60


def clamp_hour(hour: int) -> int:
    return max(BUSINESS_HOUR_MIN, min(BUSINESS_HOUR_MAX, hour))


def resolve_manual_hour(raw_hour: Optional[str], now: datetime) -> int:
    """
    Hour policy for manual uploads: parse if present, else the current hour,
    then clamp into the business day.
    """
    hour = parse_int_or_zero(raw_hour) if raw_hour is not None else now.hour
    return clamp_hour(hour)


# =============================================================================
# Hour Policies
# =============================================================================


class HourPolicy:
    """Decides which hourly bucket a parsed row lands in."""

    def resolve(self, raw_hour: Optional[str]) -> int:
        raise NotImplementedError


@dataclass(frozen=True)
class FixedHour(HourPolicy):
    """Every row gets the same hour, e.g. the hour parsed from an email subject."""
    hour: int

    def __post_init__(self) -> None:
        if not BUSINESS_HOUR_MIN <= self.hour <= BUSINESS_HOUR_MAX:
            raise ValueError(
                f"Hour {self.hour} is outside business hours "
                f"{BUSINESS_HOUR_MIN}-{BUSINESS_HOUR_MAX}"
            )

    def resolve(self, raw_hour: Optional[str]) -> int:
        return self.hour


@dataclass(frozen=True)
class ClampedHour(HourPolicy):
    """Manual-upload policy: row hour or current hour, clamped into 8..17."""
    now: datetime

    def resolve(self, raw_hour: Optional[str]) -> int:
        return resolve_manual_hour(raw_hour, self.now)


# =============================================================================
# Agent Resolution
# =============================================================================


def _name_key(name: str) -> str:
    return name.strip().lower()


def build_agent_index(agents: Sequence[Agent]) -> Dict[str, Agent]:
    """Name-key lookup table; the first roster entry wins on duplicate names."""
    index: Dict[str, Agent] = {}
    for agent in agents:
        index.setdefault(_name_key(agent.name), agent)
    return index


def find_agent_by_name(name: str, agents: Sequence[Agent]) -> Optional[Agent]:
    return build_agent_index(agents).get(_name_key(name))


# =============================================================================
# Normalization
# =============================================================================


@dataclass
class NormalizationResult:
    """Validated records plus the row errors met along the way."""
    records: List[CallRecord] = field(default_factory=list)
    errors: List[RowError] = field(default_factory=list)

    @property
    def error_messages(self) -> List[str]:
        return [error.message for error in self.errors]


def normalize_call_rows(
    rows: Sequence[RawCallRow],
    agents: Sequence[Agent],
    record_date: date,
    hour_policy: HourPolicy,
) -> NormalizationResult:
    """
    Convert raw rows into CallRecord candidates for one date.

    Args:
        rows: Parsed rows in file order.
        agents: Current roster.
        record_date: Date every record is written under.
        hour_policy: FixedHour for email imports, ClampedHour for manual ones.

    Returns:
        NormalizationResult with records in input order and one RowError per
        dropped row.
    """
    index = build_agent_index(agents)
    result = NormalizationResult()

    for row in rows:
        agent = index.get(_name_key(row.agent_name))
        if agent is None:
            result.errors.append(RowError(
                line_number=row.line_number,
                agent_name=row.agent_name,
                message=f'Agent "{row.agent_name}" not found',
            ))
            continue

        result.records.append(CallRecord(
            agent_id=agent.id,
            date=record_date,
            hour=hour_policy.resolve(row.hour),
            calls_made=parse_count(row.calls),
            total_call_time=seconds_to_minutes(parse_count(row.seconds)),
            sales_made=parse_count(row.sales),
        ))

    if result.errors:
        logger.warning(
            f"Normalization dropped {len(result.errors)} of {len(rows)} rows "
            f"(first: {result.errors[0].message})"
        )

    return result
