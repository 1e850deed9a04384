"""
Enumeration definitions for the Callboard backend.

All enums inherit from both `str` and `Enum` so they serialize as plain strings
in Pydantic models and API responses.
"""

from enum import Enum


class CallTimeTier(str, Enum):
    """
    Absolute tier for an agent's talk time in one hourly bucket.

    Measured against the call-time target (40 minutes per hour by default):
    - meets_target: ratio >= 1.0
    - near_target: ratio >= 0.75
    - below_target: ratio >= 0.5
    - well_below_target: anything lower but non-zero
    - no_data: zero minutes recorded; never reported as well_below_target
    """
    MEETS_TARGET = "meets_target"
    NEAR_TARGET = "near_target"
    BELOW_TARGET = "below_target"
    WELL_BELOW_TARGET = "well_below_target"
    NO_DATA = "no_data"


class RelativeTier(str, Enum):
    """
    Tier for calls or sales relative to a peer cohort (same hour or same day).

    - top: normalized position >= 0.8
    - high: >= 0.6
    - mid: >= 0.4
    - low: below 0.4
    - flat: every positive peer has the same value
    - no_data: the value itself is zero
    """
    TOP = "top"
    HIGH = "high"
    MID = "mid"
    LOW = "low"
    FLAT = "flat"
    NO_DATA = "no_data"


class ImportSource(str, Enum):
    """Where a batch of call records came from."""
    MANUAL_CSV = "manual_csv"
    EMAIL_CSV = "email_csv"


class AggregationDimension(str, Enum):
    """Grouping dimension for a rollup."""
    AGENT = "agent"
    TEAM = "team"
    CAMPAIGN = "campaign"
    HOUR = "hour"
    DATE = "date"
