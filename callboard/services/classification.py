"""
Performance Classifier

Maps raw measures to display tiers for the agent x hour grid.

Call-time tier (absolute):
- Measured against a per-hour talk-time target (40 minutes by default)
- ratio = minutes / target
- 0 minutes is NO_DATA, never WELL_BELOW_TARGET
- ratio >= 1.0 MEETS_TARGET, >= 0.75 NEAR_TARGET, >= 0.5 BELOW_TARGET,
  anything lower WELL_BELOW_TARGET

Calls / sales tier (relative to a peer cohort):
- Cohort is the same hour across agents for the grid, or the agents shown
  for a daily report
- min and max are taken over strictly positive peers only
- ratio = (value - min) / (max - min)
- a zero value is NO_DATA; all positive peers equal is FLAT
- ratio >= 0.8 TOP, >= 0.6 HIGH, >= 0.4 MID, else LOW

Thresholds are inclusive on the lower bound, so 40 minutes against a 40
minute target meets it and 39 does not.
"""

from typing import Dict, List, Sequence, Tuple

from callboard.models.enums import CallTimeTier, RelativeTier
from callboard.models.schemas import AgentDailySummary, AgentHourCell


# =============================================================================
# Thresholds
# =============================================================================

DEFAULT_CALL_TIME_TARGET: int = 40

# (lower bound on ratio, tier), checked top-down
CALL_TIME_THRESHOLDS: List[Tuple[float, CallTimeTier]] = [
    (1.0, CallTimeTier.MEETS_TARGET),
    (0.75, CallTimeTier.NEAR_TARGET),
    (0.5, CallTimeTier.BELOW_TARGET),
]

RELATIVE_THRESHOLDS: List[Tuple[float, RelativeTier]] = [
    (0.8, RelativeTier.TOP),
    (0.6, RelativeTier.HIGH),
    (0.4, RelativeTier.MID),
]


# =============================================================================
# Classifiers
# =============================================================================


def classify_call_time(minutes: int, target: int = DEFAULT_CALL_TIME_TARGET) -> CallTimeTier:
    """
    Classify talk time in one hourly bucket against the target.

    Args:
        minutes: Talk time in the bucket.
        target: Minutes per hour that meet target. Must be positive.

    Returns:
        CallTimeTier for the bucket.

    Examples:
        >>> classify_call_time(40)
        <CallTimeTier.MEETS_TARGET: 'meets_target'>
        >>> classify_call_time(39)
        <CallTimeTier.NEAR_TARGET: 'near_target'>
    """
    if target <= 0:
        raise ValueError(f"Call-time target must be positive, got {target}")
    if minutes <= 0:
        return CallTimeTier.NO_DATA

    ratio = minutes / target
    for lower_bound, tier in CALL_TIME_THRESHOLDS:
        if ratio >= lower_bound:
            return tier
    return CallTimeTier.WELL_BELOW_TARGET


def classify_relative(value: int, peers: Sequence[int]) -> RelativeTier:
    """
    Classify a value against its peer cohort.

    The value is always part of its own cohort, so it is considered even when
    the caller leaves it out of ``peers``.
    """
    if value <= 0:
        return RelativeTier.NO_DATA

    positive = [peer for peer in peers if peer > 0]
    positive.append(value)
    low, high = min(positive), max(positive)

    if high == low:
        return RelativeTier.FLAT

    ratio = (value - low) / (high - low)
    for lower_bound, tier in RELATIVE_THRESHOLDS:
        if ratio >= lower_bound:
            return tier
    return RelativeTier.LOW


def classify_matrix(
    matrix: Sequence[Sequence[AgentHourCell]],
    target: int = DEFAULT_CALL_TIME_TARGET,
) -> List[List[AgentHourCell]]:
    """
    Attach tiers to every cell of an agent x hour grid.

    Calls and sales are ranked against the other agents' cells for the same
    hour. Returns new cells; the input grid is left untouched.
    """
    calls_by_hour: Dict[int, List[int]] = {}
    sales_by_hour: Dict[int, List[int]] = {}
    for row in matrix:
        for cell in row:
            calls_by_hour.setdefault(cell.hour, []).append(cell.calls_made)
            sales_by_hour.setdefault(cell.hour, []).append(cell.sales_made)

    return [
        [
            cell.model_copy(update={
                'call_time_tier': classify_call_time(cell.total_call_time, target),
                'calls_tier': classify_relative(cell.calls_made, calls_by_hour[cell.hour]),
                'sales_tier': classify_relative(cell.sales_made, sales_by_hour[cell.hour]),
            })
            for cell in row
        ]
        for row in matrix
    ]


def classify_daily(
    summaries: Sequence[AgentDailySummary],
    target: int = DEFAULT_CALL_TIME_TARGET,
) -> List[AgentDailySummary]:
    """
    Attach tiers to a list of same-day agent totals.

    The cohort for calls and sales is the daily totals of the agents passed
    in, so a truncated top-N list is ranked only among itself. Call time is
    held to the same target as a single hour. Returns new summaries in the
    input order.
    """
    calls = [summary.total_calls for summary in summaries]
    sales = [summary.total_sales for summary in summaries]

    return [
        summary.model_copy(update={
            'call_time_tier': classify_call_time(summary.total_call_time, target),
            'calls_tier': classify_relative(summary.total_calls, calls),
            'sales_tier': classify_relative(summary.total_sales, sales),
        })
        for summary in summaries
    ]
