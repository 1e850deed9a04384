"""
CSV Parser & Column Resolver

Turns raw CSV text into typed rows. Two modes are supported:

Header-resolved mode (manual uploads):
- Line 1 is the header. Each header is lower-cased and trimmed, then every
  semantic field resolves to the FIRST header (in file order) whose text
  satisfies that field's rule. No scoring beyond first match.
- A required field that cannot be resolved raises MissingColumnError naming
  every unresolved field; optional fields that do not resolve are ignored.

Fixed-position mode (email attachments):
- Header text is ignored. Column B (index 1) is the agent name, E (4) the
  call count and F (5) the talk time in seconds.
- Line 1 is treated as a header, and skipped, only when it contains "agent".

Field splitting in both modes is comma-delimited with double-quote toggling:
a '"' flips the in-quotes state and commas inside quotes are literal. There is
no backslash or doubled-quote escaping.

Input with fewer than two lines yields an empty result, never an error.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from callboard.core.exceptions import MissingColumnError
from callboard.models import AgentImportRow, RawCallRow

logger = logging.getLogger(__name__)


# =============================================================================
# Column Rules
# =============================================================================


@dataclass(frozen=True)
class ColumnRule:
    """
    A semantic field and the predicate that recognises its header.

    Attributes:
        field: Canonical field name the column resolves to.
        matches: Predicate over a lower-cased, trimmed header.
        required: Whether failing to resolve aborts the import.
    """
    field: str
    matches: Callable[[str], bool]
    required: bool = True


AGENT_IMPORT_RULES: List[ColumnRule] = [
    ColumnRule('name', lambda h: 'name' in h),
    ColumnRule('email', lambda h: 'email' in h),
    ColumnRule('team', lambda h: 'team' in h),
]

CALL_IMPORT_RULES: List[ColumnRule] = [
    ColumnRule('agent_name', lambda h: ('agent' in h and 'name' in h) or h == 'name' or h == 'agent'),
    ColumnRule('calls', lambda h: 'call' in h),
    ColumnRule('seconds', lambda h: 'second' in h or 'time' in h, required=False),
    ColumnRule('sales', lambda h: 'sale' in h or 'conversion' in h, required=False),
    ColumnRule('hour', lambda h: 'hour' in h or h == 'time', required=False),
]

# Fixed-position layout of email attachments (0-based)
EMAIL_AGENT_NAME_INDEX: int = 1
EMAIL_CALLS_INDEX: int = 4
EMAIL_SECONDS_INDEX: int = 5


# =============================================================================
# Tokenizing
# =============================================================================


def split_lines(text: str) -> List[str]:
    """Trim the whole payload and split it into lines, dropping trailing CRs."""
    if not text:
        return []
    stripped = text.strip()
    if not stripped:
        return []
    return [line.rstrip('\r') for line in stripped.split('\n')]


def split_csv_line(line: str) -> List[str]:
    """
    Split one CSV line on commas, honouring double-quoted sections.

    Quote characters toggle the in-quotes state and are not kept. The last
    field is always emitted, so "a," yields ['a', ''].

    Example:
        >>> split_csv_line('1,"Smith, John",5')
        ['1', 'Smith, John', '5']
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == ',' and not in_quotes:
            fields.append(''.join(current))
            current = []
        else:
            current.append(char)

    fields.append(''.join(current))
    return fields


def _cell(values: Sequence[str], index: Optional[int]) -> Optional[str]:
    # Absent column, short row and blank value all collapse to None
    if index is None or index >= len(values):
        return None
    value = values[index].strip()
    return value or None


# =============================================================================
# Header Resolution
# =============================================================================


def resolve_columns(
    headers: Sequence[str],
    rules: Sequence[ColumnRule],
) -> Dict[str, int]:
    """
    Map each semantic field to the index of the first header that matches it.

    Args:
        headers: Raw header cells from line 1.
        rules: Column rules to resolve, in any order.

    Returns:
        Dict of field name -> column index. Optional fields that did not
        resolve are absent.

    Raises:
        MissingColumnError: If any required field has no matching header. All
            unresolved required fields are reported together.
    """
    normalized = [header.strip().lower() for header in headers]
    resolved: Dict[str, int] = {}
    missing: List[str] = []

    for rule in rules:
        index = next((i for i, header in enumerate(normalized) if rule.matches(header)), None)
        if index is not None:
            resolved[rule.field] = index
        elif rule.required:
            missing.append(rule.field)

    if missing:
        raise MissingColumnError(missing)

    return resolved


# =============================================================================
# Header-Resolved Parsers
# =============================================================================


def parse_agent_csv(text: str) -> List[AgentImportRow]:
    """
    Parse an agent roster CSV.

    The header must contain columns whose text includes "name", "email" and
    "team", in any order. Rows missing any of the three values are dropped.

    Raises:
        MissingColumnError: If the header lacks one of the three columns.
    """
    lines = split_lines(text)
    if len(lines) < 2:
        return []

    columns = resolve_columns(split_csv_line(lines[0]), AGENT_IMPORT_RULES)

    rows: List[AgentImportRow] = []
    for line in lines[1:]:
        values = split_csv_line(line)
        name = _cell(values, columns['name'])
        email = _cell(values, columns['email'])
        team_name = _cell(values, columns['team'])
        if name and email and team_name:
            rows.append(AgentImportRow(name=name, email=email, team_name=team_name))

    logger.info(f"Parsed agent CSV: {len(rows)} of {len(lines) - 1} rows usable")
    return rows


def parse_call_csv(text: str) -> List[RawCallRow]:
    """
    Parse a manually uploaded call-data CSV into canonical raw rows.

    The agent-name and calls columns are required; seconds, sales and hour are
    resolved independently when present. Unrecognised columns are ignored and
    rows with a blank agent name are skipped.

    Raises:
        MissingColumnError: If the agent-name or calls column is missing.
    """
    lines = split_lines(text)
    if len(lines) < 2:
        return []

    columns = resolve_columns(split_csv_line(lines[0]), CALL_IMPORT_RULES)

    rows: List[RawCallRow] = []
    for offset, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        values = split_csv_line(line)
        agent_name = _cell(values, columns['agent_name'])
        if not agent_name:
            continue
        rows.append(RawCallRow(
            line_number=offset,
            agent_name=agent_name,
            calls=_cell(values, columns['calls']),
            seconds=_cell(values, columns.get('seconds')),
            sales=_cell(values, columns.get('sales')),
            hour=_cell(values, columns.get('hour')),
        ))

    logger.info(f"Parsed call CSV: {len(rows)} rows, columns resolved: {sorted(columns)}")
    return rows


# =============================================================================
# Fixed-Position Parser
# =============================================================================


def has_header_line(first_line: str) -> bool:
    return 'agent' in first_line.lower()


def parse_email_csv(text: str) -> List[RawCallRow]:
    """
    Parse an email attachment by fixed column positions (B, E, F).

    Rows without an agent name or a call count are skipped.
    """
    lines = split_lines(text)
    if len(lines) < 2:
        return []

    start = 1 if has_header_line(lines[0]) else 0

    rows: List[RawCallRow] = []
    for offset, line in enumerate(lines[start:], start=start + 1):
        if not line.strip():
            continue
        values = split_csv_line(line.strip())
        agent_name = _cell(values, EMAIL_AGENT_NAME_INDEX)
        calls = _cell(values, EMAIL_CALLS_INDEX)
        if not agent_name or not calls:
            continue
        rows.append(RawCallRow(
            line_number=offset,
            agent_name=agent_name,
            calls=calls,
            seconds=_cell(values, EMAIL_SECONDS_INDEX),
        ))

    logger.info(f"Parsed email CSV: {len(rows)} rows (header {'skipped' if start else 'absent'})")
    return rows
