"""
Test Module for the CSV Parser & Column Resolver.

Covers:
- Line splitting and quote-toggling field splitting
- First-match header resolution in any column order
- MissingColumnError reporting every unresolved required field
- Agent-roster, call-data and fixed-position email parsing
"""

import pytest

from callboard.core.exceptions import MissingColumnError
from callboard.services.csv_parser import (
    AGENT_IMPORT_RULES,
    CALL_IMPORT_RULES,
    has_header_line,
    parse_agent_csv,
    parse_call_csv,
    parse_email_csv,
    resolve_columns,
    split_csv_line,
    split_lines,
)


# =============================================================================
# TEST CLASS: Tokenizing
# =============================================================================

class TestSplitLines:
    """Tests for payload-level line splitting."""

    def test_strips_carriage_returns(self):
        assert split_lines("a,b\r\nc,d\r\n") == ["a,b", "c,d"]

    def test_trims_surrounding_whitespace(self):
        assert split_lines("\n\n  a,b\nc,d  \n\n") == ["a,b", "c,d"]

    def test_empty_payload(self):
        assert split_lines("") == []
        assert split_lines("   \n  ") == []


class TestSplitCsvLine:
    """Tests for comma splitting with double-quote toggling."""

    def test_plain_fields(self):
        assert split_csv_line("a,b,c") == ["a", "b", "c"]

    def test_comma_inside_quotes_is_literal(self):
        assert split_csv_line('1,"Smith, John",5') == ["1", "Smith, John", "5"]

    def test_quotes_are_dropped(self):
        assert split_csv_line('"a","b"') == ["a", "b"]

    def test_trailing_comma_emits_empty_last_field(self):
        assert split_csv_line("a,") == ["a", ""]

    def test_empty_line_is_one_empty_field(self):
        assert split_csv_line("") == [""]

    def test_unbalanced_quote_swallows_rest_of_line(self):
        assert split_csv_line('a,"b,c') == ["a", "b,c"]


# =============================================================================
# TEST CLASS: Header Resolution
# =============================================================================

class TestResolveColumns:
    """Tests for first-match semantic column resolution."""

    def test_agent_rules_any_order(self):
        columns = resolve_columns(["Team", "Email Address", "Full Name"], AGENT_IMPORT_RULES)
        assert columns == {"name": 2, "email": 1, "team": 0}

    @pytest.mark.parametrize("headers", [
        ["Name", "Email", "Team"],
        ["Email", "Team", "Name"],
        ["Team", "Name", "Email"],
    ])
    def test_agent_rules_header_permutations(self, headers):
        columns = resolve_columns(headers, AGENT_IMPORT_RULES)
        assert headers[columns["name"]] == "Name"
        assert headers[columns["email"]] == "Email"
        assert headers[columns["team"]] == "Team"

    def test_headers_trimmed_and_lowercased(self):
        columns = resolve_columns(["  AGENT NAME ", " CALLS"], CALL_IMPORT_RULES)
        assert columns == {"agent_name": 0, "calls": 1}

    def test_first_matching_header_wins(self):
        columns = resolve_columns(["Name", "Team Name", "Email", "Team"], AGENT_IMPORT_RULES)
        assert columns["name"] == 0
        assert columns["team"] == 1

    @pytest.mark.parametrize("header", ["Agent Name", "agent_name", "Name", "Agent"])
    def test_agent_name_column_variants(self, header):
        columns = resolve_columns([header, "Calls"], CALL_IMPORT_RULES)
        assert columns["agent_name"] == 0

    def test_agent_id_is_not_an_agent_name(self):
        with pytest.raises(MissingColumnError) as exc_info:
            resolve_columns(["Agent ID", "Calls"], CALL_IMPORT_RULES)
        assert exc_info.value.fields == ["agent_name"]

    def test_optional_call_columns(self):
        columns = resolve_columns(
            ["Agent Name", "Calls", "Talk Seconds", "Conversions", "Hour"],
            CALL_IMPORT_RULES,
        )
        assert columns == {"agent_name": 0, "calls": 1, "seconds": 2, "sales": 3, "hour": 4}

    def test_time_header_feeds_both_seconds_and_hour(self):
        columns = resolve_columns(["Agent", "Calls", "Time"], CALL_IMPORT_RULES)
        assert columns["seconds"] == 2
        assert columns["hour"] == 2

    def test_optional_columns_absent(self):
        columns = resolve_columns(["Agent Name", "Calls"], CALL_IMPORT_RULES)
        assert "seconds" not in columns
        assert "sales" not in columns
        assert "hour" not in columns

    def test_missing_required_columns_all_reported(self):
        with pytest.raises(MissingColumnError) as exc_info:
            resolve_columns(["Name"], AGENT_IMPORT_RULES)
        assert exc_info.value.fields == ["email", "team"]
        assert exc_info.value.code == "MISSING_COLUMN"
        assert "email, team" in str(exc_info.value)


# =============================================================================
# TEST CLASS: Agent CSV
# =============================================================================

class TestParseAgentCsv:
    """Tests for roster CSV parsing."""

    def test_single_complete_row_kept(self):
        rows = parse_agent_csv("Name,Email,Team\nJohn Smith,john@x.com,Alpha")
        assert len(rows) == 1
        assert rows[0].name == "John Smith"
        assert rows[0].email == "john@x.com"
        assert rows[0].team_name == "Alpha"

    def test_row_with_blank_email_dropped(self):
        assert parse_agent_csv("Name,Email,Team\nJohn Smith,,Alpha") == []

    def test_whitespace_only_value_dropped(self):
        assert parse_agent_csv("Name,Email,Team\nJohn Smith,john@x.com,   ") == []

    def test_short_row_dropped(self):
        assert parse_agent_csv("Name,Email,Team\nJohn Smith") == []

    def test_header_only_is_empty(self):
        assert parse_agent_csv("Name,Email,Team") == []

    def test_missing_team_column_raises(self):
        with pytest.raises(MissingColumnError) as exc_info:
            parse_agent_csv("Name,Email\nJohn,john@x.com")
        assert exc_info.value.fields == ["team"]

    def test_quoted_name_with_comma(self):
        rows = parse_agent_csv('Team,Name,Email\nAlpha,"Smith, John",js@x.com')
        assert rows[0].name == "Smith, John"


# =============================================================================
# TEST CLASS: Call CSV
# =============================================================================

class TestParseCallCsv:
    """Tests for manual call-data CSV parsing."""

    def test_canonical_shape(self):
        rows = parse_call_csv("Agent Name,Calls,Seconds\nJohn Smith,15,3600")
        assert len(rows) == 1
        row = rows[0]
        assert row.line_number == 2
        assert row.agent_name == "John Smith"
        assert row.calls == "15"
        assert row.seconds == "3600"
        assert row.sales is None
        assert row.hour is None

    def test_columns_in_any_order(self):
        rows = parse_call_csv("Hour,Sales,Calls,Agent Name\n11,2,9,Jane Doe")
        row = rows[0]
        assert (row.agent_name, row.calls, row.sales, row.hour) == ("Jane Doe", "9", "2", "11")

    def test_blank_agent_name_skipped(self):
        rows = parse_call_csv("Agent Name,Calls\n,5\nJane Doe,3\n\nBob Lee,1")
        assert [row.agent_name for row in rows] == ["Jane Doe", "Bob Lee"]
        assert [row.line_number for row in rows] == [3, 5]

    def test_fewer_than_two_lines_is_empty(self):
        assert parse_call_csv("") == []
        assert parse_call_csv("Agent Name,Calls") == []

    def test_missing_calls_column_raises(self):
        with pytest.raises(MissingColumnError) as exc_info:
            parse_call_csv("Agent Name,Seconds\nJohn,60")
        assert exc_info.value.fields == ["calls"]

    def test_extra_columns_ignored(self):
        rows = parse_call_csv("Region,Agent Name,Calls,Notes\nWest,John Smith,4,none")
        assert rows[0].agent_name == "John Smith"
        assert rows[0].calls == "4"


# =============================================================================
# TEST CLASS: Email CSV
# =============================================================================

class TestParseEmailCsv:
    """Tests for fixed-position email attachment parsing."""

    EMAIL_CSV = (
        "ID,Agent,Extension,Queue,Calls,Seconds\n"
        "1,John Smith,201,Sales,15,3600\n"
        "2,Jane Doe,202,Sales,8,1500\n"
    )

    def test_fixed_positions(self):
        rows = parse_email_csv(self.EMAIL_CSV)
        assert [(r.agent_name, r.calls, r.seconds) for r in rows] == [
            ("John Smith", "15", "3600"),
            ("Jane Doe", "8", "1500"),
        ]
        assert rows[0].line_number == 2

    def test_header_names_are_ignored(self):
        rows = parse_email_csv("agent report,x,y,z,w,v\n1,John Smith,0,0,3,90")
        assert rows[0].calls == "3"
        assert rows[0].seconds == "90"

    def test_first_line_kept_without_agent_word(self):
        rows = parse_email_csv("1,John Smith,201,Sales,15,3600\n2,Jane Doe,202,Sales,8,1500")
        assert len(rows) == 2
        assert rows[0].line_number == 1

    def test_rows_missing_name_or_calls_skipped(self):
        rows = parse_email_csv(
            "ID,Agent,Ext,Queue,Calls,Seconds\n"
            "1,,201,Sales,15,3600\n"
            "2,Jane Doe,202,Sales,,1500\n"
            "3,Bob Lee,203,Sales,4\n"
        )
        assert [(r.agent_name, r.calls, r.seconds) for r in rows] == [("Bob Lee", "4", None)]

    def test_single_line_is_empty(self):
        assert parse_email_csv("1,John Smith,201,Sales,15,3600") == []

    def test_header_detection(self):
        assert has_header_line("ID,AGENT,Calls")
        assert not has_header_line("1,John,5")
