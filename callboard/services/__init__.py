"""
Callboard Services Module

Business logic for the reporting pipeline. Everything except the repository
is a pure function over in-memory values.

Services:
- csv_parser: CSV splitting and header-to-field resolution
- hour_extraction: business hour from an email subject
- normalization: raw rows to validated CallRecords
- upsert: replace-on-key write contract and the asyncpg repository
- aggregation: agent/team/campaign/hourly rollups over a snapshot
- classification: call-time and relative performance tiers
- export: CSV export and display formatting
- ingestion: import orchestration for the three CSV paths
"""

# =============================================================================
# CSV Parsing
# =============================================================================

from callboard.services.csv_parser import (
    AGENT_IMPORT_RULES,
    CALL_IMPORT_RULES,
    ColumnRule,
    parse_agent_csv,
    parse_call_csv,
    parse_email_csv,
    resolve_columns,
    split_csv_line,
    split_lines,
)

# =============================================================================
# Hour Extraction / Normalization
# =============================================================================

from callboard.services.hour_extraction import extract_hour_from_subject

from callboard.services.normalization import (
    ClampedHour,
    FixedHour,
    HourPolicy,
    NormalizationResult,
    find_agent_by_name,
    normalize_call_rows,
    parse_int_or_zero,
    resolve_manual_hour,
    seconds_to_minutes,
)

# =============================================================================
# Upsert
# =============================================================================

from callboard.services.upsert import (
    CallRecordRepository,
    apply_upsert,
    dedupe_batch,
    restrict_to_hours,
)

# =============================================================================
# Aggregation / Classification / Export
# =============================================================================

from callboard.services.aggregation import (
    DateFilter,
    agent_daily_summary,
    agent_hour_matrix,
    agent_time_series,
    average_call_time,
    calls_per_agent,
    campaign_summaries,
    conversion_rate,
    daily_summaries,
    daily_totals,
    hourly_summary,
    rank_by_calls,
    summarize,
    team_summaries,
)

from callboard.services.classification import (
    classify_call_time,
    classify_daily,
    classify_matrix,
    classify_relative,
)

from callboard.services.export import (
    build_daily_report,
    build_raw_export,
    export_to_csv,
    format_hour,
    format_hour_range,
    format_time,
)

# =============================================================================
# Ingestion
# =============================================================================

from callboard.services.ingestion import (
    format_import_message,
    import_agent_csv,
    import_call_csv,
    import_email_csv,
    plan_agent_import,
)

__all__ = [
    # csv_parser
    'AGENT_IMPORT_RULES',
    'CALL_IMPORT_RULES',
    'ColumnRule',
    'parse_agent_csv',
    'parse_call_csv',
    'parse_email_csv',
    'resolve_columns',
    'split_csv_line',
    'split_lines',
    # hour_extraction
    'extract_hour_from_subject',
    # normalization
    'ClampedHour',
    'FixedHour',
    'HourPolicy',
    'NormalizationResult',
    'find_agent_by_name',
    'normalize_call_rows',
    'parse_int_or_zero',
    'resolve_manual_hour',
    'seconds_to_minutes',
    # upsert
    'CallRecordRepository',
    'apply_upsert',
    'dedupe_batch',
    'restrict_to_hours',
    # aggregation
    'DateFilter',
    'agent_daily_summary',
    'agent_hour_matrix',
    'agent_time_series',
    'average_call_time',
    'calls_per_agent',
    'campaign_summaries',
    'conversion_rate',
    'daily_summaries',
    'daily_totals',
    'hourly_summary',
    'rank_by_calls',
    'summarize',
    'team_summaries',
    # classification
    'classify_call_time',
    'classify_daily',
    'classify_matrix',
    'classify_relative',
    # export
    'build_daily_report',
    'build_raw_export',
    'export_to_csv',
    'format_hour',
    'format_hour_range',
    'format_time',
    # ingestion
    'format_import_message',
    'import_agent_csv',
    'import_call_csv',
    'import_email_csv',
    'plan_agent_import',
]
