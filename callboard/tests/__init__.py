'''
Callboard Backend Test Suite

Test Modules:
-------------
- test_csv_parser.py: line/field splitting, header resolution, the three CSV shapes
- test_hour_extraction.py: subject-line hour patterns and rejection
- test_normalization.py: numeric coercion, seconds to minutes, hour policies,
  agent resolution
- test_upsert.py: replace-on-key contract, hour selection, repository writes
- test_aggregation.py: agent/team/campaign/hour rollups, matrix, time series
- test_classification.py: call-time and relative tiers
- test_export.py: CSV rendering, daily report rows, display formatting
- test_ingestion.py: manual, email and agent import paths
- test_mailbox_import.py: mailbox job skip rules, error history
- test_api.py: import and report endpoints, HTTP error mapping

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v

No live database is needed; the asyncpg pool is mocked in conftest.py.
'''

__all__ = []
