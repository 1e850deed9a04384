"""
Callboard Backend Package.

FastAPI service for call-center reporting. Turns CSV input (manual uploads
and report-email attachments) into validated hourly call records and rolls
them up into agent, team, campaign and hourly summaries.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, dependencies and errors
    - models: Pydantic schemas and enums
    - services: Parsing, normalization, upsert, aggregation, classification
    - jobs: Mailbox import job
    - sql: Parameterized SQL queries
"""

__version__ = "1.0.0"
