"""
API package initialization.

This package contains the FastAPI router modules for Callboard:
- imports: call-data, email and agent-roster CSV imports
- reports: daily, team, campaign, hourly and matrix reports plus CSV exports
"""

from fastapi import APIRouter

from callboard.api.imports import router as imports_router
from callboard.api.reports import router as reports_router

# Create main API router
api_router = APIRouter()

api_router.include_router(imports_router, prefix="/imports", tags=["imports"])
api_router.include_router(reports_router, prefix="/reports", tags=["reports"])

__all__ = [
    "api_router",
    "imports_router",
    "reports_router",
]
