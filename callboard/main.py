"""
FastAPI application entry point for the Callboard API.

Configures logging and CORS, registers the import and report routers, and
manages the database pool over the application lifespan.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from callboard.api import api_router
from callboard.core.config import get_settings
from callboard.core.database import close_db, init_db, is_pool_ready

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the database pool on startup and close it on shutdown.

    A failed pool init is logged and startup continues; /health still answers.
    """
    logger.info("Callboard API starting")
    try:
        logging.getLogger().setLevel(get_settings().log_level.upper())
        await init_db()
        logger.info("Database connection pool initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")

    yield

    logger.info("Callboard API shutting down")
    try:
        await close_db()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


app = FastAPI(
    title="Callboard API",
    version="1.0.0",
    description=(
        "Call-center reporting backend. Imports hourly call data from CSV "
        "uploads and report emails, and serves agent, team, campaign and "
        "hourly rollups."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Liveness probe. Answers even when the pool failed to start, so the
    database state is reported alongside rather than as an error.
    """
    return {
        "status": "healthy",
        "database": "connected" if is_pool_ready() else "unavailable",
    }


@app.get("/")
async def root():
    return {
        "name": "Callboard API",
        "version": "1.0.0",
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "callboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
