"""Health check and root endpoints."""

import structlog
from fastapi import APIRouter

from ..database import Database

# Initialize logger
logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint."""
    logger.info("root_endpoint_accessed")
    return {"message": "Welcome to Folder Notes API"}


@router.get("/health")
async def health():
    """Health check endpoint; reports whether a database handle is available."""
    database = "connected" if Database.db is not None else "unavailable"
    logger.debug("health_check_requested", database=database)
    return {"status": "healthy", "service": "foldernotes-api", "database": database}
