"""Health check route handler."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_backend.database.db import get_db_session
from tennis_backend.models.schemas import HealthResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/health", response_model=HealthResponse)
async def health_check(session: AsyncSession = Depends(get_db_session)):
    """
    Health check endpoint.

    Returns:
        dict: Service status and database reachability
    """
    try:
        await session.execute(text("SELECT 1"))
        return HealthResponse(status="healthy", database=True, message="API is running")
    except Exception as e:
        logger.warning(f"Health check could not reach the database: {e}")
        return HealthResponse(status="unhealthy", database=False, message=f"Error: {str(e)}")
