"""Global leaderboard route handler."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_backend.database.db import get_db_session
from tennis_backend.services import leaderboard_service
from tennis_backend.api.auth_dependencies import require_user

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/leaderboard")
async def get_global_leaderboard(
    current_user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Ranked leaderboard across all tournaments, recomputed on every request."""
    try:
        return await leaderboard_service.get_global_leaderboard(session)
    except Exception as e:
        logger.error(f"Error computing leaderboard: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error computing leaderboard: {str(e)}")
