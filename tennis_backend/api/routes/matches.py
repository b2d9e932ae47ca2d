"""Match scheduling and score recording route handlers."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_backend.database.db import get_db_session
from tennis_backend.services import match_service, tournament_service
from tennis_backend.services.match_service import MatchNotFoundError, InvalidMatchTransitionError
from tennis_backend.api.auth_dependencies import require_user, require_manager
from tennis_backend.models.schemas import (
    CreateMatchRequest,
    UpdateMatchRequest,
    UpdateMatchStatusRequest,
    UpdateMatchScoreRequest,
    UpdateMatchSetsRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/matches")
async def list_matches(
    tournament_id: Optional[int] = None,
    current_user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Matches ordered by scheduled time, optionally for one tournament."""
    try:
        return await match_service.list_matches(session, tournament_id)
    except Exception as e:
        logger.error(f"Error listing matches: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error listing matches: {str(e)}")


@router.get("/api/matches/{match_id}")
async def get_match(
    match_id: int,
    current_user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Match with its set records and the number of sets each player won."""
    try:
        match = await match_service.get_match(session, match_id)
        if not match:
            raise HTTPException(status_code=404, detail=f"Match {match_id} not found")
        return match
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting match: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error getting match: {str(e)}")


@router.post("/api/matches")
async def create_match(
    payload: CreateMatchRequest,
    current_user: dict = Depends(require_manager),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Schedule a match between two players registered in the tournament.

    Request body:
        {
            "tournament_id": 1,
            "player1_id": 3,
            "player2_id": 7,
            "court": "Court 2",                       // Optional
            "scheduled_time": "2025-04-01T10:00:00",  // Optional
            "games_per_set": 6,                       // Optional
            "sets_per_match": 3,                      // Optional
            "player1_score": 0,                       // Optional
            "player2_score": 0,                       // Optional
            "is_completed": false                     // Optional
        }
    """
    try:
        tournament = await tournament_service.get_tournament(session, payload.tournament_id)
        if not tournament:
            raise HTTPException(
                status_code=404, detail=f"Tournament {payload.tournament_id} not found"
            )

        match = await match_service.create_match(
            session=session,
            tournament_id=payload.tournament_id,
            player1_id=payload.player1_id,
            player2_id=payload.player2_id,
            court=payload.court,
            scheduled_time=payload.scheduled_time,
            games_per_set=payload.games_per_set,
            sets_per_match=payload.sets_per_match,
            player1_score=payload.player1_score,
            player2_score=payload.player2_score,
            is_completed=payload.is_completed,
        )
        return {"status": "success", "message": "Match created successfully", "match": match}
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating match: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating match: {str(e)}")


@router.put("/api/matches/{match_id}")
async def update_match(
    match_id: int,
    payload: UpdateMatchRequest,
    current_user: dict = Depends(require_manager),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        match = await match_service.update_match(
            session,
            match_id,
            player1_id=payload.player1_id,
            player2_id=payload.player2_id,
            court=payload.court,
            scheduled_time=payload.scheduled_time,
            games_per_set=payload.games_per_set,
            sets_per_match=payload.sets_per_match,
            player1_score=payload.player1_score,
            player2_score=payload.player2_score,
            clear_court=payload.clear_court,
            clear_scheduled_time=payload.clear_scheduled_time,
        )
        return {"status": "success", "message": "Match updated successfully", "match": match}
    except HTTPException:
        raise
    except MatchNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating match: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating match: {str(e)}")


@router.put("/api/matches/{match_id}/status")
async def update_match_status(
    match_id: int,
    payload: UpdateMatchStatusRequest,
    current_user: dict = Depends(require_manager),
    session: AsyncSession = Depends(get_db_session),
):
    """Move a match along scheduled -> in_progress -> completed."""
    try:
        match = await match_service.update_match_status(session, match_id, payload.status)
        return {
            "status": "success",
            "message": f"Match status set to {match['status']}",
            "match": match,
        }
    except HTTPException:
        raise
    except MatchNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidMatchTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating match status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating match status: {str(e)}")


@router.put("/api/matches/{match_id}/score")
async def update_match_score(
    match_id: int,
    payload: UpdateMatchScoreRequest,
    current_user: dict = Depends(require_manager),
    session: AsyncSession = Depends(get_db_session),
):
    """Record aggregate game totals and complete the match."""
    try:
        match = await match_service.record_match_score(
            session, match_id, payload.player1_score, payload.player2_score
        )
        return {"status": "success", "message": "Match score recorded", "match": match}
    except HTTPException:
        raise
    except MatchNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error recording match score: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error recording match score: {str(e)}")


@router.put("/api/matches/{match_id}/sets")
async def update_match_sets(
    match_id: int,
    payload: UpdateMatchSetsRequest,
    current_user: dict = Depends(require_manager),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Replace the set records of a match and complete it.

    Request body:
        {
            "sets": [
                {"set_number": 1, "player1_games": 6, "player2_games": 4},
                {"set_number": 2, "player1_games": 7, "player2_games": 5}
            ]
        }
    """
    try:
        match = await match_service.record_match_sets(
            session, match_id, [s.model_dump() for s in payload.sets]
        )
        return {"status": "success", "message": "Match sets recorded", "match": match}
    except HTTPException:
        raise
    except MatchNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error recording match sets: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error recording match sets: {str(e)}")


@router.delete("/api/matches/{match_id}")
async def delete_match(
    match_id: int,
    current_user: dict = Depends(require_manager),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        deleted = await match_service.delete_match(session, match_id)
        if not deleted:
            raise HTTPException(status_code=404, detail=f"Match {match_id} not found")
        return {"status": "success", "message": "Match deleted successfully"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting match: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deleting match: {str(e)}")
