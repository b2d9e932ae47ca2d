"""Tournament, roster and tournament leaderboard route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_backend.database.db import get_db_session
from tennis_backend.services import tournament_service, leaderboard_service
from tennis_backend.api.auth_dependencies import require_user, require_manager
from tennis_backend.models.schemas import CreateTournamentRequest, UpdateTournamentRequest

logger = logging.getLogger(__name__)
router = APIRouter()


async def _require_tournament(session: AsyncSession, tournament_id: int) -> dict:
    tournament = await tournament_service.get_tournament(session, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail=f"Tournament {tournament_id} not found")
    return tournament


@router.get("/api/tournaments")
async def list_tournaments(
    current_user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """All tournaments, newest first, each with its derived status."""
    try:
        return await tournament_service.list_tournaments(session)
    except Exception as e:
        logger.error(f"Error listing tournaments: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error listing tournaments: {str(e)}")


@router.get("/api/tournaments/{tournament_id}")
async def get_tournament(
    tournament_id: int,
    current_user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        return await _require_tournament(session, tournament_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting tournament: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error getting tournament: {str(e)}")


@router.post("/api/tournaments")
async def create_tournament(
    payload: CreateTournamentRequest,
    current_user: dict = Depends(require_manager),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Create a tournament.

    Request body:
        {
            "name": "Spring Open",
            "description": "Club singles",   // Optional
            "start_date": "2025-04-01",
            "end_date": "2025-04-03",        // Optional
            "player_ids": [1, 2, 3]          // Optional initial roster
        }
    """
    try:
        tournament = await tournament_service.create_tournament(
            session=session,
            name=payload.name.strip(),
            description=payload.description,
            start_date=payload.start_date,
            end_date=payload.end_date,
            created_by=current_user["id"],
            player_ids=payload.player_ids,
        )
        return {
            "status": "success",
            "message": "Tournament created successfully",
            "tournament": tournament,
        }
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating tournament: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating tournament: {str(e)}")


@router.put("/api/tournaments/{tournament_id}")
async def update_tournament(
    tournament_id: int,
    payload: UpdateTournamentRequest,
    current_user: dict = Depends(require_manager),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        tournament = await tournament_service.update_tournament(
            session,
            tournament_id,
            name=payload.name.strip() if payload.name is not None else None,
            description=payload.description,
            start_date=payload.start_date,
            end_date=payload.end_date,
            clear_end_date=payload.clear_end_date,
        )
        if not tournament:
            raise HTTPException(status_code=404, detail=f"Tournament {tournament_id} not found")
        return {
            "status": "success",
            "message": "Tournament updated successfully",
            "tournament": tournament,
        }
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating tournament: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating tournament: {str(e)}")


@router.delete("/api/tournaments/{tournament_id}")
async def delete_tournament(
    tournament_id: int,
    current_user: dict = Depends(require_manager),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete a tournament together with its roster and matches."""
    try:
        deleted = await tournament_service.delete_tournament(session, tournament_id)
        if not deleted:
            raise HTTPException(status_code=404, detail=f"Tournament {tournament_id} not found")
        return {"status": "success", "message": "Tournament deleted successfully"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting tournament: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deleting tournament: {str(e)}")


@router.get("/api/tournaments/{tournament_id}/players")
async def list_tournament_players(
    tournament_id: int,
    current_user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Registered players in registration order."""
    try:
        await _require_tournament(session, tournament_id)
        return await tournament_service.list_tournament_players(session, tournament_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing tournament players: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error listing tournament players: {str(e)}")


@router.post("/api/tournaments/{tournament_id}/players/{player_id}")
async def add_tournament_player(
    tournament_id: int,
    player_id: int,
    current_user: dict = Depends(require_manager),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        await _require_tournament(session, tournament_id)
        entry = await tournament_service.add_player_to_tournament(session, tournament_id, player_id)
        return {"status": "success", "message": "Player added to tournament", "entry": entry}
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error adding tournament player: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error adding tournament player: {str(e)}")


@router.delete("/api/tournaments/{tournament_id}/players/{player_id}")
async def remove_tournament_player(
    tournament_id: int,
    player_id: int,
    current_user: dict = Depends(require_manager),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        removed = await tournament_service.remove_player_from_tournament(
            session, tournament_id, player_id
        )
        if not removed:
            raise HTTPException(
                status_code=404, detail="Player is not registered in this tournament"
            )
        return {"status": "success", "message": "Player removed from tournament"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error removing tournament player: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error removing tournament player: {str(e)}")


@router.get("/api/tournaments/{tournament_id}/leaderboard")
async def get_tournament_leaderboard(
    tournament_id: int,
    current_user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Ranked leaderboard for a tournament.

    Returns:
        list: [{player_id, player_name, games_won, games_lost, matches_played,
                wins, losses, win_rate, rank}, ...]
    """
    try:
        await _require_tournament(session, tournament_id)
        return await leaderboard_service.get_tournament_leaderboard(session, tournament_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error computing tournament leaderboard: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error computing leaderboard: {str(e)}")
