"""
Leaderboard service: fetches matches and players, then hands them to the
pure calculation layer. Leaderboards are recomputed on every call.
"""

import logging
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from tennis_backend.services import calculation_service
from tennis_backend.services.match_service import get_matches
from tennis_backend.services.presentation_service import leaderboard_to_rows
from tennis_backend.services.tournament_service import get_tournament_players
from tennis_backend.services.user_service import get_player_users

logger = logging.getLogger(__name__)


async def get_tournament_leaderboard(session: AsyncSession, tournament_id: int) -> List[Dict]:
    """
    Ranked leaderboard for one tournament.

    Only the tournament's registered players are ranked, over the
    tournament's completed matches.
    """
    players = await get_tournament_players(session, tournament_id)
    matches = await get_matches(session, tournament_id)
    entries = calculation_service.build_leaderboard(matches, players)
    logger.debug(
        f"Tournament {tournament_id} leaderboard: {len(entries)} ranked of {len(players)} players"
    )
    return leaderboard_to_rows(entries)


async def get_global_leaderboard(session: AsyncSession) -> List[Dict]:
    """Ranked leaderboard over every completed match and every player-role user."""
    players = await get_player_users(session)
    matches = await get_matches(session)
    return leaderboard_to_rows(calculation_service.build_leaderboard(matches, players))
