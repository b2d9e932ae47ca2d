"""
Tournament service layer: tournaments and their player rosters.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_backend.database.models import Tournament, TournamentPlayer, Match, MatchSet, User
from tennis_backend.services.presentation_service import tournament_to_dict, user_to_dict

logger = logging.getLogger(__name__)


def _validate_dates(start_date: date, end_date: Optional[date]) -> None:
    if end_date is not None and end_date < start_date:
        raise ValueError("End date cannot be before start date")


async def _missing_user_ids(session: AsyncSession, user_ids: Iterable[int]) -> List[int]:
    user_ids = set(user_ids)
    if not user_ids:
        return []
    result = await session.execute(select(User.id).where(User.id.in_(user_ids)))
    found = set(result.scalars().all())
    return sorted(user_ids - found)


async def create_tournament(
    session: AsyncSession,
    name: str,
    start_date: date,
    created_by: int,
    description: Optional[str] = None,
    end_date: Optional[date] = None,
    player_ids: Optional[List[int]] = None,
) -> Dict:
    """
    Create a tournament and optionally register its initial players.

    Args:
        session: Database session
        name: Tournament name
        start_date: First day of the tournament
        created_by: Owning user ID
        description: Optional description
        end_date: Optional last day (must not precede start_date)
        player_ids: Optional user IDs to register

    Returns:
        Created tournament dictionary

    Raises:
        ValueError: On invalid dates or unknown player IDs
    """
    _validate_dates(start_date, end_date)

    player_ids = list(dict.fromkeys(player_ids or []))
    missing = await _missing_user_ids(session, player_ids)
    if missing:
        raise ValueError(f"Players not found: {', '.join(str(m) for m in missing)}")

    tournament = Tournament(
        name=name,
        description=description,
        start_date=start_date,
        end_date=end_date,
        created_by=created_by,
    )
    session.add(tournament)
    await session.flush()

    for player_id in player_ids:
        session.add(TournamentPlayer(tournament_id=tournament.id, player_id=player_id))

    await session.commit()
    await session.refresh(tournament)

    logger.info(
        f"Created tournament {tournament.id} '{name}' with {len(player_ids)} players"
    )
    return tournament_to_dict(tournament)


async def get_tournament_orm(session: AsyncSession, tournament_id: int) -> Optional[Tournament]:
    result = await session.execute(
        select(Tournament)
        .where(Tournament.id == tournament_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_tournament(session: AsyncSession, tournament_id: int) -> Optional[Dict]:
    """Tournament dictionary or None if not found."""
    tournament = await get_tournament_orm(session, tournament_id)
    return tournament_to_dict(tournament) if tournament else None


async def list_tournaments(session: AsyncSession) -> List[Dict]:
    """All tournaments, newest first."""
    result = await session.execute(
        select(Tournament)
        .order_by(Tournament.created_at.desc(), Tournament.id.desc())
        .execution_options(populate_existing=True)
    )
    return [tournament_to_dict(t) for t in result.scalars().all()]


async def update_tournament(
    session: AsyncSession,
    tournament_id: int,
    name: Optional[str] = None,
    description: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    clear_end_date: bool = False,
) -> Optional[Dict]:
    """
    Update tournament fields. None means "leave unchanged".

    Returns:
        Updated tournament dictionary, or None if not found

    Raises:
        ValueError: If the resulting dates are out of order
    """
    tournament = await get_tournament_orm(session, tournament_id)
    if tournament is None:
        return None

    new_start = start_date if start_date is not None else tournament.start_date
    if clear_end_date:
        new_end = None
    else:
        new_end = end_date if end_date is not None else tournament.end_date
    _validate_dates(new_start, new_end)

    if name is not None:
        tournament.name = name
    if description is not None:
        tournament.description = description
    tournament.start_date = new_start
    tournament.end_date = new_end

    await session.commit()
    await session.refresh(tournament)
    logger.info(f"Updated tournament {tournament_id}")
    return tournament_to_dict(tournament)


async def delete_tournament(session: AsyncSession, tournament_id: int) -> bool:
    """
    Delete a tournament with its roster, matches and sets.

    Returns:
        True if the tournament existed
    """
    tournament = await get_tournament_orm(session, tournament_id)
    if tournament is None:
        return False

    match_ids = select(Match.id).where(Match.tournament_id == tournament_id)
    await session.execute(delete(MatchSet).where(MatchSet.match_id.in_(match_ids)))
    await session.execute(delete(Match).where(Match.tournament_id == tournament_id))
    await session.execute(
        delete(TournamentPlayer).where(TournamentPlayer.tournament_id == tournament_id)
    )
    await session.execute(delete(Tournament).where(Tournament.id == tournament_id))
    await session.commit()

    logger.info(f"Deleted tournament {tournament_id}")
    return True


async def is_player_registered(session: AsyncSession, tournament_id: int, player_id: int) -> bool:
    result = await session.execute(
        select(TournamentPlayer.id).where(
            TournamentPlayer.tournament_id == tournament_id,
            TournamentPlayer.player_id == player_id,
        )
    )
    return result.scalar_one_or_none() is not None


async def add_player_to_tournament(
    session: AsyncSession, tournament_id: int, player_id: int
) -> Dict:
    """
    Register a player in a tournament.

    Raises:
        ValueError: If the player is unknown or already registered
    """
    if await _missing_user_ids(session, [player_id]):
        raise ValueError(f"Player {player_id} not found")
    if await is_player_registered(session, tournament_id, player_id):
        raise ValueError(f"Player {player_id} is already registered in this tournament")

    entry = TournamentPlayer(tournament_id=tournament_id, player_id=player_id)
    session.add(entry)
    try:
        await session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same player
        await session.rollback()
        raise ValueError(f"Player {player_id} is already registered in this tournament")
    await session.refresh(entry)

    logger.info(f"Registered player {player_id} in tournament {tournament_id}")
    return {
        "id": entry.id,
        "tournament_id": entry.tournament_id,
        "player_id": entry.player_id,
    }


async def remove_player_from_tournament(
    session: AsyncSession, tournament_id: int, player_id: int
) -> bool:
    """
    Remove a player from a tournament roster.

    Matches already played stay; the player simply stops appearing in the
    tournament leaderboard.

    Returns:
        True if the player was registered
    """
    result = await session.execute(
        delete(TournamentPlayer).where(
            TournamentPlayer.tournament_id == tournament_id,
            TournamentPlayer.player_id == player_id,
        )
    )
    await session.commit()
    return result.rowcount > 0


async def get_tournament_players(session: AsyncSession, tournament_id: int) -> List[User]:
    """Registered players as ORM users, in registration order."""
    result = await session.execute(
        select(User)
        .join(TournamentPlayer, TournamentPlayer.player_id == User.id)
        .where(TournamentPlayer.tournament_id == tournament_id)
        .order_by(TournamentPlayer.id.asc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def list_tournament_players(session: AsyncSession, tournament_id: int) -> List[Dict]:
    players = await get_tournament_players(session, tournament_id)
    return [user_to_dict(p) for p in players]
