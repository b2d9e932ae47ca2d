"""
Match service layer: scheduling, score recording and the match lifecycle.

Lifecycle: scheduled -> in_progress -> completed. Writing set records and
finalizing a match are separate operations; record_match_sets composes them.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_backend.database.models import Match, MatchSet, MatchStatus, User
from tennis_backend.services import calculation_service
from tennis_backend.services.presentation_service import display_name, match_to_dict
from tennis_backend.services.tournament_service import is_player_registered
from tennis_backend.utils.constants import (
    DEFAULT_GAMES_PER_SET,
    DEFAULT_SETS_PER_MATCH,
    MAX_SETS_PER_MATCH,
)

logger = logging.getLogger(__name__)


class MatchNotFoundError(ValueError):
    pass


class InvalidMatchTransitionError(ValueError):
    """Requested status change is not part of the match lifecycle."""
    pass


# ============================================================================
# Validation helpers
# ============================================================================

async def _validate_players(
    session: AsyncSession, tournament_id: int, player1_id: int, player2_id: int
) -> None:
    if player1_id == player2_id:
        raise ValueError("Please select different players")
    for player_id in (player1_id, player2_id):
        if not await is_player_registered(session, tournament_id, player_id):
            raise ValueError(f"Player {player_id} is not registered in this tournament")


def _validate_format(games_per_set: int, sets_per_match: int) -> None:
    if games_per_set < 1:
        raise ValueError("Games per set must be at least 1")
    if not 1 <= sets_per_match <= MAX_SETS_PER_MATCH:
        raise ValueError(f"Sets per match must be between 1 and {MAX_SETS_PER_MATCH}")


def _validate_scores(player1_score: int, player2_score: int) -> None:
    if player1_score < 0 or player2_score < 0:
        raise ValueError("Scores cannot be negative")


def _validate_sets(sets: Sequence[Dict], sets_per_match: int) -> None:
    if not sets:
        raise ValueError("At least one set is required")
    if len(sets) > sets_per_match:
        raise ValueError(f"This match is played over at most {sets_per_match} sets")
    numbers = [s["set_number"] for s in sets]
    if len(numbers) != len(set(numbers)):
        raise ValueError("Set numbers must be unique")
    for s in sets:
        if s["set_number"] < 1:
            raise ValueError("Set numbers start at 1")
        if s["set_number"] > sets_per_match:
            raise ValueError(
                f"Set {s['set_number']} is beyond the {sets_per_match} sets of this match"
            )
        _validate_scores(s["player1_games"], s["player2_games"])


# ============================================================================
# Reads
# ============================================================================

async def get_match_orm(session: AsyncSession, match_id: int) -> Optional[Match]:
    result = await session.execute(
        select(Match).where(Match.id == match_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _require_match(session: AsyncSession, match_id: int) -> Match:
    match = await get_match_orm(session, match_id)
    if match is None:
        raise MatchNotFoundError(f"Match {match_id} not found")
    return match


async def get_match_sets(session: AsyncSession, match_id: int) -> List[MatchSet]:
    result = await session.execute(
        select(MatchSet)
        .where(MatchSet.match_id == match_id)
        .order_by(MatchSet.set_number.asc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def _player_names(session: AsyncSession, user_ids) -> Dict[int, str]:
    user_ids = set(user_ids)
    if not user_ids:
        return {}
    result = await session.execute(select(User).where(User.id.in_(user_ids)))
    return {u.id: display_name(u) for u in result.scalars().all()}


async def get_match(session: AsyncSession, match_id: int) -> Optional[Dict]:
    """Match dictionary with sets, set tally and player names, or None."""
    match = await get_match_orm(session, match_id)
    if match is None:
        return None
    sets = await get_match_sets(session, match_id)
    names = await _player_names(session, match.player_ids)
    return match_to_dict(match, sets=sets, player_names=names)


async def get_matches(session: AsyncSession, tournament_id: Optional[int] = None) -> List[Match]:
    """Match store: ORM matches, optionally limited to one tournament."""
    query = select(Match).execution_options(populate_existing=True)
    if tournament_id is not None:
        query = query.where(Match.tournament_id == tournament_id)
    query = query.order_by(Match.scheduled_time.is_(None), Match.scheduled_time.asc(), Match.id.asc())
    result = await session.execute(query)
    return list(result.scalars().all())


async def list_matches(session: AsyncSession, tournament_id: Optional[int] = None) -> List[Dict]:
    """Matches ordered by scheduled time (unscheduled last), with player names."""
    matches = await get_matches(session, tournament_id)
    names = await _player_names(session, (pid for m in matches for pid in m.player_ids))
    return [match_to_dict(m, player_names=names) for m in matches]


# ============================================================================
# Lifecycle steps
# ============================================================================

def _apply_progress(match: Match) -> None:
    """A scheduled match with any games recorded is in progress."""
    if match.status == MatchStatus.SCHEDULED and (
        (match.player1_score or 0) > 0 or (match.player2_score or 0) > 0
    ):
        match.status = MatchStatus.IN_PROGRESS


def _finalize(match: Match) -> None:
    """
    Decide the winner from the aggregate scores and complete the match.

    Raises:
        ValueError: If no games were recorded, or on a tie the policy rejects
    """
    player1_score = match.player1_score or 0
    player2_score = match.player2_score or 0
    if player1_score == 0 and player2_score == 0:
        raise ValueError("Please enter scores for completed matches")

    winner = calculation_service.resolve_match_winner(player1_score, player2_score)
    match.winner_id = match.player1_id if winner == 1 else match.player2_id
    match.status = MatchStatus.COMPLETED


async def _write_sets(session: AsyncSession, match: Match, sets: Sequence[Dict]) -> None:
    _validate_sets(sets, match.sets_per_match)

    await session.execute(delete(MatchSet).where(MatchSet.match_id == match.id))
    new_sets = [
        MatchSet(
            match_id=match.id,
            set_number=s["set_number"],
            player1_games=s["player1_games"],
            player2_games=s["player2_games"],
        )
        for s in sorted(sets, key=lambda s: s["set_number"])
    ]
    session.add_all(new_sets)

    match.player1_score, match.player2_score = calculation_service.sum_set_games(new_sets)
    await session.flush()


async def _commit_and_render(session: AsyncSession, match: Match) -> Dict:
    await session.commit()
    await session.refresh(match)
    return await get_match(session, match.id)


async def replace_match_sets(session: AsyncSession, match_id: int, sets: Sequence[Dict]) -> Dict:
    """
    Replace a match's set records and recompute its aggregate scores.

    On a completed match the winner is decided again from the new totals;
    otherwise only scheduled -> in_progress can happen.

    Args:
        session: Database session
        match_id: Match ID
        sets: [{"set_number", "player1_games", "player2_games"}, ...]

    Returns:
        Updated match dictionary (with sets)
    """
    match = await _require_match(session, match_id)
    try:
        await _write_sets(session, match, sets)
        if match.status == MatchStatus.COMPLETED:
            _finalize(match)
        else:
            _apply_progress(match)
    except ValueError:
        await session.rollback()
        raise
    return await _commit_and_render(session, match)


async def finalize_match(session: AsyncSession, match_id: int) -> Dict:
    """
    Complete a match from its current scores and store the winner.

    Returns:
        Updated match dictionary
    """
    match = await _require_match(session, match_id)
    _finalize(match)
    logger.info(
        f"Match {match_id} completed {match.player1_score}-{match.player2_score}, "
        f"winner {match.winner_id}"
    )
    return await _commit_and_render(session, match)


async def record_match_sets(session: AsyncSession, match_id: int, sets: Sequence[Dict]) -> Dict:
    """
    Write the final set records of a match and finalize it, in one transaction.

    Returns:
        Completed match dictionary

    Raises:
        MatchNotFoundError: If the match does not exist
        ValueError: On invalid sets, no games recorded, or a rejected tie
    """
    match = await _require_match(session, match_id)
    try:
        await _write_sets(session, match, sets)
        _finalize(match)
    except ValueError:
        await session.rollback()
        raise
    logger.info(
        f"Recorded {len(sets)} sets for match {match_id}: "
        f"{match.player1_score}-{match.player2_score}, winner {match.winner_id}"
    )
    return await _commit_and_render(session, match)


async def record_match_score(
    session: AsyncSession, match_id: int, player1_score: int, player2_score: int
) -> Dict:
    """
    Set aggregate game totals directly (no per-set detail) and finalize.

    Existing set records are dropped since they would no longer add up.
    """
    _validate_scores(player1_score, player2_score)
    match = await _require_match(session, match_id)

    match.player1_score = player1_score
    match.player2_score = player2_score
    try:
        _finalize(match)
    except ValueError:
        await session.rollback()
        raise
    await session.execute(delete(MatchSet).where(MatchSet.match_id == match_id))

    logger.info(f"Recorded score {player1_score}-{player2_score} for match {match_id}")
    return await _commit_and_render(session, match)


# ============================================================================
# Create / update / delete
# ============================================================================

async def create_match(
    session: AsyncSession,
    tournament_id: int,
    player1_id: int,
    player2_id: int,
    court: Optional[str] = None,
    scheduled_time: Optional[datetime] = None,
    games_per_set: int = DEFAULT_GAMES_PER_SET,
    sets_per_match: int = DEFAULT_SETS_PER_MATCH,
    player1_score: int = 0,
    player2_score: int = 0,
    is_completed: bool = False,
) -> Dict:
    """
    Schedule a match between two registered players.

    Non-zero initial scores put the match in progress; is_completed runs the
    finalize step straight away.

    Raises:
        ValueError: Invalid players, format or scores
    """
    await _validate_players(session, tournament_id, player1_id, player2_id)
    _validate_format(games_per_set, sets_per_match)
    _validate_scores(player1_score, player2_score)

    match = Match(
        tournament_id=tournament_id,
        player1_id=player1_id,
        player2_id=player2_id,
        court=court,
        scheduled_time=scheduled_time,
        games_per_set=games_per_set,
        sets_per_match=sets_per_match,
        player1_score=player1_score,
        player2_score=player2_score,
        status=MatchStatus.SCHEDULED,
    )
    _apply_progress(match)
    if is_completed:
        _finalize(match)

    session.add(match)
    await session.flush()
    logger.info(
        f"Created match {match.id} in tournament {tournament_id}: "
        f"{player1_id} vs {player2_id} ({match.status.value})"
    )
    return await _commit_and_render(session, match)


async def update_match(
    session: AsyncSession,
    match_id: int,
    player1_id: Optional[int] = None,
    player2_id: Optional[int] = None,
    court: Optional[str] = None,
    scheduled_time: Optional[datetime] = None,
    games_per_set: Optional[int] = None,
    sets_per_match: Optional[int] = None,
    player1_score: Optional[int] = None,
    player2_score: Optional[int] = None,
    clear_court: bool = False,
    clear_scheduled_time: bool = False,
) -> Dict:
    """
    Edit match details. None means "leave unchanged"; the clear_* flags
    remove the court or the scheduled time.

    Score edits on a completed match re-run finalize (the match stays
    completed); on other matches they may move it to in_progress. Set
    records are dropped when the totals change, since they no longer add up.

    Raises:
        MatchNotFoundError: If the match does not exist
        ValueError: Invalid players, format or scores
    """
    match = await _require_match(session, match_id)

    new_player1 = player1_id if player1_id is not None else match.player1_id
    new_player2 = player2_id if player2_id is not None else match.player2_id
    if (new_player1, new_player2) != match.player_ids:
        await _validate_players(session, match.tournament_id, new_player1, new_player2)

    new_games_per_set = games_per_set if games_per_set is not None else match.games_per_set
    new_sets_per_match = sets_per_match if sets_per_match is not None else match.sets_per_match
    _validate_format(new_games_per_set, new_sets_per_match)

    new_player1_score = player1_score if player1_score is not None else match.player1_score
    new_player2_score = player2_score if player2_score is not None else match.player2_score
    _validate_scores(new_player1_score, new_player2_score)
    scores_changed = (new_player1_score, new_player2_score) != (
        match.player1_score,
        match.player2_score,
    )

    match.player1_id = new_player1
    match.player2_id = new_player2
    match.games_per_set = new_games_per_set
    match.sets_per_match = new_sets_per_match
    match.player1_score = new_player1_score
    match.player2_score = new_player2_score
    if clear_court:
        match.court = None
    elif court is not None:
        match.court = court
    if clear_scheduled_time:
        match.scheduled_time = None
    elif scheduled_time is not None:
        match.scheduled_time = scheduled_time

    try:
        if match.status == MatchStatus.COMPLETED:
            _finalize(match)
        else:
            _apply_progress(match)
    except ValueError:
        await session.rollback()
        raise

    if scores_changed:
        await session.execute(delete(MatchSet).where(MatchSet.match_id == match_id))

    logger.info(f"Updated match {match_id}")
    return await _commit_and_render(session, match)


# Allowed manual status changes. Completion goes through finalize.
ALLOWED_TRANSITIONS: Dict[MatchStatus, Tuple[MatchStatus, ...]] = {
    MatchStatus.SCHEDULED: (MatchStatus.IN_PROGRESS, MatchStatus.COMPLETED),
    MatchStatus.IN_PROGRESS: (MatchStatus.COMPLETED,),
    MatchStatus.COMPLETED: (),
}


async def update_match_status(session: AsyncSession, match_id: int, status: MatchStatus) -> Dict:
    """
    Move a match along its lifecycle.

    Raises:
        MatchNotFoundError: If the match does not exist
        InvalidMatchTransitionError: If the change is not allowed
        ValueError: If completing a match with no games recorded
    """
    status = MatchStatus(status)
    match = await _require_match(session, match_id)
    current = MatchStatus(match.status)

    if status == current:
        return await get_match(session, match_id)
    if status not in ALLOWED_TRANSITIONS[current]:
        raise InvalidMatchTransitionError(
            f"Cannot change match status from {current.value} to {status.value}"
        )

    if status == MatchStatus.COMPLETED:
        return await finalize_match(session, match_id)

    match.status = status
    logger.info(f"Match {match_id} status {current.value} -> {status.value}")
    return await _commit_and_render(session, match)


async def delete_match(session: AsyncSession, match_id: int) -> bool:
    """
    Delete a match and its sets.

    Returns:
        True if the match existed
    """
    match = await get_match_orm(session, match_id)
    if match is None:
        return False
    await session.execute(delete(MatchSet).where(MatchSet.match_id == match_id))
    await session.execute(delete(Match).where(Match.id == match_id))
    await session.commit()
    logger.info(f"Deleted match {match_id}")
    return True
