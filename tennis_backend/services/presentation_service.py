"""
Presentation adapter: turns ORM entities and ranked results into the
dict shapes returned by the API.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional

from tennis_backend.database.models import Match, MatchSet, Tournament, User
from tennis_backend.services.calculation_service import LeaderboardEntry, count_sets_won


def _enum_value(value):
    return value.value if hasattr(value, "value") else value


def _isoformat(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def display_name(user: User) -> str:
    """Full name, falling back to email."""
    return user.full_name or user.email


def user_to_dict(user: User, include_password_hash: bool = False) -> Dict:
    """Convert User ORM object to dictionary."""
    data = {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "phone": user.phone,
        "role": _enum_value(user.role),
        "verification_status": _enum_value(user.verification_status),
        "created_at": _isoformat(user.created_at),
        "updated_at": _isoformat(user.updated_at),
    }
    if include_password_hash:
        data["password_hash"] = user.password_hash
    return data


def derive_tournament_status(
    start_date: date, end_date: Optional[date], today: Optional[date] = None
) -> str:
    """
    Tournament status is never stored.

    completed: end_date is set and today is past it
    active: today is on or after start_date
    upcoming: otherwise
    """
    today = today or date.today()
    if end_date is not None and today > end_date:
        return "completed"
    if today >= start_date:
        return "active"
    return "upcoming"


def tournament_to_dict(tournament: Tournament, today: Optional[date] = None) -> Dict:
    return {
        "id": tournament.id,
        "name": tournament.name,
        "description": tournament.description,
        "start_date": _isoformat(tournament.start_date),
        "end_date": _isoformat(tournament.end_date),
        "created_by": tournament.created_by,
        "status": derive_tournament_status(tournament.start_date, tournament.end_date, today),
        "created_at": _isoformat(tournament.created_at),
        "updated_at": _isoformat(tournament.updated_at),
    }


def match_set_to_dict(match_set: MatchSet) -> Dict:
    return {
        "id": match_set.id,
        "match_id": match_set.match_id,
        "set_number": match_set.set_number,
        "player1_games": match_set.player1_games,
        "player2_games": match_set.player2_games,
    }


def match_to_dict(
    match: Match,
    sets: Optional[Iterable[MatchSet]] = None,
    player_names: Optional[Dict[int, str]] = None,
) -> Dict:
    """
    Convert Match ORM object to dictionary.

    When sets are given, the set records and a finished-set tally are included.
    """
    data = {
        "id": match.id,
        "tournament_id": match.tournament_id,
        "player1_id": match.player1_id,
        "player2_id": match.player2_id,
        "court": match.court,
        "scheduled_time": _isoformat(match.scheduled_time),
        "games_per_set": match.games_per_set,
        "sets_per_match": match.sets_per_match,
        "player1_score": match.player1_score,
        "player2_score": match.player2_score,
        "winner_id": match.winner_id,
        "status": _enum_value(match.status),
        "created_at": _isoformat(match.created_at),
        "updated_at": _isoformat(match.updated_at),
    }
    if player_names is not None:
        data["player1_name"] = player_names.get(match.player1_id, "Unknown Player")
        data["player2_name"] = player_names.get(match.player2_id, "Unknown Player")
    if sets is not None:
        sets = sorted(sets, key=lambda s: s.set_number)
        player1_sets, player2_sets = count_sets_won(sets, match.games_per_set)
        data["sets"] = [match_set_to_dict(s) for s in sets]
        data["player1_sets_won"] = player1_sets
        data["player2_sets_won"] = player2_sets
    return data


def leaderboard_entry_to_dict(entry: LeaderboardEntry) -> Dict:
    return {
        "player_id": entry.player_id,
        "player_name": entry.player_name,
        "games_won": entry.games_won,
        "games_lost": entry.games_lost,
        "matches_played": entry.matches_played,
        "wins": entry.wins,
        "losses": entry.losses,
        "win_rate": entry.win_rate,
        "rank": entry.rank,
    }


def leaderboard_to_rows(entries: Iterable[LeaderboardEntry]) -> List[Dict]:
    return [leaderboard_entry_to_dict(entry) for entry in entries]
