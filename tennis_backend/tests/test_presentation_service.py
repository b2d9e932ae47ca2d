"""
Tests for the dict shapes returned by the API.
"""
from datetime import date, datetime

from tennis_backend.database.models import (
    Match,
    MatchSet,
    MatchStatus,
    Tournament,
    User,
    UserRole,
    VerificationStatus,
)
from tennis_backend.services import presentation_service
from tennis_backend.services.calculation_service import LeaderboardEntry


def test_derive_tournament_status():
    start, end = date(2025, 4, 1), date(2025, 4, 3)
    derive = presentation_service.derive_tournament_status

    assert derive(start, end, today=date(2025, 3, 31)) == "upcoming"
    assert derive(start, end, today=date(2025, 4, 1)) == "active"
    assert derive(start, end, today=date(2025, 4, 3)) == "active"
    assert derive(start, end, today=date(2025, 4, 4)) == "completed"
    # Open-ended tournaments never complete
    assert derive(start, None, today=date(2030, 1, 1)) == "active"


def test_user_to_dict_hides_password_hash():
    user = User(
        id=1,
        email="alice@example.com",
        password_hash="hash",
        full_name="Alice Ace",
        role=UserRole.ADMIN,
        verification_status=VerificationStatus.PENDING,
    )
    data = presentation_service.user_to_dict(user)
    assert "password_hash" not in data
    assert data["role"] == "admin"
    assert data["verification_status"] == "pending"

    assert presentation_service.user_to_dict(user, include_password_hash=True)["password_hash"] == "hash"


def test_tournament_to_dict_includes_status():
    tournament = Tournament(
        id=3, name="Spring Open", start_date=date(2025, 4, 1), end_date=None, created_by=1
    )
    data = presentation_service.tournament_to_dict(tournament, today=date(2025, 3, 1))
    assert data["status"] == "upcoming"
    assert data["start_date"] == "2025-04-01"
    assert data["end_date"] is None


def test_match_to_dict_with_sets_and_names():
    match = Match(
        id=7,
        tournament_id=3,
        player1_id=1,
        player2_id=2,
        games_per_set=6,
        sets_per_match=3,
        player1_score=13,
        player2_score=12,
        status=MatchStatus.COMPLETED,
        winner_id=1,
        scheduled_time=datetime(2025, 4, 1, 10, 0),
    )
    sets = [
        MatchSet(id=2, match_id=7, set_number=2, player1_games=3, player2_games=6),
        MatchSet(id=1, match_id=7, set_number=1, player1_games=6, player2_games=4),
        MatchSet(id=3, match_id=7, set_number=3, player1_games=4, player2_games=2),
    ]

    data = presentation_service.match_to_dict(match, sets=sets, player_names={1: "Alice Ace"})

    assert data["status"] == "completed"
    assert data["player1_name"] == "Alice Ace"
    assert data["player2_name"] == "Unknown Player"
    assert [s["set_number"] for s in data["sets"]] == [1, 2, 3]
    # Third set (4-2) is unfinished in a six-game format
    assert (data["player1_sets_won"], data["player2_sets_won"]) == (1, 1)
    assert data["scheduled_time"] == "2025-04-01T10:00:00"


def test_match_to_dict_without_sets():
    match = Match(id=1, tournament_id=1, player1_id=1, player2_id=2, status=MatchStatus.SCHEDULED)
    data = presentation_service.match_to_dict(match)
    assert "sets" not in data
    assert "player1_name" not in data


def test_leaderboard_to_rows():
    entry = LeaderboardEntry(
        player_id=1,
        player_name="Alice Ace",
        games_won=6,
        games_lost=3,
        matches_played=1,
        wins=1,
        losses=0,
        win_rate=1.0,
        rank=1,
    )
    assert presentation_service.leaderboard_to_rows([entry]) == [
        {
            "player_id": 1,
            "player_name": "Alice Ace",
            "games_won": 6,
            "games_lost": 3,
            "matches_played": 1,
            "wins": 1,
            "losses": 0,
            "win_rate": 1.0,
            "rank": 1,
        }
    ]
