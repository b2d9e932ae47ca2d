"""
Tests for tournament and global leaderboards computed from stored matches.
"""
import pytest
from datetime import date

from tennis_backend.database.models import UserRole
from tennis_backend.services import leaderboard_service, match_service, tournament_service


async def play(session, tournament_id, p1, p2, s1, s2):
    match = await match_service.create_match(session, tournament_id, p1["id"], p2["id"])
    return await match_service.record_match_score(session, match["id"], s1, s2)


@pytest.mark.asyncio
async def test_empty_tournament_leaderboard(db_session, tournament):
    assert await leaderboard_service.get_tournament_leaderboard(db_session, tournament["id"]) == []


@pytest.mark.asyncio
async def test_tournament_leaderboard(db_session, tournament, alice, bob, carol):
    await play(db_session, tournament["id"], alice, bob, 6, 3)
    # Scheduled match does not count
    await match_service.create_match(db_session, tournament["id"], bob["id"], carol["id"])

    board = await leaderboard_service.get_tournament_leaderboard(db_session, tournament["id"])

    assert [row["player_id"] for row in board] == [alice["id"], bob["id"]]
    assert board[0] == {
        "player_id": alice["id"],
        "player_name": "Alice Ace",
        "games_won": 6,
        "games_lost": 3,
        "matches_played": 1,
        "wins": 1,
        "losses": 0,
        "win_rate": 1.0,
        "rank": 1,
    }
    assert board[1]["losses"] == 1
    assert board[1]["rank"] == 2


@pytest.mark.asyncio
async def test_leaderboard_reflects_score_changes(db_session, tournament, alice, bob):
    match = await play(db_session, tournament["id"], alice, bob, 6, 3)
    first = await leaderboard_service.get_tournament_leaderboard(db_session, tournament["id"])
    assert first == await leaderboard_service.get_tournament_leaderboard(db_session, tournament["id"])

    await match_service.update_match(db_session, match["id"], player1_score=2, player2_score=6)
    board = await leaderboard_service.get_tournament_leaderboard(db_session, tournament["id"])
    assert board[0]["player_id"] == bob["id"]
    assert board[0]["wins"] == 1


@pytest.mark.asyncio
async def test_tournament_leaderboard_only_covers_its_matches(
    db_session, master_user, tournament, alice, bob, carol
):
    other = await tournament_service.create_tournament(
        db_session,
        name="Winter Cup",
        start_date=date(2025, 12, 1),
        created_by=master_user["id"],
        player_ids=[alice["id"], carol["id"]],
    )
    await play(db_session, tournament["id"], alice, bob, 6, 4)
    await play(db_session, other["id"], carol, alice, 6, 0)

    board = await leaderboard_service.get_tournament_leaderboard(db_session, tournament["id"])
    alice_row = next(row for row in board if row["player_id"] == alice["id"])
    assert alice_row["matches_played"] == 1
    assert carol["id"] not in [row["player_id"] for row in board]


@pytest.mark.asyncio
async def test_removed_player_drops_off_tournament_leaderboard(db_session, tournament, alice, bob):
    await play(db_session, tournament["id"], alice, bob, 6, 1)
    await tournament_service.remove_player_from_tournament(db_session, tournament["id"], bob["id"])

    board = await leaderboard_service.get_tournament_leaderboard(db_session, tournament["id"])
    assert [row["player_id"] for row in board] == [alice["id"]]


@pytest.mark.asyncio
async def test_global_leaderboard(db_session, master_user, tournament, alice, bob, carol, user_factory):
    admin = await user_factory("admin@example.com", "Ada Admin", UserRole.ADMIN)
    await tournament_service.add_player_to_tournament(db_session, tournament["id"], admin["id"])

    await play(db_session, tournament["id"], alice, bob, 6, 2)
    await play(db_session, tournament["id"], carol, alice, 6, 4)
    await play(db_session, tournament["id"], admin, carol, 6, 0)

    board = await leaderboard_service.get_global_leaderboard(db_session)
    ids = [row["player_id"] for row in board]

    # Only player-role users are ranked
    assert admin["id"] not in ids
    # alice: 10 games; carol: 6 games; bob: 2 games
    assert ids == [alice["id"], carol["id"], bob["id"]]
    assert [row["rank"] for row in board] == [1, 2, 3]
