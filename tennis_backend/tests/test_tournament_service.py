"""
Tests for tournament_service CRUD and roster operations.
"""
import pytest
from datetime import date

from tennis_backend.services import match_service, tournament_service


@pytest.mark.asyncio
async def test_create_tournament_with_roster(db_session, tournament, alice, bob, carol):
    assert tournament["id"] > 0
    assert tournament["name"] == "Spring Open"
    assert tournament["start_date"] == "2025-04-01"
    assert tournament["status"] in ("upcoming", "active", "completed")

    players = await tournament_service.list_tournament_players(db_session, tournament["id"])
    assert [p["id"] for p in players] == [alice["id"], bob["id"], carol["id"]]


@pytest.mark.asyncio
async def test_create_tournament_rejects_bad_dates(db_session, master_user):
    with pytest.raises(ValueError, match="End date"):
        await tournament_service.create_tournament(
            db_session,
            name="Backwards",
            start_date=date(2025, 5, 2),
            end_date=date(2025, 5, 1),
            created_by=master_user["id"],
        )


@pytest.mark.asyncio
async def test_create_tournament_rejects_unknown_players(db_session, master_user, alice):
    with pytest.raises(ValueError, match="not found"):
        await tournament_service.create_tournament(
            db_session,
            name="Ghosts",
            start_date=date(2025, 5, 1),
            created_by=master_user["id"],
            player_ids=[alice["id"], 4242],
        )
    assert await tournament_service.list_tournaments(db_session) == []


@pytest.mark.asyncio
async def test_duplicate_player_ids_registered_once(db_session, master_user, alice):
    tournament = await tournament_service.create_tournament(
        db_session,
        name="Doubles Up",
        start_date=date(2025, 5, 1),
        created_by=master_user["id"],
        player_ids=[alice["id"], alice["id"]],
    )
    players = await tournament_service.get_tournament_players(db_session, tournament["id"])
    assert len(players) == 1


@pytest.mark.asyncio
async def test_get_and_list_tournaments(db_session, tournament):
    fetched = await tournament_service.get_tournament(db_session, tournament["id"])
    assert fetched["name"] == "Spring Open"
    assert await tournament_service.get_tournament(db_session, 9999) is None

    listed = await tournament_service.list_tournaments(db_session)
    assert [t["id"] for t in listed] == [tournament["id"]]


@pytest.mark.asyncio
async def test_update_tournament(db_session, tournament):
    updated = await tournament_service.update_tournament(
        db_session, tournament["id"], name="Summer Open", end_date=date(2025, 4, 10)
    )
    assert updated["name"] == "Summer Open"
    assert updated["end_date"] == "2025-04-10"
    assert updated["start_date"] == "2025-04-01"

    cleared = await tournament_service.update_tournament(
        db_session, tournament["id"], clear_end_date=True
    )
    assert cleared["end_date"] is None

    with pytest.raises(ValueError):
        await tournament_service.update_tournament(
            db_session, tournament["id"], start_date=date(2025, 6, 1), end_date=date(2025, 5, 1)
        )

    assert await tournament_service.update_tournament(db_session, 9999, name="Nope") is None


@pytest.mark.asyncio
async def test_add_and_remove_player(db_session, tournament, alice, user_factory):
    dave = await user_factory("dave@example.com", "Dave Drop")

    entry = await tournament_service.add_player_to_tournament(db_session, tournament["id"], dave["id"])
    assert entry["player_id"] == dave["id"]
    assert await tournament_service.is_player_registered(db_session, tournament["id"], dave["id"])

    with pytest.raises(ValueError, match="already registered"):
        await tournament_service.add_player_to_tournament(db_session, tournament["id"], dave["id"])
    with pytest.raises(ValueError, match="not found"):
        await tournament_service.add_player_to_tournament(db_session, tournament["id"], 4242)

    assert await tournament_service.remove_player_from_tournament(
        db_session, tournament["id"], dave["id"]
    ) is True
    assert await tournament_service.remove_player_from_tournament(
        db_session, tournament["id"], dave["id"]
    ) is False


@pytest.mark.asyncio
async def test_delete_tournament_cascades(db_session, tournament, alice, bob):
    match = await match_service.create_match(db_session, tournament["id"], alice["id"], bob["id"])
    await match_service.record_match_sets(
        db_session, match["id"], [{"set_number": 1, "player1_games": 6, "player2_games": 2}]
    )

    assert await tournament_service.delete_tournament(db_session, tournament["id"]) is True
    assert await tournament_service.get_tournament(db_session, tournament["id"]) is None
    assert await match_service.list_matches(db_session, tournament["id"]) == []
    assert await match_service.get_match_sets(db_session, match["id"]) == []
    assert await tournament_service.get_tournament_players(db_session, tournament["id"]) == []

    assert await tournament_service.delete_tournament(db_session, tournament["id"]) is False
