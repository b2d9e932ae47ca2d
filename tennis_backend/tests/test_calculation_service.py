"""
Tests for the calculation service - winners, set scoring, aggregation and ranking.
"""
import pytest
from types import SimpleNamespace
from tennis_backend.services import calculation_service
from tennis_backend.database.models import Match, MatchStatus, User


def make_player(player_id, name):
    return User(id=player_id, email=f"{name.lower()}@example.com", full_name=name)


def make_match(match_id, p1, p2, s1, s2, status=MatchStatus.COMPLETED, winner_id="auto"):
    if winner_id == "auto":
        winner_id = None
        if status == MatchStatus.COMPLETED:
            winner_id = p1 if s1 >= s2 else p2
    return Match(
        id=match_id,
        tournament_id=1,
        player1_id=p1,
        player2_id=p2,
        player1_score=s1,
        player2_score=s2,
        status=status,
        winner_id=winner_id,
    )


@pytest.fixture
def players():
    return [make_player(1, "Alice"), make_player(2, "Bob"), make_player(3, "Carol")]


# ============================================================================
# Winner decisions
# ============================================================================

def test_calculate_winner():
    assert calculation_service.calculate_winner(6, 3) == 1
    assert calculation_service.calculate_winner(2, 6) == 2
    assert calculation_service.calculate_winner(4, 4) == -1


def test_resolve_match_winner_tie_defaults_to_player1(monkeypatch):
    monkeypatch.setattr(calculation_service, "TIE_BREAK_DEFAULTS_TO_PLAYER1", True)
    assert calculation_service.resolve_match_winner(6, 6) == 1
    assert calculation_service.resolve_match_winner(3, 6) == 2


def test_resolve_match_winner_tie_rejected_when_policy_off(monkeypatch):
    monkeypatch.setattr(calculation_service, "TIE_BREAK_DEFAULTS_TO_PLAYER1", False)
    with pytest.raises(ValueError, match="tie"):
        calculation_service.resolve_match_winner(6, 6)
    assert calculation_service.resolve_match_winner(7, 6) == 1


@pytest.mark.parametrize(
    "p1,p2,expected",
    [
        (6, 4, 1),
        (4, 6, 2),
        (6, 5, -1),   # needs a two-game lead
        (7, 5, 1),
        (7, 6, 1),    # tie-break
        (5, 7, 2),
        (3, 2, -1),
        (0, 0, -1),
    ],
)
def test_set_winner(p1, p2, expected):
    assert calculation_service.set_winner(p1, p2, 6) == expected


def test_set_winner_short_sets():
    assert calculation_service.set_winner(4, 2, 4) == 1
    assert calculation_service.set_winner(5, 4, 4) == 1
    assert calculation_service.set_winner(4, 3, 4) == -1


def test_count_sets_won_ignores_unfinished_sets():
    sets = [
        SimpleNamespace(player1_games=6, player2_games=4),
        SimpleNamespace(player1_games=3, player2_games=6),
        SimpleNamespace(player1_games=5, player2_games=4),
    ]
    assert calculation_service.count_sets_won(sets, 6) == (1, 1)


def test_sum_set_games():
    sets = [
        SimpleNamespace(player1_games=6, player2_games=4),
        SimpleNamespace(player1_games=7, player2_games=6),
    ]
    assert calculation_service.sum_set_games(sets) == (13, 10)
    assert calculation_service.sum_set_games([]) == (0, 0)


# ============================================================================
# PlayerStats
# ============================================================================

def test_player_stats_record_match():
    stats = calculation_service.PlayerStats(1, "Alice")
    assert stats.win_rate == 0.0

    stats.record_match(6, 3, won=True)
    stats.record_match(2, 6, won=False)

    assert stats.as_tuple() == (2, 1, 1, 8, 9)
    assert stats.win_rate == 0.5
    assert stats.game_diff == -1


# ============================================================================
# Aggregation
# ============================================================================

def test_single_completed_match(players):
    matches = [make_match(1, 1, 2, 6, 3)]
    stats = calculation_service.aggregate_player_stats(matches, players)

    alice, bob = stats[1], stats[2]
    assert (alice.wins, alice.losses, alice.games_won, alice.games_lost) == (1, 0, 6, 3)
    assert (bob.wins, bob.losses, bob.games_won, bob.games_lost) == (0, 1, 3, 6)

    board = calculation_service.build_leaderboard(matches, players)
    assert [(e.player_id, e.rank) for e in board] == [(1, 1), (2, 2)]


def test_unfinished_matches_do_not_count(players):
    matches = [
        make_match(1, 1, 2, 6, 3, status=MatchStatus.IN_PROGRESS),
        make_match(2, 1, 3, 0, 0, status=MatchStatus.SCHEDULED),
        make_match(3, 2, 3, 6, 1, status=MatchStatus.COMPLETED, winner_id=None),
    ]
    stats = calculation_service.aggregate_player_stats(matches, players)
    assert all(s.as_tuple() == (0, 0, 0, 0, 0) for s in stats.values())
    assert calculation_service.build_leaderboard(matches, players) == []


def test_games_are_conserved_per_match(players):
    matches = [
        make_match(1, 1, 2, 6, 3),
        make_match(2, 2, 3, 7, 5),
        make_match(3, 3, 1, 4, 6),
    ]
    stats = calculation_service.aggregate_player_stats(matches, players)

    total_won = sum(s.games_won for s in stats.values())
    total_lost = sum(s.games_lost for s in stats.values())
    recorded = sum(m.player1_score + m.player2_score for m in matches)
    assert total_won == recorded
    assert total_lost == recorded
    assert sum(s.wins for s in stats.values()) == len(matches)
    assert sum(s.losses for s in stats.values()) == len(matches)


def test_unknown_players_are_skipped(players):
    matches = [make_match(1, 1, 99, 6, 2)]
    stats = calculation_service.aggregate_player_stats(matches, players)

    assert 99 not in stats
    assert stats[1].games_won == 6
    assert stats[1].wins == 1


def test_tied_completed_match_credits_stored_winner(players):
    matches = [make_match(1, 1, 2, 6, 6, winner_id=1)]
    stats = calculation_service.aggregate_player_stats(matches, players)
    assert stats[1].wins == 1
    assert stats[2].losses == 1


def test_players_without_name_fall_back_to_email():
    player = User(id=5, email="noname@example.com", full_name=None)
    stats = calculation_service.aggregate_player_stats([], [player])
    assert stats[5].player_name == "noname@example.com"


# ============================================================================
# Ranking
# ============================================================================

def test_players_without_matches_are_not_ranked(players):
    board = calculation_service.build_leaderboard([make_match(1, 1, 2, 6, 0)], players)
    assert 3 not in [e.player_id for e in board]


def test_ranking_order_and_tie_breaks(players):
    dave = make_player(4, "Dave")
    all_players = players + [dave]
    matches = [
        make_match(1, 1, 2, 6, 4),   # Alice 6, Bob 4
        make_match(2, 3, 4, 4, 6),   # Carol 4, Dave 6
        make_match(3, 2, 3, 2, 6),   # Bob 2, Carol 6
    ]
    # Alice: 6 games, 1-0. Dave: 6 games, 1-0. Carol: 10 games, 1-1. Bob: 6 games, 0-2.
    board = calculation_service.build_leaderboard(matches, all_players)

    assert [e.player_id for e in board] == [3, 1, 4, 2]
    assert [e.rank for e in board] == [1, 2, 3, 4]
    assert board[0].games_won == 10
    assert board[0].win_rate == 0.5


def test_win_rate_breaks_games_won_ties(players):
    matches = [
        make_match(1, 1, 3, 6, 0),   # Alice 6 games, win
        make_match(2, 2, 3, 3, 6),   # Bob 3 games, loss
        make_match(3, 2, 3, 3, 4),   # Bob 3 more games, loss
    ]
    board = calculation_service.build_leaderboard(matches, players)
    alice = next(e for e in board if e.player_id == 1)
    bob = next(e for e in board if e.player_id == 2)
    assert alice.games_won == bob.games_won == 6
    assert alice.rank < bob.rank


def test_win_rate_is_rounded():
    players = [make_player(1, "Alice"), make_player(2, "Bob"), make_player(3, "Carol")]
    matches = [
        make_match(1, 1, 2, 6, 1),
        make_match(2, 1, 3, 1, 6),
        make_match(3, 1, 2, 1, 6),
    ]
    board = calculation_service.build_leaderboard(matches, players)
    alice = next(e for e in board if e.player_id == 1)
    assert alice.win_rate == 0.333


def test_leaderboard_is_deterministic(players):
    matches = [
        make_match(1, 1, 2, 6, 4),
        make_match(2, 2, 3, 6, 4),
        make_match(3, 3, 1, 6, 4),
    ]
    first = calculation_service.build_leaderboard(matches, players)
    second = calculation_service.build_leaderboard(matches, players)
    assert first == second
