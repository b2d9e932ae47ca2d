"""
Match scoring and leaderboard calculation service.
Decides match winners and computes per-player statistics and rankings.

Everything in this module is pure: it works on already-fetched ORM objects
and never touches the database.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from tennis_backend.utils.constants import TIE_BREAK_DEFAULTS_TO_PLAYER1
from tennis_backend.database.models import Match, MatchStatus, User


# ============================================================================
# Score Evaluation
# ============================================================================

def calculate_winner(player1_games: int, player2_games: int) -> int:
    """
    Determine winner: 1 = player1, 2 = player2, -1 = tie.

    Args:
        player1_games: Games won by player 1 (in a set, or summed over a match)
        player2_games: Games won by player 2

    Returns:
        Winner indicator (1, 2, or -1 for tie)
    """
    if player1_games > player2_games:
        return 1
    elif player2_games > player1_games:
        return 2
    else:
        return -1


def resolve_match_winner(player1_games: int, player2_games: int) -> int:
    """
    Decide who is awarded a match being finalized.

    Higher aggregate game count wins. Equal counts fall back to the
    TIE_BREAK_DEFAULTS_TO_PLAYER1 policy.

    Returns:
        1 or 2

    Raises:
        ValueError: If the games are tied and ties are not awarded to player 1
    """
    winner = calculate_winner(player1_games, player2_games)
    if winner != -1:
        return winner
    if TIE_BREAK_DEFAULTS_TO_PLAYER1:
        return 1
    raise ValueError(
        f"Match cannot end in a tie ({player1_games}-{player2_games}). "
        "Enter scores that result in a clear winner."
    )


def set_winner(player1_games: int, player2_games: int, games_per_set: int) -> int:
    """
    Determine the winner of a single set.

    A set goes to the first player reaching games_per_set with a two-game
    lead, or winning games_per_set + 1 to games_per_set (tie-break).

    Returns:
        1, 2, or -1 if the set is unfinished
    """
    high = max(player1_games, player2_games)
    low = min(player1_games, player2_games)
    finished = (high >= games_per_set and high - low >= 2) or (
        high == games_per_set + 1 and low == games_per_set
    )
    if not finished:
        return -1
    return calculate_winner(player1_games, player2_games)


def count_sets_won(sets: Iterable, games_per_set: int) -> Tuple[int, int]:
    """Count finished sets won by each player. Unfinished sets are ignored."""
    player1_sets = 0
    player2_sets = 0
    for match_set in sets:
        winner = set_winner(match_set.player1_games, match_set.player2_games, games_per_set)
        if winner == 1:
            player1_sets += 1
        elif winner == 2:
            player2_sets += 1
    return player1_sets, player2_sets


def sum_set_games(sets: Iterable) -> Tuple[int, int]:
    """Match-level scores are the sum of games over all sets."""
    player1_total = 0
    player2_total = 0
    for match_set in sets:
        player1_total += match_set.player1_games
        player2_total += match_set.player2_games
    return player1_total, player2_total


# ============================================================================
# PlayerStats Class
# ============================================================================

class PlayerStats:
    """Running totals for a single player."""

    def __init__(self, player_id: int, player_name: Optional[str] = None):
        self.player_id = player_id
        self.player_name = player_name
        self.matches_played = 0
        self.wins = 0
        self.losses = 0
        self.games_won = 0
        self.games_lost = 0

    @property
    def win_rate(self) -> float:
        """Calculate overall win rate."""
        if self.matches_played == 0:
            return 0.0
        return self.wins / self.matches_played

    @property
    def game_diff(self) -> int:
        return self.games_won - self.games_lost

    def record_match(self, own_games: int, opponent_games: int, won: bool) -> None:
        """Record one completed match from this player's side."""
        self.matches_played += 1
        self.games_won += own_games
        self.games_lost += opponent_games
        if won:
            self.wins += 1
        else:
            self.losses += 1

    def as_tuple(self) -> Tuple[int, int, int, int, int]:
        return (self.matches_played, self.wins, self.losses, self.games_won, self.games_lost)


# ============================================================================
# Match Aggregation
# ============================================================================

def is_countable(match: Match) -> bool:
    """Only completed matches with a decided winner count toward statistics."""
    return match.status == MatchStatus.COMPLETED and match.winner_id is not None


def aggregate_player_stats(
    matches: Iterable[Match], players: Iterable[User]
) -> Dict[int, PlayerStats]:
    """
    Fold completed matches into per-player statistics.

    Args:
        matches: Match ORM objects
        players: Known players (User ORM objects); they seed the result in order

    Returns:
        Dict mapping player_id to PlayerStats. Every known player has an
        entry, including players without matches.
    """
    stats: Dict[int, PlayerStats] = {}
    for player in players:
        stats[player.id] = PlayerStats(player.id, player.full_name or player.email)

    for match in matches:
        if not is_countable(match):
            continue

        player1_games = match.player1_score or 0
        player2_games = match.player2_score or 0

        # Unknown players are skipped for their side only
        player1 = stats.get(match.player1_id)
        if player1 is not None:
            player1.record_match(
                player1_games, player2_games, won=match.winner_id == match.player1_id
            )

        player2 = stats.get(match.player2_id)
        if player2 is not None:
            player2.record_match(
                player2_games, player1_games, won=match.winner_id == match.player2_id
            )

    return stats


# ============================================================================
# Leaderboard Ranking
# ============================================================================

@dataclass
class LeaderboardEntry:
    """One ranked row of a leaderboard."""

    player_id: int
    player_name: Optional[str]
    games_won: int
    games_lost: int
    matches_played: int
    wins: int
    losses: int
    win_rate: float
    rank: int


def _ranking_key(player_stats: PlayerStats):
    # games won desc, then win rate desc, then player id asc
    return (-player_stats.games_won, -player_stats.win_rate, player_stats.player_id)


def rank_players(stats: Dict[int, PlayerStats]) -> List[LeaderboardEntry]:
    """
    Rank players who have played at least one completed match.

    Ranks are 1-based positions in the sorted order, so players with equal
    keys still get distinct ranks.
    """
    ranked = sorted(
        (s for s in stats.values() if s.matches_played > 0),
        key=_ranking_key,
    )

    return [
        LeaderboardEntry(
            player_id=s.player_id,
            player_name=s.player_name,
            games_won=s.games_won,
            games_lost=s.games_lost,
            matches_played=s.matches_played,
            wins=s.wins,
            losses=s.losses,
            win_rate=round(s.win_rate, 3),
            rank=position,
        )
        for position, s in enumerate(ranked, start=1)
    ]


def build_leaderboard(
    matches: Sequence[Match], players: Sequence[User]
) -> List[LeaderboardEntry]:
    """Aggregate and rank in one step."""
    return rank_players(aggregate_player_stats(matches, players))
