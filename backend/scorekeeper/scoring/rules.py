"""Point-by-point scoring rules.

Flat matches are a single race to ``pointsToWin`` with a ``winBy`` margin.
Hierarchical matches nest points → games → sets; a game uses the same point
rule and games and sets are first to ``gamesToWin`` / ``setsToWin``.

``decide`` is pure: it receives the counts *before* the point and returns a
decision describing what the point closed and who serves next.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Tuple, Union

from ..schemas import MatchConfig, PointOutcome

GAME = "game"
SET = "set"

ScopeLevel = Literal["game", "set"]


@dataclass(frozen=True)
class ScoreHistory:
    """Counts for the open scope up to, but excluding, the point just played."""

    participants: Tuple[str, str]
    point_number: int
    server_id: str
    receiver_id: str
    points: Dict[str, int] = field(default_factory=dict)
    games: Dict[str, int] = field(default_factory=dict)
    sets: Dict[str, int] = field(default_factory=dict)

    def opponent(self, player_id: str) -> str:
        first, second = self.participants
        if player_id == first:
            return second
        if player_id == second:
            return first
        raise ValueError(f"{player_id!r} is not a participant")


@dataclass(frozen=True)
class ScopeSeed:
    """Opening assignment for the next game."""

    server_id: str
    receiver_id: str
    point_number: int = 1


@dataclass(frozen=True)
class ContinueScope:
    next_point_number: int
    server_id: str
    receiver_id: str


@dataclass(frozen=True)
class ScopeWon:
    """A game (``level == "game"``) or a game and its set (``"set"``) closed."""

    winner_id: str
    level: ScopeLevel
    next_scope_seed: ScopeSeed


@dataclass(frozen=True)
class MatchWon:
    winner_id: str


Decision = Union[ContinueScope, ScopeWon, MatchWon]


def scope_won(count: int, opponent: int, minimum: int, win_by: int = 1) -> bool:
    """Return ``True`` once ``count`` reaches ``minimum`` with a ``win_by`` lead.

    Below ``minimum`` the scope never closes, whatever the margin.
    """
    return count >= minimum and count - opponent >= win_by


def flat_rotation(point_number: int, server_id: str, receiver_id: str) -> Tuple[str, str]:
    """Server and receiver for the point after ``point_number``.

    Serve changes hands after every even-numbered point.
    """
    if point_number % 2 == 0:
        return receiver_id, server_id
    return server_id, receiver_id


def decide(config: MatchConfig, history: ScoreHistory, outcome: PointOutcome) -> Decision:
    winner = outcome.winnerId
    loser = history.opponent(winner)

    won = history.points.get(winner, 0) + 1
    lost = history.points.get(loser, 0)

    if not scope_won(won, lost, config.pointsToWin, config.margin):
        if config.hierarchical:
            server, receiver = history.server_id, history.receiver_id
        else:
            server, receiver = flat_rotation(
                history.point_number, history.server_id, history.receiver_id
            )
        return ContinueScope(history.point_number + 1, server, receiver)

    if not config.hierarchical:
        return MatchWon(winner)

    seed = ScopeSeed(server_id=history.receiver_id, receiver_id=history.server_id)

    games = history.games.get(winner, 0) + 1
    if games < config.games_needed:
        return ScopeWon(winner, GAME, seed)

    sets = history.sets.get(winner, 0) + 1
    if sets < config.sets_needed:
        return ScopeWon(winner, SET, seed)

    return MatchWon(winner)
