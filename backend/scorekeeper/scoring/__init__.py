"""Scoring engine for point-by-point matches."""

from .rules import (
    GAME,
    SET,
    ContinueScope,
    Decision,
    MatchWon,
    ScopeSeed,
    ScopeWon,
    ScoreHistory,
    decide,
    flat_rotation,
    scope_won,
)

__all__ = [
    "GAME",
    "SET",
    "ContinueScope",
    "Decision",
    "MatchWon",
    "ScopeSeed",
    "ScopeWon",
    "ScoreHistory",
    "decide",
    "flat_rotation",
    "scope_won",
]
