"""Match setup, scoring transactions and ledger aggregates."""

from .validation import validate_config, validate_outcome, validate_participants
from .setup import create_match
from .progression import record_point_outcome, undo_last_point
from .stats import (
    competition_matches,
    current_score,
    get_match,
    latest_point,
    match_statistics,
    standings,
)

__all__ = [
    "validate_config",
    "validate_outcome",
    "validate_participants",
    "create_match",
    "record_point_outcome",
    "undo_last_point",
    "competition_matches",
    "current_score",
    "get_match",
    "latest_point",
    "match_statistics",
    "standings",
]
