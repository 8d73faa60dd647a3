import pytest
from scorekeeper.exceptions import InvalidConfig, InvalidOutcome
from scorekeeper.schemas import MatchConfig, PointOutcome
from scorekeeper.services.validation import (
    validate_config,
    validate_outcome,
    validate_participants,
)


def test_flat_defaults_are_resolved() -> None:
    cfg = validate_config({"mode": "flat", "pointsToWin": 11})
    assert cfg.winBy == 2
    assert cfg.gamesToWin is None
    assert cfg.setsToWin is None


def test_hierarchical_defaults_are_resolved() -> None:
    cfg = validate_config(MatchConfig(mode="hierarchical"))
    assert cfg.winBy == 1
    assert cfg.gamesToWin == 6
    assert cfg.setsToWin == 2


@pytest.mark.parametrize(
    "config, msg",
    [
        ({"pointsToWin": 0}, "pointsToWin"),
        ({"pointsToWin": 4, "winBy": 0}, "winBy"),
        ({"pointsToWin": 4, "winBy": -2}, "winBy"),
        ({"mode": "flat", "gamesToWin": 6}, "Flat matches"),
        ({"mode": "hierarchical", "setsToWin": 0}, "setsToWin"),
        ({"mode": "hierarchical", "gamesToWin": 0}, "gamesToWin"),
        ({"mode": "doubles"}, "mode"),
        ({"pointsToWin": "four"}, "pointsToWin"),
        ({"pointsToWin": True}, "pointsToWin"),
        ({"tiebreakTo": 7}, "tiebreakTo"),
    ],
    ids=[
        "zero-minimum",
        "zero-margin",
        "negative-margin",
        "flat-with-games",
        "zero-sets",
        "zero-games",
        "unknown-mode",
        "non-integer",
        "boolean",
        "unknown-field",
    ],
)
def test_rejects_invalid_config(config, msg) -> None:
    with pytest.raises(InvalidConfig) as exc:
        validate_config(config)
    assert msg.lower() in str(exc.value).lower()
    assert exc.value.code == "match_config_invalid"
    assert exc.value.status_code == 400


@pytest.mark.parametrize(
    "participants",
    [["alice"], ["alice", "alice"], ["alice", ""], "ab", ["a", "b", "c"]],
)
def test_rejects_invalid_participants(participants) -> None:
    with pytest.raises(InvalidConfig):
        validate_participants(participants)


def test_accepts_outcomes_consistent_with_serve() -> None:
    validate_outcome(PointOutcome(winnerId="alice", ace=True), ("alice", "bob"), "alice")
    validate_outcome(PointOutcome(winnerId="bob", faults=2), ("alice", "bob"), "alice")
    validate_outcome(PointOutcome(winnerId="bob", unforcedError=True, lets=2), ("alice", "bob"), "alice")


@pytest.mark.parametrize(
    "outcome, msg",
    [
        (PointOutcome(winnerId="carol"), "not in this match"),
        (PointOutcome(winnerId="bob", ace=True), "ace"),
        (PointOutcome(winnerId="alice", faults=2), "double fault"),
    ],
)
def test_rejects_inconsistent_outcomes(outcome, msg) -> None:
    with pytest.raises(InvalidOutcome) as exc:
        validate_outcome(outcome, ("alice", "bob"), "alice")
    assert msg in str(exc.value)
