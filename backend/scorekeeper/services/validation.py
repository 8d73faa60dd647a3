from typing import Any, Mapping, Sequence, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import InvalidConfig, InvalidOutcome
from ..schemas import MatchConfig, PointOutcome


def _format_pydantic_error(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "config"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def validate_config(config: Union[MatchConfig, Mapping[str, Any]]) -> MatchConfig:
    """Validate match scoring rules and return them with defaults filled in.

    Rules:
    - ``pointsToWin`` and ``winBy`` must be >= 1
    - Flat matches must not carry ``gamesToWin`` / ``setsToWin``
    - Hierarchical ``gamesToWin`` and ``setsToWin`` must be >= 1
    """

    if not isinstance(config, MatchConfig):
        try:
            config = MatchConfig.model_validate(dict(config))
        except PydanticValidationError as exc:
            raise InvalidConfig(_format_pydantic_error(exc)) from exc
        except (TypeError, ValueError) as exc:
            raise InvalidConfig(str(exc)) from exc

    if config.pointsToWin <= 0:
        raise InvalidConfig("pointsToWin must be >= 1.")
    if config.winBy is not None and config.winBy <= 0:
        raise InvalidConfig("winBy must be >= 1.")

    if not config.hierarchical:
        if config.gamesToWin is not None or config.setsToWin is not None:
            raise InvalidConfig(
                "Flat matches cannot define gamesToWin or setsToWin."
            )
        return config.model_copy(update={"winBy": config.margin})

    if config.gamesToWin is not None and config.gamesToWin <= 0:
        raise InvalidConfig("gamesToWin must be >= 1.")
    if config.setsToWin is not None and config.setsToWin <= 0:
        raise InvalidConfig("setsToWin must be >= 1.")

    return config.model_copy(
        update={
            "winBy": config.margin,
            "gamesToWin": config.games_needed,
            "setsToWin": config.sets_needed,
        }
    )


def validate_participants(participants: Sequence[str]) -> Tuple[str, str]:
    if isinstance(participants, (str, bytes)) or len(participants) != 2:
        raise InvalidConfig("A match requires exactly two participants.")
    first, second = participants
    if not first or not second:
        raise InvalidConfig("Participant ids must not be empty.")
    if first == second:
        raise InvalidConfig("A player cannot play against themselves.")
    return first, second


def validate_outcome(
    outcome: PointOutcome,
    participants: Sequence[str],
    server_id: str,
) -> None:
    """Check a point outcome against the point it is recorded on.

    Rules:
    - The winner must be one of the two participants
    - An ace can only be won by the server
    - A double fault (more than one fault) can only be won by the receiver
    """

    if outcome.winnerId not in participants:
        raise InvalidOutcome(f"player '{outcome.winnerId}' is not in this match.")
    if outcome.ace and outcome.winnerId != server_id:
        raise InvalidOutcome("An ace must be won by the server.")
    if outcome.faults > 1 and outcome.winnerId == server_id:
        raise InvalidOutcome("A double fault cannot be won by the server.")
