import logging
import os

logger = logging.getLogger(__name__)


def _parse_positive_int(env_var: str, default: int) -> int:
    raw_value = os.getenv(env_var)
    if raw_value is None:
        return default

    try:
        value = int(raw_value)
    except ValueError:
        logger.warning(
            "%s is not a valid integer (got %r); defaulting to %d",
            env_var,
            raw_value,
            default,
        )
        return default

    if value <= 0:
        logger.warning("%s must be positive; defaulting to %d", env_var, default)
        return default

    return value


# Flat matches: first to DEFAULT_POINTS_TO_WIN, ahead by DEFAULT_WIN_BY.
# Hierarchical matches use the same point rule inside each game.
DEFAULT_POINTS_TO_WIN = _parse_positive_int("DEFAULT_POINTS_TO_WIN", 4)
DEFAULT_WIN_BY = _parse_positive_int("DEFAULT_WIN_BY", 2)
DEFAULT_GAMES_TO_WIN = _parse_positive_int("DEFAULT_GAMES_TO_WIN", 6)
DEFAULT_SETS_TO_WIN = _parse_positive_int("DEFAULT_SETS_TO_WIN", 2)
