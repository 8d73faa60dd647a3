from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Mapping, Sequence, Union

from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import InvalidConfig, NotFound
from ..models import FLAT, HIERARCHICAL, Competition, Game, Match, MatchSet, Player, Point
from ..schemas import MatchConfig, MatchOut
from ..time_utils import to_naive_utc, utc_now
from . import ledger
from .progression import atomic
from .validation import validate_config, validate_participants

logger = logging.getLogger(__name__)


async def create_match(
    session: AsyncSession,
    participants: Sequence[str],
    config: Union[MatchConfig, Mapping[str, Any]],
    *,
    competition_id: str | None = None,
    server_id: str | None = None,
    start_date: datetime | None = None,
) -> MatchOut:
    """Create a match and open its first point.

    The scoring mode in ``config`` is stored on the match and never changes.
    ``server_id`` defaults to the first participant; the other participant
    receives. Hierarchical matches also get set 1 and game 1.
    """

    cfg = validate_config(config)
    player1_id, player2_id = validate_participants(participants)
    server = server_id or player1_id
    if server not in (player1_id, player2_id):
        raise InvalidConfig(f"server '{server}' is not a participant.")
    receiver = player2_id if server == player1_id else player1_id

    async with atomic(session):
        for pid in (player1_id, player2_id):
            if await session.get(Player, pid) is None:
                raise NotFound("player", pid)
        if competition_id is not None and await session.get(Competition, competition_id) is None:
            raise NotFound("competition", competition_id)

        match = Match(
            id=uuid.uuid4().hex,
            competition_id=competition_id,
            mode=HIERARCHICAL if cfg.hierarchical else FLAT,
            points_to_win=cfg.pointsToWin,
            win_by=cfg.winBy,
            games_to_win=cfg.gamesToWin,
            sets_to_win=cfg.setsToWin,
            player1_id=player1_id,
            player2_id=player2_id,
            start_date=to_naive_utc(start_date) or utc_now(),
            end_date=None,
            winner_id=None,
        )
        session.add(match)
        await session.flush()

        game_id = None
        if cfg.hierarchical:
            first_set = MatchSet(id=uuid.uuid4().hex, match_id=match.id, number=1)
            session.add(first_set)
            await session.flush()
            first_game = Game(
                id=uuid.uuid4().hex,
                match_id=match.id,
                set_id=first_set.id,
                number=1,
                server_id=server,
                receiver_id=receiver,
            )
            session.add(first_game)
            await session.flush()
            game_id = first_game.id

        session.add(
            Point(
                id=uuid.uuid4().hex,
                match_id=match.id,
                game_id=game_id,
                seq=1,
                number=1,
                server_id=server,
                receiver_id=receiver,
            )
        )
        await session.flush()
        out = await ledger.match_out(session, match)

    logger.info("Created %s match %s (%s vs %s)", match.mode, match.id, player1_id, player2_id)
    return out
