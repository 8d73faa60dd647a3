"""Scoring transactions for a running match.

``record_point_outcome`` and ``undo_last_point`` are the only writers of the
point ledger after setup. Each call holds the match's lock, performs all of
its writes on the caller's session and commits once; on any error the
session is rolled back so no partial state (for example a finished game
without its successor) is ever visible.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db_errors import is_unique_violation
from ..exceptions import (
    Conflict,
    DomainException,
    InvalidOutcome,
    MatchAlreadyComplete,
    NotFound,
    OutOfSequence,
    PersistenceFailure,
)
from ..locks import KeyedLocks, match_locks
from ..models import Game, Match, MatchResult, MatchSet, Point
from ..schemas import PointOutcome, ScoreUpdate
from ..scoring import SET, ContinueScope, Decision, MatchWon, ScopeWon, decide
from ..time_utils import utc_now
from . import ledger
from .validation import validate_outcome

logger = logging.getLogger(__name__)


@asynccontextmanager
async def atomic(
    session: AsyncSession, *, point_number: int | None = None
) -> AsyncIterator[None]:
    """Commit everything done inside the block, or nothing.

    Unique constraint violations surface as ``Conflict``; any other database
    error surfaces as ``PersistenceFailure``. Nothing is retried.
    """

    try:
        yield
        await session.commit()
    except DomainException:
        await session.rollback()
        raise
    except SQLAlchemyError as exc:
        await session.rollback()
        if point_number is not None and is_unique_violation(exc):
            raise Conflict(None, point_number) from exc
        raise PersistenceFailure(str(getattr(exc, "orig", None) or exc)) from exc
    except Exception:
        await session.rollback()
        raise


def _coerce_outcome(outcome: Union[PointOutcome, Mapping[str, Any]]) -> PointOutcome:
    if isinstance(outcome, PointOutcome):
        return outcome
    try:
        return PointOutcome.model_validate(dict(outcome))
    except PydanticValidationError as exc:
        raise InvalidOutcome(str(exc)) from exc
    except (TypeError, ValueError) as exc:
        raise InvalidOutcome(f"outcome must be a mapping: {exc}") from exc


def _new_point(
    match: Match,
    *,
    seq: int,
    number: int,
    server_id: str,
    receiver_id: str,
    game_id: str | None = None,
) -> Point:
    return Point(
        id=uuid.uuid4().hex,
        match_id=match.id,
        game_id=game_id,
        seq=seq,
        number=number,
        server_id=server_id,
        receiver_id=receiver_id,
        winner_id=None,
        faults=0,
        lets=0,
        ace=False,
        unforced_error=False,
    )


async def _close_game(
    session: AsyncSession, point: Point, winner_id: str, *, close_set: bool
) -> Game:
    game = await session.get(Game, point.game_id)
    game.winner_id = winner_id
    if close_set:
        match_set = await session.get(MatchSet, game.set_id)
        match_set.winner_id = winner_id
    return game


async def _apply_decision(
    session: AsyncSession, match: Match, point: Point, decision: Decision
) -> Point | None:
    """Write what ``decision`` implies and return the next open point."""

    if isinstance(decision, ContinueScope):
        nxt = _new_point(
            match,
            seq=point.seq + 1,
            number=decision.next_point_number,
            server_id=decision.server_id,
            receiver_id=decision.receiver_id,
            game_id=point.game_id,
        )
        session.add(nxt)
        return nxt

    if isinstance(decision, ScopeWon):
        closes_set = decision.level == SET
        game = await _close_game(
            session, point, decision.winner_id, close_set=closes_set
        )
        set_id = game.set_id
        game_number = game.number + 1
        if closes_set:
            previous = await session.get(MatchSet, game.set_id)
            new_set = MatchSet(
                id=uuid.uuid4().hex,
                match_id=match.id,
                number=previous.number + 1,
                winner_id=None,
            )
            session.add(new_set)
            await session.flush()
            set_id = new_set.id
            game_number = 1
            logger.info(
                "Set %s of match %s won by %s",
                previous.number,
                match.id,
                decision.winner_id,
            )

        seed = decision.next_scope_seed
        new_game = Game(
            id=uuid.uuid4().hex,
            match_id=match.id,
            set_id=set_id,
            number=game_number,
            server_id=seed.server_id,
            receiver_id=seed.receiver_id,
            winner_id=None,
        )
        session.add(new_game)
        await session.flush()
        nxt = _new_point(
            match,
            seq=point.seq + 1,
            number=seed.point_number,
            server_id=seed.server_id,
            receiver_id=seed.receiver_id,
            game_id=new_game.id,
        )
        session.add(nxt)
        logger.debug("Game %s of match %s won by %s", game.number, match.id, decision.winner_id)
        return nxt

    if isinstance(decision, MatchWon):
        if point.game_id is not None:
            await _close_game(session, point, decision.winner_id, close_set=True)
        match.end_date = utc_now()
        match.winner_id = decision.winner_id
        session.add(
            MatchResult(
                id=uuid.uuid4().hex,
                match_id=match.id,
                winner_id=decision.winner_id,
            )
        )
        logger.info("Match %s won by %s", match.id, decision.winner_id)
        return None

    raise AssertionError(f"unhandled scoring decision: {decision!r}")


async def _repeats_last_point(
    session: AsyncSession, match: Match, point_number: int, game_id: str | None
) -> bool:
    """Return ``True`` if the submission names the most recently recorded point.

    Without ``game_id`` this still matches after that point closed a game and
    the open point moved into the next one.
    """

    last = await ledger.last_played_point(session, match.id)
    if last is None or last.number != point_number:
        return False
    return game_id is None or game_id == last.game_id


async def _check_sequence(
    session: AsyncSession,
    match: Match,
    point: Point,
    point_number: int,
    game_id: str | None,
) -> None:
    if point_number == point.number and (game_id is None or game_id == point.game_id):
        return
    if await _repeats_last_point(session, match, point_number, game_id):
        raise Conflict(point.number, point_number)
    scope_game = game_id if game_id is not None else point.game_id
    if await ledger.is_recorded(session, match.id, point_number, scope_game):
        raise Conflict(point.number, point_number)
    raise OutOfSequence(point.number, point_number)


async def record_point_outcome(
    session: AsyncSession,
    match_id: str,
    point_number: int,
    outcome: Union[PointOutcome, Mapping[str, Any]],
    *,
    game_id: str | None = None,
    locks: KeyedLocks = match_locks,
) -> ScoreUpdate:
    """Record the outcome of the open point and advance the match.

    ``point_number`` (and ``game_id`` for hierarchical matches, when given)
    must identify the open point. Resubmitting a point that is already in
    the ledger raises ``Conflict``; any other mismatch raises
    ``OutOfSequence``. A finished match raises ``MatchAlreadyComplete``
    unless the submission repeats its match-winning point.
    """

    outcome = _coerce_outcome(outcome)

    async with locks.hold(match_id):
        async with atomic(session, point_number=point_number):
            match = await ledger.load_match(session, match_id)
            if match.end_date is not None:
                if await _repeats_last_point(session, match, point_number, game_id):
                    raise Conflict(None, point_number)
                raise MatchAlreadyComplete(match_id)

            point = await ledger.open_point(session, match_id)
            if point is None:
                raise NotFound("point", f"{match_id}/open")
            await _check_sequence(session, match, point, point_number, game_id)
            validate_outcome(outcome, match.participants, point.server_id)

            history = await ledger.load_history(session, match, point)
            decision = decide(ledger.config_for(match), history, outcome)

            point.winner_id = outcome.winnerId
            point.faults = outcome.faults
            point.lets = outcome.lets
            point.ace = outcome.ace
            point.unforced_error = outcome.unforcedError
            await session.flush()

            nxt = await _apply_decision(session, match, point, decision)
            await session.flush()
            update = await ledger.score_update(session, match, nxt)

    logger.debug(
        "Recorded point %s (seq %s) of match %s for %s",
        point_number,
        point.seq,
        match_id,
        outcome.winnerId,
    )
    return update


async def undo_last_point(
    session: AsyncSession,
    match_id: str,
    *,
    locks: KeyedLocks = match_locks,
) -> ScoreUpdate:
    """Remove the most recent outcome and reopen that point.

    Any game, set or match the point closed is reopened and the successor
    rows seeded for it are deleted.
    """

    async with locks.hold(match_id):
        async with atomic(session):
            match = await ledger.load_match(session, match_id)
            last = await ledger.last_played_point(session, match_id)
            if last is None:
                raise NotFound("point", f"{match_id}/latest")

            if match.end_date is not None:
                await session.execute(
                    delete(MatchResult).where(MatchResult.match_id == match_id)
                )
                match.end_date = None
                match.winner_id = None

            current = await ledger.open_point(session, match_id)
            if current is not None:
                seeded_game_id = current.game_id
                await session.delete(current)
                await session.flush()
                if seeded_game_id is not None and seeded_game_id != last.game_id:
                    await _delete_seeded_game(session, seeded_game_id, last.game_id)

            if last.game_id is not None:
                game = await session.get(Game, last.game_id)
                game.winner_id = None
                match_set = await session.get(MatchSet, game.set_id)
                match_set.winner_id = None

            last.winner_id = None
            last.faults = 0
            last.lets = 0
            last.ace = False
            last.unforced_error = False
            await session.flush()
            update = await ledger.score_update(session, match, last)

    logger.info("Undid point %s (seq %s) of match %s", last.number, last.seq, match_id)
    return update


async def _delete_seeded_game(
    session: AsyncSession, seeded_game_id: str, previous_game_id: str
) -> None:
    seeded = await session.get(Game, seeded_game_id)
    previous = await session.get(Game, previous_game_id)
    seeded_set_id = seeded.set_id
    await session.delete(seeded)
    await session.flush()
    if seeded_set_id != previous.set_id:
        remaining = (
            await session.execute(select(Game.id).where(Game.set_id == seeded_set_id))
        ).first()
        if remaining is None:
            await session.execute(delete(MatchSet).where(MatchSet.id == seeded_set_id))
