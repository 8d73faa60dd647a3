"""Read access to the point ledger.

Every count used to make a scoring decision, and every count reported back
to callers, goes through ``_counts`` so the two can never disagree.
"""

from __future__ import annotations

from typing import Dict

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import NotFound
from ..models import HIERARCHICAL, Game, Match, MatchSet, Point
from ..schemas import MatchConfig, MatchOut, ScoreOut, ScoreUpdate
from ..scoring import ScoreHistory
from ..time_utils import coerce_utc


async def load_match(session: AsyncSession, match_id: str) -> Match:
    match = await session.get(Match, match_id)
    if match is None:
        raise NotFound("match", match_id)
    return match


def config_for(match: Match) -> MatchConfig:
    return MatchConfig(
        mode=match.mode,
        pointsToWin=match.points_to_win,
        winBy=match.win_by,
        gamesToWin=match.games_to_win,
        setsToWin=match.sets_to_win,
    )


async def open_point(session: AsyncSession, match_id: str) -> Point | None:
    """Return the point waiting to be played, if the match is still running."""
    return (
        await session.execute(
            select(Point)
            .where(Point.match_id == match_id, Point.winner_id.is_(None))
            .order_by(Point.seq.desc())
            .limit(1)
        )
    ).scalars().first()


async def last_point(session: AsyncSession, match_id: str) -> Point | None:
    return (
        await session.execute(
            select(Point)
            .where(Point.match_id == match_id)
            .order_by(Point.seq.desc())
            .limit(1)
        )
    ).scalars().first()


async def last_played_point(session: AsyncSession, match_id: str) -> Point | None:
    return (
        await session.execute(
            select(Point)
            .where(Point.match_id == match_id, Point.winner_id.is_not(None))
            .order_by(Point.seq.desc())
            .limit(1)
        )
    ).scalars().first()


async def is_recorded(
    session: AsyncSession,
    match_id: str,
    number: int,
    game_id: str | None,
) -> bool:
    """Return ``True`` if point ``number`` of the scope already has an outcome."""
    stmt = select(Point.id).where(
        Point.match_id == match_id,
        Point.number == number,
        Point.winner_id.is_not(None),
    )
    if game_id is not None:
        stmt = stmt.where(Point.game_id == game_id)
    return (await session.execute(stmt.limit(1))).first() is not None


def _zeroed(match: Match, rows) -> Dict[str, int]:
    counts = {pid: 0 for pid in match.participants}
    for winner_id, total in rows:
        if winner_id in counts:
            counts[winner_id] = int(total)
    return counts


async def _counts(
    session: AsyncSession, match: Match, point: Point | None
) -> tuple[Dict[str, int], Dict[str, int] | None, Dict[str, int] | None]:
    """Win counts for the scope ``point`` belongs to.

    Returns ``(points, games, sets)``; ``games`` and ``sets`` are ``None``
    for flat matches. With no point at all every count is zero.
    """

    hierarchical = match.mode == HIERARCHICAL

    if point is None:
        empty = _zeroed(match, [])
        if hierarchical:
            return empty, dict(empty), dict(empty)
        return empty, None, None

    point_scope = Point.game_id == point.game_id if hierarchical else Point.match_id == match.id
    point_rows = (
        await session.execute(
            select(Point.winner_id, func.count(Point.id))
            .where(point_scope, Point.winner_id.is_not(None))
            .group_by(Point.winner_id)
        )
    ).all()
    points = _zeroed(match, point_rows)
    if not hierarchical:
        return points, None, None

    game = await session.get(Game, point.game_id)
    game_rows = (
        await session.execute(
            select(Game.winner_id, func.count(Game.id))
            .where(Game.set_id == game.set_id, Game.winner_id.is_not(None))
            .group_by(Game.winner_id)
        )
    ).all()
    set_rows = (
        await session.execute(
            select(MatchSet.winner_id, func.count(MatchSet.id))
            .where(MatchSet.match_id == match.id, MatchSet.winner_id.is_not(None))
            .group_by(MatchSet.winner_id)
        )
    ).all()
    return points, _zeroed(match, game_rows), _zeroed(match, set_rows)


async def load_history(session: AsyncSession, match: Match, point: Point) -> ScoreHistory:
    points, games, sets = await _counts(session, match, point)
    return ScoreHistory(
        participants=match.participants,
        point_number=point.number,
        server_id=point.server_id,
        receiver_id=point.receiver_id,
        points=points,
        games=games or {},
        sets=sets or {},
    )


async def scoreboard(
    session: AsyncSession, match: Match, point: Point | None = None
) -> ScoreOut:
    """Counts at the scope of ``point``, defaulting to the latest point."""
    if point is None:
        point = await last_point(session, match.id)
    points, games, sets = await _counts(session, match, point)
    return ScoreOut(points=points, games=games, sets=sets)


async def score_update(
    session: AsyncSession, match: Match, point: Point | None
) -> ScoreUpdate:
    """Describe ``point`` as the next point to play, or the finished match."""
    tallies = await scoreboard(session, match, point)
    if point is None:
        return ScoreUpdate(
            matchId=match.id,
            tallies=tallies,
            complete=match.end_date is not None,
            winnerId=match.winner_id,
        )

    set_id = None
    if point.game_id is not None:
        game = await session.get(Game, point.game_id)
        set_id = game.set_id
    return ScoreUpdate(
        matchId=match.id,
        pointNumber=point.number,
        setId=set_id,
        gameId=point.game_id,
        serverId=point.server_id,
        receiverId=point.receiver_id,
        tallies=tallies,
    )


async def match_out(session: AsyncSession, match: Match) -> MatchOut:
    current = await open_point(session, match.id)
    return MatchOut(
        id=match.id,
        competitionId=match.competition_id,
        config=config_for(match),
        playerIds=list(match.participants),
        startDate=coerce_utc(match.start_date),
        endDate=coerce_utc(match.end_date),
        winnerId=match.winner_id,
        openPoint=await score_update(session, match, current) if current else None,
    )
