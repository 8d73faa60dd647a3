"""Read-only aggregates over the point ledger.

Nothing here writes; an in-progress match is always tolerated and simply
contributes nothing to results that only count finished matches.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Match, MatchResult, Point
from ..schemas import MatchOut, PlayerMatchStats, ScoreOut, ScoreUpdate, StandingRow
from . import ledger


async def current_score(session: AsyncSession, match_id: str) -> ScoreOut:
    """Per-participant counts at the open scope (or the last one once finished)."""
    match = await ledger.load_match(session, match_id)
    return await ledger.scoreboard(session, match)


async def latest_point(session: AsyncSession, match_id: str) -> ScoreUpdate:
    """The point a scorer should play next, for resuming a match."""
    match = await ledger.load_match(session, match_id)
    current = await ledger.open_point(session, match_id)
    return await ledger.score_update(session, match, current)


async def match_statistics(session: AsyncSession, match_id: str) -> List[PlayerMatchStats]:
    """Fold serving and error counters for both participants.

    Faults, double faults, lets and aces belong to the server of each point;
    an unforced error belongs to the player who lost the point.
    """

    match = await ledger.load_match(session, match_id)
    stats: Dict[str, PlayerMatchStats] = {
        pid: PlayerMatchStats(playerId=pid) for pid in match.participants
    }

    played = (Point.match_id == match_id, Point.winner_id.is_not(None))
    serving_rows = (
        await session.execute(
            select(
                Point.server_id,
                func.coalesce(func.sum(Point.faults), 0),
                func.count(case((Point.faults > 1, 1))),
                func.coalesce(func.sum(Point.lets), 0),
                func.count(case((Point.ace.is_(True), 1))),
            )
            .where(*played)
            .group_by(Point.server_id)
        )
    ).all()
    for server_id, faults, double_faults, lets, aces in serving_rows:
        row = stats.get(server_id)
        if row is None:
            continue
        row.faults = int(faults)
        row.doubleFaults = int(double_faults)
        row.lets = int(lets)
        row.aces = int(aces)

    error_rows = (
        await session.execute(
            select(Point.winner_id, func.count(Point.id))
            .where(*played, Point.unforced_error.is_(True))
            .group_by(Point.winner_id)
        )
    ).all()
    first, second = match.participants
    for winner_id, errors in error_rows:
        loser_id = second if winner_id == first else first
        stats[loser_id].unforcedErrors += int(errors)

    return [stats[pid] for pid in match.participants]


async def standings(session: AsyncSession, competition_id: str) -> List[StandingRow]:
    """Competition table ordered by wins, then player id.

    ``played`` only counts matches with a result; players whose matches are
    all still in progress are listed with zeros.
    """

    matches = (
        await session.execute(select(Match).where(Match.competition_id == competition_id))
    ).scalars().all()
    if not matches:
        return []

    results = (
        await session.execute(
            select(MatchResult)
            .join(Match, Match.id == MatchResult.match_id)
            .where(Match.competition_id == competition_id)
        )
    ).scalars().all()
    finished = {r.match_id for r in results}

    played: Dict[str, int] = defaultdict(int)
    wins: Dict[str, int] = defaultdict(int)
    for m in matches:
        for pid in m.participants:
            played[pid] += int(m.id in finished)
    for r in results:
        wins[r.winner_id] += 1

    rows = [
        StandingRow(
            playerId=pid,
            played=played[pid],
            wins=wins[pid],
            losses=played[pid] - wins[pid],
        )
        for pid in played
    ]
    rows.sort(key=lambda row: (-row.wins, row.playerId))
    return rows


async def get_match(session: AsyncSession, match_id: str) -> MatchOut:
    match = await ledger.load_match(session, match_id)
    return await ledger.match_out(session, match)


async def competition_matches(session: AsyncSession, competition_id: str) -> List[MatchOut]:
    matches = (
        await session.execute(
            select(Match)
            .where(Match.competition_id == competition_id)
            .order_by(Match.start_date, Match.id)
        )
    ).scalars().all()
    return [await ledger.match_out(session, m) for m in matches]
