import pytest
from sqlalchemy import func, select

from scorekeeper.exceptions import NotFound
from scorekeeper.models import Game, Match, MatchResult, MatchSet, Point
from scorekeeper.services import (
    create_match,
    current_score,
    latest_point,
    record_point_outcome,
    undo_last_point,
)

TENNISH = {"mode": "hierarchical", "pointsToWin": 4, "gamesToWin": 2, "setsToWin": 2}


async def _open_points(session, mid):
    return (
        await session.execute(
            select(func.count(Point.id)).where(
                Point.match_id == mid, Point.winner_id.is_(None)
            )
        )
    ).scalar_one()


@pytest.mark.anyio
async def test_undo_reopens_last_flat_point(session, play) -> None:
    mid = (await create_match(session, ["alice", "bob"], {"pointsToWin": 4})).id
    await play(session, mid, ["alice"])
    await play(session, mid, ["bob"], faults=2)

    update = await undo_last_point(session, mid)
    assert update.pointNumber == 2
    assert update.serverId == "alice"
    assert update.tallies.points == {"alice": 1, "bob": 0}
    assert await _open_points(session, mid) == 1

    point = (
        await session.execute(select(Point).where(Point.match_id == mid, Point.seq == 2))
    ).scalar_one()
    assert point.faults == 0 and point.winner_id is None

    update = await record_point_outcome(session, mid, 2, {"winnerId": "alice"})
    assert update.tallies.points == {"alice": 2, "bob": 0}


@pytest.mark.anyio
async def test_undo_reopens_finished_match(session, play) -> None:
    mid = (await create_match(session, ["alice", "bob"], {"pointsToWin": 4, "winBy": 2})).id
    await play(session, mid, ["alice"] * 4)

    update = await undo_last_point(session, mid)
    assert not update.complete
    assert update.pointNumber == 4

    match = await session.get(Match, mid)
    assert match.end_date is None and match.winner_id is None
    assert (await session.execute(select(MatchResult))).first() is None

    update = await play(session, mid, ["bob"])
    assert update.tallies.points == {"alice": 3, "bob": 1}


@pytest.mark.anyio
async def test_undo_game_winning_point_drops_seeded_game(session, play) -> None:
    out = await create_match(session, ["alice", "bob"], TENNISH)
    mid = out.id
    await play(session, mid, ["alice"] * 4)

    update = await undo_last_point(session, mid)
    assert update.gameId == out.openPoint.gameId
    assert update.pointNumber == 4
    assert update.serverId == "alice"
    assert update.tallies.points == {"alice": 3, "bob": 0}
    assert update.tallies.games == {"alice": 0, "bob": 0}

    games = (await session.execute(select(Game).where(Game.match_id == mid))).scalars().all()
    assert len(games) == 1
    assert games[0].winner_id is None
    assert await _open_points(session, mid) == 1


@pytest.mark.anyio
async def test_undo_set_winning_point_drops_seeded_set(session, play) -> None:
    out = await create_match(session, ["alice", "bob"], TENNISH)
    mid = out.id
    await play(session, mid, ["bob"] * 8)
    assert (await current_score(session, mid)).sets == {"alice": 0, "bob": 1}

    update = await undo_last_point(session, mid)
    assert update.setId == out.openPoint.setId
    assert update.tallies.sets == {"alice": 0, "bob": 0}
    assert update.tallies.games == {"alice": 0, "bob": 1}
    assert update.tallies.points == {"alice": 0, "bob": 3}

    sets = (await session.execute(select(MatchSet).where(MatchSet.match_id == mid))).scalars().all()
    assert len(sets) == 1 and sets[0].winner_id is None

    update = await play(session, mid, ["bob"])
    assert update.tallies.sets == {"alice": 0, "bob": 1}


@pytest.mark.anyio
async def test_undo_with_nothing_recorded(session) -> None:
    mid = (await create_match(session, ["alice", "bob"], {})).id
    with pytest.raises(NotFound):
        await undo_last_point(session, mid)
    assert (await latest_point(session, mid)).pointNumber == 1


@pytest.mark.anyio
async def test_undo_reopens_hierarchical_match_game_and_set(session, play) -> None:
    out = await create_match(
        session,
        ["alice", "bob"],
        {"mode": "hierarchical", "pointsToWin": 1, "gamesToWin": 1, "setsToWin": 1},
    )
    mid = out.id
    update = await play(session, mid, ["alice"])
    assert update.complete and update.winnerId == "alice"

    update = await undo_last_point(session, mid)
    assert not update.complete
    assert update.pointNumber == 1
    assert update.gameId == out.openPoint.gameId
    assert update.tallies.points == {"alice": 0, "bob": 0}
    assert update.tallies.games == {"alice": 0, "bob": 0}
    assert update.tallies.sets == {"alice": 0, "bob": 0}

    match = await session.get(Match, mid)
    assert match.end_date is None and match.winner_id is None
    assert (await session.get(Game, out.openPoint.gameId)).winner_id is None
    assert (await session.get(MatchSet, out.openPoint.setId)).winner_id is None
    assert (await session.execute(select(MatchResult))).first() is None
    assert await _open_points(session, mid) == 1

    update = await play(session, mid, ["bob"])
    assert update.complete and update.winnerId == "bob"
    assert update.tallies.sets == {"alice": 0, "bob": 1}
    result = (await session.execute(select(MatchResult))).scalar_one()
    assert result.winner_id == "bob"
