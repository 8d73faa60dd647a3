import asyncio
import os
import uuid

import pytest
from sqlalchemy import select

from scorekeeper import db
from scorekeeper.exceptions import Conflict
from scorekeeper.models import MatchResult, Player
from scorekeeper.services import create_match, record_point_outcome

pytestmark = [
    pytest.mark.postgres,
    pytest.mark.skipif(
        not os.getenv("DATABASE_URL", "").startswith("postgresql"),
        reason="needs DATABASE_URL pointing at PostgreSQL",
    ),
]


async def _get_sessionmaker():
    maker = db.get_sessionmaker()
    async with db.engine.begin() as conn:
        await conn.run_sync(db.Base.metadata.create_all)
    return maker


def test_postgres_flat_match_to_completion():
    async def run():
        sessionmaker = await _get_sessionmaker()
        a, b = uuid.uuid4().hex, uuid.uuid4().hex
        async with sessionmaker() as session:
            session.add_all([Player(id=a, name="A"), Player(id=b, name="B")])
            await session.commit()

            out = await create_match(session, [a, b], {"pointsToWin": 2, "winBy": 1})
            await record_point_outcome(session, out.id, 1, {"winnerId": a})
            update = await record_point_outcome(session, out.id, 2, {"winnerId": a})
            assert update.complete and update.winnerId == a

            result = (
                await session.execute(
                    select(MatchResult).where(MatchResult.match_id == out.id)
                )
            ).scalar_one()
            assert result.winner_id == a

    asyncio.run(run())


def test_postgres_resubmitted_point_conflicts():
    async def run():
        sessionmaker = await _get_sessionmaker()
        a, b = uuid.uuid4().hex, uuid.uuid4().hex
        async with sessionmaker() as session:
            session.add_all([Player(id=a, name="A"), Player(id=b, name="B")])
            await session.commit()

            out = await create_match(session, [a, b], {})
            await record_point_outcome(session, out.id, 1, {"winnerId": b})
            with pytest.raises(Conflict):
                await record_point_outcome(session, out.id, 1, {"winnerId": a})

    asyncio.run(run())
