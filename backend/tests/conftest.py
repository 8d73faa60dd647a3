import os
import sys

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Register every ledger table with the declarative Base before create_all.
from scorekeeper import db, models  # noqa: E402
from scorekeeper.services import latest_point, record_point_outcome  # noqa: E402

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

PLAYER_IDS = ["alice", "bob", "carol", "dave"]
COMPETITION_ID = "ladder"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def session_maker(anyio_backend):
    """Fresh in-memory database with a small roster and one competition."""

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    maker = sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(db.Base.metadata.create_all)
        async with maker() as session:
            session.add_all(
                [models.Player(id=pid, name=pid.title()) for pid in PLAYER_IDS]
            )
            session.add(models.Competition(id=COMPETITION_ID, name="Club ladder"))
            await session.commit()
        yield maker
    finally:
        await engine.dispose()


@pytest.fixture
async def session(session_maker):
    async with session_maker() as s:
        yield s


@pytest.fixture
def play():
    """Record a run of points, each won by the listed player."""

    async def _play(session, match_id, winners, **extra):
        update = await latest_point(session, match_id)
        for winner in winners:
            update = await record_point_outcome(
                session,
                match_id,
                update.pointNumber,
                {"winnerId": winner, **extra},
                game_id=update.gameId,
            )
        return update

    return _play
