"""Service test fixtures — async DB, FastAPI test client and herd builders.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe sees the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency; FOR UPDATE is a no-op there,
      so these tests cover rule and counter behavior, not lock contention
    - Builders go through the real commands, never raw inserts, so every
      fixture state is one the engine can actually produce
"""

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

import swinetrack.infrastructure.database as db_module
import swinetrack.models  # noqa: F401
from swinetrack.db.base import Base
from swinetrack.db.session import session_factory_for
from swinetrack.infrastructure.database import DatabaseSessionManager, get_db
from swinetrack.main import app
from swinetrack.schemas.lot import LotCreate
from swinetrack.schemas.pen import PenCreate
from swinetrack.schemas.pig import PigAdmit
from swinetrack.services import handle_lots, handle_pens, handle_pigs

ADMITTED = datetime(2024, 1, 5, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return session_factory_for(test_engine)


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def make_lot(test_db):
    """Create a lot through the engine. Keyword overrides go to LotCreate."""
    counter = {"n": 0}

    async def _make(**overrides):
        counter["n"] += 1
        fields = {
            "code": f"LOTE-2024-{counter['n']:03d}",
            "admission_date": ADMITTED,
            "initial_count": 10,
            "initial_average_weight": 20.0,
            "initial_min_weight": 18.0,
            "initial_max_weight": 22.0,
            "site": "FINISHING",
        }
        fields.update(overrides)
        return await handle_lots.create_lot(test_db, LotCreate(**fields))

    return _make


@pytest.fixture
def make_pen(test_db):
    """Create a pen through the engine."""
    counter = {"n": 0}

    async def _make(lot_id, **overrides):
        counter["n"] += 1
        fields = {
            "number": f"A-{counter['n']:02d}",
            "lot_id": lot_id,
            "capacity": 10,
            "pen_type": "FINISHING",
        }
        fields.update(overrides)
        return await handle_pens.create_pen(test_db, PenCreate(**fields))

    return _make


@pytest.fixture
def admit(test_db):
    """Admit a pig through the engine."""
    counter = {"n": 0}

    async def _admit(lot_id, pen_id, weight=20.0, **overrides):
        counter["n"] += 1
        fields = {
            "tag": f"T-{counter['n']:06d}",
            "lot_id": lot_id,
            "pen_id": pen_id,
            "initial_weight": weight,
            "admission_date": ADMITTED,
        }
        fields.update(overrides)
        return await handle_pigs.admit_pig(test_db, PigAdmit(**fields))

    return _admit


@pytest.fixture
async def herd(make_lot, make_pen, admit):
    """One FINISHING lot of 10 with two pens and one pig T-000001 at 20 kg in the first."""
    lot = await make_lot()
    pen_a = await make_pen(lot.id)
    pen_b = await make_pen(lot.id)
    pig = await admit(lot.id, pen_a.id, 20.0)
    return {"lot": lot, "pen_a": pen_a, "pen_b": pen_b, "pig": pig}
