"""Service test fixtures — engine, host, snapshot store and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database and a fresh engine
    - MANAGER is approved for 3 portfolios; INVESTOR and OTHER hold genesis value
    - db_manager patched so readiness checks see the test database

Design Decisions:
    - The client installs app.state.host directly: ASGITransport does not run
      the lifespan, and tests need to reach the same host they assert on
"""

import pytest
from httpx import ASGITransport, AsyncClient

import mosaic.infrastructure.database as db_module
from mosaic.core.event_log import FixedClock
from mosaic.infrastructure.database import DatabaseSessionManager
from mosaic.main import app
from mosaic.services.ledger_host import LedgerHost
from mosaic.services.ledger_store import LedgerSnapshotStore
from mosaic.services.portfolio_engine import PortfolioEngine
from principals import ADMIN, INVESTOR, MANAGER, OTHER, STARTING_UNITS


@pytest.fixture
def clock():
    return FixedClock(height=7, unix_time=1_700_000_000)


@pytest.fixture
def engine(clock):
    """Fresh engine with MANAGER approved and two funded investors."""
    engine = PortfolioEngine.create(
        ADMIN, clock,
        genesis_balances={INVESTOR: STARTING_UNITS, OTHER: STARTING_UNITS},
    )
    engine.registry.approve_manager(ADMIN, MANAGER, True, 3)
    return engine


@pytest.fixture
async def test_db():
    db = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
def store(test_db):
    return LedgerSnapshotStore(test_db)


@pytest.fixture
def host(engine, store):
    return LedgerHost(engine, store)


@pytest.fixture
async def client(host, test_db):
    """FastAPI test client bound to the host fixture."""
    original_manager = db_module.db_manager
    db_module.db_manager = test_db
    app.state.host = host

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.state.host = None
    db_module.db_manager = original_manager
