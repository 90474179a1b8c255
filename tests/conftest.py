"""Root conftest: environment defaults plus in-memory database and HTTP client fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db is overridden to hand out sessions from the test engine, with the
      same rollback behaviour as production (DatabaseSessionManager.session)
    - db_manager is patched so the readiness probe sees the test database
"""

import os

os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)
os.environ.setdefault("LOG_FORMAT", "text")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

import tasklink.infrastructure.database as db_module  # noqa: E402
from tasklink.db.session import (  # noqa: E402
    create_engine_for, create_schema, create_session_factory, drop_schema,
)
from tasklink.infrastructure.database import (  # noqa: E402
    DatabaseSessionManager, get_db,
)
from tasklink.main import app  # noqa: E402


@pytest.fixture
async def test_engine():
    engine = create_engine_for("sqlite+aiosqlite:///:memory:")
    await create_schema(engine)
    yield engine
    await drop_schema(engine)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """HTTP client against the app with the DB dependency overridden."""
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory

    async def override_get_db():
        async with fake_manager.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    original_manager = db_module.db_manager
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
