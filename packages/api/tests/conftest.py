# This project was developed with assistance from AI tools.
"""Shared fixtures: in-memory database, deterministic clock, mock gateways.

Service tests run against the real ORM models on SQLite (aiosqlite). Route
tests drive the real app through ``httpx.ASGITransport`` with the database,
gateways and clock dependencies overridden.
"""

import httpx
import pytest
import pytest_asyncio
from loan_db import build_engine, build_session_factory, get_db, init_db

from loan_orchestrator.clients import get_gateways
from loan_orchestrator.core.clock import get_clock
from loan_orchestrator.core.config import Settings

from tests.factories import SteppingClock, make_gateways


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def gateways():
    return make_gateways()


@pytest.fixture
def cfg():
    """Settings with defaults only, independent of any local .env."""
    return Settings(_env_file=None)


@pytest_asyncio.fixture
async def db_engine():
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    factory = build_session_factory(db_engine)
    async with factory() as session:
        yield session


@pytest.fixture
def client_factory(db_session, gateways, clock):
    """Factory returning an async httpx client bound to the test database."""
    from loan_orchestrator.main import app

    def _make() -> httpx.AsyncClient:
        async def _get_db():
            yield db_session

        app.dependency_overrides[get_db] = _get_db
        app.dependency_overrides[get_gateways] = lambda: gateways
        app.dependency_overrides[get_clock] = lambda: clock
        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        return httpx.AsyncClient(transport=transport, base_url="http://test")

    yield _make

    app.dependency_overrides.clear()
