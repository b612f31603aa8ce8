# This project was developed with assistance from AI tools.
"""Integration test fixtures -- real PostgreSQL, no mocks.

A session-scoped container provides PostgreSQL with the schema built by
``alembic upgrade head``. Function-scoped fixtures give each test an
isolated DB session with savepoint rollback so tests don't leak state.
Tests are skipped when no Docker daemon is reachable.
"""

import os

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from testcontainers.postgres import PostgresContainer

pytestmark = pytest.mark.integration

_DB_PACKAGE = os.path.join(os.path.dirname(__file__), "..", "..", "..", "db")


# ---------------------------------------------------------------------------
# Session-scoped: container + engine + migrations
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def pg_container():
    """Start postgres:16 via testcontainers."""
    try:
        pg = PostgresContainer(
            image="postgres:16-alpine",
            username="test",
            password="test",
            dbname="test",
        ).start()
    except Exception as exc:
        pytest.skip(f"PostgreSQL container unavailable: {exc}")
    try:
        yield pg
    finally:
        pg.stop()


@pytest.fixture(scope="session")
def db_url(pg_container):
    """Async DB URL for asyncpg."""
    host = pg_container.get_container_host_ip()
    port = pg_container.get_exposed_port(5432)
    return f"postgresql+asyncpg://test:test@{host}:{port}/test"


@pytest.fixture(scope="session")
def sync_db_url(pg_container):
    """Sync DB URL for Alembic (psycopg2)."""
    host = pg_container.get_container_host_ip()
    port = pg_container.get_exposed_port(5432)
    return f"postgresql://test:test@{host}:{port}/test"


@pytest.fixture(scope="session")
def _run_migrations(sync_db_url):
    """Build the schema with alembic upgrade head."""
    from alembic import command
    from alembic.config import Config

    alembic_cfg = Config(os.path.join(_DB_PACKAGE, "alembic.ini"))
    alembic_cfg.set_main_option("script_location", os.path.join(_DB_PACKAGE, "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", sync_db_url)
    command.upgrade(alembic_cfg, "head")


@pytest.fixture(scope="session")
def async_engine(db_url, _run_migrations):
    """Create an async engine pointing at the test container."""
    return create_async_engine(db_url, echo=False, poolclass=NullPool)


# ---------------------------------------------------------------------------
# Function-scoped: per-test session with savepoint rollback
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_session(async_engine):
    """Per-test DB session with savepoint rollback.

    ``expire_on_commit=False`` matches ``db.database.SessionLocal``.
    """
    conn = await async_engine.connect()
    txn = await conn.begin()
    session = AsyncSession(
        bind=conn,
        join_transaction_mode="create_savepoint",
        expire_on_commit=False,
    )
    yield session
    await session.close()
    await txn.rollback()
    await conn.close()


@pytest_asyncio.fixture
async def staff(db_session):
    """One staff profile per approving role, so role notifications have recipients."""
    from tests.functional.data_factory import make_staff_profiles

    profiles = make_staff_profiles()
    db_session.add_all(profiles)
    await db_session.commit()
    return {p.role: p.id for p in profiles}


@pytest.fixture
def client_factory(db_session, async_engine):
    """Factory returning an async httpx client with dependency overrides."""
    from db import DatabaseService
    from db.database import get_db, get_db_service

    from src.main import app
    from src.middleware.auth import get_current_user

    db_service = DatabaseService(async_sessionmaker(async_engine, expire_on_commit=False))

    async def _make(user):
        async def _get_db():
            # Each request starts from fresh rows, as with a new session.
            db_session.expire_all()
            yield db_session

        async def _get_current_user():
            return user

        async def _get_db_service():
            return db_service

        app.dependency_overrides[get_db] = _get_db
        app.dependency_overrides[get_current_user] = _get_current_user
        app.dependency_overrides[get_db_service] = _get_db_service
        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        return httpx.AsyncClient(transport=transport, base_url="http://test")

    yield _make

    app.dependency_overrides.clear()
