"""
Pytest configuration and fixtures for Consent Log tests
"""

import os
import sys
from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH119, PTH120

from consent_log.database import Base, get_db  # noqa: E402
from consent_log.exception_handlers import register_exception_handlers  # noqa: E402
from consent_log.models.consent_record import ConsentRecord  # noqa: E402, F401
from consent_log.repositories.consent_repository import ConsentRepository  # noqa: E402
from consent_log.routes import consents  # noqa: E402
from consent_log.services.consent_service import ConsentLog  # noqa: E402

# Test database URL (SQLite in-memory for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def test_engine():
    """Create a fresh in-memory database for each test function"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,  # Set to True for SQL debugging
        poolclass=StaticPool,  # Single shared connection keeps the in-memory DB alive
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for tests that need it."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def repository(test_db: AsyncSession) -> ConsentRepository:
    return ConsentRepository(test_db)


@pytest.fixture
def consent_log(repository: ConsentRepository) -> ConsentLog:
    return ConsentLog(repository)


@pytest.fixture
def test_app(session_factory) -> FastAPI:
    """Minimal app with the consents router, exception handlers and the test database"""
    app = FastAPI()
    app.include_router(consents.router, prefix="/api/v1/consents")
    register_exception_handlers(app)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as async_client:
        yield async_client
