"""Pytest configuration and fixtures."""

from typing import AsyncGenerator
from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from toguna.api.auth import create_access_token
from toguna.core import claude_agent
from toguna.services import realtime
from toguna.services.database import Base, get_db
from toguna.models.client import Client
from toguna.models.company import Company, CompanyRank
from toguna.models.operator import Operator, OperatorRole
from toguna.models.project import Project, ProjectStatus
from toguna.main import app


# Create in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def no_redis():
    """Realtime publishing stays disabled unless a test installs a client."""
    realtime.set_redis(None)
    yield
    realtime.set_redis(None)


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get a test database session."""
    async with TestSessionLocal() as session:
        yield session


@pytest.fixture
def override_get_db(db_session: AsyncSession):
    """Override the get_db dependency."""
    async def _override_get_db():
        yield db_session
    return _override_get_db


@pytest.fixture
async def director(db_session: AsyncSession) -> Operator:
    operator = Operator(name="山田 太郎", email="director@toguna.jp", role=OperatorRole.DIRECTOR)
    db_session.add(operator)
    await db_session.commit()
    await db_session.refresh(operator)
    return operator


@pytest.fixture
async def operator(db_session: AsyncSession) -> Operator:
    operator = Operator(name="佐藤 花子", email="operator@toguna.jp", role=OperatorRole.OPERATOR)
    db_session.add(operator)
    await db_session.commit()
    await db_session.refresh(operator)
    return operator


def auth_headers(operator: Operator) -> dict:
    token, _ = create_access_token(operator)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def anon_client(override_get_db) -> AsyncGenerator[AsyncClient, None]:
    """Async test client without credentials."""
    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def client(override_get_db, director: Operator) -> AsyncGenerator[AsyncClient, None]:
    """Async test client signed in as a director."""
    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=auth_headers(director),
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def operator_client(override_get_db, operator: Operator) -> AsyncGenerator[AsyncClient, None]:
    """Async test client signed in as a regular operator."""
    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=auth_headers(operator),
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def mock_anthropic(monkeypatch):
    """Install a Claude agent whose Anthropic client is a mock."""
    agent = claude_agent.ClaudeAgent()
    mock_client = MagicMock()
    mock_response = MagicMock()
    mock_response.content = [MagicMock(text='{"message": "Test response"}')]
    mock_client.messages.create.return_value = mock_response
    agent.client = mock_client
    monkeypatch.setattr(claude_agent, "_agent", agent)
    yield mock_client


@pytest.fixture
def unconfigured_claude(monkeypatch):
    """Force the template and heuristic fallbacks."""
    agent = claude_agent.ClaudeAgent()
    agent.client = None
    monkeypatch.setattr(claude_agent, "_agent", agent)
    return agent


@pytest.fixture
async def sample_project(db_session: AsyncSession) -> Project:
    """An active project for one client with two prospects."""
    client = Client(name="株式会社テスト商事", industry="IT")
    db_session.add(client)
    await db_session.flush()

    project = Project(
        client_id=client.id,
        name="クラウド会計 新規開拓",
        product_name="クラウド会計",
        target_industries=["IT", "製造"],
        status=ProjectStatus.ACTIVE,
        min_appointment_rate=5.0,
    )
    db_session.add(project)
    await db_session.flush()

    db_session.add_all([
        Company(project_id=project.id, name="株式会社アルファ", phone="03-1234-5678",
                email="info@alpha.test", industry="IT", rank=CompanyRank.A),
        Company(project_id=project.id, name="ベータ工業株式会社", phone="06-2345-6789",
                industry="製造", rank=CompanyRank.B),
    ])
    await db_session.commit()
    await db_session.refresh(project)
    return project
