import os

# Precisa estar definido antes de qualquer import de sorrija (Settings é cacheado)
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "chave-de-teste"
os.environ["LOG_JSON"] = "false"
os.environ["AUTO_TRANSITIONS_ENABLED"] = "false"

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sorrija.domain.entities import Base, Organization, User
from sorrija.infrastructure.jobs.transition_runner import LeadTransitionRunner
from sorrija.infrastructure.services.lead_transition_store import SqlAlchemyLeadTransitionStore
from tests.utils import FakeClock, create_session_factory, create_test_engine, make_override_get_db


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """
    Banco novo para cada teste: cria as tabelas antes e descarta a engine depois.
    """
    engine = create_test_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield create_session_factory(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """
    Fixture que fornece uma sessão de banco de dados limpa para cada teste.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
async def organization(db_session: AsyncSession) -> Organization:
    org = Organization(name="Clínica Sorriso", slug="clinica-sorriso", active=True)
    db_session.add(org)
    await db_session.commit()
    return org


@pytest.fixture
async def user(db_session: AsyncSession, organization: Organization) -> User:
    admin = User(
        organization_id=organization.id,
        name="Admin",
        email="admin@clinica.com",
        active=True,
    )
    db_session.add(admin)
    await db_session.commit()
    return admin


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sql_store(session_factory: async_sessionmaker) -> SqlAlchemyLeadTransitionStore:
    # Lote pequeno para exercitar a paginação
    return SqlAlchemyLeadTransitionStore(session_factory, batch_size=2)


@pytest.fixture
def runner(sql_store: SqlAlchemyLeadTransitionStore, clock: FakeClock) -> LeadTransitionRunner:
    return LeadTransitionRunner(store=sql_store, cooldown_seconds=30, clock=clock)


@pytest.fixture
async def async_client(
    session_factory: async_sessionmaker,
    runner: LeadTransitionRunner,
) -> AsyncGenerator[AsyncClient, None]:
    from sorrija.api.main import app
    from sorrija.api.dependencies import get_lead_transition_runner
    from sorrija.infrastructure.database import get_db

    app.dependency_overrides[get_db] = make_override_get_db(session_factory)
    app.dependency_overrides[get_lead_transition_runner] = lambda: runner

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
