import os

# Banco SQLite em memória; precisa estar no ambiente antes de importar o prospectai
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from prospectai.domain.entities import Base
from prospectai.infrastructure.database import async_session, engine
from tests.utils import InMemoryProspectRepository


@pytest.fixture
def repo() -> InMemoryProspectRepository:
    return InMemoryProspectRepository()


@pytest.fixture
async def test_tables():
    """
    Cria as tabelas antes do teste e remove depois.
    O dispose fecha a conexão: cada teste começa com um banco em memória novo.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_tables) -> AsyncGenerator[AsyncSession, None]:
    """Sessão de banco limpa para cada teste."""
    async with async_session() as session:
        yield session


@pytest.fixture
async def async_client(test_tables) -> AsyncGenerator[AsyncClient, None]:
    from prospectai.api.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
