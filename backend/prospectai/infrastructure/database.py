"""Gerencia conexão com o banco (PostgreSQL em produção)."""
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy import event
from sqlalchemy.pool import StaticPool

from prospectai.config import get_settings

settings = get_settings()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Cria a engine assíncrona.

    SQLite em memória (testes) precisa de StaticPool para todas as sessões
    enxergarem o mesmo banco; pool_size/max_overflow só valem para Postgres.
    """
    if database_url.startswith("sqlite"):
        sqlite_engine = create_async_engine(
            database_url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        _enable_sqlite_savepoints(sqlite_engine)
        return sqlite_engine

    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


def _enable_sqlite_savepoints(sqlite_engine: AsyncEngine) -> None:
    """O driver sqlite3 abre transações sozinho e quebra SAVEPOINT; aqui o BEGIN é explícito."""

    @event.listens_for(sqlite_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


engine = build_engine(settings.async_database_url, echo=settings.debug)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency do FastAPI para injetar sessão do banco."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db(bind: AsyncEngine = engine) -> None:
    """Cria tabelas do banco (usar só em dev; produção usa Alembic)."""
    from prospectai.domain.entities import Base
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
