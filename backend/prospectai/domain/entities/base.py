"""Base e mixins para todos os modelos do banco."""

import uuid
from datetime import datetime, timezone
from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


def json_type():
    """
    JSONB no Postgres, JSON genérico nos demais (SQLite nos testes).

    Uma instância nova por coluna: `as_mutable` escuta toda coluna que usa
    a mesma instância de tipo.
    """
    return JSON().with_variant(JSONB(), "postgresql")


def new_id() -> str:
    """Identificadores são strings opacas no formato UUID."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    DateTime sempre com timezone.

    O SQLite devolve datetimes "naive"; aqui eles voltam como UTC para que
    comparações com `utcnow()` nunca misturem naive e aware.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        if value is not None and dialect.name == "sqlite":
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Base(DeclarativeBase):
    """Classe base para todos os modelos."""
    pass


class UUIDPrimaryKeyMixin:
    """Chave primária string/UUID."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)


class TimestampMixin:
    """Adiciona created_at e updated_at automáticos."""

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )
