"""Utilitários de data/hora (ISO-8601, início do dia no fuso do tenant)."""

from datetime import datetime, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo


def ensure_aware(value: datetime) -> datetime:
    """Datetimes sem fuso são tratados como UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Aceita ISO-8601 (inclusive com sufixo Z) ou datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_aware(datetime.fromisoformat(text))


def to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return ensure_aware(value).isoformat()


def start_of_day(now: datetime, tz_name: str) -> datetime:
    """Meia-noite do dia corrente no fuso informado."""
    local_now = ensure_aware(now).astimezone(ZoneInfo(tz_name))
    return local_now.replace(hour=0, minute=0, second=0, microsecond=0)
