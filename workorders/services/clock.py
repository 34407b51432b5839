"""Server clock. Every time-stamping service takes ``now`` and falls back here."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from workorders.config import get_settings

_settings = get_settings()


def now() -> datetime:
    """Current time in the configured business timezone."""
    return datetime.now(ZoneInfo(_settings.timezone))


def resolve(value: datetime | None) -> datetime:
    return value if value is not None else now()
