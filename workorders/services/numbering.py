"""Work order numbering: WO-<YYYYMMDD>-<seq> with a collision-free daily sequence.

The "highest number today" query is only a hint. Uniqueness comes from the
unique constraint on work_order_number: a colliding insert is rolled back
and retried with the next sequence.
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from workorders.config import get_settings
from workorders.db import crud
from workorders.errors import ConflictError, NumberGenerationFailed
from workorders.models import WorkOrder

logger = logging.getLogger(__name__)

_settings = get_settings()


def day_prefix(day: date) -> str:
    return f"{_settings.numbering.prefix}-{day.strftime('%Y%m%d')}"


def format_number(day: date, sequence: int) -> str:
    width = _settings.numbering.sequence_width
    return f"{day_prefix(day)}-{sequence:0{width}d}"


def parse_sequence(number: str) -> int | None:
    """Trailing numeric sequence of a work order number, or None if malformed."""
    tail = number.rsplit("-", 1)[-1]
    return int(tail) if tail.isdigit() else None


async def _next_sequence(db: AsyncSession, day: date) -> int:
    latest = await crud.get_latest_work_order_number(db, f"{day_prefix(day)}-")
    if latest is None:
        return 1
    return (parse_sequence(latest) or 0) + 1


async def next_work_order_number(db: AsyncSession, today: date) -> str:
    """Best-effort next number for ``today``; not reserved."""
    return format_number(today, await _next_sequence(db, today))


async def insert_numbered(db: AsyncSession, today: date, **fields) -> WorkOrder:
    """Insert a work order under the next free number for ``today``.

    Retries on unique-constraint collisions up to numbering.max_attempts.
    """
    attempts = _settings.numbering.max_attempts
    sequence = await _next_sequence(db, today)

    for attempt in range(1, attempts + 1):
        number = format_number(today, sequence)
        try:
            return await crud.create_work_order(db, work_order_number=number, **fields)
        except IntegrityError:
            await db.rollback()
            if not await crud.work_order_number_exists(db, number):
                # Some other constraint failed; retrying the number won't help.
                logger.error("Insert of work order %s failed on a non-numbering constraint", number)
                raise ConflictError(f"Work order {number} conflicts with existing data")
            logger.warning(
                "Work order number %s already taken (attempt %d/%d)", number, attempt, attempts
            )
            sequence = max(sequence + 1, await _next_sequence(db, today))

    raise NumberGenerationFailed(
        f"Could not allocate a work order number for {today.isoformat()} after {attempts} attempts"
    )
