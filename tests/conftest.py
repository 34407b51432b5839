from datetime import datetime
from types import SimpleNamespace

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from workorders.models import Base
from workorders.db import crud
from workorders.services import work_orders
from workorders.services.access import Caller

NOW = datetime(2024, 6, 1, 9, 0)


@pytest_asyncio.fixture
async def db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest_asyncio.fixture
async def people(db):
    """Callers for each tier, backed by real user rows."""
    callers = {}
    for key, role in (("admin", "admin"), ("staff", "staff"), ("other_staff", "staff"), ("client", "client")):
        user = await crud.create_user(db, f"{key}@example.com", "not-a-real-hash", role=role, display_name=key)
        callers[key] = Caller(id=user.id, role=role, name=key)
    return SimpleNamespace(**callers)


@pytest.fixture
def make_work_order(db, people):
    """Factory: create a work order as admin, assigned to ``people.staff`` by default."""
    async def _make(assigned_to="staff", now=NOW, **fields):
        fields.setdefault("description", "Leaking pipe under sink")
        assignee = getattr(people, assigned_to).id if assigned_to else None
        return await work_orders.create_work_order(
            db, people.admin, now=now, assigned_to=assignee, **fields,
        )
    return _make
