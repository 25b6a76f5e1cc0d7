"""Shared test fixtures — async DB, client, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from hrleave.common.constants import LeaveStatus, ReasonCode
from hrleave.database import Base, get_db
from hrleave.main import create_app

# Import model modules so Base.metadata knows every table
import hrleave.holidays.models  # noqa: F401
import hrleave.leave.models  # noqa: F401

# ── SQLite compat: compile PG-specific types ────────────────────────

from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from hrleave.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


@pytest.fixture
def employee_id() -> uuid.UUID:
    return uuid.uuid4()


# ── Date helpers ────────────────────────────────────────────────────

def upcoming(weekday: int, *, weeks_ahead: int = 2) -> date:
    """A date with the given weekday (0=Mon) at least `weeks_ahead` weeks out,
    so submissions made "now" count as in advance."""
    today = date.today()
    base = today + timedelta(weeks=weeks_ahead)
    return base + timedelta(days=(weekday - base.weekday()) % 7)


# ── Model factories ─────────────────────────────────────────────────

def _make_calendar(
    *,
    name: str = "India 2025",
    year: int = 2025,
    location_id: Optional[uuid.UUID] = None,
    is_active: bool = True,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        name=name,
        year=year,
        location_id=location_id,
        is_active=is_active,
        created_at=datetime.now(timezone.utc),
    )


def _make_holiday(
    calendar_id: uuid.UUID,
    day: date,
    *,
    name: str = "Festival",
    is_optional: bool = False,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        calendar_id=calendar_id,
        name=name,
        holiday_date=day,
        is_optional=is_optional,
        created_at=datetime.now(timezone.utc),
    )


def _make_application(
    employee_id: uuid.UUID,
    start_date: date,
    end_date: Optional[date] = None,
    *,
    status: LeaveStatus = LeaveStatus.pending,
    applied_at: Optional[datetime] = None,
    is_half_day: bool = False,
    deducted_days: Optional[Decimal] = None,
    reason_code: Optional[ReasonCode] = None,
) -> dict:
    now = datetime.now(timezone.utc)
    return dict(
        id=uuid.uuid4(),
        employee_id=employee_id,
        start_date=start_date,
        end_date=end_date or start_date,
        is_half_day=is_half_day,
        status=status,
        # Default: filed well before the leave starts
        applied_at=applied_at or datetime(
            start_date.year, start_date.month, start_date.day, 4, 30, tzinfo=timezone.utc,
        ) - timedelta(days=7),
        deducted_days=deducted_days,
        sandwich_reason_code=reason_code,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
async def holiday_calendar(db) -> dict:
    """Insert an active company-wide holiday calendar for 2025."""
    from hrleave.holidays.models import HolidayCalendar

    data = _make_calendar()
    db.add(HolidayCalendar(**data))
    await db.flush()
    return data


@pytest.fixture
def add_holiday(db, holiday_calendar):
    """Insert a holiday into the 2025 calendar."""
    from hrleave.holidays.models import Holiday

    async def _add(day: date, *, name: str = "Festival", is_optional: bool = False) -> dict:
        data = _make_holiday(
            holiday_calendar["id"], day, name=name, is_optional=is_optional,
        )
        db.add(Holiday(**data))
        await db.flush()
        return data

    return _add


@pytest.fixture
def add_application(db, employee_id):
    """Insert a stored leave application for the test employee."""
    from hrleave.leave.models import LeaveApplication

    async def _add(start_date: date, end_date: Optional[date] = None, **kwargs) -> LeaveApplication:
        owner = kwargs.pop("employee_id", employee_id)
        app = LeaveApplication(**_make_application(owner, start_date, end_date, **kwargs))
        db.add(app)
        await db.flush()
        return app

    return _add
