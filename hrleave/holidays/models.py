"""Holiday ORM models: HolidayCalendar, Holiday."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hrleave.database import Base


class HolidayCalendar(Base):
    __tablename__ = "holiday_calendars"
    __table_args__ = (
        sa.UniqueConstraint(
            "name", "year", "location_id", name="uq_holiday_cal_name_year_loc"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    # Locations live in the core HR service; NULL means company-wide
    location_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    holidays: Mapped[list[Holiday]] = relationship(
        back_populates="calendar", cascade="all, delete-orphan"
    )


class Holiday(Base):
    __tablename__ = "holidays"
    __table_args__ = (
        sa.UniqueConstraint("calendar_id", "date", name="uq_holiday_cal_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    calendar_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("holiday_calendars.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    holiday_date: Mapped[date] = mapped_column("date", sa.Date, nullable=False)
    is_optional: Mapped[bool] = mapped_column(
        sa.Boolean, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    calendar: Mapped[HolidayCalendar] = relationship(back_populates="holidays")
