"""Leave ORM models: LeaveApplication."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from hrleave.common.constants import HalfDayPeriod, LeaveStatus, ReasonCode
from hrleave.database import Base


class LeaveApplication(Base):
    __tablename__ = "leave_applications"
    __table_args__ = (
        sa.CheckConstraint("start_date <= end_date", name="ck_leave_app_range"),
        sa.Index("ix_leave_app_employee_dates", "employee_id", "start_date", "end_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    # Employees live in the core HR service
    employee_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    is_half_day: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    half_day_period: Mapped[Optional[HalfDayPeriod]] = mapped_column(
        sa.Enum(HalfDayPeriod, name="half_day_period")
    )
    reason: Mapped[Optional[str]] = mapped_column(sa.Text)
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(LeaveStatus, name="leave_status"),
        default=LeaveStatus.pending,
        nullable=False,
    )
    applied_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Deduction decided by the sandwich engine; NULL while not chargeable
    deducted_days: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(5, 1))
    base_working_days: Mapped[Optional[int]] = mapped_column(sa.Integer)
    is_sandwich_leave: Mapped[Optional[bool]] = mapped_column(sa.Boolean)
    sandwich_reason_code: Mapped[Optional[ReasonCode]] = mapped_column(
        sa.Enum(ReasonCode, name="sandwich_reason_code")
    )

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
