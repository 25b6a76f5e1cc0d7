"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Response / *Out    → response bodies (read)
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from hrleave.common.constants import (
    HalfDayPeriod,
    LeaveStatus,
    PairRelationship,
    ReasonCode,
)


# ═════════════════════════════════════════════════════════════════════
# Shared range payload
# ═════════════════════════════════════════════════════════════════════


class LeaveRangeBase(BaseModel):
    """Date range + half-day flag shared by preview and apply payloads."""

    employee_id: uuid.UUID
    start_date: date = Field(..., description="Leave start date (inclusive)")
    end_date: date = Field(..., description="Leave end date (inclusive)")
    is_half_day: bool = False
    half_day_period: Optional[HalfDayPeriod] = None

    @model_validator(mode="after")
    def validate_span(self) -> "LeaveRangeBase":
        # Reversed ranges and half-day/multi-day conflicts are left to the
        # engine so preview and apply reject them identically.
        if (self.end_date - self.start_date).days > 365:
            raise ValueError("Leave request cannot span more than 365 days.")
        if self.half_day_period is not None and not self.is_half_day:
            raise ValueError("half_day_period is only allowed for half-day leave.")
        return self


# ═════════════════════════════════════════════════════════════════════
# Preview
# ═════════════════════════════════════════════════════════════════════


class DeductionPreviewRequest(LeaveRangeBase):
    """What-if deduction for a range that has not been submitted yet."""

    approved: bool = Field(
        default=False,
        description="Price the request as if it were already approved.",
    )


class DeductionBreakdownOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_days: int
    working_days: int
    weekend_days: int
    holiday_days: int
    sandwich_days: Decimal
    has_related_application: bool = False
    related_application_ids: list[uuid.UUID] = Field(default_factory=list)


class DeductionOut(BaseModel):
    """Engine decision for one request."""

    model_config = ConfigDict(from_attributes=True)

    deducted_days: Decimal
    base_working_days: int
    is_sandwich_leave: bool
    reason_code: ReasonCode
    reason: str
    breakdown: DeductionBreakdownOut


# ═════════════════════════════════════════════════════════════════════
# Related Friday/Monday applications
# ═════════════════════════════════════════════════════════════════════


class RelatedApplicationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    application_id: Optional[uuid.UUID] = None
    start_date: date
    end_date: date
    status: Optional[str] = None
    relationship_type: PairRelationship
    combined_deduction: Decimal


# ═════════════════════════════════════════════════════════════════════
# Leave Application
# ═════════════════════════════════════════════════════════════════════


class LeaveApplicationCreate(LeaveRangeBase):
    """Payload for submitting a leave application."""

    reason: Optional[str] = Field(
        None, min_length=5, max_length=1000, description="Reason for leave"
    )


class LeaveApplicationOut(BaseModel):
    """Stored leave application with its current deduction."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    start_date: date
    end_date: date
    is_half_day: bool = False
    half_day_period: Optional[HalfDayPeriod] = None
    reason: Optional[str] = None
    status: LeaveStatus
    applied_at: datetime
    deducted_days: Optional[Decimal] = None
    base_working_days: Optional[int] = None
    is_sandwich_leave: Optional[bool] = None
    sandwich_reason_code: Optional[ReasonCode] = None
    created_at: datetime
    updated_at: datetime


# ═════════════════════════════════════════════════════════════════════
# Finalize / Recalculate
# ═════════════════════════════════════════════════════════════════════


class FinalizeRequest(BaseModel):
    """Optional status transition applied before the deduction is recomputed."""

    status: Optional[LeaveStatus] = None


class DeductionAdjustment(BaseModel):
    """Change in one application's stored deduction — for the balance ledger."""

    application_id: uuid.UUID
    previous_days: Decimal = Decimal("0")
    new_days: Decimal = Decimal("0")
    reason_code: Optional[ReasonCode] = None

    @property
    def delta(self) -> Decimal:
        return self.new_days - self.previous_days


class FinalizeOut(BaseModel):
    application: LeaveApplicationOut
    adjustments: list[DeductionAdjustment] = Field(default_factory=list)


class RecalculationOut(BaseModel):
    employee_id: uuid.UUID
    year: int
    applications_checked: int = 0
    total_deducted: Decimal = Decimal("0")
    adjustments: list[DeductionAdjustment] = Field(default_factory=list)
