"""Leave service layer — sandwich deduction over stored applications.

Business logic:
  - What-if deduction preview against the employee's active applications
  - Friday/Monday partner lookup
  - Application submission with overlap rejection and provisional deduction
  - Finalization on status change, with retroactive partner re-evaluation
  - Yearly recalculation of an employee's stored deductions
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrleave.common.constants import ACTIVE_LEAVE_STATUSES, LeaveStatus
from hrleave.common.exceptions import NotFoundException, ValidationException
from hrleave.config import settings
from hrleave.holidays.service import HolidayService
from hrleave.leave.calendar import expand_range
from hrleave.leave.models import LeaveApplication
from hrleave.leave.sandwich import (
    BRIDGE_GAP,
    FRIDAY,
    MONDAY,
    DeductionResult,
    LeaveRequest,
    SiblingRequest,
    compute_deduction,
    find_related_applications,
)
from hrleave.leave.schemas import (
    DeductionAdjustment,
    DeductionOut,
    DeductionPreviewRequest,
    FinalizeOut,
    LeaveApplicationCreate,
    LeaveApplicationOut,
    RecalculationOut,
    RelatedApplicationOut,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


# ═════════════════════════════════════════════════════════════════════
# Sibling source
# ═════════════════════════════════════════════════════════════════════


class LeaveApplicationSiblingSource:
    """Active (pending/approved) applications of one employee, read from
    the leave_applications table."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def fetch(
        self,
        employee_id: uuid.UUID,
        from_date: date,
        to_date: date,
        *,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> list[SiblingRequest]:
        query = select(LeaveApplication).where(
            LeaveApplication.employee_id == employee_id,
            LeaveApplication.status.in_(ACTIVE_LEAVE_STATUSES),
            LeaveApplication.start_date <= to_date,
            LeaveApplication.end_date >= from_date,
        )
        if exclude_id is not None:
            query = query.where(LeaveApplication.id != exclude_id)

        result = await self.db.execute(query.order_by(LeaveApplication.start_date))
        return [
            SiblingRequest(
                start_date=app.start_date,
                end_date=app.end_date,
                employee_id=app.employee_id,
                id=app.id,
                status=app.status.value,
                is_half_day=bool(app.is_half_day),
            )
            for app in result.scalars().all()
        ]


# ═════════════════════════════════════════════════════════════════════
# SandwichLeaveService
# ═════════════════════════════════════════════════════════════════════


class SandwichLeaveService:
    """Async sandwich-leave operations: preview, apply, finalize, recalculate."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _as_utc(moment: datetime) -> datetime:
        """Stored timestamps are UTC; some drivers hand them back naive."""
        if moment.tzinfo is None:
            return moment.replace(tzinfo=timezone.utc)
        return moment

    @staticmethod
    def _to_request(app: LeaveApplication) -> LeaveRequest:
        return LeaveRequest(
            start_date=app.start_date,
            end_date=app.end_date,
            submitted_at=SandwichLeaveService._as_utc(app.applied_at),
            employee_id=app.employee_id,
            approved=app.status == LeaveStatus.approved,
            is_half_day=bool(app.is_half_day),
            id=app.id,
        )

    @staticmethod
    async def _load_siblings(
        db: AsyncSession,
        request: LeaveRequest,
    ) -> list[SiblingRequest]:
        if request.employee_id is None:
            return []
        return await LeaveApplicationSiblingSource(db).fetch(
            request.employee_id,
            request.start_date - timedelta(days=settings.SANDWICH_LOOKBACK_DAYS),
            request.end_date + timedelta(days=settings.SANDWICH_LOOKAHEAD_DAYS),
            exclude_id=request.id,
        )

    @staticmethod
    async def _evaluate(
        db: AsyncSession,
        request: LeaveRequest,
    ) -> DeductionResult:
        """Load holidays and siblings for a request and price it.

        Preview, submit and finalize all go through here so that the same
        range sees the same context.
        """

        holidays = await HolidayService.get_holiday_entries(
            db, request.start_date, request.end_date,
        )
        siblings = await SandwichLeaveService._load_siblings(db, request)
        return compute_deduction(request, holidays, siblings)

    @staticmethod
    def _store(app: LeaveApplication, result: Optional[DeductionResult]) -> None:
        if result is None:
            app.deducted_days = None
            app.base_working_days = None
            app.is_sandwich_leave = None
            app.sandwich_reason_code = None
        else:
            app.deducted_days = result.deducted_days
            app.base_working_days = result.base_working_days
            app.is_sandwich_leave = result.is_sandwich_leave
            app.sandwich_reason_code = result.reason_code
        app.updated_at = datetime.now(timezone.utc)

    @staticmethod
    async def _get_application(
        db: AsyncSession,
        application_id: uuid.UUID,
    ) -> LeaveApplication:
        app = await db.get(LeaveApplication, application_id)
        if app is None:
            raise NotFoundException("LeaveApplication", application_id)
        return app

    @staticmethod
    async def _reprice(
        db: AsyncSession,
        app: LeaveApplication,
    ) -> Optional[DeductionAdjustment]:
        """Recompute one stored application; an adjustment if it changed."""

        previous = app.deducted_days if app.deducted_days is not None else ZERO
        if app.status in ACTIVE_LEAVE_STATUSES:
            result = await SandwichLeaveService._evaluate(
                db, SandwichLeaveService._to_request(app),
            )
        else:
            result = None
        SandwichLeaveService._store(app, result)

        new = result.deducted_days if result is not None else ZERO
        if new == previous:
            return None
        return DeductionAdjustment(
            application_id=app.id,
            previous_days=previous,
            new_days=new,
            reason_code=result.reason_code if result is not None else None,
        )

    @staticmethod
    async def _partner_applications(
        db: AsyncSession,
        app: LeaveApplication,
    ) -> list[LeaveApplication]:
        """Active single-day applications on the far side of the weekend."""

        if app.start_date != app.end_date:
            return []
        weekday = app.start_date.weekday()
        if weekday == FRIDAY:
            partner_day = app.start_date + BRIDGE_GAP
        elif weekday == MONDAY:
            partner_day = app.start_date - BRIDGE_GAP
        else:
            return []

        result = await db.execute(
            select(LeaveApplication).where(
                LeaveApplication.employee_id == app.employee_id,
                LeaveApplication.id != app.id,
                LeaveApplication.status.in_(ACTIVE_LEAVE_STATUSES),
                LeaveApplication.start_date == partner_day,
                LeaveApplication.end_date == partner_day,
            )
        )
        return list(result.scalars().all())

    # ─────────────────────────────────────────────────────────────────
    # Preview / lookup
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def preview(
        db: AsyncSession,
        employee_id: uuid.UUID,
        data: DeductionPreviewRequest,
    ) -> DeductionOut:
        """What-if deduction, priced as if submitted now."""

        request = LeaveRequest(
            start_date=data.start_date,
            end_date=data.end_date,
            submitted_at=datetime.now(timezone.utc),
            employee_id=employee_id,
            approved=data.approved,
            is_half_day=data.is_half_day,
        )
        result = await SandwichLeaveService._evaluate(db, request)
        return DeductionOut.model_validate(result)

    @staticmethod
    async def get_related_applications(
        db: AsyncSession,
        employee_id: uuid.UUID,
        start_date: date,
        end_date: date,
    ) -> list[RelatedApplicationOut]:
        """Separate Friday/Monday applications pairing with this range."""

        expand_range(start_date, end_date)
        request = LeaveRequest(
            start_date=start_date,
            end_date=end_date,
            submitted_at=datetime.now(timezone.utc),
            employee_id=employee_id,
        )
        siblings = await SandwichLeaveService._load_siblings(db, request)
        return [
            RelatedApplicationOut.model_validate(related)
            for related in find_related_applications(request, siblings)
        ]

    # ─────────────────────────────────────────────────────────────────
    # Apply
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def submit_application(
        db: AsyncSession,
        employee_id: uuid.UUID,
        data: LeaveApplicationCreate,
    ) -> LeaveApplicationOut:
        """Store a pending application with its provisional deduction."""

        overlap = await db.execute(
            select(LeaveApplication.id).where(
                LeaveApplication.employee_id == employee_id,
                LeaveApplication.status.in_(ACTIVE_LEAVE_STATUSES),
                LeaveApplication.start_date <= data.end_date,
                LeaveApplication.end_date >= data.start_date,
            )
        )
        if overlap.first() is not None:
            raise ValidationException(
                {"dates": ["Overlaps with an existing pending or approved leave application."]}
            )

        applied_at = datetime.now(timezone.utc)
        result = await SandwichLeaveService._evaluate(
            db,
            LeaveRequest(
                start_date=data.start_date,
                end_date=data.end_date,
                submitted_at=applied_at,
                employee_id=employee_id,
                is_half_day=data.is_half_day,
            ),
        )

        app = LeaveApplication(
            id=uuid.uuid4(),
            employee_id=employee_id,
            start_date=data.start_date,
            end_date=data.end_date,
            is_half_day=data.is_half_day,
            half_day_period=data.half_day_period,
            reason=data.reason,
            status=LeaveStatus.pending,
            applied_at=applied_at,
            created_at=applied_at,
        )
        SandwichLeaveService._store(app, result)
        db.add(app)
        await db.flush()

        logger.info(
            "Leave application %s submitted for employee %s: %s..%s, %s days (%s)",
            app.id, employee_id, data.start_date.isoformat(),
            data.end_date.isoformat(), result.deducted_days, result.reason_code.value,
        )
        return LeaveApplicationOut.model_validate(app)

    # ─────────────────────────────────────────────────────────────────
    # Finalize / Recalculate
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def finalize(
        db: AsyncSession,
        application_id: uuid.UUID,
        status: Optional[LeaveStatus] = None,
    ) -> FinalizeOut:
        """Recompute an application's deduction from its current status.

        Approved applications are priced with approved=True; rejected,
        cancelled and withdrawn ones have their deduction cleared. The
        Friday/Monday partner (if any) is re-priced too, since a pair
        deduction depends on both sides still being active.
        """

        app = await SandwichLeaveService._get_application(db, application_id)

        # Partners are looked up before the status change so a withdrawn
        # Friday still finds the Monday it was paired with.
        partners = await SandwichLeaveService._partner_applications(db, app)

        if status is not None and status != app.status:
            logger.info(
                "Leave application %s: %s → %s",
                app.id, app.status.value, status.value,
            )
            app.status = status
            await db.flush()

        adjustments: list[DeductionAdjustment] = []
        own = await SandwichLeaveService._reprice(db, app)
        if own is not None:
            adjustments.append(own)
        await db.flush()

        for partner in partners:
            adjustment = await SandwichLeaveService._reprice(db, partner)
            if adjustment is not None:
                logger.info(
                    "Partner application %s re-priced: %s → %s days",
                    partner.id, adjustment.previous_days, adjustment.new_days,
                )
                adjustments.append(adjustment)
        await db.flush()

        return FinalizeOut(
            application=LeaveApplicationOut.model_validate(app),
            adjustments=adjustments,
        )

    @staticmethod
    async def recalculate_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
        year: int,
    ) -> RecalculationOut:
        """Re-price every active application of an employee starting in a year."""

        result = await db.execute(
            select(LeaveApplication)
            .where(
                LeaveApplication.employee_id == employee_id,
                LeaveApplication.status.in_(ACTIVE_LEAVE_STATUSES),
                LeaveApplication.start_date >= date(year, 1, 1),
                LeaveApplication.start_date <= date(year, 12, 31),
            )
            .order_by(LeaveApplication.start_date)
        )
        apps = list(result.scalars().all())

        adjustments: list[DeductionAdjustment] = []
        total = ZERO
        for app in apps:
            adjustment = await SandwichLeaveService._reprice(db, app)
            if adjustment is not None:
                adjustments.append(adjustment)
            total += app.deducted_days if app.deducted_days is not None else ZERO
        await db.flush()

        logger.info(
            "Recalculated %d applications for employee %s in %d: %d changed, total %s days",
            len(apps), employee_id, year, len(adjustments), total,
        )
        return RecalculationOut(
            employee_id=employee_id,
            year=year,
            applications_checked=len(apps),
            total_deducted=total,
            adjustments=adjustments,
        )
