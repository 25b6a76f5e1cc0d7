"""Leave router — sandwich deduction preview, apply, finalize, recalculate.

Employee identity is passed explicitly; authentication lives in the core
HR service in front of this one.
"""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hrleave.common.rate_limit import limiter
from hrleave.config import settings
from hrleave.database import get_db
from hrleave.leave.schemas import (
    DeductionOut,
    DeductionPreviewRequest,
    FinalizeOut,
    FinalizeRequest,
    LeaveApplicationCreate,
    LeaveApplicationOut,
    RecalculationOut,
    RelatedApplicationOut,
)
from hrleave.leave.service import SandwichLeaveService

router = APIRouter(prefix="", tags=["leave"])


# ── POST /sandwich/preview ──────────────────────────────────────────

@router.post("/sandwich/preview", response_model=DeductionOut)
@limiter.limit(settings.PREVIEW_RATE_LIMIT)
async def preview_deduction(
    request: Request,
    body: DeductionPreviewRequest,
    db: AsyncSession = Depends(get_db),
):
    """What-if deduction for a leave range, with the day breakdown."""
    return await SandwichLeaveService.preview(db, body.employee_id, body)


# ── GET /sandwich/related ───────────────────────────────────────────

@router.get("/sandwich/related", response_model=list[RelatedApplicationOut])
async def related_applications(
    employee_id: uuid.UUID = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Separate Friday/Monday applications that pair with the given range."""
    return await SandwichLeaveService.get_related_applications(
        db, employee_id, start_date, end_date,
    )


# ── POST /applications ──────────────────────────────────────────────

@router.post("/applications", response_model=LeaveApplicationOut, status_code=201)
async def submit_application(
    body: LeaveApplicationCreate,
    db: AsyncSession = Depends(get_db),
):
    """Submit a leave application; stores its provisional deduction."""
    return await SandwichLeaveService.submit_application(db, body.employee_id, body)


# ── POST /applications/{id}/finalize ────────────────────────────────

@router.post("/applications/{application_id}/finalize", response_model=FinalizeOut)
async def finalize_application(
    application_id: uuid.UUID,
    body: Optional[FinalizeRequest] = None,
    db: AsyncSession = Depends(get_db),
):
    """Apply a status change (if any) and recompute the stored deduction."""
    status = body.status if body is not None else None
    return await SandwichLeaveService.finalize(db, application_id, status)


# ── POST /employees/{employee_id}/recalculate ───────────────────────

@router.post(
    "/employees/{employee_id}/recalculate", response_model=RecalculationOut,
)
async def recalculate_employee(
    employee_id: uuid.UUID,
    year: int = Query(..., ge=2000, le=2100),
    db: AsyncSession = Depends(get_db),
):
    """Re-price every active application of an employee in a year."""
    return await SandwichLeaveService.recalculate_employee(db, employee_id, year)
