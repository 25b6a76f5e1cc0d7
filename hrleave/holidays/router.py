"""Holiday router — read-only holiday listing."""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrleave.database import get_db
from hrleave.holidays.schemas import HolidayOut
from hrleave.holidays.service import HolidayService

router = APIRouter(prefix="", tags=["holidays"])


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[HolidayOut])
async def list_holidays(
    year: Optional[int] = Query(None),
    location_id: Optional[uuid.UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List holidays, optionally filtered by year and location."""
    return await HolidayService.list_holidays(
        db, year=year, location_id=location_id,
    )
