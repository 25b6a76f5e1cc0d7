"""Holiday service — read-only holiday lookups for listing and for the
deduction engine."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrleave.holidays.models import Holiday, HolidayCalendar
from hrleave.holidays.schemas import HolidayOut
from hrleave.leave.calendar import HolidayEntry


class HolidayService:
    """Async holiday queries over active holiday calendars."""

    @staticmethod
    def _active_holidays(location_id: Optional[uuid.UUID]):
        query = (
            select(Holiday)
            .join(HolidayCalendar, Holiday.calendar_id == HolidayCalendar.id)
            .where(HolidayCalendar.is_active.is_(True))
        )
        if location_id is not None:
            query = query.where(
                (HolidayCalendar.location_id == location_id)
                | (HolidayCalendar.location_id.is_(None))
            )
        return query

    @staticmethod
    async def list_holidays(
        db: AsyncSession,
        *,
        year: Optional[int] = None,
        location_id: Optional[uuid.UUID] = None,
    ) -> list[HolidayOut]:
        """List holidays, optionally filtered by year and location."""

        query = HolidayService._active_holidays(location_id).order_by(
            Holiday.holiday_date, Holiday.created_at,
        )
        if year is not None:
            query = query.where(HolidayCalendar.year == year)

        result = await db.execute(query)
        return [HolidayOut.model_validate(h) for h in result.scalars().all()]

    @staticmethod
    async def get_holiday_entries(
        db: AsyncSession,
        from_date: date,
        to_date: date,
        *,
        location_id: Optional[uuid.UUID] = None,
    ) -> list[HolidayEntry]:
        """Holidays in [from_date, to_date] as engine entries.

        Ordered by date then creation time, so when two calendars list the
        same date the older entry is the one the engine keeps.
        """

        query = (
            HolidayService._active_holidays(location_id)
            .where(
                Holiday.holiday_date >= from_date,
                Holiday.holiday_date <= to_date,
            )
            .order_by(Holiday.holiday_date, Holiday.created_at)
        )
        result = await db.execute(query)
        return [
            HolidayEntry(day=h.holiday_date, name=h.name, is_optional=h.is_optional)
            for h in result.scalars().all()
        ]
