"""Business calendar primitives for leave deduction.

  - HolidayEntry / HolidayIndex: read-only holiday facts keyed by date
  - classify_day: weekday name, weekend flag, mandatory-holiday flag
  - expand_range: inclusive list of calendar days in a leave range
  - count_working_days: days that are neither weekend nor mandatory holiday
  - is_sudden: submission on/after the leave start (business timezone)

Everything here is pure: no I/O, no shared state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo

from hrleave.common.exceptions import InvalidRangeError

logger = logging.getLogger(__name__)

SATURDAY = 5
SUNDAY = 6
WEEKEND_DAYS = frozenset({SATURDAY, SUNDAY})

WEEKDAY_NAMES = (
    "Monday", "Tuesday", "Wednesday", "Thursday",
    "Friday", "Saturday", "Sunday",
)


@dataclass(frozen=True)
class HolidayEntry:
    """A calendar holiday. Optional holidays do not exempt the day."""

    day: date
    name: str
    is_optional: bool = False


HolidayIndex = Mapping[date, HolidayEntry]
HolidaysArg = Union[HolidayIndex, Iterable[HolidayEntry]]


@dataclass(frozen=True)
class DayInfo:
    day: date
    weekday_name: str
    is_weekend: bool
    is_mandatory_holiday: bool
    holiday_name: Optional[str] = None

    @property
    def is_working_day(self) -> bool:
        return not (self.is_weekend or self.is_mandatory_holiday)


# ─────────────────────────────────────────────────────────────────────
# Holidays
# ─────────────────────────────────────────────────────────────────────


def build_holiday_index(holidays: HolidaysArg) -> HolidayIndex:
    """Key holidays by date. Duplicate dates keep the first entry seen."""

    if isinstance(holidays, Mapping):
        return holidays

    index: dict[date, HolidayEntry] = {}
    for holiday in holidays:
        existing = index.get(holiday.day)
        if existing is not None:
            logger.warning(
                "Duplicate holiday on %s: keeping %r, ignoring %r",
                holiday.day.isoformat(), existing.name, holiday.name,
            )
            continue
        index[holiday.day] = holiday
    return index


# ─────────────────────────────────────────────────────────────────────
# Classifier / Expander / Counter
# ─────────────────────────────────────────────────────────────────────


def classify_day(day: date, holidays: HolidaysArg) -> DayInfo:
    """Tag a date with weekday name, weekend and mandatory-holiday flags."""

    index = build_holiday_index(holidays)
    holiday = index.get(day)
    is_mandatory = holiday is not None and not holiday.is_optional
    return DayInfo(
        day=day,
        weekday_name=WEEKDAY_NAMES[day.weekday()],
        is_weekend=day.weekday() in WEEKEND_DAYS,
        is_mandatory_holiday=is_mandatory,
        holiday_name=holiday.name if holiday is not None else None,
    )


def expand_range(start_date: date, end_date: date) -> tuple[date, ...]:
    """Every calendar day from start_date to end_date, both inclusive."""

    if start_date > end_date:
        raise InvalidRangeError(start_date, end_date)

    span = (end_date - start_date).days
    return tuple(start_date + timedelta(days=offset) for offset in range(span + 1))


def count_working_days(days: Iterable[date], holidays: HolidaysArg) -> int:
    index = build_holiday_index(holidays)
    return sum(1 for d in days if classify_day(d, index).is_working_day)


# ─────────────────────────────────────────────────────────────────────
# Sudden-leave detection
# ─────────────────────────────────────────────────────────────────────


def business_date(moment: datetime, tz: Optional[ZoneInfo] = None) -> date:
    """Calendar date of a timestamp in the business timezone.

    Naive datetimes are assumed to already be in business time.
    """

    if moment.tzinfo is None or tz is None:
        return moment.date()
    return moment.astimezone(tz).date()


def is_sudden(
    submitted_at: datetime,
    start_date: date,
    tz: Optional[ZoneInfo] = None,
) -> bool:
    """True when the request was filed on or after its own start date."""
    return business_date(submitted_at, tz) >= start_date
