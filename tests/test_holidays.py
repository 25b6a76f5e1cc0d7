"""Holiday service and API tests."""

from __future__ import annotations

import uuid
from datetime import date

from hrleave.holidays.models import Holiday, HolidayCalendar
from hrleave.holidays.service import HolidayService
from tests.conftest import _make_calendar, _make_holiday


async def _seed(db) -> dict[str, uuid.UUID]:
    location_id = uuid.uuid4()
    company = _make_calendar(name="Company 2025")
    mumbai = _make_calendar(name="Mumbai 2025", location_id=location_id)
    delhi = _make_calendar(name="Delhi 2025", location_id=uuid.uuid4())
    retired = _make_calendar(name="Old 2025", is_active=False)
    next_year = _make_calendar(name="Company 2026", year=2026)
    for cal in (company, mumbai, delhi, retired, next_year):
        db.add(HolidayCalendar(**cal))
    await db.flush()

    db.add(Holiday(**_make_holiday(company["id"], date(2025, 10, 2), name="Gandhi Jayanti")))
    db.add(Holiday(**_make_holiday(mumbai["id"], date(2025, 8, 27), name="Ganesh Chaturthi")))
    db.add(Holiday(**_make_holiday(delhi["id"], date(2025, 10, 21), name="Diwali (Delhi)")))
    db.add(Holiday(**_make_holiday(retired["id"], date(2025, 12, 25), name="Christmas")))
    db.add(Holiday(**_make_holiday(
        company["id"], date(2025, 11, 5), name="Guru Nanak Jayanti", is_optional=True,
    )))
    db.add(Holiday(**_make_holiday(next_year["id"], date(2026, 1, 26), name="Republic Day")))
    await db.flush()
    return {"location_id": location_id}


# ═════════════════════════════════════════════════════════════════════
# Service
# ═════════════════════════════════════════════════════════════════════


async def test_list_holidays_by_year(db):
    await _seed(db)
    holidays = await HolidayService.list_holidays(db, year=2025)
    names = [h.name for h in holidays]
    assert names == [
        "Ganesh Chaturthi", "Gandhi Jayanti", "Diwali (Delhi)", "Guru Nanak Jayanti",
    ]


async def test_list_holidays_by_location(db):
    seeded = await _seed(db)
    holidays = await HolidayService.list_holidays(
        db, year=2025, location_id=seeded["location_id"],
    )
    assert [h.name for h in holidays] == [
        "Ganesh Chaturthi", "Gandhi Jayanti", "Guru Nanak Jayanti",
    ]


async def test_holiday_entries_for_engine(db):
    await _seed(db)
    entries = await HolidayService.get_holiday_entries(
        db, date(2025, 10, 1), date(2025, 11, 30),
    )
    by_day = {e.day: e for e in entries}
    assert not by_day[date(2025, 10, 2)].is_optional
    assert by_day[date(2025, 11, 5)].is_optional
    assert date(2025, 12, 25) not in by_day


# ═════════════════════════════════════════════════════════════════════
# API
# ═════════════════════════════════════════════════════════════════════


async def test_holidays_endpoint(client, db):
    await _seed(db)
    await db.commit()

    resp = await client.get("/api/v1/holidays", params={"year": 2026})
    assert resp.status_code == 200
    data = resp.json()
    assert len(data) == 1
    assert data[0]["name"] == "Republic Day"
    assert data[0]["date"] == "2026-01-26"
