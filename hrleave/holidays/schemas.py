"""Holiday Pydantic v2 schemas."""

from __future__ import annotations

import datetime as dt
import uuid

from pydantic import BaseModel, ConfigDict, Field


class HolidayOut(BaseModel):
    """Holiday as listed to clients; ORM column holiday_date → date."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: uuid.UUID
    calendar_id: uuid.UUID
    name: str
    date: dt.date = Field(validation_alias="holiday_date")
    is_optional: bool = False
