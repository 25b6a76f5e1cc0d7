"""Common module — shared utilities for HR Leave."""

from hrleave.common.constants import (
    ACTIVE_LEAVE_STATUSES,
    DATE_FORMAT,
    REASON_TEXT,
    HalfDayPeriod,
    LeaveStatus,
    PairRelationship,
    ReasonCode,
)
from hrleave.common.exceptions import (
    AppException,
    HalfDayRangeError,
    InvalidRangeError,
    NotFoundException,
    UnsupportedHalfDayPatternError,
    ValidationException,
    register_exception_handlers,
)

__all__ = [
    # Constants / Enums
    "ACTIVE_LEAVE_STATUSES",
    "DATE_FORMAT",
    "REASON_TEXT",
    "HalfDayPeriod",
    "LeaveStatus",
    "PairRelationship",
    "ReasonCode",
    # Exceptions
    "AppException",
    "HalfDayRangeError",
    "InvalidRangeError",
    "NotFoundException",
    "UnsupportedHalfDayPatternError",
    "ValidationException",
    "register_exception_handlers",
]
