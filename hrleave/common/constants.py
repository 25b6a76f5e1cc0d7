"""Enums and constants for HR Leave — matching PostgreSQL ENUM types."""

from __future__ import annotations

import enum


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"
    withdrawn = "withdrawn"


# Applications that still count against the employee (siblings, overlaps)
ACTIVE_LEAVE_STATUSES: tuple[LeaveStatus, ...] = (
    LeaveStatus.pending,
    LeaveStatus.approved,
)


class HalfDayPeriod(str, enum.Enum):
    first_half = "first_half"
    second_half = "second_half"


class ReasonCode(str, enum.Enum):
    """Which row of the sandwich table decided a deduction."""

    FRI_SAT_SUN = "FRI_SAT_SUN"
    SAT_SUN_MON = "SAT_SUN_MON"
    FRI_TO_MON = "FRI_TO_MON"
    SPLIT_FRI_MON = "SPLIT_FRI_MON"
    SINGLE_ADVANCE = "SINGLE_ADVANCE"
    SINGLE_SUDDEN = "SINGLE_SUDDEN"
    NONE = "NONE"


REASON_TEXT: dict[ReasonCode, str] = {
    ReasonCode.FRI_SAT_SUN: "Sandwich leave: Friday + Saturday + Sunday (4 days deducted)",
    ReasonCode.SAT_SUN_MON: "Sandwich leave: Saturday + Sunday + Monday (4 days deducted)",
    ReasonCode.FRI_TO_MON: "Sandwich leave: Friday to Monday continuous (4 days deducted)",
    ReasonCode.SPLIT_FRI_MON: (
        "Sandwich leave: separate Friday/Monday applications (2 days each, 4 total)"
    ),
    ReasonCode.SINGLE_ADVANCE: "Single Friday/Monday leave (approved in advance - 1 day)",
    ReasonCode.SINGLE_SUDDEN: "Single Friday/Monday leave (unapproved/sudden - 3 days penalty)",
    ReasonCode.NONE: "Regular leave (actual working days excluding holidays)",
}


class PairRelationship(str, enum.Enum):
    friday_to_monday = "friday_to_monday"
    monday_to_friday = "monday_to_friday"


# ── Misc constants ──────────────────────────────────────────────────

DATE_FORMAT = "%d-%b-%Y"          # Indian format: 19-Feb-2026
