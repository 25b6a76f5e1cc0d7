"""Sandwich-leave deduction engine.

Turns a leave range into the number of days to deduct, charging a flat
penalty when the leave bridges a weekend. The rules are an ordered table,
most specific first; the first matching row decides:

  1. FRI_SAT_SUN     Fri → Sun (3 days)                          → 4
  2. SAT_SUN_MON     Sat → Mon (3 days)                          → 4
  3. FRI_TO_MON      Fri → Mon (4 days)                          → 4
  4. SPLIT_FRI_MON   single Fri + separate single Mon (or v.v.)  → 2 each
  5. SINGLE_ADVANCE  single Fri/Mon, approved, filed in advance  → 1
  6. SINGLE_SUDDEN   single Fri/Mon, sudden or unapproved        → 3

Anything else is charged its working days (weekends and mandatory holidays
excluded). Penalties are flat: holidays inside a matched range do not
reduce them. Half-day requests may only land on rows 5/6 (or no row) and
are charged half; row 4 is refused when either side of the pair is a
half-day.

The engine is pure. Holidays and sibling applications are fetched by the
caller (see SandwichLeaveService) and passed in.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional, Protocol
from zoneinfo import ZoneInfo

from hrleave.common.constants import REASON_TEXT, PairRelationship, ReasonCode
from hrleave.common.exceptions import HalfDayRangeError, UnsupportedHalfDayPatternError
from hrleave.config import settings
from hrleave.leave.calendar import (
    SATURDAY,
    DayInfo,
    HolidaysArg,
    build_holiday_index,
    classify_day,
    count_working_days,
    expand_range,
    is_sudden,
)

logger = logging.getLogger(__name__)

MONDAY = 0
FRIDAY = 4

# Friday → next Monday
BRIDGE_GAP = timedelta(days=3)

HALF = Decimal("0.5")
FULL = Decimal("1")
PAIR_COMBINED_DEDUCTION = Decimal("4")


# ═════════════════════════════════════════════════════════════════════
# Engine types
# ═════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class LeaveRequest:
    """A leave range to be priced. Never mutated by the engine."""

    start_date: date
    end_date: date
    submitted_at: datetime
    employee_id: Optional[uuid.UUID]
    approved: bool = False
    is_half_day: bool = False
    id: Optional[uuid.UUID] = None

    @property
    def is_single_day(self) -> bool:
        return self.start_date == self.end_date


@dataclass(frozen=True)
class SiblingRequest:
    """Another application of the same employee, as seen by the engine."""

    start_date: date
    end_date: date
    employee_id: Optional[uuid.UUID] = None
    id: Optional[uuid.UUID] = None
    status: Optional[str] = None
    is_half_day: bool = False


class SiblingSource(Protocol):
    """Read-only provider of an employee's other applications."""

    async def fetch(
        self,
        employee_id: uuid.UUID,
        from_date: date,
        to_date: date,
        *,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> list[SiblingRequest]:
        ...


@dataclass(frozen=True)
class RelatedApplication:
    """A separate single-day application on the other side of the weekend."""

    application_id: Optional[uuid.UUID]
    start_date: date
    end_date: date
    status: Optional[str]
    relationship_type: PairRelationship
    combined_deduction: Decimal = PAIR_COMBINED_DEDUCTION
    is_half_day: bool = False


@dataclass(frozen=True)
class DeductionBreakdown:
    total_days: int
    working_days: int
    weekend_days: int
    holiday_days: int
    sandwich_days: Decimal
    related_application_ids: tuple[uuid.UUID, ...] = ()

    @property
    def has_related_application(self) -> bool:
        return bool(self.related_application_ids)


@dataclass(frozen=True)
class DeductionResult:
    deducted_days: Decimal
    base_working_days: int
    is_sandwich_leave: bool
    reason_code: ReasonCode
    breakdown: DeductionBreakdown

    @property
    def reason(self) -> str:
        return REASON_TEXT[self.reason_code]


# ═════════════════════════════════════════════════════════════════════
# Rule table
# ═════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class MatchContext:
    """Everything a rule may look at for one request."""

    request: LeaveRequest
    days: tuple[DayInfo, ...]
    related: tuple[RelatedApplication, ...]
    sudden: bool

    @property
    def start_weekday(self) -> int:
        return self.request.start_date.weekday()

    @property
    def is_bridge_day(self) -> bool:
        """Single working Friday or Monday.

        A Friday/Monday that is itself a mandatory holiday is not a bridge:
        nothing is taken off work, so the single-day rules do not fire.
        """
        return (
            self.request.is_single_day
            and self.start_weekday in (FRIDAY, MONDAY)
            and not self.days[0].is_mandatory_holiday
        )


@dataclass(frozen=True)
class SandwichRule:
    code: ReasonCode
    deduction: Decimal
    is_sandwich: bool
    matches: Callable[[MatchContext], bool] = field(repr=False)
    half_day_allowed: bool = False


def _fri_sat_sun(ctx: MatchContext) -> bool:
    return len(ctx.days) == 3 and ctx.start_weekday == FRIDAY


def _sat_sun_mon(ctx: MatchContext) -> bool:
    return len(ctx.days) == 3 and ctx.start_weekday == SATURDAY


def _fri_to_mon(ctx: MatchContext) -> bool:
    return (
        len(ctx.days) == 4
        and ctx.start_weekday == FRIDAY
        and ctx.request.end_date.weekday() == MONDAY
    )


def _split_fri_mon(ctx: MatchContext) -> bool:
    return ctx.is_bridge_day and bool(ctx.related)


def _single_advance(ctx: MatchContext) -> bool:
    return ctx.is_bridge_day and ctx.request.approved and not ctx.sudden


def _single_sudden(ctx: MatchContext) -> bool:
    # Reached only when _single_advance did not match: sudden or unapproved
    return ctx.is_bridge_day


SANDWICH_RULES: tuple[SandwichRule, ...] = (
    SandwichRule(ReasonCode.FRI_SAT_SUN, Decimal("4"), True, _fri_sat_sun),
    SandwichRule(ReasonCode.SAT_SUN_MON, Decimal("4"), True, _sat_sun_mon),
    SandwichRule(ReasonCode.FRI_TO_MON, Decimal("4"), True, _fri_to_mon),
    SandwichRule(ReasonCode.SPLIT_FRI_MON, Decimal("2"), True, _split_fri_mon),
    SandwichRule(
        ReasonCode.SINGLE_ADVANCE, Decimal("1"), False, _single_advance,
        half_day_allowed=True,
    ),
    SandwichRule(
        ReasonCode.SINGLE_SUDDEN, Decimal("3"), True, _single_sudden,
        half_day_allowed=True,
    ),
)


def match_pattern(ctx: MatchContext) -> Optional[SandwichRule]:
    """First rule in priority order that matches, or None."""
    for rule in SANDWICH_RULES:
        if rule.matches(ctx):
            return rule
    return None


# ═════════════════════════════════════════════════════════════════════
# Sibling correlation
# ═════════════════════════════════════════════════════════════════════


def find_related_applications(
    request: LeaveRequest,
    siblings: Iterable[SiblingRequest],
) -> tuple[RelatedApplication, ...]:
    """Single-day siblings on the far side of the weekend from a single
    Friday (the following Monday) or single Monday (the preceding Friday)."""

    if not request.is_single_day:
        return ()

    weekday = request.start_date.weekday()
    if weekday == FRIDAY:
        partner_day = request.start_date + BRIDGE_GAP
        relationship = PairRelationship.friday_to_monday
    elif weekday == MONDAY:
        partner_day = request.start_date - BRIDGE_GAP
        relationship = PairRelationship.monday_to_friday
    else:
        return ()

    if request.employee_id is None:
        logger.warning(
            "Leave request for %s has no employee id; skipping sibling correlation",
            request.start_date.isoformat(),
        )
        return ()

    related: list[RelatedApplication] = []
    for sibling in siblings:
        if sibling.employee_id is None:
            logger.warning(
                "Ignoring sibling application %s (%s): missing employee id",
                sibling.id, sibling.start_date.isoformat(),
            )
            continue
        if sibling.employee_id != request.employee_id:
            logger.warning(
                "Ignoring sibling application %s: belongs to employee %s, not %s",
                sibling.id, sibling.employee_id, request.employee_id,
            )
            continue
        if request.id is not None and sibling.id == request.id:
            continue
        if sibling.start_date == sibling.end_date == partner_day:
            related.append(
                RelatedApplication(
                    application_id=sibling.id,
                    start_date=sibling.start_date,
                    end_date=sibling.end_date,
                    status=sibling.status,
                    relationship_type=relationship,
                    is_half_day=sibling.is_half_day,
                )
            )
    return tuple(related)


# ═════════════════════════════════════════════════════════════════════
# Calculator
# ═════════════════════════════════════════════════════════════════════


def business_timezone() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def compute_deduction(
    request: LeaveRequest,
    holidays: HolidaysArg,
    siblings: Iterable[SiblingRequest] = (),
    *,
    tz: Optional[ZoneInfo] = None,
) -> DeductionResult:
    """Price one leave request.

    Raises:
        InvalidRangeError: end_date before start_date.
        HalfDayRangeError: half-day flag on a multi-day range.
        UnsupportedHalfDayPatternError: a separate Friday/Monday pair in
            which either side is a half-day.
    """

    dates = expand_range(request.start_date, request.end_date)
    if request.is_half_day and not request.is_single_day:
        raise HalfDayRangeError(request.start_date, request.end_date)

    index = build_holiday_index(holidays)
    days = tuple(classify_day(d, index) for d in dates)
    base_working_days = count_working_days(dates, index)

    ctx = MatchContext(
        request=request,
        days=days,
        related=find_related_applications(request, siblings),
        sudden=is_sudden(request.submitted_at, request.start_date, tz or business_timezone()),
    )
    rule = match_pattern(ctx)

    factor = HALF if request.is_half_day else FULL
    if rule is None:
        deducted = Decimal(base_working_days) * factor
        reason_code = ReasonCode.NONE
        is_sandwich = False
    else:
        half_day_involved = request.is_half_day or any(r.is_half_day for r in ctx.related)
        if half_day_involved and not rule.half_day_allowed:
            raise UnsupportedHalfDayPatternError(rule.code.value)
        deducted = rule.deduction * factor
        reason_code = rule.code
        is_sandwich = rule.is_sandwich

    breakdown = DeductionBreakdown(
        total_days=len(days),
        working_days=base_working_days,
        weekend_days=sum(1 for d in days if d.is_weekend),
        holiday_days=sum(
            1 for d in days if d.is_mandatory_holiday and not d.is_weekend
        ),
        sandwich_days=max(Decimal("0"), deducted - Decimal(base_working_days) * factor),
        related_application_ids=tuple(
            r.application_id for r in ctx.related if r.application_id is not None
        ),
    )

    logger.debug(
        "Deduction %s → %s for %s..%s (base=%d, half_day=%s, sudden=%s)",
        reason_code.value, deducted, request.start_date.isoformat(),
        request.end_date.isoformat(), base_working_days,
        request.is_half_day, ctx.sudden,
    )

    return DeductionResult(
        deducted_days=deducted,
        base_working_days=base_working_days,
        is_sandwich_leave=is_sandwich,
        reason_code=reason_code,
        breakdown=breakdown,
    )


def compute_total_deduction(
    requests: Sequence[LeaveRequest],
    holidays: HolidaysArg,
    *,
    tz: Optional[ZoneInfo] = None,
) -> tuple[Decimal, list[DeductionResult]]:
    """Price a batch of one employee's requests, each against the others."""

    index = build_holiday_index(holidays)
    as_siblings = [to_sibling(r) for r in requests]

    results: list[DeductionResult] = []
    for position, request in enumerate(requests):
        others = as_siblings[:position] + as_siblings[position + 1:]
        results.append(compute_deduction(request, index, others, tz=tz))

    total = sum((r.deducted_days for r in results), Decimal("0"))
    return total, results


def to_sibling(request: LeaveRequest) -> SiblingRequest:
    return SiblingRequest(
        start_date=request.start_date,
        end_date=request.end_date,
        employee_id=request.employee_id,
        id=request.id,
        is_half_day=request.is_half_day,
    )
