"""Weekly forecast: contracted staffing cost against scheduled shifts."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal

from labour_cost.calculators.break_calculator import BreakCalculator
from labour_cost.calculators.periods import Period
from labour_cost.calculators.rate_resolver import RateResolver
from labour_cost.calculators.rounding import ZERO, percent_change, round_hours, round_money
from labour_cost.calculators.types import (
    IntervalSource,
    PaymentType,
    PayrollConfig,
    Snapshot,
    StaffMember,
    WorkedInterval,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractedStaff:
    user_id: str
    name: str
    contracted_hours: Decimal
    estimated_cost: Decimal


@dataclass(frozen=True)
class ScheduledStaff:
    user_id: str
    name: str
    scheduled_hours: Decimal
    estimated_cost: Decimal


@dataclass(frozen=True)
class ContractedSummary:
    total_hours: Decimal
    total_cost: Decimal
    staff_count: int
    staff: tuple[ContractedStaff, ...]


@dataclass(frozen=True)
class ScheduledSummary:
    total_hours: Decimal
    total_cost: Decimal
    shift_count: int
    staff: tuple[ScheduledStaff, ...]


@dataclass(frozen=True)
class ForecastVariance:
    """scheduled - contracted, with percentages of contracted (0 if none)."""

    hours: Decimal
    cost: Decimal
    hours_percent: Decimal
    cost_percent: Decimal


@dataclass(frozen=True)
class ForecastResult:
    week_start: date
    week_end: date
    contracted: ContractedSummary
    scheduled: ScheduledSummary
    variance: ForecastVariance
    location_id: str | None = None
    snapshot_fingerprint: str = ""


class ForecastEngine:
    """Compares contracted staffing cost with the week's scheduled shifts.

    Contracted cost is contracted_hours x contracted rate for hourly staff
    and monthly_salary / weeks_per_month for salaried staff. Scheduled cost
    runs every shift in the week through the break and rate logic; shifts
    assigned to salaried staff add hours but no cost. Single pass, no
    caching.
    """

    def __init__(
        self,
        config: PayrollConfig,
        rate_resolver: RateResolver,
        break_calculator: BreakCalculator,
    ):
        self.config = config
        self.rate_resolver = rate_resolver
        self.break_calculator = break_calculator

    def forecast(
        self,
        snapshot: Snapshot,
        week_start: date,
        location_id: str | None = None,
    ) -> ForecastResult:
        """Run the forecast for the week starting at week_start."""
        week = Period.for_week(week_start)

        staff = [
            s
            for s in snapshot.staff
            if s.is_active and (location_id is None or location_id in s.location_ids)
        ]
        shifts = [
            i
            for i in snapshot.intervals
            if i.source == IntervalSource.SHIFT
            and week.contains(i.start)
            and (location_id is None or i.location_id == location_id)
        ]

        contracted_hours, contracted_cost, contracted_rows = self._contracted(staff)
        # Assignees are looked up on the whole roster, not the location-filtered list
        scheduled_hours, scheduled_cost, scheduled_rows = self._scheduled(
            shifts, snapshot.staff_by_id()
        )

        return ForecastResult(
            week_start=week.start,
            week_end=week.end,
            contracted=ContractedSummary(
                total_hours=round_hours(contracted_hours),
                total_cost=round_money(contracted_cost),
                staff_count=len(contracted_rows),
                staff=tuple(contracted_rows),
            ),
            scheduled=ScheduledSummary(
                total_hours=round_hours(scheduled_hours),
                total_cost=round_money(scheduled_cost),
                shift_count=len(shifts),
                staff=tuple(scheduled_rows),
            ),
            variance=self.variance(
                contracted_hours, contracted_cost, scheduled_hours, scheduled_cost
            ),
            location_id=location_id,
        )

    def contracted_cost(self, staff: StaffMember) -> Decimal:
        """Weekly cost of a staff member's contract."""
        if staff.payment_type == PaymentType.MONTHLY:
            if staff.monthly_salary is None or self.config.weeks_per_month <= 0:
                return ZERO
            return staff.monthly_salary / self.config.weeks_per_month
        return (staff.contracted_hours or ZERO) * self.rate_resolver.contracted_rate(staff)

    def _contracted(
        self, staff: Iterable[StaffMember]
    ) -> tuple[Decimal, Decimal, list[ContractedStaff]]:
        total_hours = ZERO
        total_cost = ZERO
        rows: list[ContractedStaff] = []

        for member in staff:
            if member.contracted_hours is None or member.contracted_hours <= 0:
                continue
            cost = self.contracted_cost(member)
            total_hours += member.contracted_hours
            total_cost += cost
            rows.append(
                ContractedStaff(
                    user_id=member.user_id,
                    name=member.name,
                    contracted_hours=round_hours(member.contracted_hours),
                    estimated_cost=round_money(cost),
                )
            )

        return total_hours, total_cost, rows

    def _scheduled(
        self,
        shifts: list[WorkedInterval],
        roster: dict[str, StaffMember],
    ) -> tuple[Decimal, Decimal, list[ScheduledStaff]]:
        prepared: list[WorkedInterval] = []
        for shift in shifts:
            if shift.user_id and shift.user_id not in roster:
                logger.warning(
                    "Shift %s assigned to %s who is not on the roster; costing as open shift",
                    shift.interval_id,
                    shift.user_id,
                )
                shift = replace(shift, user_id=None)
            prepared.append(shift)

        def rate_for(interval: WorkedInterval) -> Decimal:
            assignee = roster.get(interval.user_id) if interval.user_id else None
            return self.rate_resolver.resolve_for_staff(assignee, interval.category_id)

        total_hours = ZERO
        total_cost = ZERO
        per_staff: dict[str, list[Decimal]] = {}

        for cost in self.break_calculator.apply(prepared, rate_for):
            user_id = cost.interval.user_id
            assignee = roster.get(user_id) if user_id else None
            pay = ZERO if assignee is not None and assignee.is_salaried else cost.pay

            total_hours += cost.paid_hours
            total_cost += pay
            if assignee is not None:
                entry = per_staff.setdefault(assignee.user_id, [ZERO, ZERO])
                entry[0] += cost.paid_hours
                entry[1] += pay

        rows = [
            ScheduledStaff(
                user_id=user_id,
                name=roster[user_id].name,
                scheduled_hours=round_hours(hours),
                estimated_cost=round_money(cost),
            )
            for user_id, (hours, cost) in per_staff.items()
        ]
        return total_hours, total_cost, rows

    @staticmethod
    def variance(
        contracted_hours: Decimal,
        contracted_cost: Decimal,
        scheduled_hours: Decimal,
        scheduled_cost: Decimal,
    ) -> ForecastVariance:
        """Variance of scheduled against contracted; percentages guarded."""
        hours_variance = scheduled_hours - contracted_hours
        cost_variance = scheduled_cost - contracted_cost
        return ForecastVariance(
            hours=round_hours(hours_variance),
            cost=round_money(cost_variance),
            hours_percent=percent_change(hours_variance, contracted_hours),
            cost_percent=percent_change(cost_variance, contracted_cost),
        )
