"""Labour cost engine - main orchestrator."""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any

from labour_cost.calculators.aggregation import AggregationEngine, Breakdown
from labour_cost.calculators.break_calculator import BreakCalculator
from labour_cost.calculators.cost_calculator import PayrollCostCalculator
from labour_cost.calculators.forecast import ForecastEngine, ForecastResult
from labour_cost.calculators.periods import Period
from labour_cost.calculators.rate_resolver import RateResolver
from labour_cost.calculators.rounding import ZERO, percent_change, round_hours, round_money
from labour_cost.calculators.types import (
    CostResult,
    IntervalCost,
    Location,
    PaymentType,
    PayrollConfig,
    Snapshot,
    StaffCost,
    StaffMember,
    StaffRole,
    WorkedInterval,
)
from labour_cost.calculators.visibility import visible_to_caller
from labour_cost.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StaffCostLine:
    """Per-staff reporting row, rounded to pence."""

    user_id: str
    name: str
    role: StaffRole
    payment_type: PaymentType
    hours: Decimal
    gross_pay: Decimal
    holiday_accrual: Decimal
    employee_ni: Decimal
    employer_ni: Decimal
    total_cost: Decimal


@dataclass(frozen=True)
class CostTotals:
    """Period totals, summed at full precision and rounded once."""

    hours: Decimal
    gross_pay: Decimal
    holiday_accrual: Decimal
    employee_ni: Decimal
    employer_ni: Decimal
    total_cost: Decimal
    hourly_cost: Decimal
    salaried_cost: Decimal
    hourly_staff_count: int
    salaried_staff_count: int


@dataclass(frozen=True)
class PeriodVariance:
    """Total cost against the previous calendar month."""

    amount: Decimal
    percentage: Decimal
    previous_total: Decimal


@dataclass(frozen=True)
class StaffCostReport:
    """Result of costing one period."""

    period: Period
    totals: CostTotals
    variance: PeriodVariance
    staff: tuple[StaffCostLine, ...]
    breakdown: Breakdown
    all_locations: tuple[Location, ...]
    location_id: str | None = None
    snapshot_fingerprint: str = ""


class LabourCostEngine:
    """Main labour cost engine.

    Pipeline for a staff cost report (stable order):
    1) Filter intervals to the period (and location, if given)
    2) Resolve each interval's rate
    3) Deduct unpaid breaks (PER_SHIFT or PER_DAY)
    4) Cost each staff member (gross pay, NI, holiday accrual)
    5) Aggregate by location, category and day
    6) Total at full precision, round once
    7) Compare with the previous month

    The engine holds only its configuration; every call works on the
    snapshot it is given and can run concurrently with others.
    """

    def __init__(self, config: PayrollConfig, engine_version: str | None = None):
        self.config = config
        self.engine_version = engine_version or get_settings().engine_version
        self.break_calculator = BreakCalculator(config.break_rules, config.break_calculation_mode)
        self.cost_calculator = PayrollCostCalculator(config)

    def rate_resolver(self, snapshot: Snapshot) -> RateResolver:
        return RateResolver(snapshot.categories, self.config.default_hourly_rate)

    def staff_costs(
        self,
        snapshot: Snapshot,
        period: Period,
        location_id: str | None = None,
    ) -> StaffCostReport:
        """Cost every staff member for the period."""
        staff_costs = self.cost_staff(snapshot, self._intervals_in(snapshot, period, location_id))

        previous_costs = self.cost_staff(
            snapshot, self._intervals_in(snapshot, period.previous_month(), location_id)
        )
        current_total = sum((sc.cost.total_cost for sc in staff_costs), ZERO)
        previous_total = sum((sc.cost.total_cost for sc in previous_costs), ZERO)

        aggregation = AggregationEngine(
            snapshot.active_locations(),
            snapshot.categories_by_id(),
            location_names={loc.location_id: loc.name for loc in snapshot.locations},
        )

        ordered = sorted(staff_costs, key=lambda sc: sc.cost.total_cost, reverse=True)
        report = StaffCostReport(
            period=period,
            totals=self._totals(staff_costs),
            variance=PeriodVariance(
                amount=round_money(current_total - previous_total),
                percentage=percent_change(current_total - previous_total, previous_total),
                previous_total=round_money(previous_total),
            ),
            staff=tuple(self._line(sc) for sc in ordered),
            breakdown=aggregation.aggregate(staff_costs),
            all_locations=tuple(snapshot.active_locations()),
            location_id=location_id,
            snapshot_fingerprint=self.fingerprint(
                snapshot, {"period": period.label, "location_id": location_id}
            ),
        )

        logger.info(
            "Costed %d staff for %s: total %s",
            len(staff_costs),
            period.label,
            report.totals.total_cost,
        )
        return report

    staff_costs_for = visible_to_caller(staff_costs)

    def weekly_forecast(
        self,
        snapshot: Snapshot,
        week_start: date,
        location_id: str | None = None,
    ) -> ForecastResult:
        """Contracted against scheduled cost for one week."""
        forecast = ForecastEngine(self.config, self.rate_resolver(snapshot), self.break_calculator)
        result = forecast.forecast(snapshot, week_start, location_id)
        return replace(
            result,
            snapshot_fingerprint=self.fingerprint(
                snapshot, {"week_start": week_start.isoformat(), "location_id": location_id}
            ),
        )

    def cost_staff(
        self, snapshot: Snapshot, intervals: list[WorkedInterval]
    ) -> list[StaffCost]:
        """Cost each staff member with intervals, plus every salaried member.

        Salaried staff are included even without intervals. Intervals for users not
        on the roster are costed as hourly with no overrides.
        """
        roster = snapshot.staff_by_id()
        rates = self.rate_resolver(snapshot)

        members: dict[str, StaffMember] = {}
        for staff in snapshot.staff:
            if staff.is_active and staff.is_salaried and staff.monthly_salary is not None:
                members[staff.user_id] = staff

        assigned: list[WorkedInterval] = []
        for interval in intervals:
            if not interval.user_id:
                logger.warning("Interval %s has no user; not costed", interval.interval_id)
                continue
            if interval.user_id not in members:
                staff = roster.get(interval.user_id)
                if staff is None:
                    logger.warning(
                        "User %s is not on the roster; costing as hourly", interval.user_id
                    )
                    staff = StaffMember(user_id=interval.user_id, name=interval.user_id)
                members[interval.user_id] = staff
            assigned.append(interval)

        def rate_for(interval: WorkedInterval) -> Decimal:
            return rates.resolve_for_staff(members.get(interval.user_id), interval.category_id)

        by_user: dict[str, list[IntervalCost]] = {user_id: [] for user_id in members}
        for cost in self.break_calculator.apply(assigned, rate_for):
            by_user[cost.interval.user_id].append(cost)

        return [
            StaffCost(
                staff=staff,
                cost=self.cost_calculator.calculate(staff, by_user[user_id]),
                intervals=tuple(by_user[user_id]),
            )
            for user_id, staff in members.items()
        ]

    def fingerprint(self, snapshot: Snapshot, params: dict[str, Any]) -> str:
        """Deterministic fingerprint of everything a result depends on."""
        data = {
            "engine_version": self.engine_version,
            "config": self.config.to_canonical_dict(),
            "snapshot": snapshot.to_canonical_dict(),
            "params": params,
        }
        json_str = json.dumps(data, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]

    @staticmethod
    def _intervals_in(
        snapshot: Snapshot, period: Period, location_id: str | None
    ) -> list[WorkedInterval]:
        return [
            i
            for i in snapshot.intervals
            if period.contains(i.start) and (location_id is None or i.location_id == location_id)
        ]

    @staticmethod
    def _line(staff_cost: StaffCost) -> StaffCostLine:
        staff = staff_cost.staff
        cost = staff_cost.cost.rounded()
        return StaffCostLine(
            user_id=staff.user_id,
            name=staff.name,
            role=staff.role,
            payment_type=staff.payment_type,
            hours=round_hours(staff_cost.hours),
            gross_pay=cost.gross_pay,
            holiday_accrual=cost.holiday_accrual,
            employee_ni=cost.employee_ni,
            employer_ni=cost.employer_ni,
            total_cost=cost.total_cost,
        )

    @staticmethod
    def _totals(staff_costs: list[StaffCost]) -> CostTotals:
        hours = ZERO
        summed = CostResult()
        hourly_cost = ZERO
        salaried_cost = ZERO
        hourly_count = 0
        salaried_count = 0

        for sc in staff_costs:
            hours += sc.hours
            summed = CostResult(
                gross_pay=summed.gross_pay + sc.cost.gross_pay,
                holiday_accrual=summed.holiday_accrual + sc.cost.holiday_accrual,
                employee_ni=summed.employee_ni + sc.cost.employee_ni,
                employer_ni=summed.employer_ni + sc.cost.employer_ni,
                total_cost=summed.total_cost + sc.cost.total_cost,
            )
            if sc.staff.is_salaried:
                # Salaried staff without a salary have no active contract
                if sc.staff.has_contract:
                    salaried_cost += sc.cost.total_cost
                    salaried_count += 1
            else:
                hourly_cost += sc.cost.total_cost
                hourly_count += 1

        rounded = summed.rounded()
        return CostTotals(
            hours=round_hours(hours),
            gross_pay=rounded.gross_pay,
            holiday_accrual=rounded.holiday_accrual,
            employee_ni=rounded.employee_ni,
            employer_ni=rounded.employer_ni,
            total_cost=rounded.total_cost,
            hourly_cost=round_money(hourly_cost),
            salaried_cost=round_money(salaried_cost),
            hourly_staff_count=hourly_count,
            salaried_staff_count=salaried_count,
        )
