"""Pydantic schemas for API request/response models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from labour_cost.calculators.break_calculator import parse_break_rules
from labour_cost.calculators.engine import StaffCostReport
from labour_cost.calculators.forecast import ForecastResult
from labour_cost.calculators.types import (
    BreakCalculationMode,
    Location,
    NIContribution,
    PaymentType,
    PayrollConfig,
    ShiftCategory,
    Snapshot,
    StaffMember,
    StaffRole,
    WorkedInterval,
)
from labour_cost.config import Settings


# ============================================================================
# Snapshot input schemas
# ============================================================================


class StaffMemberIn(BaseModel):
    """Schema for a roster entry."""

    user_id: str
    name: str = ""
    role: StaffRole = StaffRole.EMPLOYEE
    payment_type: PaymentType = PaymentType.HOURLY
    monthly_salary: Decimal | None = None
    contracted_hours: Decimal | None = None
    # Overrides in the order they were created; the first one is the contracted rate
    category_rates: dict[str, Decimal] = Field(default_factory=dict)
    location_ids: list[str] = Field(default_factory=list)
    is_active: bool = True

    def to_domain(self) -> StaffMember:
        return StaffMember(
            user_id=self.user_id,
            name=self.name,
            role=self.role,
            payment_type=self.payment_type,
            monthly_salary=self.monthly_salary,
            contracted_hours=self.contracted_hours,
            category_rates=dict(self.category_rates),
            location_ids=frozenset(self.location_ids),
            is_active=self.is_active,
        )


class ShiftCategoryIn(BaseModel):
    """Schema for a shift category."""

    category_id: str
    name: str = ""
    default_hourly_rate: Decimal | None = None
    color: str | None = None

    def to_domain(self) -> ShiftCategory:
        return ShiftCategory(
            category_id=self.category_id,
            name=self.name,
            default_hourly_rate=self.default_hourly_rate,
            color=self.color,
        )


class LocationIn(BaseModel):
    """Schema for a location."""

    location_id: str
    name: str = ""
    is_active: bool = True

    def to_domain(self) -> Location:
        return Location(location_id=self.location_id, name=self.name, is_active=self.is_active)


class TimeEntryIn(BaseModel):
    """Schema for an approved time entry."""

    entry_id: str
    user_id: str
    clock_in: datetime
    clock_out: datetime | None = None
    total_break_minutes: Decimal = Decimal("0")
    category_id: str | None = None
    location_id: str | None = None

    def to_domain(self) -> WorkedInterval | None:
        """Convert to a worked interval; open entries (no clock-out) give None."""
        if self.clock_out is None:
            return None
        return WorkedInterval.from_time_entry(
            entry_id=self.entry_id,
            user_id=self.user_id,
            clock_in=self.clock_in,
            clock_out=self.clock_out,
            total_break_minutes=self.total_break_minutes,
            category_id=self.category_id,
            location_id=self.location_id,
        )


class ShiftIn(BaseModel):
    """Schema for a scheduled shift."""

    shift_id: str
    start_time: datetime
    end_time: datetime
    assigned_to_id: str | None = None
    category_id: str | None = None
    location_id: str | None = None
    scheduled_break_minutes: Decimal = Decimal("0")

    def to_domain(self) -> WorkedInterval:
        return WorkedInterval.from_shift(
            shift_id=self.shift_id,
            start_time=self.start_time,
            end_time=self.end_time,
            assigned_to_id=self.assigned_to_id,
            category_id=self.category_id,
            location_id=self.location_id,
            scheduled_break_minutes=self.scheduled_break_minutes,
        )


class PayrollConfigIn(BaseModel):
    """Schema for organization payroll configuration.

    Every field is optional; missing fields take the deployment defaults.
    ``break_rules`` may be a list of rules or the JSON text stored on the
    organization record.
    """

    break_calculation_mode: BreakCalculationMode | None = None
    break_rules: list[dict[str, Any]] | str | None = None
    employee_ni_threshold: Decimal | None = None
    employee_ni_rate: Decimal | None = None
    employee_ni_upper_threshold: Decimal | None = None
    employee_ni_upper_rate: Decimal | None = None
    employer_ni_threshold: Decimal | None = None
    employer_ni_rate: Decimal | None = None
    holiday_accrual_ratio: Decimal | None = None
    default_hourly_rate: Decimal | None = None
    weeks_per_month: Decimal | None = None

    def to_domain(self, defaults: PayrollConfig) -> PayrollConfig:
        employee_ni = NIContribution(
            threshold=_pick(self.employee_ni_threshold, defaults.employee_ni.threshold),
            rate=_pick(self.employee_ni_rate, defaults.employee_ni.rate),
            upper_threshold=_pick(
                self.employee_ni_upper_threshold, defaults.employee_ni.upper_threshold
            ),
            upper_rate=_pick(self.employee_ni_upper_rate, defaults.employee_ni.upper_rate),
        )
        employer_ni = NIContribution(
            threshold=_pick(self.employer_ni_threshold, defaults.employer_ni.threshold),
            rate=_pick(self.employer_ni_rate, defaults.employer_ni.rate),
        )
        return PayrollConfig(
            break_calculation_mode=_pick(
                self.break_calculation_mode, defaults.break_calculation_mode
            ),
            break_rules=parse_break_rules(self.break_rules),
            employee_ni=employee_ni,
            employer_ni=employer_ni,
            holiday_accrual_ratio=_pick(
                self.holiday_accrual_ratio, defaults.holiday_accrual_ratio
            ),
            default_hourly_rate=_pick(self.default_hourly_rate, defaults.default_hourly_rate),
            weeks_per_month=_pick(self.weeks_per_month, defaults.weeks_per_month),
        )


def _pick(value: Any, default: Any) -> Any:
    return default if value is None else value


class SnapshotRequest(BaseModel):
    """Common body of the analytics endpoints."""

    config: PayrollConfigIn | None = None
    staff: list[StaffMemberIn] = Field(default_factory=list)
    categories: list[ShiftCategoryIn] = Field(default_factory=list)
    locations: list[LocationIn] = Field(default_factory=list)

    def payroll_config(self, settings: Settings) -> PayrollConfig:
        defaults = settings.payroll_config()
        if self.config is None:
            return defaults
        return self.config.to_domain(defaults)

    def intervals(self) -> list[WorkedInterval]:
        return []

    def to_snapshot(self) -> Snapshot:
        return Snapshot(
            staff=tuple(s.to_domain() for s in self.staff),
            categories=tuple(c.to_domain() for c in self.categories),
            locations=tuple(loc.to_domain() for loc in self.locations),
            intervals=tuple(self.intervals()),
        )


class StaffCostRequest(SnapshotRequest):
    """Schema for a staff cost report request.

    Time entries should cover the requested month and the month before it,
    which the report compares against.
    """

    time_entries: list[TimeEntryIn] = Field(default_factory=list)

    def intervals(self) -> list[WorkedInterval]:
        converted = (entry.to_domain() for entry in self.time_entries)
        return [interval for interval in converted if interval is not None]


class ForecastRequest(SnapshotRequest):
    """Schema for a weekly forecast request."""

    shifts: list[ShiftIn] = Field(default_factory=list)

    def intervals(self) -> list[WorkedInterval]:
        return [shift.to_domain() for shift in self.shifts]


# ============================================================================
# Staff cost response schemas
# ============================================================================


class StaffCostLineResponse(BaseModel):
    """Schema for one staff member's cost."""

    model_config = ConfigDict(from_attributes=True)

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


class CostTotalsResponse(BaseModel):
    """Schema for period totals."""

    model_config = ConfigDict(from_attributes=True)

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


class PeriodVarianceResponse(BaseModel):
    """Schema for the previous-month comparison."""

    model_config = ConfigDict(from_attributes=True)

    amount: Decimal
    percentage: Decimal
    previous_total: Decimal


class AggregateResponse(BaseModel):
    """Schema for a location, category or day group."""

    model_config = ConfigDict(from_attributes=True)

    key: str
    name: str
    hours: Decimal
    cost: Decimal


class BreakdownResponse(BaseModel):
    """Schema for the cost breakdowns."""

    model_config = ConfigDict(from_attributes=True)

    locations: list[AggregateResponse]
    categories: list[AggregateResponse]
    days: list[AggregateResponse]


class LocationResponse(BaseModel):
    """Schema for an active location."""

    model_config = ConfigDict(from_attributes=True)

    location_id: str
    name: str


class StaffCostResponse(BaseModel):
    """Schema for a staff cost report."""

    month: str
    period_start: date
    period_end: date
    location_id: str | None = None
    totals: CostTotalsResponse
    variance: PeriodVarianceResponse
    staff: list[StaffCostLineResponse]
    breakdown: BreakdownResponse
    all_locations: list[LocationResponse]
    snapshot_fingerprint: str

    @classmethod
    def from_report(cls, report: StaffCostReport) -> StaffCostResponse:
        return cls(
            month=report.period.label,
            period_start=report.period.start,
            period_end=report.period.last_day,
            location_id=report.location_id,
            totals=CostTotalsResponse.model_validate(report.totals),
            variance=PeriodVarianceResponse.model_validate(report.variance),
            staff=[StaffCostLineResponse.model_validate(line) for line in report.staff],
            breakdown=BreakdownResponse.model_validate(report.breakdown),
            all_locations=[LocationResponse.model_validate(loc) for loc in report.all_locations],
            snapshot_fingerprint=report.snapshot_fingerprint,
        )


# ============================================================================
# Forecast response schemas
# ============================================================================


class ContractedStaffResponse(BaseModel):
    """Schema for one staff member's contracted week."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    name: str
    contracted_hours: Decimal
    estimated_cost: Decimal


class ScheduledStaffResponse(BaseModel):
    """Schema for one staff member's scheduled week."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    name: str
    scheduled_hours: Decimal
    estimated_cost: Decimal


class ContractedResponse(BaseModel):
    """Schema for the contracted side of a forecast."""

    model_config = ConfigDict(from_attributes=True)

    total_hours: Decimal
    total_cost: Decimal
    staff_count: int
    staff: list[ContractedStaffResponse]


class ScheduledResponse(BaseModel):
    """Schema for the scheduled side of a forecast."""

    model_config = ConfigDict(from_attributes=True)

    total_hours: Decimal
    total_cost: Decimal
    shift_count: int
    staff: list[ScheduledStaffResponse]


class ForecastVarianceResponse(BaseModel):
    """Schema for scheduled against contracted."""

    model_config = ConfigDict(from_attributes=True)

    hours: Decimal
    cost: Decimal
    hours_percent: Decimal
    cost_percent: Decimal


class ForecastResponse(BaseModel):
    """Schema for a weekly forecast."""

    model_config = ConfigDict(from_attributes=True)

    week_start: date
    week_end: date
    location_id: str | None = None
    contracted: ContractedResponse
    scheduled: ScheduledResponse
    variance: ForecastVarianceResponse
    snapshot_fingerprint: str

    @classmethod
    def from_result(cls, result: ForecastResult) -> ForecastResponse:
        return cls.model_validate(result)


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None
