"""Type definitions for the labour cost calculation pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from labour_cost.calculators.rounding import ZERO, hours_between, round_money, to_decimal


class PaymentType(str, Enum):
    """How a staff member is paid."""

    HOURLY = "HOURLY"
    MONTHLY = "MONTHLY"


class StaffRole(str, Enum):
    """Organization roles relevant to cost visibility."""

    EMPLOYEE = "EMPLOYEE"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class BreakCalculationMode(str, Enum):
    """Organization-wide unpaid break evaluation mode."""

    PER_SHIFT = "PER_SHIFT"
    PER_DAY = "PER_DAY"


class IntervalSource(str, Enum):
    """Record a worked interval was resolved from."""

    SHIFT = "SHIFT"
    TIME_ENTRY = "TIME_ENTRY"


@dataclass(frozen=True)
class BreakRule:
    """Unpaid break granted once worked hours reach min_hours."""

    min_hours: Decimal
    break_minutes: Decimal


@dataclass(frozen=True)
class NIContribution:
    """National Insurance settings for one payer.

    Earnings above ``threshold`` are charged at ``rate``. When
    ``upper_threshold`` is set, earnings above it are charged at
    ``upper_rate`` instead (the employee two-band model).
    """

    threshold: Decimal
    rate: Decimal
    upper_threshold: Decimal | None = None
    upper_rate: Decimal = ZERO


@dataclass(frozen=True)
class PayrollConfig:
    """Organization-scoped payroll configuration.

    Passed explicitly into every engine call. Monetary thresholds are
    monthly figures (UK 2024/25 weekly thresholds x 52 / 12).
    """

    break_calculation_mode: BreakCalculationMode = BreakCalculationMode.PER_SHIFT
    break_rules: tuple[BreakRule, ...] = ()
    employee_ni: NIContribution = NIContribution(
        threshold=Decimal("1048.67"),
        rate=Decimal("0.08"),
        upper_threshold=Decimal("4189.67"),
        upper_rate=Decimal("0.02"),
    )
    employer_ni: NIContribution = NIContribution(
        threshold=Decimal("758.33"),
        rate=Decimal("0.138"),
    )
    holiday_accrual_ratio: Decimal = Decimal("0.1207")
    default_hourly_rate: Decimal = Decimal("10.00")
    weeks_per_month: Decimal = Decimal("4.33")

    def to_canonical_dict(self) -> dict[str, Any]:
        """Return canonical dict for fingerprinting."""
        return {
            "break_calculation_mode": self.break_calculation_mode.value,
            "break_rules": [
                [str(r.min_hours), str(r.break_minutes)] for r in self.break_rules
            ],
            "employee_ni": _ni_canonical(self.employee_ni),
            "employer_ni": _ni_canonical(self.employer_ni),
            "holiday_accrual_ratio": str(self.holiday_accrual_ratio),
            "default_hourly_rate": str(self.default_hourly_rate),
            "weeks_per_month": str(self.weeks_per_month),
        }


def _ni_canonical(ni: NIContribution) -> list[str | None]:
    return [
        str(ni.threshold),
        str(ni.rate),
        str(ni.upper_threshold) if ni.upper_threshold is not None else None,
        str(ni.upper_rate),
    ]


@dataclass(frozen=True)
class StaffMember:
    """A member of the organization's roster."""

    user_id: str
    name: str = ""
    role: StaffRole = StaffRole.EMPLOYEE
    payment_type: PaymentType = PaymentType.HOURLY
    monthly_salary: Decimal | None = None
    contracted_hours: Decimal | None = None
    # category_id -> hourly rate, in the order the overrides were created
    category_rates: Mapping[str, Decimal] = field(default_factory=dict)
    location_ids: frozenset[str] = frozenset()
    is_active: bool = True

    @property
    def is_salaried(self) -> bool:
        return self.payment_type == PaymentType.MONTHLY

    @property
    def has_contract(self) -> bool:
        """False for salaried staff without a salary on record."""
        return not self.is_salaried or self.monthly_salary is not None

    def to_canonical_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "role": self.role.value,
            "payment_type": self.payment_type.value,
            "monthly_salary": _opt_str(self.monthly_salary),
            "contracted_hours": _opt_str(self.contracted_hours),
            "category_rates": [[k, str(v)] for k, v in self.category_rates.items()],
            "location_ids": sorted(self.location_ids),
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class ShiftCategory:
    """Category of work carrying a default hourly rate."""

    category_id: str
    name: str = ""
    default_hourly_rate: Decimal | None = None
    color: str | None = None

    def to_canonical_dict(self) -> dict[str, Any]:
        return {
            "category_id": self.category_id,
            "default_hourly_rate": _opt_str(self.default_hourly_rate),
        }


@dataclass(frozen=True)
class Location:
    """Physical site of the organization."""

    location_id: str
    name: str = ""
    is_active: bool = True

    def to_canonical_dict(self) -> dict[str, Any]:
        return {
            "location_id": self.location_id,
            "name": self.name,
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class WorkedInterval:
    """A resolved unit of worked time (scheduled shift or approved time entry)."""

    interval_id: str
    user_id: str | None
    start: datetime
    end: datetime
    category_id: str | None = None
    location_id: str | None = None
    recorded_break_minutes: Decimal = ZERO
    source: IntervalSource = IntervalSource.SHIFT

    @classmethod
    def from_shift(
        cls,
        shift_id: str,
        start_time: datetime,
        end_time: datetime,
        assigned_to_id: str | None = None,
        category_id: str | None = None,
        location_id: str | None = None,
        scheduled_break_minutes: Any = 0,
    ) -> WorkedInterval:
        return cls(
            interval_id=shift_id,
            user_id=assigned_to_id,
            start=start_time,
            end=end_time,
            category_id=category_id or None,
            location_id=location_id or None,
            recorded_break_minutes=to_decimal(scheduled_break_minutes or 0),
            source=IntervalSource.SHIFT,
        )

    @classmethod
    def from_time_entry(
        cls,
        entry_id: str,
        user_id: str,
        clock_in: datetime,
        clock_out: datetime,
        total_break_minutes: Any = 0,
        category_id: str | None = None,
        location_id: str | None = None,
    ) -> WorkedInterval:
        return cls(
            interval_id=entry_id,
            user_id=user_id,
            start=clock_in,
            end=clock_out,
            category_id=category_id or None,
            location_id=location_id or None,
            recorded_break_minutes=to_decimal(total_break_minutes or 0),
            source=IntervalSource.TIME_ENTRY,
        )

    @property
    def gross_hours(self) -> Decimal:
        """Duration in hours; zero when end <= start."""
        return hours_between(self.end - self.start)

    @property
    def work_date(self) -> date:
        return self.start.date()

    @property
    def is_assigned(self) -> bool:
        return bool(self.user_id)

    def to_canonical_dict(self) -> dict[str, Any]:
        return {
            "interval_id": self.interval_id,
            "user_id": self.user_id,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "category_id": self.category_id,
            "location_id": self.location_id,
            "recorded_break_minutes": str(self.recorded_break_minutes),
            "source": self.source.value,
        }


@dataclass(frozen=True)
class Snapshot:
    """Immutable bundle of input records for one engine invocation."""

    staff: tuple[StaffMember, ...] = ()
    categories: tuple[ShiftCategory, ...] = ()
    locations: tuple[Location, ...] = ()
    intervals: tuple[WorkedInterval, ...] = ()

    def staff_by_id(self) -> dict[str, StaffMember]:
        return {s.user_id: s for s in self.staff}

    def categories_by_id(self) -> dict[str, ShiftCategory]:
        return {c.category_id: c for c in self.categories}

    def active_locations(self) -> list[Location]:
        return [loc for loc in self.locations if loc.is_active]

    def to_canonical_dict(self) -> dict[str, Any]:
        return {
            "staff": [s.to_canonical_dict() for s in self.staff],
            "categories": [c.to_canonical_dict() for c in self.categories],
            "locations": [loc.to_canonical_dict() for loc in self.locations],
            "intervals": [i.to_canonical_dict() for i in self.intervals],
        }


@dataclass(frozen=True)
class IntervalCost:
    """An interval after rate resolution and break deduction."""

    interval: WorkedInterval
    rate: Decimal
    gross_hours: Decimal
    break_hours: Decimal
    paid_hours: Decimal
    pay: Decimal  # paid_hours x rate, before NI and holiday accrual

    @property
    def gross_pay(self) -> Decimal:
        """Pay before the unpaid break is deducted."""
        return self.gross_hours * self.rate


@dataclass(frozen=True)
class CostResult:
    """Employer cost of one staff member for a period."""

    gross_pay: Decimal = ZERO
    holiday_accrual: Decimal = ZERO
    employee_ni: Decimal = ZERO
    employer_ni: Decimal = ZERO
    total_cost: Decimal = ZERO

    def rounded(self) -> CostResult:
        """Copy with every figure rounded to pence."""
        return CostResult(
            gross_pay=round_money(self.gross_pay),
            holiday_accrual=round_money(self.holiday_accrual),
            employee_ni=round_money(self.employee_ni),
            employer_ni=round_money(self.employer_ni),
            total_cost=round_money(self.total_cost),
        )


def _opt_str(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


@dataclass(frozen=True)
class StaffCost:
    """A staff member's full-precision cost and the intervals behind it."""

    staff: StaffMember
    cost: CostResult
    intervals: tuple[IntervalCost, ...] = ()

    @property
    def hours(self) -> Decimal:
        return sum((c.paid_hours for c in self.intervals), ZERO)
