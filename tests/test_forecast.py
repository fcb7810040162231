"""Tests for the weekly contracted against scheduled forecast."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from labour_cost.calculators.engine import LabourCostEngine
from labour_cost.calculators.forecast import ForecastEngine
from labour_cost.calculators.types import (
    PaymentType,
    PayrollConfig,
    ShiftCategory,
    Snapshot,
    StaffMember,
    WorkedInterval,
)

WEEK = date(2024, 3, 4)  # a Monday


def _at(day: int, hour: int) -> datetime:
    return datetime(2024, 3, day, hour, tzinfo=timezone.utc)


def _shift(shift_id, day, start, end, user_id="eve", location_id="loc-a", break_minutes=0):
    return WorkedInterval.from_shift(
        shift_id,
        _at(day, start),
        _at(day, end),
        assigned_to_id=user_id,
        category_id="floor",
        location_id=location_id,
        scheduled_break_minutes=break_minutes,
    )


@pytest.fixture
def floor() -> tuple[ShiftCategory, ...]:
    return (ShiftCategory(category_id="floor", name="Floor", default_hourly_rate=Decimal("10")),)


@pytest.fixture
def eve() -> StaffMember:
    return StaffMember(
        user_id="eve",
        name="Eve",
        contracted_hours=Decimal("40"),
        location_ids=frozenset({"loc-a"}),
    )


@pytest.fixture
def engine() -> LabourCostEngine:
    return LabourCostEngine(PayrollConfig(), engine_version="test")


class TestForecastVariance:
    """Test contracted against scheduled totals."""

    def test_under_scheduled_week(self, engine, floor, eve):
        """40 contracted hours against five 7 hour shifts."""
        snapshot = Snapshot(
            staff=(eve,),
            categories=floor,
            intervals=tuple(_shift(f"s{d}", d, 9, 16) for d in range(4, 9)),
        )

        result = engine.weekly_forecast(snapshot, WEEK)

        assert result.contracted.total_hours == Decimal("40.00")
        assert result.contracted.total_cost == Decimal("400.00")
        assert result.scheduled.total_hours == Decimal("35.00")
        assert result.scheduled.total_cost == Decimal("350.00")
        assert result.scheduled.shift_count == 5
        assert result.variance.hours == Decimal("-5.00")
        assert result.variance.cost == Decimal("-50.00")
        assert result.variance.hours_percent == Decimal("-12.50")
        assert result.variance.cost_percent == Decimal("-12.50")

    def test_no_contracted_hours_percentages_are_zero(self, engine, floor):
        """Percentages against an empty baseline are defined as 0."""
        snapshot = Snapshot(
            categories=floor,
            intervals=(_shift("open", 4, 9, 15, user_id=None),),
        )

        result = engine.weekly_forecast(snapshot, WEEK)

        assert result.contracted.staff_count == 0
        assert result.variance.cost == Decimal("60.00")
        assert result.variance.hours_percent == Decimal("0.00")
        assert result.variance.cost_percent == Decimal("0.00")

    def test_week_bounds(self, engine, floor, eve):
        """Only shifts starting inside [week_start, week_start + 7 days) count."""
        snapshot = Snapshot(
            staff=(eve,),
            categories=floor,
            intervals=(
                _shift("before", 3, 9, 17),
                _shift("monday", 4, 9, 17),
                _shift("sunday", 10, 9, 17),
                _shift("next", 11, 9, 17),
            ),
        )

        result = engine.weekly_forecast(snapshot, WEEK)

        assert result.week_end == date(2024, 3, 11)
        assert result.scheduled.shift_count == 2

    def test_fingerprint_attached(self, engine, floor, eve):
        snapshot = Snapshot(staff=(eve,), categories=floor)

        first = engine.weekly_forecast(snapshot, WEEK)
        second = engine.weekly_forecast(snapshot, WEEK)

        assert first.snapshot_fingerprint
        assert first == second


class TestContractedCost:
    """Test the weekly cost of contracts."""

    def test_salaried_weekly_equivalent(self, floor):
        """Monthly salary over 4.33 weeks."""
        config = PayrollConfig()
        labour = LabourCostEngine(config, engine_version="test")
        resolver = labour.rate_resolver(Snapshot(categories=floor))
        engine = ForecastEngine(config, resolver, labour.break_calculator)
        frank = StaffMember(
            user_id="frank",
            payment_type=PaymentType.MONTHLY,
            monthly_salary=Decimal("2165"),
            contracted_hours=Decimal("37.5"),
        )

        assert engine.contracted_cost(frank) == Decimal("500")

    def test_override_is_contracted_rate(self, engine, floor):
        """Hourly contracts use the member's first override."""
        gina = StaffMember(
            user_id="gina",
            contracted_hours=Decimal("10"),
            category_rates={"floor": Decimal("11.50")},
        )

        result = engine.weekly_forecast(Snapshot(staff=(gina,), categories=floor), WEEK)

        assert result.contracted.total_cost == Decimal("115.00")

    def test_staff_without_contract_excluded(self, engine, floor):
        """Members with no contracted hours do not appear in the contracted list."""
        casual = StaffMember(user_id="casual")

        result = engine.weekly_forecast(Snapshot(staff=(casual,), categories=floor), WEEK)

        assert result.contracted.staff == ()


class TestScheduledCost:
    """Test costing of the week's shifts."""

    def test_salaried_shifts_add_hours_not_cost(self, engine, floor):
        frank = StaffMember(
            user_id="frank",
            name="Frank",
            payment_type=PaymentType.MONTHLY,
            monthly_salary=Decimal("2165"),
        )
        snapshot = Snapshot(
            staff=(frank,),
            categories=floor,
            intervals=(_shift("s1", 4, 9, 17, user_id="frank"),),
        )

        result = engine.weekly_forecast(snapshot, WEEK)

        assert result.scheduled.total_hours == Decimal("8.00")
        assert result.scheduled.total_cost == Decimal("0.00")
        assert result.scheduled.staff[0].scheduled_hours == Decimal("8.00")

    def test_open_shift_uses_recorded_break(self, engine, floor):
        snapshot = Snapshot(
            categories=floor,
            intervals=(_shift("open", 4, 9, 15, user_id=None, break_minutes=30),),
        )

        result = engine.weekly_forecast(snapshot, WEEK)

        assert result.scheduled.total_hours == Decimal("5.50")
        assert result.scheduled.total_cost == Decimal("55.00")
        assert result.scheduled.staff == ()

    def test_unknown_assignee_costed_as_open_shift(self, engine, floor, eve):
        snapshot = Snapshot(
            staff=(eve,),
            categories=floor,
            intervals=(_shift("ghost", 4, 9, 13, user_id="ghost"),),
        )

        result = engine.weekly_forecast(snapshot, WEEK)

        assert result.scheduled.total_cost == Decimal("40.00")
        assert result.scheduled.staff == ()

    def test_time_entries_ignored(self, engine, floor, eve):
        """Only scheduled shifts are forecast."""
        entry = WorkedInterval.from_time_entry("te-1", "eve", _at(4, 9), _at(4, 17))
        snapshot = Snapshot(staff=(eve,), categories=floor, intervals=(entry,))

        result = engine.weekly_forecast(snapshot, WEEK)

        assert result.scheduled.shift_count == 0

    def test_location_filter(self, engine, floor, eve):
        """Contracted staff by location access; shifts by their location."""
        harry = StaffMember(
            user_id="harry",
            contracted_hours=Decimal("20"),
            location_ids=frozenset({"loc-b"}),
        )
        snapshot = Snapshot(
            staff=(eve, harry),
            categories=floor,
            intervals=(
                _shift("a", 4, 9, 13, user_id="eve", location_id="loc-a"),
                _shift("b", 4, 9, 13, user_id="harry", location_id="loc-b"),
            ),
        )

        result = engine.weekly_forecast(snapshot, WEEK, location_id="loc-b")

        assert [s.user_id for s in result.contracted.staff] == ["harry"]
        assert result.scheduled.shift_count == 1
        assert result.scheduled.staff[0].user_id == "harry"
        assert result.location_id == "loc-b"
