"""Tests for location, category and day aggregation."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from labour_cost.calculators.aggregation import (
    UNASSIGNED_LOCATION,
    UNCATEGORISED,
    AggregationEngine,
)
from labour_cost.calculators.engine import LabourCostEngine
from labour_cost.calculators.periods import Period
from labour_cost.calculators.types import (
    Location,
    PaymentType,
    Snapshot,
    StaffMember,
    WorkedInterval,
)


def _at(day: int, hour: int) -> datetime:
    return datetime(2024, 3, day, hour, tzinfo=timezone.utc)


def _aggregate(config, snapshot: Snapshot):
    engine = LabourCostEngine(config, engine_version="test")
    staff_costs = engine.cost_staff(snapshot, list(snapshot.intervals))
    aggregation = AggregationEngine(
        snapshot.active_locations(),
        snapshot.categories_by_id(),
        location_names={loc.location_id: loc.name for loc in snapshot.locations},
    )
    return staff_costs, aggregation.aggregate(staff_costs)


def _march(snapshot: Snapshot) -> Snapshot:
    return Snapshot(
        staff=snapshot.staff,
        categories=snapshot.categories,
        locations=snapshot.locations,
        intervals=tuple(i for i in snapshot.intervals if i.start.month == 3),
    )


class TestLocationBreakdown:
    """Test location grouping."""

    def test_active_locations_seeded(self, config, snapshot):
        """Every active location appears, inactive ones do not."""
        quiet = Snapshot(
            staff=snapshot.staff,
            categories=snapshot.categories,
            locations=snapshot.locations + (Location("loc-d", "Quiet Yard"),),
            intervals=_march(snapshot).intervals,
        )

        _, breakdown = _aggregate(config, quiet)
        by_key = {agg.key: agg for agg in breakdown.locations}

        assert set(by_key) == {"loc-a", "loc-b", "loc-d"}
        assert by_key["loc-d"].cost == Decimal("0.00")
        assert by_key["loc-d"].name == "Quiet Yard"

    def test_costs_include_employer_on_costs(self, config, snapshot):
        """Location cost carries NI and holiday accrual, not just pay."""
        _, breakdown = _aggregate(config, _march(snapshot))
        by_key = {agg.key: agg for agg in breakdown.locations}

        # alice 151.2945 + carol 2171.35046 = 2322.64496, plus the penny
        # that makes the locations add up to the 2376.44 total
        assert by_key["loc-a"].cost == Decimal("2322.65")
        assert by_key["loc-a"].hours == Decimal("15.00")
        # bob 48 + 12.07% holiday
        assert by_key["loc-b"].cost == Decimal("53.79")

    def test_sorted_by_cost_descending(self, config, snapshot):
        _, breakdown = _aggregate(config, _march(snapshot))

        costs = [agg.cost for agg in breakdown.locations]
        assert costs == sorted(costs, reverse=True)

    def test_no_unassigned_bucket_when_all_placed(self, config, snapshot):
        _, breakdown = _aggregate(config, _march(snapshot))

        assert UNASSIGNED_LOCATION not in {agg.key for agg in breakdown.locations}

    def test_salary_without_time_goes_to_unassigned(self, config, categories, locations):
        """A salary with nothing to spread over is kept in the unassigned bucket."""
        snapshot = Snapshot(
            staff=(
                StaffMember(
                    user_id="carol",
                    payment_type=PaymentType.MONTHLY,
                    monthly_salary=Decimal("2000"),
                ),
            ),
            categories=categories,
            locations=locations,
        )

        _, breakdown = _aggregate(config, snapshot)

        assert breakdown.locations[0].key == UNASSIGNED_LOCATION
        assert breakdown.locations[0].name == "Unassigned"
        assert breakdown.locations[0].cost == Decimal("2171.35")

    def test_unlisted_location_gets_own_group(self, config, categories, locations):
        """Time at a location missing from the active list is still counted."""
        entry = WorkedInterval.from_time_entry(
            "te-x", "bob", _at(7, 9), _at(7, 13), category_id="bar", location_id="popup"
        )
        snapshot = Snapshot(
            staff=(StaffMember(user_id="bob"),),
            categories=categories,
            locations=locations,
            intervals=(entry,),
        )

        _, breakdown = _aggregate(config, snapshot)
        by_key = {agg.key: agg for agg in breakdown.locations}

        assert by_key["popup"].name == "popup"
        assert by_key["popup"].cost == Decimal("53.79")


class TestCategoryAndDayBreakdown:
    """Test category and calendar day grouping."""

    def test_categories(self, config, snapshot):
        """Intervals without a category form their own group."""
        _, breakdown = _aggregate(config, _march(snapshot))

        assert [agg.key for agg in breakdown.categories] == [UNCATEGORISED, "kitchen", "bar"]
        assert breakdown.categories[0].name == "Uncategorised"
        assert breakdown.categories[1].name == "Kitchen"
        assert breakdown.categories[1].cost == Decimal("151.29")

    def test_days(self, config, snapshot):
        """Only days with time appear, keyed by ISO date."""
        _, breakdown = _aggregate(config, _march(snapshot))

        assert [agg.key for agg in breakdown.days] == ["2024-03-06", "2024-03-04", "2024-03-05"]
        assert breakdown.days[1].hours == Decimal("7.50")


class TestReconciliation:
    """Test that location costs add back up to the total."""

    def test_locations_reconcile_to_total(self, config, snapshot):
        staff_costs, breakdown = _aggregate(config, snapshot)

        total = sum(sc.cost.total_cost for sc in staff_costs)
        located = sum(agg.cost for agg in breakdown.locations)

        assert abs(located - total) <= Decimal("0.01")

    def test_allocation_places_whole_cost(self, config, snapshot):
        """Each staff member's cost is spread over their intervals exactly."""
        staff_costs, _ = _aggregate(config, snapshot)
        aggregation = AggregationEngine(snapshot.active_locations(), snapshot.categories_by_id())

        for staff_cost in staff_costs:
            allocated, unplaced = aggregation.allocate(staff_cost)
            if staff_cost.intervals:
                placed = sum(a.cost for a in allocated)
                assert abs(placed - staff_cost.cost.total_cost) < Decimal("0.000001")
                assert unplaced == 0

    def test_many_locations_add_up_exactly(self, config):
        """Per-location rounding gaps do not accumulate across locations."""
        sites = tuple(Location(f"loc-{n}", f"Site {n}") for n in range(8))
        entries = tuple(
            WorkedInterval.from_time_entry(
                f"te-{n}", f"u{n}", _at(4, 9), _at(4, 9) + timedelta(minutes=30),
                location_id=f"loc-{n}",
            )
            for n in range(8)
        )
        snapshot = Snapshot(
            staff=tuple(StaffMember(user_id=f"u{n}") for n in range(8)),
            locations=sites,
            intervals=entries,
        )
        engine = LabourCostEngine(config, engine_version="test")

        report = engine.staff_costs(snapshot, Period.for_month(2024, 3))
        locations = report.breakdown.locations

        # 8 x 5.6035 = 44.828; the three missing pennies go to the first sites
        assert report.totals.total_cost == Decimal("44.83")
        assert sum(agg.cost for agg in locations) == Decimal("44.83")
        assert [agg.cost for agg in locations] == [Decimal("5.61")] * 3 + [Decimal("5.60")] * 5
        assert [agg.key for agg in locations[:3]] == ["loc-0", "loc-1", "loc-2"]
