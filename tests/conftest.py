"""Pytest fixtures for labour cost engine tests."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from labour_cost.calculators.types import (
    BreakCalculationMode,
    BreakRule,
    Location,
    PaymentType,
    PayrollConfig,
    ShiftCategory,
    Snapshot,
    StaffMember,
    StaffRole,
    WorkedInterval,
)


def at(year: int, month: int, day: int, hour: int, minute: int = 0) -> datetime:
    """UTC timestamp helper."""
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def config() -> PayrollConfig:
    """Organization config with a single 30 minute break after 6 hours."""
    return PayrollConfig(
        break_calculation_mode=BreakCalculationMode.PER_SHIFT,
        break_rules=(BreakRule(min_hours=Decimal("6"), break_minutes=Decimal("30")),),
    )


@pytest.fixture
def categories() -> tuple[ShiftCategory, ...]:
    return (
        ShiftCategory(category_id="bar", name="Bar", default_hourly_rate=Decimal("12.00")),
        ShiftCategory(category_id="kitchen", name="Kitchen", default_hourly_rate=Decimal("15.00")),
        ShiftCategory(category_id="events", name="Events", default_hourly_rate=None),
    )


@pytest.fixture
def locations() -> tuple[Location, ...]:
    return (
        Location(location_id="loc-a", name="High Street"),
        Location(location_id="loc-b", name="Harbour"),
        Location(location_id="loc-c", name="Old Depot", is_active=False),
    )


@pytest.fixture
def roster() -> tuple[StaffMember, ...]:
    """Two hourly employees, a salaried manager and an admin without a salary."""
    return (
        StaffMember(
            user_id="alice",
            name="Alice",
            category_rates={"kitchen": Decimal("18.00")},
            contracted_hours=Decimal("20"),
            location_ids=frozenset({"loc-a"}),
        ),
        StaffMember(
            user_id="bob",
            name="Bob",
            contracted_hours=Decimal("10"),
            location_ids=frozenset({"loc-a", "loc-b"}),
        ),
        StaffMember(
            user_id="carol",
            name="Carol",
            role=StaffRole.MANAGER,
            payment_type=PaymentType.MONTHLY,
            monthly_salary=Decimal("2000"),
            contracted_hours=Decimal("40"),
            location_ids=frozenset({"loc-a"}),
        ),
        StaffMember(
            user_id="dave",
            name="Dave",
            role=StaffRole.ADMIN,
            payment_type=PaymentType.MONTHLY,
            monthly_salary=None,
        ),
    )


@pytest.fixture
def march_entries() -> tuple[WorkedInterval, ...]:
    """Approved time entries for March 2024 plus one in February."""
    return (
        WorkedInterval.from_time_entry(
            "te-1", "alice", at(2024, 3, 4, 9), at(2024, 3, 4, 17),
            category_id="kitchen", location_id="loc-a",
        ),
        WorkedInterval.from_time_entry(
            "te-2", "bob", at(2024, 3, 5, 10), at(2024, 3, 5, 14),
            category_id="bar", location_id="loc-b",
        ),
        WorkedInterval.from_time_entry(
            "te-3", "carol", at(2024, 3, 6, 9), at(2024, 3, 6, 17),
            location_id="loc-a",
        ),
        WorkedInterval.from_time_entry(
            "te-0", "alice", at(2024, 2, 12, 9), at(2024, 2, 12, 13),
            category_id="bar", location_id="loc-a",
        ),
    )


@pytest.fixture
def snapshot(roster, categories, locations, march_entries) -> Snapshot:
    return Snapshot(
        staff=roster,
        categories=categories,
        locations=locations,
        intervals=march_entries,
    )
