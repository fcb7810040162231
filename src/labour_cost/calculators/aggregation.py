"""Grouping of computed costs by location, category and calendar day."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal

from labour_cost.calculators.rounding import (
    ZERO,
    round_hours,
    round_money,
    round_to_total,
    safe_ratio,
)
from labour_cost.calculators.types import (
    IntervalCost,
    Location,
    PaymentType,
    ShiftCategory,
    StaffCost,
)

UNASSIGNED_LOCATION = "unassigned"
UNCATEGORISED = "uncategorised"


@dataclass(frozen=True)
class Aggregate:
    """A named group with summed hours and cost (rounded for reporting)."""

    key: str
    name: str
    hours: Decimal
    cost: Decimal


@dataclass(frozen=True)
class AllocatedInterval:
    """An interval carrying its share of the staff member's employer cost."""

    interval_cost: IntervalCost
    cost: Decimal


@dataclass(frozen=True)
class Breakdown:
    """Location, category and day aggregates, each sorted by cost descending."""

    locations: tuple[Aggregate, ...] = ()
    categories: tuple[Aggregate, ...] = ()
    days: tuple[Aggregate, ...] = ()


class _Group:
    __slots__ = ("key", "name", "hours", "cost")

    def __init__(self, key: str, name: str):
        self.key = key
        self.name = name
        self.hours = ZERO
        self.cost = ZERO


class AggregationEngine:
    """Builds location, category and day breakdowns from staff costs.

    Each interval carries a share of its staff member's total employer
    cost (NI and holiday accrual included): hourly staff by share of gross
    pay, salaried staff by share of hours. Cost that cannot be placed on
    any interval, such as the salary of someone who clocked no time, goes
    to the "unassigned" location so that location costs reconcile to the
    grand total. Location costs are rounded together (largest remainder)
    so their pence add up exactly to the rounded total.

    Locations are seeded at zero from the active-location list so that
    sites with no staffing stay visible. Category and day groups exist
    only when an interval falls in them. Ties in cost keep first-seen
    order.
    """

    def __init__(
        self,
        active_locations: Iterable[Location],
        categories: Mapping[str, ShiftCategory],
        location_names: Mapping[str, str] | None = None,
    ):
        self.active_locations = list(active_locations)
        self.categories = categories
        self.location_names = dict(location_names or {})
        for loc in self.active_locations:
            self.location_names.setdefault(loc.location_id, loc.name)

    def aggregate(self, staff_costs: Iterable[StaffCost]) -> Breakdown:
        """Produce the three breakdowns."""
        locations: dict[str, _Group] = {
            loc.location_id: _Group(loc.location_id, loc.name) for loc in self.active_locations
        }
        categories: dict[str, _Group] = {}
        days: dict[str, _Group] = {}

        for staff_cost in staff_costs:
            allocated, unplaced = self.allocate(staff_cost)

            for item in allocated:
                interval = item.interval_cost.interval
                hours = item.interval_cost.paid_hours

                _add(
                    locations,
                    interval.location_id or UNASSIGNED_LOCATION,
                    self._location_name,
                    hours,
                    item.cost,
                )
                _add(
                    categories,
                    interval.category_id or UNCATEGORISED,
                    self._category_name,
                    hours,
                    item.cost,
                )
                day_key = interval.work_date.isoformat()
                _add(days, day_key, str, hours, item.cost)

            if unplaced != 0:
                _add(locations, UNASSIGNED_LOCATION, self._location_name, ZERO, unplaced)

        return Breakdown(
            locations=_sorted_aggregates(locations, reconcile=True),
            categories=_sorted_aggregates(categories),
            days=_sorted_aggregates(days),
        )

    def allocate(self, staff_cost: StaffCost) -> tuple[list[AllocatedInterval], Decimal]:
        """Spread a staff member's total cost over their intervals.

        Returns the allocated intervals and the cost left unplaced.
        """
        total = staff_cost.cost.total_cost
        intervals = staff_cost.intervals

        weights = [c.paid_hours for c in intervals]
        if staff_cost.staff.payment_type == PaymentType.HOURLY:
            pay = [c.pay for c in intervals]
            if sum(pay, ZERO) > 0:
                weights = pay

        weight_total = sum(weights, ZERO)
        if weight_total == 0:
            return [AllocatedInterval(c, ZERO) for c in intervals], total

        allocated = [
            AllocatedInterval(c, total * safe_ratio(w, weight_total))
            for c, w in zip(intervals[:-1], weights[:-1])
        ]
        # Last interval takes the remainder so nothing is lost to division
        remainder = total - sum((a.cost for a in allocated), ZERO)
        allocated.append(AllocatedInterval(intervals[-1], remainder))
        return allocated, ZERO

    def _location_name(self, key: str) -> str:
        if key == UNASSIGNED_LOCATION:
            return "Unassigned"
        return self.location_names.get(key) or key

    def _category_name(self, key: str) -> str:
        if key == UNCATEGORISED:
            return "Uncategorised"
        category = self.categories.get(key)
        return category.name if category and category.name else key


def _add(
    groups: dict[str, _Group],
    key: str,
    name_for: Callable[[str], str],
    hours: Decimal,
    cost: Decimal,
) -> None:
    group = groups.get(key)
    if group is None:
        group = groups[key] = _Group(key, name_for(key))
    group.hours += hours
    group.cost += cost


def _sorted_aggregates(
    groups: dict[str, _Group], reconcile: bool = False
) -> tuple[Aggregate, ...]:
    """Round and sort groups; with reconcile, costs add up to the rounded total."""
    values = list(groups.values())
    if reconcile:
        costs = round_to_total([g.cost for g in values])
    else:
        costs = [round_money(g.cost) for g in values]
    aggregates = [
        Aggregate(key=g.key, name=g.name, hours=round_hours(g.hours), cost=cost)
        for g, cost in zip(values, costs)
    ]
    # sorted() is stable, so equal costs keep insertion order
    return tuple(sorted(aggregates, key=lambda a: a.cost, reverse=True))
