"""Hourly pay rate resolution."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal

from labour_cost.calculators.types import ShiftCategory, StaffMember

logger = logging.getLogger(__name__)


class RateResolver:
    """Resolves effective hourly rates for staff and categories.

    Rate selection priority:
    1. The staff member's override for the category, if one is present
       (membership check, so a configured override of 0 is honoured)
    2. The category's default hourly rate
    3. The organization fallback rate

    Missing categories or rates never raise; they fall through to the
    next step.
    """

    def __init__(
        self,
        categories: Iterable[ShiftCategory],
        fallback_rate: Decimal,
    ):
        self.categories: dict[str, ShiftCategory] = {c.category_id: c for c in categories}
        self.fallback_rate = fallback_rate

    def category_rate(self, category_id: str | None) -> Decimal:
        """Default rate for a category, or the fallback rate."""
        category = self.categories.get(category_id) if category_id else None
        if category is None or category.default_hourly_rate is None:
            if category_id:
                logger.debug(
                    "No default rate for category %s, using fallback %s",
                    category_id,
                    self.fallback_rate,
                )
            return self.fallback_rate
        return category.default_hourly_rate

    def resolve(
        self,
        overrides: Mapping[str, Decimal],
        category_id: str | None,
    ) -> Decimal:
        """Resolve the effective rate from an override map and category id."""
        if category_id and category_id in overrides:
            return overrides[category_id]
        return self.category_rate(category_id)

    def resolve_for_staff(
        self,
        staff: StaffMember | None,
        category_id: str | None,
    ) -> Decimal:
        """Resolve the rate for a staff member (None for open shifts)."""
        if staff is None:
            return self.category_rate(category_id)
        return self.resolve(staff.category_rates, category_id)

    def default_category_rate(self) -> Decimal:
        """Rate of the organization's first category that has one."""
        for category in self.categories.values():
            if category.default_hourly_rate is not None:
                return category.default_hourly_rate
        return self.fallback_rate

    def contracted_rate(self, staff: StaffMember) -> Decimal:
        """Rate used to cost a staff member's contracted hours.

        The member's first override in creation order, else the
        organization's default category rate, else the fallback rate.
        """
        for rate in staff.category_rates.values():
            return rate
        return self.default_category_rate()
