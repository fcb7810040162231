"""Unpaid break calculation from organization break rules."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

from labour_cost.calculators.rounding import MINUTES_PER_HOUR, ZERO, safe_ratio, to_decimal
from labour_cost.calculators.types import (
    BreakCalculationMode,
    BreakRule,
    IntervalCost,
    WorkedInterval,
)

logger = logging.getLogger(__name__)

RateLookup = Callable[[WorkedInterval], Decimal]


def parse_break_rules(raw: Any) -> tuple[BreakRule, ...]:
    """Parse break rules from a list of dicts or the stored JSON text.

    Malformed configuration degrades rather than raising: unparsable JSON
    or a non-list payload yields no rules, and individual entries that are
    missing keys or carry non-numeric or negative values are skipped.
    """
    if raw is None or raw == "":
        return ()

    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Break rules are not valid JSON; no breaks will apply")
            return ()

    if not isinstance(raw, (list, tuple)):
        logger.warning("Break rules must be a list, got %s", type(raw).__name__)
        return ()

    rules: list[BreakRule] = []
    for entry in raw:
        if isinstance(entry, BreakRule):
            rules.append(entry)
            continue
        try:
            min_hours = to_decimal(entry["minHours"] if "minHours" in entry else entry["min_hours"])
            minutes = to_decimal(
                entry["breakMinutes"] if "breakMinutes" in entry else entry["break_minutes"]
            )
        except (KeyError, TypeError, InvalidOperation):
            logger.warning("Skipping malformed break rule %r", entry)
            continue
        if not min_hours.is_finite() or not minutes.is_finite() or min_hours < 0 or minutes < 0:
            logger.warning("Skipping out-of-range break rule %r", entry)
            continue
        rules.append(BreakRule(min_hours=min_hours, break_minutes=minutes))
    return tuple(rules)


class BreakCalculator:
    """Maps worked hours to unpaid break minutes.

    Rule selection is a step function: among the rules whose min_hours is
    at most the worked hours, the one with the greatest min_hours wins.
    No qualifying rule means no break.

    PER_SHIFT evaluates each interval on its own duration. PER_DAY groups a
    staff member's intervals by calendar day, evaluates the rule once on the
    day's combined hours and removes break_hours x the day's average rate
    from the day's cost. Unassigned intervals keep their recorded break in
    both modes.
    """

    def __init__(
        self,
        rules: Sequence[BreakRule],
        mode: BreakCalculationMode = BreakCalculationMode.PER_SHIFT,
    ):
        # Highest threshold first so the first match is the dominant rule
        self.rules = sorted(rules, key=lambda r: r.min_hours, reverse=True)
        self.mode = mode

    def break_minutes(self, worked_hours: Decimal) -> Decimal:
        """Unpaid break minutes for the given worked hours."""
        if worked_hours <= 0:
            return ZERO
        for rule in self.rules:
            if rule.min_hours <= worked_hours:
                return rule.break_minutes
        return ZERO

    def paid_hours(self, gross_hours: Decimal) -> Decimal:
        """Gross hours less the rule's break, floored at zero."""
        break_hours = self.break_minutes(gross_hours) / MINUTES_PER_HOUR
        return max(ZERO, gross_hours - break_hours)

    def apply(
        self,
        intervals: Iterable[WorkedInterval],
        rate_for: RateLookup,
    ) -> list[IntervalCost]:
        """Cost a batch of intervals, returning results in input order."""
        intervals = list(intervals)
        rates = [rate_for(interval) for interval in intervals]
        results: dict[int, IntervalCost] = {}
        days: dict[tuple[str, Any], list[int]] = {}

        for idx, (interval, rate) in enumerate(zip(intervals, rates)):
            if not interval.is_assigned:
                results[idx] = _recorded_break_cost(interval, rate)
            elif self.mode == BreakCalculationMode.PER_DAY:
                days.setdefault((interval.user_id, interval.work_date), []).append(idx)
            else:
                gross = interval.gross_hours
                break_hours = min(gross, self.break_minutes(gross) / MINUTES_PER_HOUR)
                paid = gross - break_hours
                results[idx] = IntervalCost(
                    interval=interval,
                    rate=rate,
                    gross_hours=gross,
                    break_hours=break_hours,
                    paid_hours=paid,
                    pay=paid * rate,
                )

        for indices in days.values():
            day_intervals = [(idx, intervals[idx], rates[idx]) for idx in indices]
            for idx, cost in zip(indices, self._apply_day(day_intervals)):
                results[idx] = cost

        return [results[idx] for idx in range(len(intervals))]

    def _apply_day(
        self, day_intervals: list[tuple[int, WorkedInterval, Decimal]]
    ) -> list[IntervalCost]:
        """Evaluate one staff member's day and apportion the break."""
        day_hours = sum((iv.gross_hours for _, iv, _ in day_intervals), ZERO)
        day_cost = sum((iv.gross_hours * rate for _, iv, rate in day_intervals), ZERO)

        break_hours = min(day_hours, self.break_minutes(day_hours) / MINUTES_PER_HOUR)
        average_rate = safe_ratio(day_cost, day_hours)
        cost_reduction = break_hours * average_rate

        costs: list[IntervalCost] = []
        for _, interval, rate in day_intervals:
            gross = interval.gross_hours
            gross_pay = gross * rate
            share_of_break = break_hours * safe_ratio(gross, day_hours)
            share_of_reduction = cost_reduction * safe_ratio(gross_pay, day_cost)
            costs.append(
                IntervalCost(
                    interval=interval,
                    rate=rate,
                    gross_hours=gross,
                    break_hours=share_of_break,
                    paid_hours=max(ZERO, gross - share_of_break),
                    pay=max(ZERO, gross_pay - share_of_reduction),
                )
            )
        return costs


def _recorded_break_cost(interval: WorkedInterval, rate: Decimal) -> IntervalCost:
    gross = interval.gross_hours
    break_hours = min(gross, max(ZERO, interval.recorded_break_minutes) / MINUTES_PER_HOUR)
    paid = gross - break_hours
    return IntervalCost(
        interval=interval,
        rate=rate,
        gross_hours=gross,
        break_hours=break_hours,
        paid_hours=paid,
        pay=paid * rate,
    )
