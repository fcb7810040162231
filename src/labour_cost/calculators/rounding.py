"""Decimal helpers for the reporting boundary.

Internal computation keeps full Decimal precision. Values are quantized
exactly once, when a report is built, and totals are summed from the
unrounded figures.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import timedelta
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Any

ZERO = Decimal("0")
MONEY_PRECISION = Decimal("0.01")  # pence
HOURS_PRECISION = Decimal("0.01")  # hundredths of an hour
SECONDS_PER_HOUR = Decimal("3600")
MINUTES_PER_HOUR = Decimal("60")


def round_money(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (pence)."""
    return amount.quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def round_to_total(amounts: Sequence[Decimal]) -> list[Decimal]:
    """Round amounts to pence so that they add up to their rounded total.

    Each amount is rounded down, then the pennies still missing go one each
    to the amounts with the largest remainders. Earlier amounts win ties.
    """
    target = round_money(sum(amounts, ZERO))
    rounded = [a.quantize(MONEY_PRECISION, rounding=ROUND_FLOOR) for a in amounts]
    pennies = int((target - sum(rounded, ZERO)) / MONEY_PRECISION)
    by_remainder = sorted(
        range(len(amounts)), key=lambda i: amounts[i] - rounded[i], reverse=True
    )
    for i in by_remainder[:pennies]:
        rounded[i] += MONEY_PRECISION
    return rounded


def round_hours(hours: Decimal) -> Decimal:
    """Round hours to 2 decimal places."""
    return hours.quantize(HOURS_PRECISION, rounding=ROUND_HALF_UP)


def to_decimal(value: Any) -> Decimal:
    """Convert ints, floats and strings to Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def hours_between(delta: timedelta) -> Decimal:
    """Exact hours in a timedelta, floored at zero."""
    seconds = Decimal(delta.days * 86400 + delta.seconds) + (
        Decimal(delta.microseconds) / Decimal(1_000_000)
    )
    if seconds <= 0:
        return ZERO
    return seconds / SECONDS_PER_HOUR


def safe_ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    """numerator / denominator, or 0 when the denominator is zero."""
    if denominator == 0:
        return ZERO
    return numerator / denominator


def percent_change(change: Decimal, baseline: Decimal) -> Decimal:
    """Percentage of change relative to baseline, rounded to 2 dp (0 if no baseline)."""
    if baseline <= 0:
        return ZERO.quantize(MONEY_PRECISION)
    return round_money(change / baseline * 100)
