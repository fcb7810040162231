"""Role-based visibility of staff-level cost rows.

Applied after aggregation: totals and breakdowns are always computed
over every staff member, and only the per-staff rows are filtered.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from labour_cost.calculators.types import StaffRole
from labour_cost.errors import AccessDenied

if TYPE_CHECKING:
    from labour_cost.calculators.engine import StaffCostReport

# Roles whose rows a manager may see
MANAGER_VISIBLE_ROLES = frozenset({StaffRole.EMPLOYEE})


def check_access(caller_role: StaffRole | str | None) -> StaffRole:
    """Return the caller's role, or raise if it may not view labour costs."""
    try:
        role = StaffRole(caller_role) if caller_role is not None else None
    except ValueError:
        raise AccessDenied(str(caller_role)) from None

    if role not in (StaffRole.MANAGER, StaffRole.ADMIN):
        raise AccessDenied(role.value if role else None)
    return role


def filter_for_caller(
    report: StaffCostReport, caller_role: StaffRole | str | None
) -> StaffCostReport:
    """Hide manager and admin rows from managers; admins see everything."""
    role = check_access(caller_role)
    if role == StaffRole.ADMIN:
        return report
    visible = tuple(line for line in report.staff if line.role in MANAGER_VISIBLE_ROLES)
    return replace(report, staff=visible)


def visible_to_caller(
    func: Callable[..., StaffCostReport],
) -> Callable[..., StaffCostReport]:
    """Wrap a report builder so it takes a keyword-only ``caller_role``.

    Access is checked before the report is built and the result is
    filtered for the caller afterwards.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, caller_role: StaffRole | str | None, **kwargs: Any) -> StaffCostReport:
        check_access(caller_role)
        return filter_for_caller(func(*args, **kwargs), caller_role)

    return wrapper
