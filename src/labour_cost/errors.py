"""Exception types raised by the labour cost engine."""

from __future__ import annotations


class LabourCostError(Exception):
    """Base class for engine errors."""


class InputRangeError(LabourCostError):
    """Raised when a period parameter is missing or cannot be parsed."""

    def __init__(self, parameter: str, value: str | None, reason: str):
        self.parameter = parameter
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {parameter} {value!r}: {reason}")


class AccessDenied(LabourCostError):
    """Raised when the caller's role may not see labour cost data."""

    def __init__(self, role: str | None):
        self.role = role
        super().__init__(f"Role {role!r} is not permitted to view labour costs")
