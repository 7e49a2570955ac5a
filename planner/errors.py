"""
Error taxonomy for the subnet planner.

Every error is a ``ValueError`` subclass so callers that only care about
"bad input" can catch the builtin, while the CLI catches ``PlannerError``.
"""

from __future__ import annotations


class PlannerError(ValueError):
    """Base class for all recoverable planner errors."""


class InvalidFormat(PlannerError):
    """Address or CIDR text failed to parse."""


class InvalidTarget(PlannerError):
    """Split/join target prefix violates ordering or range constraints."""


class CannotSplitMinimumSubnet(PlannerError):
    """Attempt to split a subnet at or beyond the /64 floor."""


class TooManyChildren(PlannerError):
    """A single level would create more children than allowed."""


class DecodeError(PlannerError):
    """Persisted state text is malformed or has the wrong shape."""
