"""
Errors raised to callers of Bookfinder.
"""


class InvalidInput(ValueError):
    """A required input is missing, empty or not recognized."""


class NotFound(LookupError):
    """A stored document does not exist."""


class Conflict(ValueError):
    """A document would duplicate an existing one."""
