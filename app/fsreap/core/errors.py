"""Exception hierarchy for fsreap.

Fatal errors abort a run before anything destructive happens and map
to exit code 1 in the CLI. Per-entry problems during eviction are
recorded as results instead of being raised.
"""


class ReapError(Exception):
    """Base exception for all fatal fsreap errors."""


class UsageError(ReapError):
    """Raised for bad arguments, such as a missing or unreadable root."""


class InvalidConfiguration(ReapError):
    """Raised when threshold percentages or the exclusion pattern are invalid."""


class ProbeUnavailable(ReapError):
    """Raised when filesystem usage cannot be determined."""
