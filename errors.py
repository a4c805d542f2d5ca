class ProgressionError(Exception):
    """Base class for errors raised by the progression engine."""


class InvalidFormatError(ProgressionError, ValueError):
    """Raised when a snapshot does not decode to a valid save state."""


class NotFoundError(ProgressionError, LookupError):
    """Raised when an operation references an unknown quest or record."""


class AlreadyCompletedError(ProgressionError):
    """Raised when completing a quest that is already completed."""
