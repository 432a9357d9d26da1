class TrackerError(Exception):
    """Base class for fatal tracker parsing errors."""


class HeaderNotFound(TrackerError):
    """Raised when no leading row matches enough column names."""


class EmptyInput(TrackerError):
    """Raised when the sheet has no non-blank rows at all."""
