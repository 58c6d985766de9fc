"""Exceptions for tzrules library."""


class ZoneRulesError(Exception):
    """Base exception for all tzrules errors."""


class ZoneFormatError(ZoneRulesError, ValueError):
    """Exception raised when text does not match an offset or zone id grammar.

    The 'message' attribute contains a human-readable message about the
    error that occurred. The 'detailed_error' attribute can provide additional
    information about the error, such as the underlying range violation
    when a field of an offset was out of bounds.
    """

    def __init__(self, message: str, *, detailed_error: str | None = None) -> None:
        """Initialize the ZoneFormatError with a message."""
        super().__init__(message)
        self.message = message
        self.detailed_error = detailed_error


class UnknownZoneError(ZoneRulesError, LookupError):
    """Exception raised when a well formed region id is not known to any provider.

    This is distinct from a ZoneFormatError since the remedy is different:
    the zone database needs to be installed or updated rather than the
    zone id text being fixed.
    """


class OffsetRangeError(ZoneRulesError, ValueError):
    """Exception raised when offset components are outside the valid range."""


class TimezoneInfoError(ZoneRulesError):
    """Raised on error reading or compiling timezone information."""
