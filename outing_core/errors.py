"""
Exception hierarchy for outing_core.

The clustering and matching engine itself does not raise for in-range
inputs. These exceptions are raised at the boundaries: parsing timestamp
strings, naming an unknown timezone, or reading capture metadata from a
file that is not there.
"""


class OutingCoreError(Exception):
    """Base exception class for outing_core errors."""
    pass


class TimestampFormatError(OutingCoreError, ValueError):
    """Raised when a timestamp string is not one of the accepted shapes."""
    pass


class UnknownTimezoneError(OutingCoreError, KeyError):
    """Raised when a zone name is not in the IANA database."""

    def __str__(self):
        return f"Unknown timezone: {self.args[0]!r}" if self.args else "Unknown timezone"


class MetadataError(OutingCoreError):
    """Raised when capture metadata cannot be read from a file."""
    pass
