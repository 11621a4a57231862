"""
Fatal error types.

Anything raised from this hierarchy aborts the whole restore run. Per-file
restore failures are never raised; they travel as RestoreOutcome values.
"""

from typing import Optional


class FatalRestoreError(Exception):
    """Base class for errors that abort a restore run."""


class ConfigurationError(FatalRestoreError):
    """Raised when run parameters are invalid."""


class InvalidPatternError(ConfigurationError):
    """Raised when the path-matching pattern does not compile."""


class InvalidBaseURLError(ConfigurationError):
    """Raised when the restore base location is not a usable http(s) URL."""


class ArchiveError(FatalRestoreError):
    """Base class for archive access and decoding errors."""


class ArchiveNotFoundError(ArchiveError):
    """Raised when the archive file does not exist."""


class ArchiveOpenError(ArchiveError):
    """Raised when the archive cannot be opened or is not gzip-compressed."""


class ArchiveDecodeError(ArchiveError):
    """Raised when a record in the archive cannot be decoded."""

    def __init__(self, message: str, record_index: Optional[int] = None):
        self.record_index = record_index
        if record_index is not None:
            message = f"record {record_index}: {message}"
        super().__init__(message)
