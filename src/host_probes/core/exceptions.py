"""Exception hierarchy for probe readers and rate derivation.

Every failure raised by this package derives from ProbeError so callers can
decide per domain whether a failed read aborts a sampling cycle or only drops
that domain from the report.
"""

from __future__ import annotations

from pathlib import Path


class ProbeError(Exception):
    """Base exception for all probe errors."""

    pass


class ProbeIOError(ProbeError):
    """Raised when a required file, directory or command could not be read.

    Attributes:
        path: The file path (or command line) that failed
    """

    def __init__(self, path: Path | str, cause: OSError | None = None) -> None:
        self.path = str(path)
        self.cause = cause
        reason = cause.strerror if cause is not None and cause.strerror else str(cause)
        super().__init__(f"{reason} for {self.path}" if cause is not None else self.path)


class UnexpectedContentError(ProbeError):
    """Raised when content was readable but not in the expected shape."""

    pass


class InvalidInputError(ProbeError):
    """Raised when caller-supplied arguments violate a precondition."""

    pass
