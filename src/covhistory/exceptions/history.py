"""History store exceptions: missing entries, storage I/O, cancellation."""

from pathlib import Path
from typing import Optional

from .base import CovHistoryError


class HistoryError(CovHistoryError):
    """Base class for coverage history errors."""
    pass


class NoEntriesFoundError(HistoryError):
    """Raised when a branch has no entries inside the queried window.

    Callers usually treat this as a first run rather than a failure.
    """

    def __init__(self, branch: str, days: Optional[int] = None):
        details = {"branch": branch}
        if days is not None:
            details["days"] = str(days)
        super().__init__(f"No entries found for branch: {branch}", details=details)
        self.branch = branch
        self.days = days


class StorageError(HistoryError):
    """Raised when the entry store cannot be read or written."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Storage operation failed: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class OperationCancelledError(HistoryError):
    """Raised when a cancel token fires before or during an operation."""

    def __init__(self, reason: str = "cancelled"):
        super().__init__(f"Operation {reason}", details={"reason": reason})
        self.reason = reason


class UnsupportedDataTypeError(HistoryError):
    """Raised by the legacy ``Tracker.add`` for non-coverage payloads."""

    def __init__(self, type_name: str):
        super().__init__(f"Unsupported data type: {type_name}", details={"type": type_name})
        self.type_name = type_name
