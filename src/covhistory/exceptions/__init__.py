"""Exception hierarchy for covhistory."""

from .base import CovHistoryError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)
from .history import (
    HistoryError,
    NoEntriesFoundError,
    OperationCancelledError,
    StorageError,
    UnsupportedDataTypeError,
)

__all__ = [
    "CovHistoryError",
    "HistoryError",
    "NoEntriesFoundError",
    "StorageError",
    "OperationCancelledError",
    "UnsupportedDataTypeError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
]
