"""Coverage snapshot data supplied by the coverage-profile parser.

These records are produced outside this package and passed into
``Tracker.record``. Every field is a plain value or a collection of plain
values so an entry can be written to JSON and read back unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..timestamps import format_timestamp, parse_optional_timestamp


def expect_object(value: Any, what: str) -> Dict[str, Any]:
    """Return ``value`` as a JSON object; missing or null reads as empty.

    Raises:
        ValueError: If ``value`` is present but not an object.
    """
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be an object, got {type(value).__name__}")
    return value


def expect_list(value: Any, what: str) -> List[Any]:
    """Like :func:`expect_object` for JSON arrays."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{what} must be an array, got {type(value).__name__}")
    return value


@dataclass
class Statement:
    """One coverage block from a profile line."""

    start_line: int = 0
    start_col: int = 0
    end_line: int = 0
    end_col: int = 0
    num_stmt: int = 0
    count: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "start_line": self.start_line,
            "start_col": self.start_col,
            "end_line": self.end_line,
            "end_col": self.end_col,
            "num_stmt": self.num_stmt,
            "count": self.count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Statement":
        data = expect_object(data, "statement")
        return cls(
            start_line=int(data.get("start_line", 0)),
            start_col=int(data.get("start_col", 0)),
            end_line=int(data.get("end_line", 0)),
            end_col=int(data.get("end_col", 0)),
            num_stmt=int(data.get("num_stmt", 0)),
            count=int(data.get("count", 0)),
        )


@dataclass
class FileCoverage:
    """Coverage for a single source file."""

    path: str
    statements: List[Statement] = field(default_factory=list)
    total_lines: int = 0
    covered_lines: int = 0
    percentage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "statements": [s.to_dict() for s in self.statements],
            "total_lines": self.total_lines,
            "covered_lines": self.covered_lines,
            "percentage": self.percentage,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileCoverage":
        data = expect_object(data, "file coverage")
        return cls(
            path=str(data.get("path", "")),
            statements=[
                Statement.from_dict(s) for s in expect_list(data.get("statements"), "statements")
            ],
            total_lines=int(data.get("total_lines", 0)),
            covered_lines=int(data.get("covered_lines", 0)),
            percentage=float(data.get("percentage", 0.0)),
        )


@dataclass
class PackageCoverage:
    """Coverage for one package, keyed by file path."""

    name: str
    files: Dict[str, FileCoverage] = field(default_factory=dict)
    total_lines: int = 0
    covered_lines: int = 0
    percentage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "files": {path: f.to_dict() for path, f in self.files.items()},
            "total_lines": self.total_lines,
            "covered_lines": self.covered_lines,
            "percentage": self.percentage,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PackageCoverage":
        data = expect_object(data, "package coverage")
        return cls(
            name=str(data.get("name", "")),
            files={
                path: FileCoverage.from_dict(f)
                for path, f in expect_object(data.get("files"), "files").items()
            },
            total_lines=int(data.get("total_lines", 0)),
            covered_lines=int(data.get("covered_lines", 0)),
            percentage=float(data.get("percentage", 0.0)),
        )


@dataclass
class CoverageData:
    """Whole-profile coverage snapshot."""

    mode: str = ""
    packages: Dict[str, PackageCoverage] = field(default_factory=dict)
    total_lines: int = 0
    covered_lines: int = 0
    percentage: float = 0.0
    timestamp: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "mode": self.mode,
            "packages": {name: p.to_dict() for name, p in self.packages.items()},
            "total_lines": self.total_lines,
            "covered_lines": self.covered_lines,
            "percentage": self.percentage,
        }
        if self.timestamp is not None:
            data["timestamp"] = format_timestamp(self.timestamp)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CoverageData":
        """Build a snapshot from its JSON form.

        Raises:
            ValueError: If a field has the wrong JSON type.
        """
        data = expect_object(data, "coverage")
        return cls(
            mode=str(data.get("mode", "")),
            packages={
                name: PackageCoverage.from_dict(p)
                for name, p in expect_object(data.get("packages"), "packages").items()
            },
            total_lines=int(data.get("total_lines", 0)),
            covered_lines=int(data.get("covered_lines", 0)),
            percentage=float(data.get("percentage", 0.0)),
            timestamp=parse_optional_timestamp(data.get("timestamp")),
        )
