"""Coverage snapshot records consumed by the history tracker."""

from .models import CoverageData, FileCoverage, PackageCoverage, Statement

__all__ = ["CoverageData", "PackageCoverage", "FileCoverage", "Statement"]
