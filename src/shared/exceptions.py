"""
NYC Shootings - Exception Classes

Errors raised by the shooting incident pipeline. Fatal errors carry enough
context (file, column) for a user to fix the input.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any


class ShootingDataError(Exception):
    """Base class for all pipeline errors."""


class DataSourceError(ShootingDataError):
    """Raised when the input file is missing, unreadable or not a table."""

    def __init__(self, path: str | Path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot read incident data from '{self.path}': {reason}")


class SchemaError(ShootingDataError):
    """Raised when expected columns are absent."""

    def __init__(self, missing_columns: Iterable[str], source: str | Path | None = None):
        self.missing_columns = sorted(missing_columns)
        self.source = str(source) if source is not None else None
        where = f" in '{self.source}'" if self.source else ""
        super().__init__(f"Missing expected columns{where}: {self.missing_columns}")


class ParseError(ShootingDataError):
    """Raised when a single field fails to parse to its expected type."""

    def __init__(self, column: str, value: Any, expected: str):
        self.column = column
        self.value = value
        self.expected = expected
        super().__init__(f"Cannot parse {column}={value!r} as {expected}")
