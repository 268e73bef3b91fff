"""Exception hierarchy shared by the store, the cache and the pages."""
from __future__ import annotations

from typing import Dict, Optional


class DashboardError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(DashboardError):
    """A write was rejected before reaching the database.

    ``errors`` maps field names to human readable messages so forms can show
    them inline next to the offending widget.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        message = "; ".join(f"{field}: {msg}" for field, msg in sorted(self.errors.items()))
        super().__init__(message or "invalid input")


class StoreError(DashboardError):
    """The database refused or failed a read/write."""


class NotFoundError(StoreError):
    def __init__(self, table: str, row_id: str):
        self.table = table
        self.row_id = row_id
        super().__init__(f"{table} row {row_id} not found")


class ConflictError(StoreError):
    """The row changed since the caller last read it."""

    def __init__(self, table: str, row_id: str, expected: Optional[str], actual: Optional[str]):
        self.table = table
        self.row_id = row_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{table} row {row_id} was modified by someone else "
            f"(expected updated_at {expected}, found {actual})"
        )


class InvalidTransitionError(DashboardError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"task cannot move from {current!r} to {target!r}")
