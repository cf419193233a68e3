from __future__ import annotations


class DashboardError(Exception):
    """Base error for the dashboard core."""


class UnknownViewError(DashboardError, KeyError):
    """Raised when a list view name is not registered."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown view: {self.name!r}"


class RecordNotFoundError(DashboardError):
    """Raised when a keyed record does not exist in the data source."""

    def __init__(self, table: str, key: object):
        super().__init__(f"{table} record {key!r} not found")
        self.table = table
        self.key = key


class DataSourceError(DashboardError):
    """Raised when the backing data source rejects or fails a request."""
