"""
Repository-layer exceptions for redirect lookups.
"""

from __future__ import annotations


class RepositoryError(Exception):
    """Base exception for repository failures."""


class DatastoreQueryError(RepositoryError):
    """Raised when a lookup query fails or exceeds the statement timeout."""

    def __init__(self, table: str, message: str) -> None:
        super().__init__(f"Lookup against {table!r} failed: {message}")
        self.table = table
