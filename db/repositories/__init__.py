"""
Repository layer exports.
"""

from db.repositories.errors import DatastoreQueryError, RepositoryError

__all__ = [
    "DatastoreQueryError",
    "RepositoryError",
]
