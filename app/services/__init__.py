"""
app/services package marker.
"""

from app.services.errors import (
    DatastoreUnavailableError,
    MigrationConfigError,
    MissingSourceUriError,
    RedirectError,
    UnknownMigrationPatternError,
    UnknownSourceUriError,
    UnmigratedSourceError,
)
from app.services.migration_registry import MigrationRegistry
from app.services.redirect_resolver import RedirectResolver

__all__ = [
    "DatastoreUnavailableError",
    "MigrationConfigError",
    "MigrationRegistry",
    "MissingSourceUriError",
    "RedirectError",
    "RedirectResolver",
    "UnknownMigrationPatternError",
    "UnknownSourceUriError",
    "UnmigratedSourceError",
]
