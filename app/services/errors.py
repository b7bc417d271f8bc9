"""
app/services/errors.py

Redirect failure taxonomy. Each error carries the HTTP status and the
plain-text body the entry point responds with.
"""

from __future__ import annotations

NOT_FOUND_BODY = "Sorry folks. Park is closed."
CONFIG_ERROR_BODY = "Redirect configuration error."
UNAVAILABLE_BODY = "Service temporarily unavailable."


class RedirectError(Exception):
    """Base exception for terminal redirect failures."""

    status_code: int = 500
    body: str = CONFIG_ERROR_BODY


class MissingSourceUriError(RedirectError):
    """Raised when the legacy URI parameter is absent or blank."""

    status_code = 400

    def __init__(self, param: str) -> None:
        super().__init__(f"{param} was not found on the request.")
        self.param = param
        self.body = f"{param} was not found on the request."


class UnknownSourceUriError(RedirectError):
    """Raised when the URI has no row in the mapping table."""

    status_code = 404
    body = NOT_FOUND_BODY

    def __init__(self, source_uri: str) -> None:
        super().__init__(f"Unknown source URI: {source_uri!r}")
        self.source_uri = source_uri


class UnmigratedSourceError(RedirectError):
    """Raised when the URI is recognised but its content was never migrated."""

    status_code = 404
    body = NOT_FOUND_BODY

    def __init__(
        self,
        source_uri: str,
        migration_name: str,
        source_id: int | str,
        *,
        status_code: int = 404,
    ) -> None:
        super().__init__(
            f"Source URI {source_uri!r} maps to {migration_name}:{source_id} "
            "which has no migrated destination"
        )
        self.source_uri = source_uri
        self.migration_name = migration_name
        self.source_id = source_id
        self.status_code = status_code


class UnknownMigrationPatternError(RedirectError):
    """Raised when a mapping row names a migration with no configured route."""

    status_code = 500
    body = CONFIG_ERROR_BODY

    def __init__(self, migration_name: str) -> None:
        super().__init__(f"No URL pattern configured for migration {migration_name!r}")
        self.migration_name = migration_name


class DatastoreUnavailableError(RedirectError):
    """Raised when a lookup fails or times out."""

    status_code = 503
    body = UNAVAILABLE_BODY


class MigrationConfigError(RuntimeError):
    """Raised at startup when migration routes are misconfigured."""

    def __init__(self, problems: list[str]) -> None:
        super().__init__(
            "Invalid migration redirect configuration:\n"
            + "\n".join(f"  - {problem}" for problem in problems)
        )
        self.problems = problems
