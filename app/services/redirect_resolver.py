"""
app/services/redirect_resolver.py

Resolve a legacy URI to its migrated location.

Lookup chain:
    URI map (source_uri -> migration_name, source_id)
    -> migration map table (source_id -> destid1)
    -> URL pattern + optional alias
    -> absolute Location for a 301.
"""

from __future__ import annotations

import logging
from typing import Protocol

from app.config import DEFAULT_SOURCE_URI_PARAM, RedirectSettings
from app.domain.redirects import RedirectTarget, UriMapping
from app.logging_utils import log_event
from app.services.errors import (
    DatastoreUnavailableError,
    MissingSourceUriError,
    UnknownMigrationPatternError,
    UnknownSourceUriError,
    UnmigratedSourceError,
)
from app.services.migration_registry import MigrationRegistry, build_destination_path
from db.repositories.errors import DatastoreQueryError

logger = logging.getLogger(__name__)


class RedirectLookup(Protocol):
    def find_uri_mapping(self, source_uri: str) -> UriMapping | None:
        ...

    def find_destination_id(self, map_table: str, source_id: int | str) -> str | None:
        ...

    def find_alias(self, path: str) -> str | None:
        ...


def join_base_url(base_url: str, path: str) -> str:
    """
    Join base URL and path with exactly one slash between them.
    """

    return base_url.rstrip("/") + "/" + path.lstrip("/")


class RedirectResolver:
    """
    Stateless resolver. All I/O goes through the injected lookup.
    """

    def __init__(
        self,
        *,
        lookup: RedirectLookup,
        registry: MigrationRegistry,
        base_url: str,
        source_uri_param: str = DEFAULT_SOURCE_URI_PARAM,
        alias_lookup_enabled: bool = True,
        unmigrated_status: int = 404,
    ) -> None:
        self._lookup = lookup
        self._registry = registry
        self._base_url = base_url
        self._source_uri_param = source_uri_param
        self._alias_lookup_enabled = alias_lookup_enabled
        self._unmigrated_status = unmigrated_status

    @classmethod
    def from_settings(
        cls,
        *,
        lookup: RedirectLookup,
        registry: MigrationRegistry,
        settings: RedirectSettings,
    ) -> "RedirectResolver":
        return cls(
            lookup=lookup,
            registry=registry,
            base_url=settings.base_url,
            source_uri_param=settings.source_uri_param,
            alias_lookup_enabled=settings.alias_lookup_enabled,
            unmigrated_status=settings.unmigrated_status,
        )

    def resolve(self, source_uri: str | None) -> RedirectTarget:
        """
        Resolve ``source_uri`` or raise a RedirectError subclass.

        Raises:
            MissingSourceUriError: parameter absent or blank (400).
            UnknownSourceUriError: no mapping row (404).
            UnknownMigrationPatternError: migration has no configured route (500).
            UnmigratedSourceError: mapping row but no destination (404/410).
            DatastoreUnavailableError: any lookup failed or timed out (503).
        """

        if source_uri is None or not source_uri.strip():
            raise MissingSourceUriError(self._source_uri_param)

        try:
            return self._resolve(source_uri)
        except DatastoreQueryError as exc:
            log_event(
                logger,
                logging.ERROR,
                "redirect.datastore_error",
                source_uri=source_uri,
                table=exc.table,
                error=str(exc),
            )
            raise DatastoreUnavailableError(str(exc)) from exc

    def _resolve(self, source_uri: str) -> RedirectTarget:
        mapping = self._lookup.find_uri_mapping(source_uri)
        if mapping is None:
            log_event(logger, logging.INFO, "redirect.unknown_source", source_uri=source_uri)
            raise UnknownSourceUriError(source_uri)

        try:
            route = self._registry.route_for(mapping.migration_name)
        except UnknownMigrationPatternError:
            log_event(
                logger,
                logging.ERROR,
                "redirect.config_error",
                source_uri=source_uri,
                migration_name=mapping.migration_name,
            )
            raise

        destination_id = self._lookup.find_destination_id(route.map_table, mapping.source_id)
        if destination_id is None:
            log_event(
                logger,
                logging.WARNING,
                "redirect.unmigrated",
                source_uri=source_uri,
                migration_name=mapping.migration_name,
                source_id=mapping.source_id,
            )
            raise UnmigratedSourceError(
                source_uri,
                mapping.migration_name,
                mapping.source_id,
                status_code=self._unmigrated_status,
            )

        destination_path = build_destination_path(route.pattern, destination_id)
        alias = self._lookup.find_alias(destination_path) if self._alias_lookup_enabled else None
        final_path = alias or destination_path

        target = RedirectTarget(
            source_uri=source_uri,
            migration_name=mapping.migration_name,
            destination_id=destination_id,
            destination_path=destination_path,
            aliased=alias is not None,
            location=join_base_url(self._base_url, final_path),
        )
        log_event(
            logger,
            logging.INFO,
            "redirect.resolved",
            source_uri=source_uri,
            migration_name=target.migration_name,
            destination_id=destination_id,
            location=target.location,
        )
        return target
