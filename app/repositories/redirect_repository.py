"""
app/repositories/redirect_repository.py

Read-only lookups against the URI map, migration map and alias tables.
"""

from __future__ import annotations

from sqlalchemy import MetaData, Select, select
from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.redirects import UriMapping
from db.models import (
    DEFAULT_ALIAS_TABLE,
    DEFAULT_SOURCE_URI_TABLE,
    migration_map_table,
    source_uri_map_table,
    url_alias_table,
)
from db.repositories.errors import DatastoreQueryError


class RedirectRepository:
    """
    Repository for the three exact-match lookups behind a legacy redirect.
    """

    def __init__(
        self,
        session: Session,
        *,
        uri_table: str = DEFAULT_SOURCE_URI_TABLE,
        alias_table: str = DEFAULT_ALIAS_TABLE,
    ) -> None:
        self._session = session
        self._metadata = MetaData()
        self._uri_table = source_uri_map_table(self._metadata, uri_table)
        self._alias_table = url_alias_table(self._metadata, alias_table)

    def _first(self, stmt: Select, table: str) -> Row | None:
        try:
            return self._session.execute(stmt).first()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise DatastoreQueryError(table, str(exc)) from exc

    def find_uri_mapping(self, source_uri: str) -> UriMapping | None:
        """
        Resolve one mapping row by exact ``source_uri`` match.
        """

        table = self._uri_table
        stmt = (
            select(table.c.migration_name, table.c.source_id)
            .where(table.c.source_uri == source_uri)
            .limit(1)
        )
        row = self._first(stmt, table.name)
        if row is None:
            return None
        return UriMapping(
            source_uri=source_uri,
            migration_name=row.migration_name,
            source_id=row.source_id,
        )

    def find_destination_id(self, map_table: str, source_id: int | str) -> str | None:
        """
        Return ``destid1`` for ``source_id`` in one migration's map table.

        NULL and empty destinations count as missing.
        """

        table = migration_map_table(self._metadata, map_table)
        stmt = select(table.c.destid1).where(table.c.sourceid1 == source_id).limit(1)
        row = self._first(stmt, table.name)
        if row is None or row.destid1 is None:
            return None
        destination_id = str(row.destid1).strip()
        return destination_id or None

    def find_alias(self, path: str) -> str | None:
        """
        Return the newest alias for a canonical path, if any.

        Aliases are stored without a leading slash, so ``/node/42`` is also
        tried as ``node/42``.
        """

        candidates = [path]
        stripped = path.lstrip("/")
        if stripped and stripped != path:
            candidates.append(stripped)

        table = self._alias_table
        stmt = (
            select(table.c.alias)
            .where(table.c.source.in_(candidates))
            .order_by(table.c.pid.desc())
            .limit(1)
        )
        row = self._first(stmt, table.name)
        if row is None or not row.alias:
            return None
        return row.alias
