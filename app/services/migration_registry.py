"""
app/services/migration_registry.py

Explicit registry of migration name -> (map table, URL pattern).

The CMS derives map table names as ``migrate_map_`` + lower-cased migration
name. That rule is the default here, but any migration may declare its table
explicitly, and every entry is validated once at startup.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from app.config import RedirectSettings
from app.domain.redirects import MigrationRoute
from app.services.errors import MigrationConfigError, UnknownMigrationPatternError
from db.models import DEFAULT_MAP_TABLE_PREFIX

SOURCE_ID_TOKEN = ":source_id"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_valid_identifier(name: str) -> bool:
    return bool(_IDENTIFIER_RE.match(name))


def conventional_map_table(migration_name: str, prefix: str = DEFAULT_MAP_TABLE_PREFIX) -> str:
    """
    Map table name the migration tool creates for ``migration_name``.
    """

    return prefix + migration_name.lower()


def build_destination_path(pattern: str, destination_id: str) -> str:
    """
    Swap the destination ID into a URL pattern.

    >>> build_destination_path("/legacy/:source_id", "42")
    '/legacy/42'
    """

    return pattern.replace(SOURCE_ID_TOKEN, str(destination_id))


class MigrationRegistry:
    """
    Validated, read-only lookup of migration routes.
    """

    def __init__(self, routes: Mapping[str, MigrationRoute]) -> None:
        self._routes = dict(routes)
        self._folded = {name.lower(): route for name, route in self._routes.items()}

    @classmethod
    def from_mappings(
        cls,
        *,
        patterns: Mapping[str, str],
        map_tables: Mapping[str, str] | None = None,
        map_table_prefix: str = DEFAULT_MAP_TABLE_PREFIX,
    ) -> "MigrationRegistry":
        """
        Build a registry, collecting every problem before raising.
        """

        map_tables = map_tables or {}
        problems: list[str] = []
        routes: dict[str, MigrationRoute] = {}

        for name in sorted(set(map_tables) - set(patterns)):
            problems.append(f"migration {name!r} has a map table but no URL pattern")

        for name, pattern in patterns.items():
            if not name.strip():
                problems.append("migration names must not be empty")
                continue
            if not isinstance(pattern, str) or not pattern.strip():
                problems.append(f"migration {name!r} has an empty URL pattern")
                continue
            if SOURCE_ID_TOKEN not in pattern:
                problems.append(
                    f"migration {name!r} pattern {pattern!r} does not contain {SOURCE_ID_TOKEN}"
                )
                continue

            table = map_tables.get(name) or conventional_map_table(name, map_table_prefix)
            if not is_valid_identifier(table):
                problems.append(f"migration {name!r} map table {table!r} is not a valid table name")
                continue

            routes[name] = MigrationRoute(migration_name=name, map_table=table, pattern=pattern.strip())

        folded: dict[str, str] = {}
        for name in routes:
            key = name.lower()
            if key in folded:
                problems.append(
                    f"migrations {folded[key]!r} and {name!r} differ only by case"
                )
            folded[key] = name

        if problems:
            raise MigrationConfigError(problems)
        return cls(routes)

    @classmethod
    def from_settings(cls, settings: RedirectSettings) -> "MigrationRegistry":
        return cls.from_mappings(
            patterns=settings.patterns,
            map_tables=settings.map_tables,
            map_table_prefix=settings.map_table_prefix,
        )

    def route_for(self, migration_name: str) -> MigrationRoute:
        """
        Return the route for ``migration_name``.

        Exact match first, then case-insensitive. Raises
        UnknownMigrationPatternError when nothing matches.
        """

        route = self._routes.get(migration_name)
        if route is None:
            route = self._folded.get(migration_name.lower())
        if route is None:
            raise UnknownMigrationPatternError(migration_name)
        return route

    def table_names(self) -> set[str]:
        return {route.map_table for route in self._routes.values()}

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, migration_name: object) -> bool:
        if not isinstance(migration_name, str):
            return False
        return migration_name in self._routes or migration_name.lower() in self._folded
