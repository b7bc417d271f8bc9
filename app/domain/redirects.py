"""
Domain DTOs for legacy URI redirects.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UriMapping:
    """
    One row of the URI mapping table.

    ``source_id`` keeps the type the driver returned so it binds against the
    migration map table exactly as stored.
    """

    source_uri: str
    migration_name: str
    source_id: int | str


@dataclass(frozen=True)
class MigrationRoute:
    """
    Where one migration's content lives: its map table and URL pattern.
    """

    migration_name: str
    map_table: str
    pattern: str


@dataclass(frozen=True)
class RedirectTarget:
    """
    Result of a successful resolution.
    """

    source_uri: str
    migration_name: str
    destination_id: str
    destination_path: str
    aliased: bool
    location: str
