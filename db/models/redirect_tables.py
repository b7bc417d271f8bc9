"""
db/models/redirect_tables.py

Core table definitions for the lookup tables written by the CMS migration run.

Table names are configurable per site, so these are built on demand against a
caller-owned MetaData instead of being fixed declarative classes.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, String, Table

DEFAULT_SOURCE_URI_TABLE = "migrate_source_uri_map"
DEFAULT_ALIAS_TABLE = "url_alias"
DEFAULT_MAP_TABLE_PREFIX = "migrate_map_"


def _existing(metadata: MetaData, name: str) -> Table | None:
    return metadata.tables.get(name)


def source_uri_map_table(metadata: MetaData, name: str = DEFAULT_SOURCE_URI_TABLE) -> Table:
    """
    Tall table mapping legacy URIs to (migration_name, source_id).
    """

    existing = _existing(metadata, name)
    if existing is not None:
        return existing
    return Table(
        name,
        metadata,
        Column("source_uri", String(255), primary_key=True, default=""),
        Column("migration_name", String(255), nullable=False),
        # Integer in the reference schema, varchar for some migrations.
        Column("source_id", String(255), nullable=False),
    )


def migration_map_table(metadata: MetaData, name: str) -> Table:
    """
    Per-migration map table: sourceid1 -> destid1.
    """

    existing = _existing(metadata, name)
    if existing is not None:
        return existing
    return Table(
        name,
        metadata,
        Column("sourceid1", String(255), primary_key=True),
        Column("destid1", String(255), nullable=True),
    )


def url_alias_table(metadata: MetaData, name: str = DEFAULT_ALIAS_TABLE) -> Table:
    """
    Path alias table: canonical source path -> human-friendly alias.
    """

    existing = _existing(metadata, name)
    if existing is not None:
        return existing
    return Table(
        name,
        metadata,
        Column("pid", Integer, primary_key=True, autoincrement=True),
        Column("source", String(255), nullable=False, index=True),
        Column("alias", String(255), nullable=False),
        Column("langcode", String(12), nullable=False, default="und"),
    )
