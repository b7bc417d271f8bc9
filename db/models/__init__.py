"""
Model package exports.

Only read-side table builders live here; the tables themselves are created and
populated by the CMS migration tooling.
"""

from db.models.redirect_tables import (
    DEFAULT_ALIAS_TABLE,
    DEFAULT_MAP_TABLE_PREFIX,
    DEFAULT_SOURCE_URI_TABLE,
    migration_map_table,
    source_uri_map_table,
    url_alias_table,
)

__all__ = [
    "DEFAULT_ALIAS_TABLE",
    "DEFAULT_MAP_TABLE_PREFIX",
    "DEFAULT_SOURCE_URI_TABLE",
    "migration_map_table",
    "source_uri_map_table",
    "url_alias_table",
]
