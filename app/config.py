"""
app/config.py

Application-level configuration helpers.

Redirect settings come from environment variables, optionally layered over a
JSON settings file shaped like the CMS's ``migrate.settings.json``::

    {
        "migrate_source_uri_table": "migrate_source_uri_map",
        "migrate_patterns": {"Article": "node/:source_id"},
        "migrate_map_tables": {"Article": "migrate_map_article"}
    }

Environment variables win over file values.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

from db.config import load_env_files
from db.models import DEFAULT_ALIAS_TABLE, DEFAULT_MAP_TABLE_PREFIX, DEFAULT_SOURCE_URI_TABLE

DEFAULT_SOURCE_URI_PARAM = "migrate_source_uri"
ALLOWED_UNMIGRATED_STATUSES = {404, 410}


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _resolve_config_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (_project_root() / candidate).resolve()


def _parse_json_object(raw: str, *, source: str) -> dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"{source} is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise RuntimeError(f"{source} must be a JSON object.")
    return parsed


def _string_map(value: Any, *, source: str) -> dict[str, str]:
    """
    Coerce a JSON object of name -> string, rejecting anything else.
    """

    if value is None:
        return {}
    if not isinstance(value, dict):
        raise RuntimeError(f"{source} must be a JSON object of strings.")
    result: dict[str, str] = {}
    for key, item in value.items():
        if not isinstance(item, str):
            raise RuntimeError(f"{source}[{key!r}] must be a string.")
        result[str(key)] = item
    return result


def load_settings_file(path: str | None) -> dict[str, Any]:
    """
    Read the optional JSON settings file. Returns an empty dict when unset.
    """

    if not path:
        return {}
    config_path = _resolve_config_path(path)
    if not config_path.exists():
        raise RuntimeError(f"Migrate settings file not found: {config_path}")
    return _parse_json_object(
        config_path.read_text(encoding="utf-8"),
        source=str(config_path),
    )


@dataclass(frozen=True)
class RedirectSettings:
    """
    Runtime settings for legacy URI redirects.
    """

    base_url: str
    patterns: dict[str, str] = field(default_factory=dict)
    map_tables: dict[str, str] = field(default_factory=dict)
    source_uri_param: str = DEFAULT_SOURCE_URI_PARAM
    source_uri_table: str = DEFAULT_SOURCE_URI_TABLE
    map_table_prefix: str = DEFAULT_MAP_TABLE_PREFIX
    alias_table: str = DEFAULT_ALIAS_TABLE
    alias_lookup_enabled: bool = True
    unmigrated_status: int = 404


def build_redirect_settings() -> RedirectSettings:
    """
    Assemble redirect settings from the settings file and environment.

    Raises RuntimeError for a missing base URL, malformed JSON, or an
    unsupported unmigrated status.
    """

    _load_env_once()
    file_settings = load_settings_file(_get_optional_str_env("MIGRATE_SETTINGS_PATH"))

    base_url = _get_optional_str_env("MIGRATE_BASE_URL") or file_settings.get("base_url")
    if not base_url or not isinstance(base_url, str):
        raise RuntimeError("MIGRATE_BASE_URL must be set to the site's base URL.")

    patterns = _string_map(file_settings.get("migrate_patterns"), source="migrate_patterns")
    raw_patterns = _get_optional_str_env("MIGRATE_PATTERNS")
    if raw_patterns:
        patterns.update(
            _string_map(
                _parse_json_object(raw_patterns, source="MIGRATE_PATTERNS"),
                source="MIGRATE_PATTERNS",
            )
        )

    map_tables = _string_map(file_settings.get("migrate_map_tables"), source="migrate_map_tables")
    raw_map_tables = _get_optional_str_env("MIGRATE_MAP_TABLES")
    if raw_map_tables:
        map_tables.update(
            _string_map(
                _parse_json_object(raw_map_tables, source="MIGRATE_MAP_TABLES"),
                source="MIGRATE_MAP_TABLES",
            )
        )

    file_uri_table = file_settings.get("migrate_source_uri_table")
    source_uri_table = _get_str_env(
        "MIGRATE_SOURCE_URI_TABLE",
        file_uri_table if isinstance(file_uri_table, str) and file_uri_table else DEFAULT_SOURCE_URI_TABLE,
    )

    unmigrated_status = _get_int_env("MIGRATE_UNMIGRATED_STATUS", 404)
    if unmigrated_status not in ALLOWED_UNMIGRATED_STATUSES:
        raise RuntimeError(
            f"MIGRATE_UNMIGRATED_STATUS={unmigrated_status} is not valid. "
            f"Allowed values: {sorted(ALLOWED_UNMIGRATED_STATUSES)}."
        )

    return RedirectSettings(
        base_url=base_url.strip(),
        patterns=patterns,
        map_tables=map_tables,
        source_uri_param=_get_str_env("MIGRATE_SOURCE_URI_PARAM", DEFAULT_SOURCE_URI_PARAM),
        source_uri_table=source_uri_table,
        map_table_prefix=_get_str_env("MIGRATE_MAP_TABLE_PREFIX", DEFAULT_MAP_TABLE_PREFIX),
        alias_table=_get_str_env("MIGRATE_ALIAS_TABLE", DEFAULT_ALIAS_TABLE),
        alias_lookup_enabled=_get_bool_env("MIGRATE_ALIAS_LOOKUP_ENABLED", True),
        unmigrated_status=unmigrated_status,
    )


@lru_cache(maxsize=1)
def get_redirect_settings() -> RedirectSettings:
    """
    Return cached redirect settings.
    """

    return build_redirect_settings()
