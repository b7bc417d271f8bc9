from __future__ import annotations

import json

import pytest

from app.config import build_redirect_settings
from db.config import normalize_database_url
from db.session import statement_timeout_connect_args

_ENV_VARS = (
    "MIGRATE_BASE_URL",
    "MIGRATE_SETTINGS_PATH",
    "MIGRATE_PATTERNS",
    "MIGRATE_MAP_TABLES",
    "MIGRATE_SOURCE_URI_TABLE",
    "MIGRATE_SOURCE_URI_PARAM",
    "MIGRATE_MAP_TABLE_PREFIX",
    "MIGRATE_ALIAS_TABLE",
    "MIGRATE_ALIAS_LOOKUP_ENABLED",
    "MIGRATE_UNMIGRATED_STATUS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_match_cms_conventions(monkeypatch) -> None:
    monkeypatch.setenv("MIGRATE_BASE_URL", "https://www.example.org")

    settings = build_redirect_settings()

    assert settings.base_url == "https://www.example.org"
    assert settings.source_uri_param == "migrate_source_uri"
    assert settings.source_uri_table == "migrate_source_uri_map"
    assert settings.map_table_prefix == "migrate_map_"
    assert settings.alias_table == "url_alias"
    assert settings.alias_lookup_enabled is True
    assert settings.unmigrated_status == 404
    assert settings.patterns == {}


def test_base_url_is_required() -> None:
    with pytest.raises(RuntimeError, match="MIGRATE_BASE_URL"):
        build_redirect_settings()


def test_settings_file_is_layered_under_env(monkeypatch, tmp_path) -> None:
    settings_file = tmp_path / "migrate.settings.json"
    settings_file.write_text(
        json.dumps(
            {
                "migrate_source_uri_table": "legacy_uri_map",
                "migrate_patterns": {"Article": "node/:source_id", "Term": "taxonomy/term/:source_id"},
                "migrate_map_tables": {"Term": "legacy_term_map"},
            }
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("MIGRATE_BASE_URL", "https://www.example.org")
    monkeypatch.setenv("MIGRATE_SETTINGS_PATH", str(settings_file))
    monkeypatch.setenv("MIGRATE_PATTERNS", json.dumps({"Article": "stories/:source_id"}))

    settings = build_redirect_settings()

    assert settings.source_uri_table == "legacy_uri_map"
    assert settings.patterns == {
        "Article": "stories/:source_id",
        "Term": "taxonomy/term/:source_id",
    }
    assert settings.map_tables == {"Term": "legacy_term_map"}


def test_missing_settings_file_is_an_error(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("MIGRATE_BASE_URL", "https://www.example.org")
    monkeypatch.setenv("MIGRATE_SETTINGS_PATH", str(tmp_path / "absent.json"))

    with pytest.raises(RuntimeError, match="not found"):
        build_redirect_settings()


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", '{"Article": 5}'])
def test_malformed_patterns_are_rejected(monkeypatch, raw) -> None:
    monkeypatch.setenv("MIGRATE_BASE_URL", "https://www.example.org")
    monkeypatch.setenv("MIGRATE_PATTERNS", raw)

    with pytest.raises(RuntimeError, match="MIGRATE_PATTERNS"):
        build_redirect_settings()


def test_unmigrated_status_must_be_404_or_410(monkeypatch) -> None:
    monkeypatch.setenv("MIGRATE_BASE_URL", "https://www.example.org")
    monkeypatch.setenv("MIGRATE_UNMIGRATED_STATUS", "410")
    assert build_redirect_settings().unmigrated_status == 410

    monkeypatch.setenv("MIGRATE_UNMIGRATED_STATUS", "200")
    with pytest.raises(RuntimeError, match="MIGRATE_UNMIGRATED_STATUS"):
        build_redirect_settings()


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("postgres://u:p@db/site", "postgresql+psycopg://u:p@db/site"),
        ("postgresql://u:p@db/site", "postgresql+psycopg://u:p@db/site"),
        ("mysql://u:p@db/site", "mysql+pymysql://u:p@db/site"),
        ("mysql+pymysql://u:p@db/site", "mysql+pymysql://u:p@db/site"),
    ],
)
def test_normalize_database_url(raw, expected) -> None:
    assert normalize_database_url(raw) == expected


def test_statement_timeout_connect_args() -> None:
    assert statement_timeout_connect_args("postgresql+psycopg://db/site", 2000) == {
        "options": "-c statement_timeout=2000"
    }
    assert statement_timeout_connect_args("mysql+pymysql://db/site", 1500) == {
        "read_timeout": 2,
        "write_timeout": 2,
    }
    assert statement_timeout_connect_args("postgresql+psycopg://db/site", 0) == {}
