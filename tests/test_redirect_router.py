"""
tests/test_redirect_router.py

HTTP contract of the redirect endpoint. The real dependency chain runs with
settings, registry and DB session overridden to an in-memory SQLite fixture.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import MetaData, create_engine, insert
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from app.api.dependencies import get_migration_registry, get_redirect_resolver
from app.api.routers import redirect_router
from app.config import RedirectSettings, get_redirect_settings
from app.services.errors import DatastoreUnavailableError
from app.services.migration_registry import MigrationRegistry
from db.models import migration_map_table, source_uri_map_table, url_alias_table
from db.session import get_db

BASE_URL = "https://www.example.org"


def _settings(**overrides) -> RedirectSettings:
    values = {
        "base_url": BASE_URL,
        "patterns": {
            "Article": "/legacy/:source_id",
            "Page": "node/:source_id",
            "Poll": "poll/:source_id",
        },
    }
    values.update(overrides)
    return RedirectSettings(**values)


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata = MetaData()
    uri_map = source_uri_map_table(metadata)
    article_map = migration_map_table(metadata, "migrate_map_article")
    page_map = migration_map_table(metadata, "migrate_map_page")
    aliases = url_alias_table(metadata)
    metadata.create_all(engine)

    with engine.begin() as conn:
        conn.execute(
            insert(uri_map),
            [
                {"source_uri": "/news/story.asp?id=9", "migration_name": "Article", "source_id": "9"},
                {"source_uri": "/about.html", "migration_name": "Page", "source_id": "3"},
                {"source_uri": "/news/lost.asp", "migration_name": "Article", "source_id": "99"},
                {"source_uri": "/gallery/1", "migration_name": "Gallery", "source_id": "1"},
                {"source_uri": "/polls/5", "migration_name": "Poll", "source_id": "5"},
            ],
        )
        conn.execute(insert(article_map), [{"sourceid1": "9", "destid1": "42"}])
        conn.execute(insert(page_map), [{"sourceid1": "3", "destid1": "8"}])
        conn.execute(insert(aliases), [{"source": "node/8", "alias": "about-us"}])

    yield engine
    engine.dispose()


def _client(engine: Engine, settings: RedirectSettings) -> TestClient:
    application = FastAPI()
    application.include_router(redirect_router)

    def override_get_db() -> Iterator[Session]:
        with Session(engine) as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_redirect_settings] = lambda: settings
    application.dependency_overrides[get_migration_registry] = (
        lambda: MigrationRegistry.from_settings(settings)
    )
    return TestClient(application, follow_redirects=False)


@pytest.fixture()
def client(engine: Engine) -> TestClient:
    return _client(engine, _settings())


def test_migrated_uri_redirects_permanently(client) -> None:
    response = client.get(
        "/uri_map_redirect.php",
        params={"migrate_source_uri": "/news/story.asp?id=9"},
    )

    assert response.status_code == 301
    assert response.headers["location"] == f"{BASE_URL}/legacy/42"


def test_alias_is_used_for_location(client) -> None:
    response = client.get("/uri_map_redirect", params={"migrate_source_uri": "/about.html"})

    assert response.status_code == 301
    assert response.headers["location"] == f"{BASE_URL}/about-us"


def test_unknown_uri_is_plain_text_404(client) -> None:
    response = client.get("/uri_map_redirect", params={"migrate_source_uri": "/nope"})

    assert response.status_code == 404
    assert response.text == "Sorry folks. Park is closed."
    assert response.headers["content-type"].startswith("text/plain")


def test_unmigrated_uri_is_not_silent(client) -> None:
    response = client.get("/uri_map_redirect", params={"migrate_source_uri": "/news/lost.asp"})

    assert response.status_code == 404
    assert response.text == "Sorry folks. Park is closed."


def test_unmigrated_uri_can_answer_gone(engine) -> None:
    client = _client(engine, _settings(unmigrated_status=410))

    response = client.get("/uri_map_redirect", params={"migrate_source_uri": "/news/lost.asp"})

    assert response.status_code == 410


@pytest.mark.parametrize("params", [{}, {"migrate_source_uri": ""}])
def test_missing_parameter_is_400(client, params) -> None:
    response = client.get("/uri_map_redirect", params=params)

    assert response.status_code == 400
    assert response.text == "migrate_source_uri was not found on the request."


def test_custom_parameter_name(engine) -> None:
    client = _client(engine, _settings(source_uri_param="legacy"))

    ok = client.get("/uri_map_redirect", params={"legacy": "/news/story.asp?id=9"})
    missing = client.get("/uri_map_redirect", params={"migrate_source_uri": "/news/story.asp?id=9"})

    assert ok.status_code == 301
    assert missing.status_code == 400
    assert missing.text == "legacy was not found on the request."


def test_unknown_migration_is_500(client) -> None:
    response = client.get("/uri_map_redirect", params={"migrate_source_uri": "/gallery/1"})

    assert response.status_code == 500
    assert response.text == "Redirect configuration error."


def test_missing_map_table_is_503(client) -> None:
    # Poll has a pattern but its map table was never created.
    response = client.get("/uri_map_redirect", params={"migrate_source_uri": "/polls/5"})

    assert response.status_code == 503
    assert response.text == "Service temporarily unavailable."


def test_datastore_failure_from_resolver_is_503(engine) -> None:
    class BrokenResolver:
        def resolve(self, source_uri):
            raise DatastoreUnavailableError("connection refused")

    client = _client(engine, _settings())
    client.app.dependency_overrides[get_redirect_resolver] = lambda: BrokenResolver()

    response = client.get("/uri_map_redirect", params={"migrate_source_uri": "/about.html"})

    assert response.status_code == 503
