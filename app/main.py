from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate all required configuration at startup.

    Runs before any database connection is initialised.
    Raises RuntimeError listing every missing or invalid setting so the
    operator can fix all problems in one restart cycle.

    Rules:
    - A database URL must be configured.
    - MIGRATE_BASE_URL must be set.
    - Every configured migration must have a usable URL pattern and table name.
    - Lookup table names must be plain SQL identifiers.
    """

    from db.config import load_env_files, resolve_database_url

    load_env_files()

    errors: list[str] = []

    # --- Database URL ---------------------------------------------------
    try:
        resolve_database_url()
    except RuntimeError as exc:
        errors.append(str(exc))

    # --- Redirect settings ----------------------------------------------
    from app.config import get_redirect_settings
    from app.services.errors import MigrationConfigError
    from app.services.migration_registry import MigrationRegistry, is_valid_identifier

    try:
        settings = get_redirect_settings()
    except RuntimeError as exc:
        errors.append(str(exc))
    else:
        for label, table in (
            ("MIGRATE_SOURCE_URI_TABLE", settings.source_uri_table),
            ("MIGRATE_ALIAS_TABLE", settings.alias_table),
        ):
            if not is_valid_identifier(table):
                errors.append(f"{label}={table!r} is not a valid table name.")

        try:
            registry = MigrationRegistry.from_settings(settings)
        except MigrationConfigError as exc:
            errors.extend(exc.problems)
        else:
            if not len(registry):
                logging.getLogger(__name__).warning(
                    "No migration URL patterns configured; every known URI will "
                    "fail with a configuration error."
                )

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid configuration:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def required_tables() -> set[str]:
    """
    Every table a redirect may read, given the current configuration.
    """
    from app.api.dependencies import get_migration_registry
    from app.config import get_redirect_settings

    settings = get_redirect_settings()
    tables = {settings.source_uri_table} | get_migration_registry().table_names()
    if settings.alias_lookup_enabled:
        tables.add(settings.alias_table)
    return tables


def _check_schema() -> None:
    """
    Compare the configured lookup tables against the live DB schema.

    The tables are owned by the CMS migration tooling; if any are missing,
    log a critical error and abort startup instead of serving 503s.

    Does NOT create tables.
    """
    from sqlalchemy import inspect as sa_inspect

    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected = required_tables()
    missing = expected - actual

    if missing:
        log = logging.getLogger(__name__)
        log.critical(
            "Schema mismatch: %d configured lookup table(s) are absent from "
            "the database: %s. Check migrate settings or run the migrations.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))})."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and lookup tables on boot; dispose the engine on exit."""
    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _check_schema()
    logging.getLogger(__name__).info("Redirect lookup tables validated")
    try:
        yield
    finally:
        from db.session import get_engine

        get_engine().dispose()
        logging.getLogger(__name__).info("Database engine disposed")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Legacy URI Redirect API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import redirect_router

    application.include_router(redirect_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "healthy"}

    return application


app = create_app()
