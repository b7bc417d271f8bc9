"""
app/api/dependencies.py

Shared FastAPI dependencies for redirect resolution.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from app.config import RedirectSettings, get_redirect_settings
from app.repositories.redirect_repository import RedirectRepository
from app.services.migration_registry import MigrationRegistry
from app.services.redirect_resolver import RedirectResolver
from db.session import get_db


@lru_cache(maxsize=1)
def get_migration_registry() -> MigrationRegistry:
    """
    Return the registry built from cached settings. Raises on bad config.
    """

    return MigrationRegistry.from_settings(get_redirect_settings())


def get_redirect_resolver(
    db: Session = Depends(get_db),
    settings: RedirectSettings = Depends(get_redirect_settings),
    registry: MigrationRegistry = Depends(get_migration_registry),
) -> RedirectResolver:
    """
    Build a per-request resolver bound to the request's session.
    """

    repository = RedirectRepository(
        db,
        uri_table=settings.source_uri_table,
        alias_table=settings.alias_table,
    )
    return RedirectResolver.from_settings(
        lookup=repository,
        registry=registry,
        settings=settings,
    )
