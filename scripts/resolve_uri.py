"""
Resolve legacy URIs from the CLI without going through HTTP.

Useful for checking a URI map before pointing rewrite rules at the service.
"""

from __future__ import annotations

import argparse
import json

from app.config import get_redirect_settings
from app.repositories.redirect_repository import RedirectRepository
from app.services.errors import RedirectError
from app.services.migration_registry import MigrationRegistry
from app.services.redirect_resolver import RedirectResolver
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Resolve legacy URIs to their redirect targets.")
    parser.add_argument("source_uris", nargs="+", help="Legacy URIs to resolve.")
    args = parser.parse_args()

    settings = get_redirect_settings()
    registry = MigrationRegistry.from_settings(settings)

    payload = []
    failed = 0
    with SessionLocal() as db:
        resolver = RedirectResolver.from_settings(
            lookup=RedirectRepository(
                db,
                uri_table=settings.source_uri_table,
                alias_table=settings.alias_table,
            ),
            registry=registry,
            settings=settings,
        )
        for source_uri in args.source_uris:
            try:
                target = resolver.resolve(source_uri)
            except RedirectError as exc:
                failed += 1
                payload.append(
                    {
                        "source_uri": source_uri,
                        "status": exc.status_code,
                        "error": str(exc),
                    }
                )
                continue
            payload.append(
                {
                    "source_uri": source_uri,
                    "status": 301,
                    "migration_name": target.migration_name,
                    "destination_id": target.destination_id,
                    "location": target.location,
                }
            )

    print(json.dumps(payload, indent=2))
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
