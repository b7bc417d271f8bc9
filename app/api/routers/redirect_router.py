"""
app/api/routers/redirect_router.py

Legacy URI redirect endpoint.

Web server rewrite rules send legacy requests here with the original URI in a
query parameter. Both the bare path and the historical ``.php`` script name
are served so existing rules keep working.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse, RedirectResponse, Response

from app.api.dependencies import get_redirect_resolver
from app.config import RedirectSettings, get_redirect_settings
from app.services.errors import RedirectError
from app.services.redirect_resolver import RedirectResolver

router = APIRouter(tags=["redirects"], include_in_schema=False)


@router.get("/uri_map_redirect")
@router.get("/uri_map_redirect.php")
def redirect_legacy_uri(
    request: Request,
    settings: RedirectSettings = Depends(get_redirect_settings),
    resolver: RedirectResolver = Depends(get_redirect_resolver),
) -> Response:
    """
    Answer 301 with the migrated location, or a plain-text error.

    400 when the parameter is missing, 404 for unknown or unmigrated URIs
    (410 for unmigrated when configured), 500 for configuration errors and
    503 when the datastore is unavailable.
    """
    source_uri = request.query_params.get(settings.source_uri_param)
    try:
        target = resolver.resolve(source_uri)
    except RedirectError as exc:
        return PlainTextResponse(exc.body, status_code=exc.status_code)

    return RedirectResponse(target.location, status_code=status.HTTP_301_MOVED_PERMANENTLY)
