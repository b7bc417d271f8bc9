"""
app/domain package marker.
"""

from app.domain.redirects import MigrationRoute, RedirectTarget, UriMapping

__all__ = [
    "MigrationRoute",
    "RedirectTarget",
    "UriMapping",
]
