"""
app/repositories package marker.
"""

from app.repositories.redirect_repository import RedirectRepository

__all__ = [
    "RedirectRepository",
]
