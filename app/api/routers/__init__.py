"""
app/api/routers package marker.
"""

from app.api.routers.redirect_router import router as redirect_router

__all__ = [
    "redirect_router",
]
