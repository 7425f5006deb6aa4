"""Deck service routers package."""

from services.deck_service.routers.cart import router as cart_router
from services.deck_service.routers.catalog import router as catalog_router
from services.deck_service.routers.chats import router as chats_router
from services.deck_service.routers.live import router as live_router
from services.deck_service.routers.navigation import router as navigation_router
from services.deck_service.routers.reports import router as reports_router
from services.deck_service.routers.session import router as session_router
from services.deck_service.routers.social import router as social_router
from services.deck_service.routers.studio import router as studio_router
from services.deck_service.routers.team import router as team_router

__all__ = [
    "cart_router",
    "catalog_router",
    "chats_router",
    "live_router",
    "navigation_router",
    "reports_router",
    "session_router",
    "social_router",
    "studio_router",
    "team_router",
]
