"""FastAPI application for the Deck Service."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from libs.common.config import get_settings
from libs.common.logging import configure_logging, get_logger
from libs.common.middleware import add_request_logging
from services.deck_service.errors import DeckError
from services.deck_service.routers import (
    cart_router,
    catalog_router,
    chats_router,
    live_router,
    navigation_router,
    reports_router,
    session_router,
    social_router,
    studio_router,
    team_router,
)
from services.deck_service.services.discount_scheduler import (
    DiscountScheduler,
    get_discount_scheduler,
)
from services.deck_service.storage import build_storage
from services.deck_service.store import AppStore, bootstrap_store

logger = get_logger(__name__)


async def deck_error_handler(request: Request, exc: DeckError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


def create_app(
    store: Optional[AppStore] = None,
    scheduler: Optional[DiscountScheduler] = None,
) -> FastAPI:
    """Create and configure the Deck Service FastAPI app.

    One app instance drives one client session. Without an explicit store the
    cold-start sequence runs: saved snapshot, else seed data.
    """
    settings = get_settings()
    if store is None:
        store = bootstrap_store(build_storage(settings), settings)
    scheduler = scheduler or get_discount_scheduler()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        logger.info(
            "Deck service ready",
            extra={"extra_fields": {"backend": settings.STATE_BACKEND, "version": store.version}},
        )
        yield
        scheduler.cancel_all()

    app = FastAPI(
        title="Deck Service",
        version="0.1.0",
        description="Application-state engine for the Deck live-shopping client.",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.scheduler = scheduler

    add_request_logging(app)
    app.add_exception_handler(DeckError, deck_error_handler)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "deck"}

    app.include_router(session_router)
    app.include_router(navigation_router)
    app.include_router(cart_router)
    app.include_router(catalog_router)
    app.include_router(social_router)
    app.include_router(chats_router)
    app.include_router(live_router)
    app.include_router(team_router)
    app.include_router(reports_router)
    app.include_router(studio_router)

    return app


app = create_app()
