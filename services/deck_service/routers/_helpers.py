"""Dependencies and response helpers shared by the deck routers."""

from typing import Iterable

from fastapi import Depends, Request
from pydantic import BaseModel
from services.deck_service.providers.media import MediaGenerationClient
from services.deck_service.schemas import User
from services.deck_service.services.discount_scheduler import DiscountScheduler
from services.deck_service.services.session_service import require_current_user
from services.deck_service.store import AppStore


def get_store(request: Request) -> AppStore:
    """The app instance's store; one app serves one client session."""
    return request.app.state.store


def get_scheduler(request: Request) -> DiscountScheduler:
    return request.app.state.scheduler


def get_current_user(store: AppStore = Depends(get_store)) -> User:
    return require_current_user(store)


def dump(model: BaseModel) -> dict:
    if isinstance(model, User):
        return model.public_dict()
    return model.model_dump(mode="json", by_alias=True)


def dump_all(models: Iterable[BaseModel]) -> list[dict]:
    return [dump(m) for m in models]


def get_media_client() -> MediaGenerationClient:
    """Overridden in tests with a fake client."""
    return MediaGenerationClient()
