"""Session router: app snapshot, login, registration and account settings."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from services.deck_service import navigation
from services.deck_service.routers._helpers import (
    dump,
    get_current_user,
    get_store,
)
from services.deck_service.schemas import User
from services.deck_service.schemas.requests import (
    ChangePasswordRequest,
    LanguageRequest,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    ResetPasswordRequest,
    SettingsUpdate,
)
from services.deck_service.services import cart_service, session_service, social_service
from services.deck_service.store import AppStore

router = APIRouter(tags=["session"])


def app_snapshot(store: AppStore) -> dict:
    """What a client needs to render the current screen."""
    user = store.current_user
    return {
        "currentUser": user.public_dict() if user else None,
        "view": store.navigation.current.to_dict(),
        "history": store.navigation.to_list(),
        "isPublicView": store.public_view,
        "language": store.state.language.value,
        "cartItemCount": cart_service.cart_item_count(store),
        "unreadNotifications": social_service.unread_notification_count(store),
        "filteredCreatorId": store.filtered_creator_id,
        "version": store.version,
    }


# ============================================================================
# APP
# ============================================================================


@router.get("/app/state")
async def get_app_state(store: AppStore = Depends(get_store)):
    return app_snapshot(store)


@router.post("/app/open")
async def open_shared_link(
    user_id: Optional[str] = Query(None, alias="userId"),
    deck_id: Optional[str] = Query(None, alias="deckId"),
    product_id: Optional[str] = Query(None, alias="productId"),
    store: AppStore = Depends(get_store),
):
    """Apply shared-link parameters to the initial view."""
    handled = navigation.apply_deep_link(store, user_id, deck_id, product_id)
    return {"handled": handled, **app_snapshot(store)}


# ============================================================================
# SESSION
# ============================================================================


@router.post("/session/login")
async def login(payload: LoginRequest, store: AppStore = Depends(get_store)):
    session_service.login(store, payload.identifier, payload.password)
    return app_snapshot(store)


@router.post("/session/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, store: AppStore = Depends(get_store)):
    session_service.register(
        store,
        payload.username,
        payload.password,
        role=payload.role,
        email=payload.email,
        phone=payload.phone,
    )
    return app_snapshot(store)


@router.post("/session/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(store: AppStore = Depends(get_store)):
    session_service.logout(store)


@router.post("/session/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    payload: ChangePasswordRequest,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    session_service.change_password(store, payload.current_password, payload.new_password)


@router.post("/session/password/reset")
async def reset_password(payload: ResetPasswordRequest, store: AppStore = Depends(get_store)):
    updated = session_service.reset_password(store, payload.identifier, payload.new_password)
    return {"updated": updated}


# ============================================================================
# ACCOUNT
# ============================================================================


@router.get("/me")
async def get_me(user: User = Depends(get_current_user)):
    return dump(user)


@router.patch("/me")
async def update_profile(
    payload: ProfileUpdate,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    user = session_service.update_profile(
        store, **{field: getattr(payload, field) for field in payload.model_fields_set}
    )
    return dump(user)


@router.patch("/me/settings")
async def update_settings(
    payload: SettingsUpdate,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    user = session_service.update_settings(
        store, **{field: getattr(payload, field) for field in payload.model_fields_set}
    )
    return dump(user)


@router.put("/language")
async def set_language(payload: LanguageRequest, store: AppStore = Depends(get_store)):
    language = session_service.set_language(store, payload.language)
    return {"language": language.value}
