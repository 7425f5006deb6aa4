"""Social router: likes, saves, follows and notifications."""

from fastapi import APIRouter, Depends
from services.deck_service.routers._helpers import dump_all, get_current_user, get_store
from services.deck_service.schemas import User
from services.deck_service.services import social_service
from services.deck_service.store import AppStore

router = APIRouter(tags=["social"])


@router.post("/products/{product_id}/like")
async def toggle_like(product_id: str, store: AppStore = Depends(get_store)):
    return {"liked": social_service.toggle_like(store, product_id)}


@router.post("/products/{product_id}/save")
async def toggle_save(product_id: str, store: AppStore = Depends(get_store)):
    return {"saved": social_service.toggle_save(store, product_id)}


@router.get("/me/liked")
async def liked_products(store: AppStore = Depends(get_store)):
    return dump_all(social_service.liked_products(store))


@router.get("/me/saved")
async def saved_products(store: AppStore = Depends(get_store)):
    return dump_all(social_service.saved_products(store))


# ============================================================================
# FOLLOWS
# ============================================================================


@router.post("/users/{user_id}/follow")
async def toggle_follow(
    user_id: str,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    return {"following": social_service.toggle_follow(store, user_id)}


@router.get("/me/following")
async def following_users(
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    return dump_all(social_service.following_users(store))


@router.get("/users/{user_id}/followers")
async def follower_users(user_id: str, store: AppStore = Depends(get_store)):
    return dump_all(social_service.follower_users(store, user_id))


# ============================================================================
# NOTIFICATIONS
# ============================================================================


@router.get("/notifications")
async def list_notifications(store: AppStore = Depends(get_store)):
    return {
        "unread": social_service.unread_notification_count(store),
        "notifications": dump_all(store.state.notifications),
    }


@router.post("/notifications/{notification_id}/open")
async def open_notification(notification_id: str, store: AppStore = Depends(get_store)):
    """Mark read and navigate to the linked product or deck when it still exists."""
    frame = social_service.notification_click(store, notification_id)
    return {
        "navigated": frame is not None,
        "view": store.navigation.current.to_dict(),
        "unread": social_service.unread_notification_count(store),
    }


@router.post("/notifications/read")
async def mark_all_read(store: AppStore = Depends(get_store)):
    return {"marked": social_service.mark_all_notifications_read(store)}
