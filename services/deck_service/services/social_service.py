"""Likes, saves, follows and follower notifications."""

from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.deck_service import navigation
from services.deck_service.errors import EntityNotFound, InvalidOperation
from services.deck_service.models import LinkType
from services.deck_service.schemas import (
    Notification,
    NotificationLink,
    Product,
    User,
    new_id,
)
from services.deck_service.services.session_service import require_current_user
from services.deck_service.store import AppStore

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Likes and saves
# ---------------------------------------------------------------------------


def _toggle(ids: set[str], item_id: str) -> bool:
    if item_id in ids:
        ids.discard(item_id)
        return False
    ids.add(item_id)
    return True


def toggle_like(store: AppStore, product_id: str) -> bool:
    """Returns whether the product is liked afterwards."""
    with store.transaction():
        return _toggle(store.state.liked_product_ids, product_id)


def toggle_save(store: AppStore, product_id: str) -> bool:
    with store.transaction():
        return _toggle(store.state.saved_product_ids, product_id)


def liked_products(store: AppStore) -> list[Product]:
    liked = store.state.liked_product_ids
    return [p for p in store.state.all_products if p.id in liked]


def saved_products(store: AppStore) -> list[Product]:
    saved = store.state.saved_product_ids
    return [p for p in store.state.all_products if p.id in saved]


# ---------------------------------------------------------------------------
# Follow graph
# ---------------------------------------------------------------------------


def toggle_follow(store: AppStore, target_user_id: str) -> bool:
    """Follow or unfollow; both sides of the edge change in one commit.

    Returns whether the current user follows the target afterwards.
    """
    user = require_current_user(store)
    target = store.find_user(target_user_id)
    if target is None:
        raise EntityNotFound(f"User {target_user_id} not found")
    if target.id == user.id:
        raise InvalidOperation("You cannot follow yourself")

    with store.transaction():
        if target.id in user.following_ids:
            user.following_ids = [i for i in user.following_ids if i != target.id]
            target.follower_ids = [i for i in target.follower_ids if i != user.id]
            following = False
        else:
            user.following_ids = user.following_ids + [target.id]
            if user.id not in target.follower_ids:
                target.follower_ids = target.follower_ids + [user.id]
            following = True

    logger.info("User %s %s %s", user.id, "followed" if following else "unfollowed", target.id)
    return following


def following_users(store: AppStore) -> list[User]:
    user = require_current_user(store)
    return [u for u in (store.find_user(i) for i in user.following_ids) if u is not None]


def follower_users(store: AppStore, user_id: str) -> list[User]:
    user = store.find_user(user_id)
    if user is None:
        raise EntityNotFound(f"User {user_id} not found")
    return [u for u in (store.find_user(i) for i in user.follower_ids) if u is not None]


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


def unread_notification_count(store: AppStore) -> int:
    """Unread notifications, not counting ones the current user triggered."""
    user = store.current_user
    own_id = user.id if user else None
    return sum(
        1 for n in store.state.notifications if not n.read and n.from_user.id != own_id
    )


def fanout_on_publish(
    store: AppStore,
    creator: User,
    link_type: LinkType,
    entity_id: str,
    message: str,
    variant_name: Optional[str] = None,
) -> list[Notification]:
    """Notify every follower of ``creator`` about a new deck or product."""
    summary = creator.summary()
    link = NotificationLink(type=link_type, id=entity_id, variant_name=variant_name)
    now = utc_now()
    created = [
        Notification(
            id=new_id(f"notif-{follower_id}"),
            from_user=summary,
            message=message,
            link=link,
            timestamp=now,
        )
        for follower_id in creator.follower_ids
    ]
    with store.transaction():
        store.state.notifications = created + store.state.notifications

    logger.info(
        "Fanned out %d notification(s)",
        len(created),
        extra={"extra_fields": {"creator_id": creator.id, "link_type": link_type.value}},
    )
    return created


def notification_click(store: AppStore, notification_id: str) -> Optional[navigation.ViewFrame]:
    """Mark read, then open what the notification points at.

    A deck that no longer exists only marks the notification read.
    """
    notification = next(
        (n for n in store.state.notifications if n.id == notification_id), None
    )
    if notification is None:
        raise EntityNotFound(f"Notification {notification_id} not found")

    with store.transaction():
        notification.read = True
        link = notification.link
        if link.type == LinkType.PRODUCT:
            if store.find_product(link.id) is None:
                return None
            navigation.navigate_to_product(store, link.id, link.variant_name)
            return store.navigation.current

        creator = store.find_user(notification.from_user.id)
        if creator is None or creator.find_deck(link.id) is None:
            return None
        return navigation.open_deck(store, creator.id, link.id)


def mark_all_notifications_read(store: AppStore) -> int:
    unread = [n for n in store.state.notifications if not n.read]
    with store.transaction():
        for n in unread:
            n.read = True
    return len(unread)
