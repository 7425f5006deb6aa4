"""Live streams: lifecycle, chat, host control and timed discounts."""

from datetime import datetime, timedelta
from typing import Optional

from libs.common.currency import MAX_DISCOUNT_PERCENT, MIN_DISCOUNT_PERCENT, apply_discount
from libs.common.datetime_utils import parse_iso, to_iso, utc_now
from libs.common.logging import get_logger
from services.deck_service.errors import (
    EntityNotFound,
    InvalidOperation,
    PermissionDenied,
)
from services.deck_service.models import (
    STREAM_TRANSITIONS,
    CommentType,
    StreamStatus,
    ViewTag,
)
from services.deck_service.schemas import (
    ActiveDiscount,
    CartItem,
    LiveComment,
    LiveStream,
    Product,
    new_id,
)
from services.deck_service.services import cart_service
from services.deck_service.services.discount_scheduler import DiscountScheduler
from services.deck_service.services.session_service import (
    can_go_live,
    require_current_user,
)
from services.deck_service.store import AppStore

logger = get_logger(__name__)

DEMO_PLAYBACK_URL = (
    "http://commondatastorage.googleapis.com/gtv-videos-bucket/sample/ForBiggerEscapes.mp4"
)


def get_stream(store: AppStore, stream_id: str) -> LiveStream:
    stream = store.find_stream(stream_id)
    if stream is None:
        raise EntityNotFound(f"Live stream {stream_id} not found")
    return stream


def _require_host(store: AppStore, stream_id: str) -> LiveStream:
    user = require_current_user(store)
    stream = get_stream(store, stream_id)
    if stream.host_id != user.id:
        raise PermissionDenied("Only the host can do that")
    return stream


def _transition(stream: LiveStream, target: StreamStatus) -> None:
    if target not in STREAM_TRANSITIONS[stream.status]:
        raise InvalidOperation(
            f"Stream {stream.id} cannot go from {stream.status.value} to {target.value}"
        )
    stream.status = target


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


def list_streams(store: AppStore, status: Optional[StreamStatus] = None) -> list[LiveStream]:
    streams = store.state.all_live_streams
    if status is None:
        return list(streams)
    return [s for s in streams if s.status == status]


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def finalize_stream(
    store: AppStore,
    title: str,
    thumbnail_url: str,
    product_ids: list[str],
    scheduled_at: Optional[str] = None,
) -> LiveStream:
    """Create a stream from the setup screen.

    With ``scheduled_at`` the stream is announced as upcoming and the user
    lands on the live feeds; otherwise it goes live at once and the player
    opens.
    """
    user = require_current_user(store)
    if not can_go_live(user):
        raise PermissionDenied("Only brands and sales reps can go live")
    if not title.strip():
        raise InvalidOperation("A stream needs a title")

    state = store.state
    with store.transaction():
        if scheduled_at:
            parse_iso(scheduled_at)
            stream = LiveStream(
                id=new_id("live"),
                host_id=user.id,
                title=title,
                thumbnail_url=thumbnail_url,
                product_showcase_ids=list(product_ids),
                status=StreamStatus.UPCOMING,
                scheduled_at=scheduled_at,
            )
            streams = [stream] + state.all_live_streams
            scheduled = [s for s in streams if s.scheduled_at]
            scheduled.sort(key=lambda s: parse_iso(s.scheduled_at), reverse=True)
            others = iter(scheduled)
            # Streams without a schedule keep their slots.
            state.all_live_streams = [
                next(others) if s.scheduled_at else s for s in streams
            ]
            store.navigation.reset_to_root(ViewTag.LIVE_FEEDS, public_view=store.public_view)
        else:
            stream = LiveStream(
                id=new_id("live"),
                host_id=user.id,
                title=title,
                thumbnail_url=thumbnail_url,
                product_showcase_ids=list(product_ids),
                status=StreamStatus.LIVE,
                started_at=to_iso(utc_now()),
                viewer_count=1,
                playback_url=DEMO_PLAYBACK_URL,
            )
            state.all_live_streams.insert(0, stream)
            store.navigation.push(ViewTag.LIVE_STREAM_PLAYER, {"streamId": stream.id})

    logger.info(
        "Created live stream %s",
        stream.id,
        extra={"extra_fields": {"status": stream.status.value, "host_id": user.id}},
    )
    return stream


def start_scheduled_stream(store: AppStore, stream_id: str) -> LiveStream:
    stream = _require_host(store, stream_id)
    with store.transaction():
        _transition(stream, StreamStatus.LIVE)
        stream.started_at = to_iso(utc_now())
        stream.scheduled_at = None
        store.navigation.push(ViewTag.LIVE_STREAM_PLAYER, {"streamId": stream.id})
    logger.info("Live stream %s started", stream.id)
    return stream


def end_stream(store: AppStore, scheduler: DiscountScheduler, stream_id: str) -> LiveStream:
    stream = _require_host(store, stream_id)
    with store.transaction():
        _transition(stream, StreamStatus.ENDED)
        stream.ended_at = to_iso(utc_now())
        stream.active_discount = None
        stream.is_host_controlled = False
    scheduler.cancel(stream_id)
    logger.info("Live stream %s ended", stream.id)
    return stream


# ---------------------------------------------------------------------------
# Audience
# ---------------------------------------------------------------------------


def _comment(store: AppStore, stream: LiveStream, text: str, kind: CommentType) -> LiveComment:
    user = require_current_user(store)
    comment = LiveComment(
        id=new_id("c"),
        user_id=user.id,
        username=user.username,
        avatar_url=user.avatar_url,
        text=text,
        timestamp=to_iso(utc_now()),
        type=kind,
    )
    stream.comments.append(comment)
    return comment


def add_comment(store: AppStore, stream_id: str, text: str) -> LiveComment:
    if not text.strip():
        raise InvalidOperation("Comment cannot be empty")
    stream = get_stream(store, stream_id)
    with store.transaction():
        return _comment(store, stream, text, CommentType.COMMENT)


def add_like(store: AppStore, stream_id: str) -> LiveStream:
    stream = get_stream(store, stream_id)
    with store.transaction():
        stream.likes_count += 1
        _comment(store, stream, "💖", CommentType.LIKE)
    return stream


def join_stream(store: AppStore, stream_id: str) -> LiveStream:
    stream = get_stream(store, stream_id)
    if stream.status != StreamStatus.LIVE:
        raise InvalidOperation("Stream is not live")
    with store.transaction():
        stream.viewer_count += 1
        if store.current_user:
            _comment(store, stream, f"{store.current_user.username} joined", CommentType.JOIN)
        store.navigation.push(ViewTag.LIVE_STREAM_PLAYER, {"streamId": stream.id})
    return stream


# ---------------------------------------------------------------------------
# Host control
# ---------------------------------------------------------------------------


def toggle_host_control(store: AppStore, stream_id: str) -> LiveStream:
    """Switch between open pinning and host-controlled pinning."""
    stream = _require_host(store, stream_id)
    with store.transaction():
        stream.is_host_controlled = not stream.is_host_controlled
        if stream.is_host_controlled and stream.host_pinned_product_index is None:
            stream.host_pinned_product_index = 0
    return stream


def host_pin_product(store: AppStore, stream_id: str, index: Optional[int]) -> LiveStream:
    stream = _require_host(store, stream_id)
    if index is not None and not 0 <= index < len(stream.product_showcase_ids):
        raise InvalidOperation(f"No showcase product at position {index}")
    with store.transaction():
        stream.host_pinned_product_index = index
    return stream


def can_pin(stream: LiveStream, user_id: Optional[str]) -> bool:
    return user_id == stream.host_id or not stream.is_host_controlled


def effective_pinned_index(
    stream: LiveStream, viewer_id: Optional[str], local_index: Optional[int]
) -> Optional[int]:
    """Viewers follow the host's pin while the host holds control."""
    if stream.is_host_controlled and viewer_id != stream.host_id:
        return stream.host_pinned_product_index
    return local_index


# ---------------------------------------------------------------------------
# Discounts
# ---------------------------------------------------------------------------


def active_discount_for(
    stream: LiveStream, product_id: str, now: Optional[datetime] = None
) -> Optional[ActiveDiscount]:
    discount = stream.active_discount
    if discount is None or discount.product_id != product_id:
        return None
    if parse_iso(discount.expires_at) <= (now or utc_now()):
        return None
    return discount


def discounted_price(product: Product, discount: ActiveDiscount) -> float:
    return apply_discount(product.price, discount.discount_percentage)


def expire_discount(store: AppStore, stream_id: str, product_id: str) -> bool:
    """Clear the stream's discount if it is still the one for ``product_id``.

    A stale timer for a superseded discount finds a different product and
    leaves the newer discount alone.
    """
    stream = store.find_stream(stream_id)
    if stream is None or stream.active_discount is None:
        return False
    if stream.active_discount.product_id != product_id:
        return False
    with store.transaction():
        stream.active_discount = None
    logger.info("Discount on stream %s for product %s expired", stream_id, product_id)
    return True


def set_discount(
    store: AppStore,
    scheduler: DiscountScheduler,
    stream_id: str,
    product_id: str,
    discount_percentage: float,
    duration_minutes: float,
) -> ActiveDiscount:
    """Start a timed discount, superseding any discount already running."""
    stream = _require_host(store, stream_id)
    if not MIN_DISCOUNT_PERCENT <= discount_percentage <= MAX_DISCOUNT_PERCENT:
        raise InvalidOperation(
            f"Discount must be between {MIN_DISCOUNT_PERCENT}% and {MAX_DISCOUNT_PERCENT}%"
        )
    if duration_minutes <= 0:
        raise InvalidOperation("Discount duration must be positive")
    if product_id not in stream.product_showcase_ids:
        raise InvalidOperation(f"Product {product_id} is not showcased in this stream")

    delay_seconds = duration_minutes * 60
    discount = ActiveDiscount(
        product_id=product_id,
        discount_percentage=discount_percentage,
        expires_at=to_iso(utc_now() + timedelta(seconds=delay_seconds)),
    )
    with store.transaction():
        stream.active_discount = discount
    scheduler.schedule(
        stream_id,
        delay_seconds,
        lambda: expire_discount(store, stream_id, product_id),
    )
    logger.info(
        "Discount started",
        extra={
            "extra_fields": {
                "stream_id": stream_id,
                "product_id": product_id,
                "discount_percentage": discount_percentage,
                "expires_at": discount.expires_at,
            }
        },
    )
    return discount


def add_to_cart_from_live(
    store: AppStore,
    stream_id: str,
    product_id: str,
    variant_name: str,
    size: Optional[str] = None,
    pack_id: Optional[str] = None,
) -> CartItem:
    """Add a showcased product, locking in the live discount while it runs."""
    stream = get_stream(store, stream_id)
    product = store.find_product(product_id)
    if product is None:
        raise EntityNotFound(f"Product {product_id} not found")
    discount = active_discount_for(stream, product_id)
    special_price = discounted_price(product, discount) if discount and not pack_id else None
    return cart_service.add_to_cart(
        store, product_id, variant_name, size=size, pack_id=pack_id, special_price=special_price
    )
