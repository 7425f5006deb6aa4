"""Live router: stream lifecycle, audience actions, pinning and discounts."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from services.deck_service import navigation
from services.deck_service.models import StreamStatus
from services.deck_service.routers._helpers import (
    dump,
    dump_all,
    get_current_user,
    get_scheduler,
    get_store,
)
from services.deck_service.schemas import User
from services.deck_service.schemas.requests import (
    AddToCartRequest,
    CommentCreate,
    DiscountRequest,
    PinRequest,
    StreamCreate,
)
from services.deck_service.services import live_service
from services.deck_service.services.discount_scheduler import DiscountScheduler
from services.deck_service.store import AppStore

router = APIRouter(tags=["live"])


@router.get("/live")
async def list_streams(
    stream_status: Optional[StreamStatus] = Query(None, alias="status"),
    store: AppStore = Depends(get_store),
):
    return dump_all(live_service.list_streams(store, stream_status))


@router.get("/live/{stream_id}")
async def get_stream_detail(stream_id: str, store: AppStore = Depends(get_store)):
    stream = live_service.get_stream(store, stream_id)
    user = store.current_user
    discount = stream.active_discount
    return {
        **dump(stream),
        "canPin": live_service.can_pin(stream, user.id if user else None),
        "activeDiscount": (
            dump(discount)
            if discount and live_service.active_discount_for(stream, discount.product_id)
            else None
        ),
    }


@router.post("/live", status_code=status.HTTP_201_CREATED)
async def finalize_stream(
    payload: StreamCreate,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    """Go live now, or announce an upcoming stream when ``scheduledAt`` is set."""
    stream = live_service.finalize_stream(
        store,
        payload.title,
        payload.thumbnail_url,
        payload.product_ids,
        scheduled_at=payload.scheduled_at,
    )
    return dump(stream)


@router.post("/live/{stream_id}/start")
async def start_scheduled_stream(
    stream_id: str,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    return dump(live_service.start_scheduled_stream(store, stream_id))


@router.post("/live/{stream_id}/end")
async def end_stream(
    stream_id: str,
    store: AppStore = Depends(get_store),
    scheduler: DiscountScheduler = Depends(get_scheduler),
    _: User = Depends(get_current_user),
):
    return dump(live_service.end_stream(store, scheduler, stream_id))


# ============================================================================
# AUDIENCE
# ============================================================================


@router.post("/live/{stream_id}/join")
async def join_stream(stream_id: str, store: AppStore = Depends(get_store)):
    return dump(live_service.join_stream(store, stream_id))


@router.post("/live/{stream_id}/leave")
async def leave_stream(stream_id: str, store: AppStore = Depends(get_store)):
    navigation.leave_live_stream(store)
    return {"view": store.navigation.current.to_dict()}


@router.post("/live/{stream_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    stream_id: str,
    payload: CommentCreate,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    return dump(live_service.add_comment(store, stream_id, payload.text))


@router.post("/live/{stream_id}/likes")
async def add_like(
    stream_id: str,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    stream = live_service.add_like(store, stream_id)
    return {"likesCount": stream.likes_count}


@router.post("/live/{stream_id}/cart", status_code=status.HTTP_201_CREATED)
async def add_to_cart_from_live(
    stream_id: str,
    payload: AddToCartRequest,
    store: AppStore = Depends(get_store),
):
    line = live_service.add_to_cart_from_live(
        store,
        stream_id,
        payload.product_id,
        payload.variant_name,
        size=payload.size,
        pack_id=payload.pack_id,
    )
    return dump(line)


@router.post("/live/{stream_id}/basket")
async def open_basket(stream_id: str, store: AppStore = Depends(get_store)):
    live_service.get_stream(store, stream_id)
    navigation.open_basket_from_live(store, stream_id)
    return {"view": store.navigation.current.to_dict()}


@router.post("/live/return")
async def return_to_live(store: AppStore = Depends(get_store)):
    frame = navigation.return_to_live(store)
    return {"returned": frame is not None, "view": store.navigation.current.to_dict()}


# ============================================================================
# HOST CONTROLS
# ============================================================================


@router.post("/live/{stream_id}/host-control")
async def toggle_host_control(
    stream_id: str,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    stream = live_service.toggle_host_control(store, stream_id)
    return {
        "isHostControlled": stream.is_host_controlled,
        "hostPinnedProductIndex": stream.host_pinned_product_index,
    }


@router.put("/live/{stream_id}/pin")
async def host_pin_product(
    stream_id: str,
    payload: PinRequest,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    stream = live_service.host_pin_product(store, stream_id, payload.index)
    return {"hostPinnedProductIndex": stream.host_pinned_product_index}


@router.post("/live/{stream_id}/discount", status_code=status.HTTP_201_CREATED)
async def set_discount(
    stream_id: str,
    payload: DiscountRequest,
    store: AppStore = Depends(get_store),
    scheduler: DiscountScheduler = Depends(get_scheduler),
    _: User = Depends(get_current_user),
):
    discount = live_service.set_discount(
        store,
        scheduler,
        stream_id,
        payload.product_id,
        payload.discount_percentage,
        payload.duration_minutes,
    )
    return dump(discount)
