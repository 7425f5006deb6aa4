"""Cart router: basket lines, checkout and pre-orders."""

from fastapi import APIRouter, Depends, status
from libs.common.currency import round_money
from services.deck_service.routers._helpers import dump, dump_all, get_current_user, get_store
from services.deck_service.schemas import User
from services.deck_service.schemas.requests import (
    AddToCartRequest,
    CheckoutRequest,
    PreOrderRequest,
    UpdateQuantityRequest,
)
from services.deck_service.services import cart_service
from services.deck_service.store import AppStore

router = APIRouter(tags=["cart"])


def basket(store: AppStore) -> dict:
    """The active cart grouped by creator, with per-group subtotals."""
    products = store.state.all_products
    cart = store.active_cart
    groups = [
        {
            "creatorId": creator_id,
            "items": dump_all(items),
            "subtotal": round_money(cart_service.compute_subtotal(items, products)),
        }
        for creator_id, items in cart_service.group_cart_by_creator(cart, products).items()
    ]
    return {
        "items": dump_all(cart),
        "groups": groups,
        "itemCount": cart_service.cart_item_count(store),
        "subtotal": round_money(cart_service.compute_subtotal(cart, products)),
        "editingPreOrder": dump(store.editing_pre_order) if store.editing_pre_order else None,
    }


@router.get("/cart")
async def get_cart(store: AppStore = Depends(get_store)):
    return basket(store)


@router.post("/cart/items", status_code=status.HTTP_201_CREATED)
async def add_to_cart(payload: AddToCartRequest, store: AppStore = Depends(get_store)):
    cart_service.add_to_cart(
        store,
        payload.product_id,
        payload.variant_name,
        size=payload.size,
        pack_id=payload.pack_id,
        special_price=payload.special_price,
    )
    return basket(store)


@router.patch("/cart/items")
async def update_quantity(payload: UpdateQuantityRequest, store: AppStore = Depends(get_store)):
    cart_service.update_quantity(
        store,
        payload.product_id,
        payload.variant_name,
        payload.quantity,
        size=payload.size,
        pack_id=payload.pack_id,
    )
    return basket(store)


@router.delete("/cart")
async def clear_cart(store: AppStore = Depends(get_store)):
    cart_service.clear_cart(store)
    return basket(store)


@router.post("/cart/checkout", status_code=status.HTTP_201_CREATED)
async def checkout(
    payload: CheckoutRequest,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    record = cart_service.checkout(store, payload.creator_id, payload.items)
    return {"sale": dump(record), **basket(store)}


@router.post("/cart/pre-orders", status_code=status.HTTP_201_CREATED)
async def send_pre_order(
    payload: PreOrderRequest,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    """Send the creator's lines as a pre-order form in chat."""
    order = cart_service.build_pre_order_payload(
        store, payload.creator_id, payload.items, salesperson_id=payload.salesperson_id
    )
    message = cart_service.send_pre_order(store, payload.creator_id, order)
    return {
        "message": dump(message),
        "view": store.navigation.current.to_dict(),
        **basket(store),
    }


@router.post("/chats/{chat_id}/messages/{message_id}/edit-pre-order")
async def edit_pre_order(
    chat_id: str,
    message_id: str,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    cart_service.edit_pre_order(store, chat_id, message_id)
    return {"view": store.navigation.current.to_dict(), **basket(store)}
