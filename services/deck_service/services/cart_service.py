"""Cart, checkout and pre-order operations.

Unit prices resolve in this order: the line's special price (a live-stream
deal), then the chosen pack's bundle price, then the product's base price. A
line whose product or pack has disappeared is worth zero rather than an error.
"""

from typing import Optional

from libs.common.currency import percentage_of
from libs.common.datetime_utils import to_iso, utc_now
from libs.common.logging import get_logger
from services.deck_service.errors import EntityNotFound, InvalidOperation
from services.deck_service.models import MessageType, UserRole, ViewTag
from services.deck_service.schemas import (
    CartItem,
    Chat,
    PreOrderEditContext,
    PreOrderItem,
    PreOrderMessage,
    PreOrderPayload,
    Product,
    SaleRecord,
    SaleRecordItem,
    User,
    new_id,
)
from services.deck_service.services.session_service import require_current_user
from services.deck_service.store import AppStore

logger = get_logger(__name__)


# ============================================================================
# PRICING
# ============================================================================


def _product_map(products: list[Product]) -> dict[str, Product]:
    return {p.id: p for p in products}


def unit_price(item: CartItem, products: list[Product] | dict[str, Product]) -> float:
    if item.special_price is not None:
        return item.special_price
    by_id = products if isinstance(products, dict) else _product_map(products)
    product = by_id.get(item.product_id)
    if product is None:
        return 0.0
    if item.pack_id and product.packs:
        pack = product.find_pack(item.pack_id)
        return pack.price if pack else 0.0
    return product.price


def compute_subtotal(items: list[CartItem], products: list[Product]) -> float:
    by_id = _product_map(products)
    return sum(unit_price(item, by_id) * item.quantity for item in items)


def group_cart_by_creator(
    items: list[CartItem], products: list[Product]
) -> dict[str, list[CartItem]]:
    """Basket layout: creator id -> lines, in first-seen order."""
    by_id = _product_map(products)
    groups: dict[str, list[CartItem]] = {}
    for item in items:
        product = by_id.get(item.product_id)
        if product is None:
            continue
        groups.setdefault(product.creator.id, []).append(item)
    return groups


def cart_item_count(store: AppStore) -> int:
    return sum(item.quantity for item in store.active_cart)


def _creator_lines(store: AppStore, creator_id: str) -> list[CartItem]:
    return group_cart_by_creator(store.active_cart, store.state.all_products).get(
        creator_id, []
    )


# ============================================================================
# CART LINES
# ============================================================================


def add_to_cart(
    store: AppStore,
    product_id: str,
    variant_name: str,
    size: Optional[str] = None,
    pack_id: Optional[str] = None,
    special_price: Optional[float] = None,
) -> CartItem:
    """Add one unit, merging with an existing line for the same key.

    Re-adding with a special price overwrites the stored one; re-adding
    without one keeps it.
    """
    if pack_id:
        size = None
    with store.transaction():
        cart = list(store.active_cart)
        line = next(
            (i for i in cart if i.matches(product_id, variant_name, size, pack_id)),
            None,
        )
        if line is not None:
            line.quantity += 1
            if special_price is not None:
                line.special_price = special_price
        else:
            line = CartItem(
                product_id=product_id,
                variant_name=variant_name,
                size=size,
                pack_id=pack_id,
                quantity=1,
                special_price=special_price,
            )
            cart.append(line)
        store.set_active_cart(cart)

        if store.public_view:
            store.navigation.push(ViewTag.BASKET)
    return line


def update_quantity(
    store: AppStore,
    product_id: str,
    variant_name: str,
    quantity: int,
    size: Optional[str] = None,
    pack_id: Optional[str] = None,
) -> Optional[CartItem]:
    """Set a line's quantity; zero or less removes the line."""
    with store.transaction():
        cart = store.active_cart
        if quantity <= 0:
            store.set_active_cart(
                [i for i in cart if not i.matches(product_id, variant_name, size, pack_id)]
            )
            return None
        line = None
        for item in cart:
            if item.matches(product_id, variant_name, size, pack_id):
                item.quantity = quantity
                line = item
        return line


def clear_cart(store: AppStore) -> None:
    with store.transaction():
        store.set_active_cart([])


# ============================================================================
# CHECKOUT
# ============================================================================


def _sale_items(items: list[CartItem], by_id: dict[str, Product]) -> tuple[SaleRecordItem, ...]:
    lines = []
    for item in items:
        product = by_id.get(item.product_id)
        pack = product.find_pack(item.pack_id) if product else None
        lines.append(
            SaleRecordItem(
                product_id=item.product_id,
                product_name=product.name if product else "",
                variant_name=item.variant_name,
                size=item.size,
                pack_name=pack.name if pack else None,
                quantity=item.quantity,
                price_per_unit=unit_price(item, by_id),
            )
        )
    return tuple(lines)


def _commission_rate_for(seller: User, creator_id: str) -> float:
    if seller.role == UserRole.SALES_REP and seller.company_id == creator_id:
        return seller.commission_rate or 0
    return 0


def checkout(
    store: AppStore, creator_id: str, items: Optional[list[CartItem]] = None
) -> SaleRecord:
    """Record a sale for one creator's lines and clear them from the cart.

    Commission is earned only by a sales rep on the creator's own team.
    """
    user = require_current_user(store)
    state = store.state
    if items is None:
        items = _creator_lines(store, creator_id)
    if not items:
        raise InvalidOperation("No items to check out")

    by_id = _product_map(state.all_products)
    subtotal = compute_subtotal(items, state.all_products)
    record = SaleRecord(
        id=new_id("sale"),
        salesperson_id=user.id,
        brand_owner_id=creator_id,
        items=_sale_items(items, by_id),
        total_amount=subtotal,
        commission_amount=percentage_of(subtotal, _commission_rate_for(user, creator_id)),
        timestamp=utc_now(),
    )

    with store.transaction():
        state.all_sales.insert(0, record)
        for item in items:
            product = by_id.get(item.product_id)
            if product is not None:
                product.sales_count += item.quantity
        state.cart = [
            i
            for i in state.cart
            if (p := by_id.get(i.product_id)) is None or p.creator.id != creator_id
        ]

    logger.info(
        "Checkout completed",
        extra={
            "extra_fields": {
                "sale_id": record.id,
                "brand_owner_id": creator_id,
                "total_amount": record.total_amount,
                "commission_amount": record.commission_amount,
            }
        },
    )
    return record


# ============================================================================
# PRE-ORDERS
# ============================================================================


def build_pre_order_payload(
    store: AppStore,
    creator_id: str,
    items: Optional[list[CartItem]] = None,
    salesperson_id: Optional[str] = None,
) -> PreOrderPayload:
    """Snapshot the creator's lines as an order form sent through chat."""
    user = require_current_user(store)
    salesperson = store.find_user(salesperson_id) if salesperson_id else user
    if salesperson is None:
        raise EntityNotFound(f"User {salesperson_id} not found")
    if items is None:
        items = _creator_lines(store, creator_id)

    by_id = _product_map(store.state.all_products)
    lines = []
    for item in items:
        product = by_id.get(item.product_id)
        if product is None:
            continue
        variant = product.find_variant(item.variant_name)
        pack = product.find_pack(item.pack_id)
        lines.append(
            PreOrderItem(
                product_id=product.id,
                variant_name=item.variant_name,
                size=item.size,
                pack_id=item.pack_id,
                pack_name=pack.name if pack else None,
                quantity=item.quantity,
                price=unit_price(item, by_id),
                name=product.name,
                image_url=variant.media_url if variant else "",
            )
        )
    if not lines:
        raise InvalidOperation("No items for the pre-order")

    return PreOrderPayload(
        items=lines,
        subtotal=sum(line.price * line.quantity for line in lines),
        salesperson_id=salesperson.id,
        salesperson_name=salesperson.username,
    )


def _general_chat(store: AppStore, user_id: str, creator_id: str) -> Optional[Chat]:
    return next(
        (
            c
            for c in store.state.all_chats
            if c.has_participant(user_id)
            and c.has_participant(creator_id)
            and not c.product_id
        ),
        None,
    )


def send_pre_order(
    store: AppStore, creator_id: str, payload: PreOrderPayload
) -> PreOrderMessage:
    """Send (or re-send, when editing) a pre-order form to the creator.

    A rep-attributed order also books a sale at the rep's commission rate.
    The ordered lines leave the cart and the chat opens.
    """
    user = require_current_user(store)
    state = store.state
    if not store.find_user(creator_id):
        raise EntityNotFound(f"User {creator_id} not found")
    now = to_iso(utc_now())
    editing = store.editing_pre_order
    if editing is not None:
        target_chat = state.find_chat(editing.chat_id)
        target_message = target_chat.find_message(editing.message_id) if target_chat else None
        if target_message is None:
            raise EntityNotFound(f"Pre-order message {editing.message_id} not found")

    with store.transaction():
        chat = _general_chat(store, user.id, creator_id)
        if chat is None:
            chat = Chat(id=new_id("chat"), participant_ids=[user.id, creator_id])
            state.all_chats.insert(0, chat)

        if editing is not None:
            message = PreOrderMessage(
                id=target_message.id,
                text=f"UPDATED Pre-Order Form - {len(payload.items)} items",
                sender_id=user.id,
                timestamp=now,
                payload=payload,
            )
            index = target_chat.messages.index(target_message)
            target_chat.messages[index] = message
        else:
            message = PreOrderMessage(
                id=new_id("msg"),
                text=f"Pre-Order Form - {len(payload.items)} items",
                sender_id=user.id,
                timestamp=now,
                payload=payload,
            )
            chat.messages.append(message)
            state.all_chats.remove(chat)
            state.all_chats.insert(0, chat)

        store.editing_pre_order = None

        salesperson = store.find_user(payload.salesperson_id)
        if salesperson is not None and salesperson.role == UserRole.SALES_REP:
            state.all_sales.insert(
                0,
                SaleRecord(
                    id=new_id("sale"),
                    salesperson_id=salesperson.id,
                    brand_owner_id=creator_id,
                    items=tuple(
                        SaleRecordItem(
                            product_id=i.product_id,
                            product_name=i.name,
                            variant_name=i.variant_name,
                            size=i.size,
                            pack_name=i.pack_name,
                            quantity=i.quantity,
                            price_per_unit=i.price,
                        )
                        for i in payload.items
                    ),
                    total_amount=payload.subtotal,
                    commission_amount=percentage_of(
                        payload.subtotal, salesperson.commission_rate or 0
                    ),
                    timestamp=utc_now(),
                ),
            )

        for ordered in payload.items:
            update_quantity(
                store, ordered.product_id, ordered.variant_name, 0, ordered.size, ordered.pack_id
            )

        store.navigation.push(ViewTag.CHAT, {"chatId": chat.id, "otherUserId": creator_id})

    logger.info(
        "Pre-order sent",
        extra={
            "extra_fields": {
                "chat_id": chat.id,
                "message_id": message.id,
                "edited": editing is not None,
                "subtotal": payload.subtotal,
            }
        },
    )
    return message


def edit_pre_order(
    store: AppStore, chat_id: str, message_id: str, creator_id: Optional[str] = None
) -> list[CartItem]:
    """Load a sent pre-order back into the cart for editing.

    Lines from other creators stay; the creator's lines are replaced by the
    pre-order's items.
    """
    require_current_user(store)
    state = store.state
    chat = state.find_chat(chat_id)
    message = chat.find_message(message_id) if chat else None
    if message is None:
        raise EntityNotFound(f"Message {message_id} not found")
    if message.type != MessageType.PRE_ORDER:
        raise InvalidOperation("Only pre-order messages can be edited")

    by_id = _product_map(state.all_products)
    if creator_id is None:
        first = by_id.get(message.payload.items[0].product_id) if message.payload.items else None
        creator_id = first.creator.id if first else next(
            (pid for pid in chat.participant_ids if pid != message.sender_id),
            chat.participant_ids[-1],
        )

    with store.transaction():
        other_lines = [
            i
            for i in state.cart
            if (p := by_id.get(i.product_id)) is None or p.creator.id != creator_id
        ]
        state.cart = other_lines + [
            CartItem(
                product_id=i.product_id,
                variant_name=i.variant_name,
                size=None if i.pack_id else i.size,
                pack_id=i.pack_id,
                quantity=i.quantity,
            )
            for i in message.payload.items
        ]
        store.editing_pre_order = PreOrderEditContext(
            chat_id=chat_id, message_id=message_id, creator_id=creator_id
        )
        store.navigation.push(ViewTag.BASKET)
    return state.cart
