"""Stack-based view router.

The stack holds ``ViewFrame`` entries; the last frame is the active view and
the stack is never empty. ``NavigationStack`` is pure bookkeeping; the
module-level helpers below apply the app's navigation rules against a store
(public shared-link mode, the pre-order edit context, the live-stream context).
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from libs.common.logging import get_logger
from services.deck_service.errors import EntityNotFound
from services.deck_service.models import UserRole, ViewTag

if TYPE_CHECKING:
    from services.deck_service.store import AppStore

logger = get_logger(__name__)


@dataclass
class ViewFrame:
    view: ViewTag
    props: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"view": self.view.value, "props": dict(self.props)}


@dataclass
class ProductFocus:
    """Product (and variant) the feed should scroll to on its next render."""

    product_id: str
    variant_name: Optional[str] = None


class NavigationStack:
    def __init__(self, root: ViewTag = ViewTag.FEED):
        self._frames: list[ViewFrame] = [ViewFrame(root)]

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def frames(self) -> tuple[ViewFrame, ...]:
        return tuple(self._frames)

    @property
    def current(self) -> ViewFrame:
        return self._frames[-1]

    def push(self, view: ViewTag, props: Optional[dict[str, Any]] = None) -> ViewFrame:
        frame = ViewFrame(view, dict(props or {}))
        self._frames.append(frame)
        return frame

    def pop(self) -> Optional[ViewFrame]:
        """Drop the active frame. The root frame is never popped."""
        if len(self._frames) <= 1:
            return None
        return self._frames.pop()

    def reset_to_root(self, view: ViewTag, public_view: bool = False) -> bool:
        """Replace the stack with ``[view]``.

        No-op while a shared public link is displayed, or when ``view`` is
        already the active view. Returns whether the stack changed.
        """
        if public_view or self.current.view == view:
            return False
        self._frames = [ViewFrame(view)]
        return True

    def replace(self, frames: list[ViewFrame]) -> None:
        if not frames:
            raise ValueError("Navigation stack cannot be empty")
        self._frames = list(frames)

    def snapshot(self) -> list[ViewFrame]:
        return [ViewFrame(f.view, dict(f.props)) for f in self._frames]

    def to_list(self) -> list[dict]:
        return [f.to_dict() for f in self._frames]


# ---------------------------------------------------------------------------
# Store-level navigation
# ---------------------------------------------------------------------------


def navigate_to(
    store: "AppStore", view: ViewTag, props: Optional[dict[str, Any]] = None
) -> ViewFrame:
    with store.transaction(persist=False):
        return store.navigation.push(view, props)


def go_back(store: "AppStore") -> Optional[ViewFrame]:
    """Pop the active view; leaving the basket abandons a pre-order edit."""
    with store.transaction(persist=False):
        popped = store.navigation.pop()
        if popped is not None and popped.view == ViewTag.BASKET:
            store.editing_pre_order = None
        return popped


def reset_to_view(store: "AppStore", view: ViewTag) -> bool:
    with store.transaction(persist=False):
        return store.navigation.reset_to_root(view, public_view=store.public_view)


def apply_deep_link(
    store: "AppStore",
    user_id: Optional[str] = None,
    deck_id: Optional[str] = None,
    product_id: Optional[str] = None,
) -> bool:
    """Build the initial view from shared-link parameters, at most once.

    Ignored when a session is active, when the user has already navigated, or
    after a link was handled. Unknown ids leave everything untouched.
    """
    if store.current_user or store.deep_link_handled or len(store.navigation) > 1:
        return False

    state = store.state
    handled = False
    with store.transaction():
        if user_id:
            user = state.find_user(user_id)
            if user:
                frames = [ViewFrame(ViewTag.PUBLIC_PROFILE, {"userId": user.id})]
                if deck_id and user.find_deck(deck_id):
                    frames.append(
                        ViewFrame(ViewTag.DECK_DETAIL, {"userId": user.id, "deckId": deck_id})
                    )
                store.public_view = True
                store.navigation.replace(frames)
                handled = True
        elif product_id:
            product = state.find_product(product_id)
            if product:
                state.all_products = [product] + [
                    p for p in state.all_products if p.id != product_id
                ]
                handled = True

        if handled:
            store.deep_link_handled = True

    if handled:
        logger.info(
            "Opened shared link",
            extra={
                "extra_fields": {
                    "user_id": user_id,
                    "deck_id": deck_id,
                    "product_id": product_id,
                }
            },
        )
    return handled


def navigate_to_product(
    store: "AppStore", product_id: str, variant_name: Optional[str] = None
) -> ProductFocus:
    """Show a product in the feed, remembering it as the last viewed one."""
    if not store.state.find_product(product_id):
        raise EntityNotFound(f"Product {product_id} not found")
    with store.transaction():
        store.state.last_viewed_product_id = product_id
        store.product_to_show = ProductFocus(product_id, variant_name)
        store.navigation.reset_to_root(ViewTag.FEED, public_view=store.public_view)
    return store.product_to_show


def filter_by_creator(store: "AppStore", creator_id: str) -> Optional[str]:
    """Restrict the feed to one creator, starting at their first product."""
    first = next(
        (p for p in store.state.all_products if p.creator.id == creator_id), None
    )
    with store.transaction():
        store.filtered_creator_id = creator_id
        store.state.last_viewed_product_id = first.id if first else None
        store.navigation.reset_to_root(ViewTag.FEED, public_view=store.public_view)
    return store.state.last_viewed_product_id


def clear_creator_filter(store: "AppStore") -> None:
    with store.transaction(persist=False):
        store.filtered_creator_id = None


def open_creator_profile(store: "AppStore", creator_id: str) -> ViewFrame:
    if not store.state.find_user(creator_id):
        raise EntityNotFound(f"User {creator_id} not found")
    return navigate_to(store, ViewTag.CREATOR_PROFILE, {"userId": creator_id})


def open_deck(store: "AppStore", owner_id: str, deck_id: str) -> ViewFrame:
    """Customers browse decks as a gallery; sellers get the detail view."""
    owner = store.state.find_user(owner_id)
    if not owner or not owner.find_deck(deck_id):
        raise EntityNotFound(f"Deck {deck_id} not found")

    viewer = store.current_user
    view = (
        ViewTag.DECK_GALLERY
        if viewer and viewer.role == UserRole.CUSTOMER
        else ViewTag.DECK_DETAIL
    )
    return navigate_to(store, view, {"userId": owner_id, "deckId": deck_id})


def open_basket_from_live(store: "AppStore", stream_id: str) -> ViewFrame:
    with store.transaction():
        store.state.live_stream_context_id = stream_id
        return store.navigation.push(ViewTag.BASKET)


def return_to_live(store: "AppStore") -> Optional[ViewFrame]:
    """Reopen the stream the user left for the basket, if it still exists."""
    context_id = store.state.live_stream_context_id
    if not context_id:
        return None
    with store.transaction():
        if store.state.find_stream(context_id):
            return store.navigation.push(
                ViewTag.LIVE_STREAM_PLAYER, {"streamId": context_id}
            )
        store.state.live_stream_context_id = None
    return None


def leave_live_stream(store: "AppStore") -> Optional[ViewFrame]:
    with store.transaction():
        store.state.live_stream_context_id = None
        return go_back(store)


def nav_tab(store: "AppStore", view: ViewTag) -> bool:
    """Bottom-bar navigation; leaving a player remembers the stream."""
    with store.transaction():
        current = store.navigation.current
        if current.view == ViewTag.LIVE_STREAM_PLAYER and current.props.get("streamId"):
            store.state.live_stream_context_id = current.props["streamId"]
        return store.navigation.reset_to_root(view, public_view=store.public_view)
