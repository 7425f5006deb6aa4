"""Application state store.

``AppStore`` owns the state tree for one client session. Every mutation runs
inside ``transaction()``; when the outermost transaction exits cleanly the
snapshot is written to storage and subscribers are notified. A transaction that
raises is rolled back, so no handler ever leaves half-applied state behind.
"""

from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from libs.common.config import Settings, get_settings
from libs.common.logging import get_logger
from services.deck_service.codec import clear_state, load_state, save_state
from services.deck_service.models import Language
from services.deck_service.navigation import NavigationStack, ProductFocus
from services.deck_service.schemas import (
    AppState,
    AssistantMessage,
    CartItem,
    Chat,
    LiveStream,
    PreOrderEditContext,
    Product,
    User,
)
from services.deck_service.seed import build_seed_state
from services.deck_service.storage import KeyValueStorage, MemoryStorage

logger = get_logger(__name__)

Subscriber = Callable[["AppStore"], None]


class AppStore:
    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        key: str = "deckAppState",
        state: Optional[AppState] = None,
    ):
        self.storage = storage if storage is not None else MemoryStorage()
        self.key = key
        self.state = state if state is not None else AppState()

        # Session-only state; never persisted.
        self.navigation = NavigationStack()
        self.public_view = False
        self.public_cart: list[CartItem] = []
        self.editing_pre_order: Optional[PreOrderEditContext] = None
        self.deep_link_handled = False
        self.product_to_show: Optional[ProductFocus] = None
        self.filtered_creator_id: Optional[str] = None
        self.assistant_history: list[AssistantMessage] = []

        self._subscribers: list[Subscriber] = []
        self._depth = 0
        self._persist = True
        self.version = 0

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def current_user(self) -> Optional[User]:
        return self.state.current_user

    @property
    def active_cart(self) -> list[CartItem]:
        """Visitors on a shared link shop from a separate, unpersisted cart."""
        return self.public_cart if self.public_view else self.state.cart

    def set_active_cart(self, items: list[CartItem]) -> None:
        if self.public_view:
            self.public_cart = items
        else:
            self.state.cart = items

    def find_user(self, user_id: Optional[str]) -> Optional[User]:
        return self.state.find_user(user_id)

    def find_product(self, product_id: Optional[str]) -> Optional[Product]:
        return self.state.find_product(product_id)

    def find_chat(self, chat_id: Optional[str]) -> Optional[Chat]:
        return self.state.find_chat(chat_id)

    def find_stream(self, stream_id: Optional[str]) -> Optional[LiveStream]:
        return self.state.find_stream(stream_id)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for post-commit notification.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self)
            except Exception:
                logger.exception("State subscriber %r failed", callback)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def _snapshot(self) -> tuple:
        return (
            self.state.model_copy(deep=True),
            self.navigation.snapshot(),
            self.public_view,
            [item.model_copy() for item in self.public_cart],
            self.editing_pre_order,
            self.deep_link_handled,
            self.product_to_show,
            self.filtered_creator_id,
            list(self.assistant_history),
        )

    def _restore(self, snapshot: tuple) -> None:
        (
            self.state,
            frames,
            self.public_view,
            self.public_cart,
            self.editing_pre_order,
            self.deep_link_handled,
            self.product_to_show,
            self.filtered_creator_id,
            self.assistant_history,
        ) = snapshot
        self.navigation.replace(frames)

    @contextmanager
    def transaction(self, persist: bool = True) -> Iterator[AppState]:
        """Group mutations into one committed change.

        Nested transactions join the outermost one, whose ``persist`` flag
        decides whether the snapshot is written on commit.
        """
        outermost = self._depth == 0
        if outermost:
            snapshot = self._snapshot()
            self._persist = persist
        self._depth += 1
        try:
            yield self.state
        except BaseException:
            self._depth -= 1
            if outermost:
                self._restore(snapshot)
                logger.debug("Rolled back state transaction")
            raise
        self._depth -= 1
        if outermost:
            self._commit()

    def _commit(self) -> None:
        self.version += 1
        if self._persist:
            save_state(self.storage, self.key, self.state)
        self._notify()

    def purge(self) -> None:
        """Remove the persisted snapshot without writing a new one."""
        clear_state(self.storage, self.key)


def bootstrap_store(
    storage: KeyValueStorage, settings: Optional[Settings] = None
) -> AppStore:
    """Cold start: persisted snapshot, else seed data, else an empty tree."""
    settings = settings or get_settings()
    state = load_state(storage, settings.APP_STATE_KEY)
    if state is None:
        if settings.SEED_ON_COLD_START:
            state = build_seed_state()
            logger.info(
                "No saved state; starting from seed data",
                extra={"extra_fields": {"users": len(state.all_users)}},
            )
        else:
            state = AppState()
        state.language = Language(settings.DEFAULT_LANGUAGE)
    else:
        logger.info("Restored saved state from %s", settings.APP_STATE_KEY)
    return AppStore(storage=storage, key=settings.APP_STATE_KEY, state=state)
