"""Root application state tree."""

from typing import Optional

from pydantic import Field
from services.deck_service.models import Language
from services.deck_service.schemas.base import CamelModel, OrderedIdSet
from services.deck_service.schemas.catalog import Product
from services.deck_service.schemas.chat import Chat
from services.deck_service.schemas.commerce import CartItem, SaleRecord
from services.deck_service.schemas.live import LiveStream
from services.deck_service.schemas.notifications import Notification
from services.deck_service.schemas.users import User


class AppState(CamelModel):
    """Everything that survives a reload.

    ``current_user_id`` is the session pointer; the codec writes the full
    ``currentUser`` object and resolves it back to an id on load.
    """

    all_users: list[User] = Field(default_factory=list)
    all_products: list[Product] = Field(default_factory=list)
    all_chats: list[Chat] = Field(default_factory=list)
    all_sales: list[SaleRecord] = Field(default_factory=list)
    all_live_streams: list[LiveStream] = Field(default_factory=list)
    current_user_id: Optional[str] = Field(None, exclude=True)
    cart: list[CartItem] = Field(default_factory=list)
    notifications: list[Notification] = Field(default_factory=list)
    liked_product_ids: OrderedIdSet = Field(default_factory=OrderedIdSet)
    saved_product_ids: OrderedIdSet = Field(default_factory=OrderedIdSet)
    archived_chat_ids: OrderedIdSet = Field(default_factory=OrderedIdSet)
    language: Language = Language.EN
    last_viewed_product_id: Optional[str] = None
    live_stream_context_id: Optional[str] = None

    @property
    def current_user(self) -> Optional[User]:
        if not self.current_user_id:
            return None
        return self.find_user(self.current_user_id)

    def find_user(self, user_id: Optional[str]) -> Optional[User]:
        return next((u for u in self.all_users if u.id == user_id), None)

    def find_product(self, product_id: Optional[str]) -> Optional[Product]:
        return next((p for p in self.all_products if p.id == product_id), None)

    def find_chat(self, chat_id: Optional[str]) -> Optional[Chat]:
        return next((c for c in self.all_chats if c.id == chat_id), None)

    def find_stream(self, stream_id: Optional[str]) -> Optional[LiveStream]:
        return next((s for s in self.all_live_streams if s.id == stream_id), None)
