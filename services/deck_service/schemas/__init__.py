"""Deck service schemas package."""

from services.deck_service.schemas.base import CamelModel, OrderedIdSet, new_id
from services.deck_service.schemas.catalog import (
    Fabric,
    MediaVariant,
    Product,
    ProductPack,
)
from services.deck_service.schemas.chat import (
    AudioContent,
    AudioMessage,
    AudioPayload,
    Chat,
    ChatMessage,
    MessageContent,
    PreOrderMessage,
    TextContent,
    TextMessage,
)
from services.deck_service.schemas.creative import (
    AssistantAction,
    AssistantMessage,
    AssistantReply,
    AssistantRequest,
    SceneImageRequest,
    SceneVideoRequest,
    VideoScene,
    VideoScriptRequest,
)
from services.deck_service.schemas.commerce import (
    CartItem,
    PreOrderEditContext,
    PreOrderItem,
    PreOrderPayload,
    SaleRecord,
    SaleRecordItem,
)
from services.deck_service.schemas.live import ActiveDiscount, LiveComment, LiveStream
from services.deck_service.schemas.notifications import Notification, NotificationLink
from services.deck_service.schemas.reports import (
    ProductSales,
    RepSales,
    SalesReport,
    SalesTotals,
)
from services.deck_service.schemas.state import AppState
from services.deck_service.schemas.users import (
    Address,
    Contact,
    Deck,
    ProductPackTemplate,
    SizeGuide,
    SizeGuideTemplate,
    User,
    UserSummary,
)

__all__ = [
    "ActiveDiscount",
    "Address",
    "AppState",
    "AssistantAction",
    "AssistantMessage",
    "AssistantReply",
    "AssistantRequest",
    "AudioContent",
    "AudioMessage",
    "AudioPayload",
    "CamelModel",
    "CartItem",
    "Chat",
    "ChatMessage",
    "Contact",
    "Deck",
    "Fabric",
    "LiveComment",
    "LiveStream",
    "MediaVariant",
    "MessageContent",
    "Notification",
    "NotificationLink",
    "OrderedIdSet",
    "PreOrderEditContext",
    "PreOrderItem",
    "PreOrderMessage",
    "PreOrderPayload",
    "Product",
    "ProductPack",
    "ProductPackTemplate",
    "ProductSales",
    "RepSales",
    "SaleRecord",
    "SaleRecordItem",
    "SalesReport",
    "SalesTotals",
    "SceneImageRequest",
    "SceneVideoRequest",
    "SizeGuide",
    "SizeGuideTemplate",
    "TextContent",
    "TextMessage",
    "User",
    "UserSummary",
    "VideoScene",
    "VideoScriptRequest",
    "new_id",
]
