"""Request bodies accepted by the deck API.

Business validation (price rules, discount bounds, duplicate contacts) lives in
the service layer so the same rules apply to Python callers and HTTP callers.
"""

from typing import Any, Optional

from pydantic import Field, field_validator
from services.deck_service.models import Language, UserRole, ViewTag
from services.deck_service.schemas.base import CamelModel
from services.deck_service.schemas.catalog import Fabric, MediaVariant
from services.deck_service.schemas.chat import MessageContent
from services.deck_service.schemas.commerce import CartItem
from services.deck_service.schemas.users import Address, Contact, SizeGuide

# ============================================================================
# SESSION
# ============================================================================


class LoginRequest(CamelModel):
    identifier: str
    password: str


class RegisterRequest(CamelModel):
    username: str
    password: str
    role: UserRole = UserRole.CUSTOMER
    email: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("role")
    @classmethod
    def not_sales_rep(cls, v: UserRole) -> UserRole:
        if v == UserRole.SALES_REP:
            raise ValueError("Sales reps join through a brand owner's team")
        return v


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str


class ResetPasswordRequest(CamelModel):
    identifier: str
    new_password: str


class ProfileUpdate(CamelModel):
    username: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    original_avatar_url: Optional[str] = None
    contact: Optional[Contact] = None
    address: Optional[Address] = None


class SettingsUpdate(CamelModel):
    language: Optional[Language] = None
    voice_messages_enabled: Optional[bool] = None
    payment_provider_id: Optional[str] = None


class LanguageRequest(CamelModel):
    language: Language


# ============================================================================
# NAVIGATION
# ============================================================================


class NavigateRequest(CamelModel):
    view: ViewTag
    props: dict[str, Any] = Field(default_factory=dict)


class ResetViewRequest(CamelModel):
    view: ViewTag


class ProductFocusRequest(CamelModel):
    product_id: str
    variant_name: Optional[str] = None


# ============================================================================
# CART
# ============================================================================


class AddToCartRequest(CamelModel):
    product_id: str
    variant_name: str
    size: Optional[str] = None
    pack_id: Optional[str] = None
    special_price: Optional[float] = None


class UpdateQuantityRequest(CamelModel):
    product_id: str
    variant_name: str
    quantity: int
    size: Optional[str] = None
    pack_id: Optional[str] = None


class CheckoutRequest(CamelModel):
    creator_id: str
    # Defaults to the creator's lines in the active cart.
    items: Optional[list[CartItem]] = None


class PreOrderRequest(CamelModel):
    creator_id: str
    salesperson_id: Optional[str] = None
    items: Optional[list[CartItem]] = None


# ============================================================================
# CATALOG
# ============================================================================


class PackInput(CamelModel):
    id: Optional[str] = None
    name: str = ""
    contents: dict[str, int] = Field(default_factory=dict)
    price: Optional[float] = None


class ProductCreate(CamelModel):
    name: str = ""
    price: Optional[float] = None
    original_price: Optional[float] = None
    description: str = ""
    fabric: Optional[Fabric] = None
    variants: list[MediaVariant] = Field(default_factory=list)
    sizes: Optional[list[str]] = None
    size_guide: Optional[SizeGuide] = None
    shop_the_look_product_ids: Optional[list[str]] = None
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    is_wholesale: bool = False
    packs: Optional[list[PackInput]] = None


class DeckCreate(CamelModel):
    name: str
    media_urls: list[str] = Field(default_factory=list)
    products: list[ProductCreate] = Field(default_factory=list)


class DeckUpdate(CamelModel):
    name: Optional[str] = None
    media_urls: Optional[list[str]] = None
    product_ids: Optional[list[str]] = None


class SizeGuideTemplateSave(CamelModel):
    id: Optional[str] = None
    name: str
    size_guide: SizeGuide


class PackTemplateSave(CamelModel):
    id: Optional[str] = None
    name: str
    contents: dict[str, int] = Field(default_factory=dict)


# ============================================================================
# CHATS
# ============================================================================


class OpenChatRequest(CamelModel):
    other_user_id: str
    product_id: Optional[str] = None


class SendMessageRequest(CamelModel):
    content: MessageContent


class TranslateRequest(CamelModel):
    text: str
    target_language: Language
    source_language: Optional[Language] = None


# ============================================================================
# LIVE
# ============================================================================


class StreamCreate(CamelModel):
    title: str
    thumbnail_url: str = ""
    product_ids: list[str] = Field(default_factory=list)
    scheduled_at: Optional[str] = None


class CommentCreate(CamelModel):
    text: str = Field(..., min_length=1)


class DiscountRequest(CamelModel):
    product_id: str
    discount_percentage: float
    duration_minutes: float


class PinRequest(CamelModel):
    index: Optional[int] = None


# ============================================================================
# TEAM
# ============================================================================


class TeamMemberRequest(CamelModel):
    member_id: str


class CommissionRateRequest(CamelModel):
    rate: float
