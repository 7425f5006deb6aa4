"""Cart, pre-order and sale record schemas."""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field, model_validator
from services.deck_service.schemas.base import CamelModel


class CartItem(CamelModel):
    product_id: str
    variant_name: str
    quantity: int = Field(1, ge=1)
    size: Optional[str] = None
    pack_id: Optional[str] = None
    special_price: Optional[float] = None

    @model_validator(mode="after")
    def check_size_or_pack(self) -> "CartItem":
        if self.size is not None and self.pack_id is not None:
            raise ValueError("A cart line is either a size or a pack, not both")
        return self

    def matches(
        self,
        product_id: str,
        variant_name: str,
        size: Optional[str] = None,
        pack_id: Optional[str] = None,
    ) -> bool:
        """Identity key: (product, variant, pack when given else size)."""
        if self.product_id != product_id or self.variant_name != variant_name:
            return False
        if pack_id:
            return self.pack_id == pack_id
        return self.size == size


class PreOrderItem(CamelModel):
    product_id: str
    variant_name: str
    size: Optional[str] = None
    pack_id: Optional[str] = None
    pack_name: Optional[str] = None
    quantity: int = Field(..., ge=1)
    price: float
    name: str
    image_url: str = ""


class PreOrderPayload(CamelModel):
    items: list[PreOrderItem]
    subtotal: float
    salesperson_id: str
    salesperson_name: str


class PreOrderEditContext(CamelModel):
    """The pre-order message being rewritten by the basket."""

    chat_id: str
    message_id: str
    creator_id: str


class SaleRecordItem(CamelModel):
    """Price snapshot; never a live reference to the product."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    product_name: str
    variant_name: str
    size: Optional[str] = None
    pack_name: Optional[str] = None
    quantity: int
    price_per_unit: float


class SaleRecord(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    salesperson_id: str
    brand_owner_id: str
    items: tuple[SaleRecordItem, ...]
    total_amount: float
    commission_amount: float
    timestamp: datetime

    @property
    def items_sold(self) -> int:
        return sum(item.quantity for item in self.items)
