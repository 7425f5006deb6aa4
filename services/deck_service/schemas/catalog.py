"""Product catalog schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator
from services.deck_service.models import MediaType
from services.deck_service.schemas.base import CamelModel
from services.deck_service.schemas.users import SizeGuide, UserSummary


class MediaVariant(CamelModel):
    name: str
    color: str = ""
    media_url: str = ""
    media_type: MediaType = MediaType.IMAGE


class Fabric(CamelModel):
    name: str = "Not specified"
    description: str = "A high-quality fabric."
    close_up_image_url: Optional[str] = None
    movement_video_url: Optional[str] = None


class ProductPack(CamelModel):
    """Wholesale bundle: quantities per size sold at one bundle price."""

    id: str
    name: str
    contents: dict[str, int] = Field(default_factory=dict)
    total_quantity: int = 0
    price: float = Field(..., ge=0)

    @model_validator(mode="after")
    def check_total_quantity(self) -> "ProductPack":
        if self.total_quantity != sum(self.contents.values()):
            raise ValueError(
                f"Pack {self.id} total quantity {self.total_quantity} does not match its contents"
            )
        return self


class Product(CamelModel):
    id: str
    name: str
    price: float = Field(0.0, ge=0)
    original_price: Optional[float] = None
    description: str = ""
    fabric: Fabric = Field(default_factory=Fabric)
    variants: list[MediaVariant]
    creator: UserSummary
    sizes: Optional[list[str]] = None
    size_guide: Optional[SizeGuide] = None
    shop_the_look_product_ids: Optional[list[str]] = None
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    is_featured: bool = False
    is_wholesale: bool = False
    packs: Optional[list[ProductPack]] = None
    view_count: int = 0
    sales_count: int = 0
    created_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_invariants(self) -> "Product":
        if not self.variants:
            raise ValueError("A product needs at least one variant")
        if self.is_wholesale and not self.packs:
            raise ValueError("A wholesale product needs at least one pack")
        return self

    def find_pack(self, pack_id: Optional[str]) -> Optional[ProductPack]:
        if not pack_id or not self.packs:
            return None
        return next((p for p in self.packs if p.id == pack_id), None)

    def find_variant(self, variant_name: str) -> Optional[MediaVariant]:
        return next((v for v in self.variants if v.name == variant_name), None)
