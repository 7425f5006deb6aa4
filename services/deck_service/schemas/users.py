"""User, deck and template schemas."""

from typing import Optional

from pydantic import Field, model_validator
from services.deck_service.models import Language, UserRole
from services.deck_service.schemas.base import CamelModel

DEFAULT_MAPS_URL = "https://www.google.com/maps"

# Fields never exposed outside the state tree.
CREDENTIAL_FIELDS = {"password_hash", "password_salt"}


class Contact(CamelModel):
    email: str = ""
    phone: str = ""


class Address(CamelModel):
    google_maps_url: str = DEFAULT_MAPS_URL


class SizeGuide(CamelModel):
    headers: list[str] = Field(default_factory=list)
    measurements: dict[str, list[str]] = Field(default_factory=dict)


class SizeGuideTemplate(CamelModel):
    id: str
    name: str
    size_guide: SizeGuide


class ProductPackTemplate(CamelModel):
    id: str
    name: str
    contents: dict[str, int] = Field(default_factory=dict)


class Deck(CamelModel):
    id: str
    name: str
    media_urls: list[str] = Field(default_factory=list)
    product_ids: list[str] = Field(default_factory=list)
    product_count: int = 0

    @model_validator(mode="after")
    def sync_product_count(self) -> "Deck":
        self.product_count = len(self.product_ids)
        return self

    def set_product_ids(self, product_ids: list[str]) -> None:
        self.product_ids = list(product_ids)
        self.product_count = len(self.product_ids)


class UserSummary(CamelModel):
    """Denormalised creator snapshot embedded in products and notifications."""

    id: str
    username: str
    avatar_url: str = ""


class User(UserSummary):
    bio: str = ""
    decks: list[Deck] = Field(default_factory=list)
    contact: Contact = Field(default_factory=Contact)
    address: Address = Field(default_factory=Address)
    password_hash: str = ""
    password_salt: str = ""
    original_avatar_url: Optional[str] = None
    following_ids: list[str] = Field(default_factory=list)
    follower_ids: list[str] = Field(default_factory=list)
    size_guide_templates: list[SizeGuideTemplate] = Field(default_factory=list)
    pack_templates: list[ProductPackTemplate] = Field(default_factory=list)
    role: UserRole = UserRole.CUSTOMER
    company_id: Optional[str] = None
    team_member_ids: list[str] = Field(default_factory=list)
    language: Optional[Language] = None
    commission_rate: Optional[float] = None
    payment_provider_id: Optional[str] = None
    voice_messages_enabled: bool = False

    def summary(self) -> UserSummary:
        return UserSummary(id=self.id, username=self.username, avatar_url=self.avatar_url)

    def find_deck(self, deck_id: str) -> Optional[Deck]:
        return next((d for d in self.decks if d.id == deck_id), None)

    def public_dict(self) -> dict:
        """camelCase dict without credential fields."""
        return self.to_camel_dict(exclude=CREDENTIAL_FIELDS)
