"""Shareable links for profiles, decks and products."""

from typing import NamedTuple, Optional
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from libs.common.config import get_settings
from services.deck_service.errors import EntityNotFound
from services.deck_service.schemas import Product
from services.deck_service.services.session_service import require_current_user
from services.deck_service.store import AppStore

DEEP_LINK_PARAMS = ("userId", "deckId", "productId")


class ShareLink(NamedTuple):
    title: str
    text: str
    url: str


def build_share_url(base_url: Optional[str] = None, **params: Optional[str]) -> str:
    """The base URL with its query replaced by the non-empty ``params``."""
    base_url = base_url or get_settings().PUBLIC_BASE_URL
    scheme, netloc, path, _, _ = urlsplit(base_url)
    query = urlencode({k: v for k, v in params.items() if v})
    return urlunsplit((scheme, netloc, path, query, ""))


def parse_deep_link(query: str) -> dict[str, Optional[str]]:
    """Pull ``userId``/``deckId``/``productId`` out of a query string or URL."""
    if "?" in query:
        query = urlsplit(query).query
    values = parse_qs(query.lstrip("?"))
    return {name: (values.get(name) or [None])[0] for name in DEEP_LINK_PARAMS}


def share_profile(store: AppStore, user_id: str, base_url: Optional[str] = None) -> ShareLink:
    user = store.find_user(user_id)
    if user is None:
        raise EntityNotFound(f"User {user_id} not found")
    return ShareLink(
        title=f"{user.username}'s Profile",
        text=f"Check out {user.username}'s collections on Deck!",
        url=build_share_url(base_url, userId=user.id),
    )


def share_deck(store: AppStore, deck_id: str, base_url: Optional[str] = None) -> ShareLink:
    """Decks are shared by their owner, so the deck must belong to the current user."""
    user = require_current_user(store)
    deck = user.find_deck(deck_id)
    if deck is None:
        raise EntityNotFound(f"Deck {deck_id} not found")
    return ShareLink(
        title=f"{deck.name} by {user.username}",
        text=f'Check out the "{deck.name}" collection on Deck!',
        url=build_share_url(base_url, userId=user.id, deckId=deck.id),
    )


def share_product(product: Product, base_url: Optional[str] = None) -> ShareLink:
    return ShareLink(
        title=product.name,
        text=f"Check out this product on Deck: {product.name} by {product.creator.username}",
        url=build_share_url(base_url, productId=product.id),
    )
