"""Products, decks and the brand's authoring templates."""

from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.deck_service.errors import (
    EntityNotFound,
    InvalidOperation,
    InvalidProduct,
    PermissionDenied,
)
from services.deck_service.models import LinkType
from services.deck_service.schemas import (
    Deck,
    Fabric,
    Product,
    ProductPack,
    ProductPackTemplate,
    SizeGuide,
    SizeGuideTemplate,
    User,
    new_id,
)
from services.deck_service.schemas.requests import (
    DeckCreate,
    DeckUpdate,
    PackInput,
    ProductCreate,
)
from services.deck_service.services.session_service import (
    can_sell,
    require_current_user,
)
from services.deck_service.services.social_service import fanout_on_publish
from services.deck_service.store import AppStore

logger = get_logger(__name__)


# ============================================================================
# VALIDATION
# ============================================================================


def _pack_total(pack: PackInput) -> int:
    return sum(q for q in pack.contents.values() if q > 0)


def validate_product_input(data: ProductCreate) -> list[str]:
    """Every problem with the form, in the order the editor lists them."""
    errors: list[str] = []
    if not data.name.strip():
        errors.append("Product name is required.")
    if not data.is_wholesale and (data.price is None or data.price < 0):
        errors.append("A valid price is required.")
    if data.is_wholesale:
        if not data.packs:
            errors.append("Please define at least one pack for wholesale.")
        for i, pack in enumerate(data.packs or [], start=1):
            if not pack.name.strip():
                errors.append(f"Pack #{i} needs a name.")
            if pack.price is None or pack.price < 0:
                errors.append(f"Pack #{i} needs a valid price.")
            if _pack_total(pack) == 0:
                errors.append(f"Pack #{i} must contain at least one item.")
    if not data.variants:
        errors.append("Please add at least one product variant.")
    for i, variant in enumerate(data.variants, start=1):
        if not variant.name.strip():
            errors.append(f"Variant #{i} needs a name.")
        if not variant.media_url:
            errors.append(f"Variant #{i} needs an image or video.")
    return errors


def _build_packs(data: ProductCreate) -> Optional[list[ProductPack]]:
    if not data.is_wholesale:
        return None
    packs = []
    for pack in data.packs or []:
        contents = {size: qty for size, qty in pack.contents.items() if qty > 0}
        packs.append(
            ProductPack(
                id=pack.id or new_id("pack"),
                name=pack.name.strip(),
                contents=contents,
                total_quantity=sum(contents.values()),
                price=pack.price,
            )
        )
    return packs


def _product_fields(data: ProductCreate) -> dict:
    errors = validate_product_input(data)
    if errors:
        raise InvalidProduct("; ".join(errors))
    tags = sorted({t.strip().lower() for t in data.tags or [] if t.strip()})
    return dict(
        name=data.name.strip(),
        price=data.price or 0.0,
        original_price=data.original_price or None,
        description=data.description,
        fabric=data.fabric or Fabric(),
        variants=data.variants,
        sizes=[s.strip().upper() for s in data.sizes] if data.sizes else None,
        size_guide=data.size_guide,
        shop_the_look_product_ids=data.shop_the_look_product_ids,
        category=data.category or None,
        tags=tags or None,
        is_wholesale=data.is_wholesale,
        packs=_build_packs(data),
    )


def _require_seller(store: AppStore) -> User:
    user = require_current_user(store)
    if not can_sell(user):
        raise PermissionDenied("Only brands and sales reps can publish products")
    return user


def _get_owned_product(store: AppStore, product_id: str) -> Product:
    user = require_current_user(store)
    product = store.find_product(product_id)
    if product is None:
        raise EntityNotFound(f"Product {product_id} not found")
    if product.creator.id != user.id:
        raise PermissionDenied("Only the creator can change this product")
    return product


# ============================================================================
# PRODUCTS
# ============================================================================


def create_product(store: AppStore, data: ProductCreate) -> Product:
    """Publish a product and notify the creator's followers."""
    user = _require_seller(store)
    product = Product(
        id=new_id("prod"),
        creator=user.summary(),
        created_at=utc_now(),
        **_product_fields(data),
    )
    with store.transaction():
        store.state.all_products.insert(0, product)
        fanout_on_publish(
            store,
            user,
            LinkType.PRODUCT,
            product.id,
            f"added a new product: {product.name}",
            variant_name=product.variants[0].name,
        )
    logger.info("Product %s created by %s", product.id, user.id)
    return product


def update_product(store: AppStore, product_id: str, data: ProductCreate) -> Product:
    """Replace the editable fields; identity, creator and counters are kept."""
    product = _get_owned_product(store, product_id)
    updated = Product.model_validate({**product.model_dump(), **_product_fields(data)})

    with store.transaction():
        products = store.state.all_products
        products[products.index(product)] = updated
    return updated


def toggle_featured(store: AppStore, product_id: str) -> bool:
    product = _get_owned_product(store, product_id)
    with store.transaction():
        product.is_featured = not product.is_featured
    return product.is_featured


def record_product_view(store: AppStore, product_id: str) -> int:
    product = store.find_product(product_id)
    if product is None:
        raise EntityNotFound(f"Product {product_id} not found")
    with store.transaction():
        product.view_count += 1
    return product.view_count


def feed_products(store: AppStore) -> list[Product]:
    """The feed, restricted to one creator while a creator filter is set."""
    creator_id = store.filtered_creator_id
    products = store.state.all_products
    if creator_id:
        return [p for p in products if p.creator.id == creator_id]
    return list(products)


def products_by_creator(store: AppStore, creator_id: str) -> list[Product]:
    return [p for p in store.state.all_products if p.creator.id == creator_id]


# ============================================================================
# DECKS
# ============================================================================


def create_deck(store: AppStore, data: DeckCreate) -> Deck:
    """Create the deck's products, then the deck; followers hear about the deck."""
    user = _require_seller(store)
    if not data.name.strip():
        raise InvalidOperation("A deck needs a name")

    now = utc_now()
    summary = user.summary()
    products = [
        Product(id=new_id("prod"), creator=summary, created_at=now, **_product_fields(p))
        for p in data.products
    ]
    deck = Deck(
        id=new_id("deck"),
        name=data.name.strip(),
        media_urls=list(data.media_urls),
        product_ids=[p.id for p in products],
    )

    with store.transaction():
        store.state.all_products = products + store.state.all_products
        user.decks.append(deck)
        fanout_on_publish(
            store,
            user,
            LinkType.DECK,
            deck.id,
            f"published a new collection: {deck.name}",
        )
        store.navigation.pop()

    logger.info(
        "Deck %s created",
        deck.id,
        extra={"extra_fields": {"owner_id": user.id, "product_count": deck.product_count}},
    )
    return deck


def _get_own_deck(store: AppStore, deck_id: str) -> tuple[User, Deck]:
    user = require_current_user(store)
    deck = user.find_deck(deck_id)
    if deck is None:
        raise EntityNotFound(f"Deck {deck_id} not found")
    return user, deck


def update_deck(store: AppStore, deck_id: str, data: DeckUpdate) -> Deck:
    _, deck = _get_own_deck(store, deck_id)
    if data.product_ids is not None:
        missing = [pid for pid in data.product_ids if store.find_product(pid) is None]
        if missing:
            raise EntityNotFound(f"Unknown products: {', '.join(missing)}")

    with store.transaction():
        if data.name is not None:
            deck.name = data.name
        if data.media_urls is not None:
            deck.media_urls = list(data.media_urls)
        if data.product_ids is not None:
            deck.set_product_ids(data.product_ids)
        store.navigation.pop()
    return deck


def delete_deck(store: AppStore, deck_id: str) -> None:
    user, deck = _get_own_deck(store, deck_id)
    with store.transaction():
        user.decks.remove(deck)
    logger.info("Deck %s deleted by %s", deck_id, user.id)


# ============================================================================
# TEMPLATES
# ============================================================================


def save_size_guide_template(
    store: AppStore, name: str, size_guide: SizeGuide, template_id: Optional[str] = None
) -> SizeGuideTemplate:
    """Create a template, or edit the one with ``template_id``."""
    user = require_current_user(store)
    with store.transaction():
        if template_id:
            template = next((t for t in user.size_guide_templates if t.id == template_id), None)
            if template is None:
                raise EntityNotFound(f"Template {template_id} not found")
            template.name = name
            template.size_guide = size_guide
        else:
            template = SizeGuideTemplate(id=new_id("sgt"), name=name, size_guide=size_guide)
            user.size_guide_templates.append(template)
    return template


def delete_size_guide_template(store: AppStore, template_id: str) -> None:
    user = require_current_user(store)
    with store.transaction():
        user.size_guide_templates = [
            t for t in user.size_guide_templates if t.id != template_id
        ]


def save_pack_template(
    store: AppStore,
    name: str,
    contents: dict[str, int],
    template_id: Optional[str] = None,
) -> ProductPackTemplate:
    user = require_current_user(store)
    with store.transaction():
        if template_id:
            template = next((t for t in user.pack_templates if t.id == template_id), None)
            if template is None:
                raise EntityNotFound(f"Template {template_id} not found")
            template.name = name
            template.contents = dict(contents)
        else:
            template = ProductPackTemplate(id=new_id("ppt"), name=name, contents=dict(contents))
            user.pack_templates.append(template)
    return template


def delete_pack_template(store: AppStore, template_id: str) -> None:
    user = require_current_user(store)
    with store.transaction():
        user.pack_templates = [t for t in user.pack_templates if t.id != template_id]
