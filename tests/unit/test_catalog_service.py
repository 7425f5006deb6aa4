"""Unit tests for products, decks and authoring templates."""

import pytest
from services.deck_service.errors import (
    EntityNotFound,
    InvalidOperation,
    InvalidProduct,
    PermissionDenied,
)
from services.deck_service.models import LinkType, ViewTag
from services.deck_service.schemas import SizeGuide
from services.deck_service.schemas.requests import DeckCreate, DeckUpdate, PackInput
from services.deck_service.services.catalog_service import (
    create_deck,
    create_product,
    delete_deck,
    delete_pack_template,
    delete_size_guide_template,
    feed_products,
    products_by_creator,
    record_product_view,
    save_pack_template,
    save_size_guide_template,
    toggle_featured,
    update_deck,
    update_product,
    validate_product_input,
)
from tests.factories import ProductInputFactory

# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_valid_input_has_no_errors():
    assert validate_product_input(ProductInputFactory.create()) == []


@pytest.mark.unit
def test_validation_lists_every_problem():
    data = ProductInputFactory.create(name=" ", price=None, variants=[])

    assert validate_product_input(data) == [
        "Product name is required.",
        "A valid price is required.",
        "Please add at least one product variant.",
    ]


@pytest.mark.unit
def test_wholesale_needs_valid_packs():
    data = ProductInputFactory.create(
        is_wholesale=True,
        price=None,
        packs=[PackInput(name="", contents={"S": 0}, price=None)],
    )

    assert validate_product_input(data) == [
        "Pack #1 needs a name.",
        "Pack #1 needs a valid price.",
        "Pack #1 must contain at least one item.",
    ]


@pytest.mark.unit
def test_wholesale_without_packs():
    errors = validate_product_input(ProductInputFactory.create(is_wholesale=True, packs=[]))

    assert errors == ["Please define at least one pack for wholesale."]


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_create_product_prepends_and_notifies(brand_store):
    product = create_product(
        brand_store, ProductInputFactory.create(tags=["Wool", "wool ", "Tailoring"], sizes=["s", "m"])
    )

    assert brand_store.state.all_products[0].id == product.id
    assert product.creator.id == "user1"
    assert product.tags == ["tailoring", "wool"]
    assert product.sizes == ["S", "M"]
    notification = brand_store.state.notifications[0]
    assert notification.link.type == LinkType.PRODUCT
    assert notification.link.variant_name == "Camel"
    assert notification.message == "added a new product: New Blazer"


@pytest.mark.unit
def test_create_wholesale_product_builds_packs(brand_store):
    data = ProductInputFactory.create(
        is_wholesale=True,
        packs=[PackInput(name="Starter", contents={"S": 2, "M": 0, "L": 1}, price=300.0)],
    )

    product = create_product(brand_store, data)

    pack = product.packs[0]
    assert pack.contents == {"S": 2, "L": 1}
    assert pack.total_quantity == 3
    assert pack.id.startswith("pack-")


@pytest.mark.unit
def test_invalid_product_is_rejected(brand_store):
    count = len(brand_store.state.all_products)

    with pytest.raises(InvalidProduct) as exc_info:
        create_product(brand_store, ProductInputFactory.create(name=""))

    assert "Product name is required." in exc_info.value.message
    assert len(brand_store.state.all_products) == count


@pytest.mark.unit
def test_customers_cannot_publish(customer_store):
    with pytest.raises(PermissionDenied):
        create_product(customer_store, ProductInputFactory.create())


@pytest.mark.unit
def test_update_product_keeps_identity_and_counters(brand_store):
    before = brand_store.find_product("prod2")

    updated = update_product(brand_store, "prod2", ProductInputFactory.create(name="Silk Blouse II"))

    assert updated.id == "prod2"
    assert updated.name == "Silk Blouse II"
    assert updated.view_count == before.view_count
    assert updated.creator.id == "user1"
    assert brand_store.find_product("prod2").name == "Silk Blouse II"


@pytest.mark.unit
def test_only_creator_can_update(brand_store):
    with pytest.raises(PermissionDenied):
        update_product(brand_store, "prod3", ProductInputFactory.create())


@pytest.mark.unit
def test_toggle_featured_and_views(brand_store):
    assert toggle_featured(brand_store, "prod1") is False
    views = brand_store.find_product("prod1").view_count

    assert record_product_view(brand_store, "prod1") == views + 1


@pytest.mark.unit
def test_feed_honours_creator_filter(store):
    assert len(feed_products(store)) == 5

    store.filtered_creator_id = "user2"

    assert [p.id for p in feed_products(store)] == ["prod3", "prod4"]
    assert [p.id for p in products_by_creator(store, "user1")] == ["prod1", "prod2"]


# ---------------------------------------------------------------------------
# Decks
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_create_deck_with_new_products(brand_store):
    brand_store.navigation.push(ViewTag.CREATE_DECK)
    data = DeckCreate(
        name="Winter Edit",
        media_urls=["https://img.test/winter.jpg"],
        products=[ProductInputFactory.create(name="Coat"), ProductInputFactory.create(name="Scarf")],
    )

    deck = create_deck(brand_store, data)

    user = brand_store.find_user("user1")
    assert user.decks[-1].id == deck.id
    assert deck.product_count == 2
    assert [p.name for p in brand_store.state.all_products[:2]] == ["Coat", "Scarf"]
    assert brand_store.state.notifications[0].message == "published a new collection: Winter Edit"
    assert brand_store.navigation.current.view == ViewTag.FEED


@pytest.mark.unit
def test_deck_needs_name(brand_store):
    with pytest.raises(InvalidOperation):
        create_deck(brand_store, DeckCreate(name=" "))


@pytest.mark.unit
def test_update_deck_products(brand_store):
    deck = update_deck(brand_store, "deck2", DeckUpdate(name="Autumn", product_ids=["prod2", "prod1"]))

    assert deck.name == "Autumn"
    assert deck.product_ids == ["prod2", "prod1"]
    assert deck.product_count == 2


@pytest.mark.unit
def test_update_deck_rejects_unknown_products(brand_store):
    with pytest.raises(EntityNotFound):
        update_deck(brand_store, "deck2", DeckUpdate(product_ids=["prod-nope"]))


@pytest.mark.unit
def test_delete_deck(brand_store):
    delete_deck(brand_store, "deck1")

    assert brand_store.find_user("user1").find_deck("deck1") is None
    with pytest.raises(EntityNotFound):
        delete_deck(brand_store, "deck1")


@pytest.mark.unit
def test_cannot_edit_someone_elses_deck(brand_store):
    with pytest.raises(EntityNotFound):
        update_deck(brand_store, "deck3", DeckUpdate(name="Mine now"))


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_size_guide_template_create_edit_delete(brand_store):
    guide = SizeGuide(headers=["Chest"], measurements={"M": ["96"]})

    template = save_size_guide_template(brand_store, "Knitwear", guide)
    assert template.id.startswith("sgt-")

    edited = save_size_guide_template(brand_store, "Knitwear v2", guide, template_id=template.id)
    assert edited.name == "Knitwear v2"
    assert len(brand_store.find_user("user1").size_guide_templates) == 1

    delete_size_guide_template(brand_store, template.id)
    assert brand_store.find_user("user1").size_guide_templates == []


@pytest.mark.unit
def test_pack_template_create_and_delete(brand_store):
    template = save_pack_template(brand_store, "Mini", {"S": 1, "M": 1})

    assert template.id.startswith("ppt-")
    delete_pack_template(brand_store, template.id)
    assert brand_store.find_user("user1").pack_templates == []


@pytest.mark.unit
def test_edit_unknown_template(brand_store):
    with pytest.raises(EntityNotFound):
        save_pack_template(brand_store, "Ghost", {}, template_id="ppt-missing")
