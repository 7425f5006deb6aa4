"""Unit tests for likes, saves, the follow graph and notifications."""

import pytest
from services.deck_service.errors import EntityNotFound, InvalidOperation
from services.deck_service.models import LinkType, ViewTag
from services.deck_service.services.social_service import (
    fanout_on_publish,
    follower_users,
    following_users,
    liked_products,
    mark_all_notifications_read,
    notification_click,
    saved_products,
    toggle_follow,
    toggle_like,
    toggle_save,
    unread_notification_count,
)

# ---------------------------------------------------------------------------
# Likes and saves
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_toggle_like_twice_restores(customer_store):
    assert toggle_like(customer_store, "prod2") is True
    assert [p.id for p in liked_products(customer_store)] == ["prod2"]

    assert toggle_like(customer_store, "prod2") is False
    assert liked_products(customer_store) == []


@pytest.mark.unit
def test_saved_products_follow_catalog_order(customer_store):
    toggle_save(customer_store, "prod5")
    toggle_save(customer_store, "prod1")

    assert [p.id for p in saved_products(customer_store)] == ["prod1", "prod5"]


# ---------------------------------------------------------------------------
# Follow graph
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_unfollow_updates_both_sides(customer_store):
    assert toggle_follow(customer_store, "user1") is False

    assert "user1" not in customer_store.find_user("user6").following_ids
    assert "user6" not in customer_store.find_user("user1").follower_ids


@pytest.mark.unit
def test_follow_updates_both_sides(customer_store):
    assert toggle_follow(customer_store, "user3") is True

    assert customer_store.find_user("user6").following_ids[-1] == "user3"
    assert "user6" in customer_store.find_user("user3").follower_ids
    assert [u.id for u in following_users(customer_store)] == ["user1", "user3"]


@pytest.mark.unit
def test_follow_graph_stays_symmetric_over_mixed_toggles(store):
    steps = [
        ("user6", "user3"),
        ("user4", "user1"),
        ("user6", "user1"),
        ("user1", "user6"),
        ("user5", "user2"),
        ("user6", "user3"),
        ("user2", "user5"),
        ("user4", "user1"),
        ("user1", "user4"),
        ("user5", "user2"),
        ("user6", "user1"),
    ]
    users = store.state.all_users

    for actor, target in steps:
        store.state.current_user_id = actor
        toggle_follow(store, target)

        for a in users:
            for b in users:
                assert (b.id in a.following_ids) == (a.id in b.follower_ids), (a.id, b.id)

    assert "user3" not in store.find_user("user6").following_ids
    assert "user6" in store.find_user("user1").following_ids
    assert "user6" in store.find_user("user1").follower_ids


@pytest.mark.unit
def test_cannot_follow_self(customer_store):
    with pytest.raises(InvalidOperation):
        toggle_follow(customer_store, "user6")


@pytest.mark.unit
def test_follow_unknown_user(customer_store):
    with pytest.raises(EntityNotFound):
        toggle_follow(customer_store, "ghost")


@pytest.mark.unit
def test_follower_users(store):
    assert [u.id for u in follower_users(store, "user1")] == ["user4", "user6"]


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_fanout_notifies_each_follower(brand_store):
    creator = brand_store.find_user("user1")

    created = fanout_on_publish(
        brand_store, creator, LinkType.DECK, "deck1", "published a new collection: La Parisienne"
    )

    assert len(created) == 2
    assert brand_store.state.notifications[:2] == created
    assert all(n.from_user.id == "user1" for n in created)
    assert len({n.id for n in created}) == 2


@pytest.mark.unit
def test_unread_count_skips_own_notifications(brand_store):
    fanout_on_publish(
        brand_store, brand_store.find_user("user1"), LinkType.PRODUCT, "prod1", "added a new product"
    )
    assert unread_notification_count(brand_store) == 0

    brand_store.state.current_user_id = "user6"
    assert unread_notification_count(brand_store) == 2


@pytest.mark.unit
def test_product_notification_click_focuses_feed(customer_store):
    [notification, _] = fanout_on_publish(
        customer_store,
        customer_store.find_user("user1"),
        LinkType.PRODUCT,
        "prod2",
        "added a new product: Silk Charmeuse Blouse",
        variant_name="Black",
    )

    frame = notification_click(customer_store, notification.id)

    assert notification.read is True
    assert frame.view == ViewTag.FEED
    assert customer_store.product_to_show.variant_name == "Black"
    assert customer_store.state.last_viewed_product_id == "prod2"


@pytest.mark.unit
def test_deck_notification_click_opens_gallery_for_customer(customer_store):
    [notification, _] = fanout_on_publish(
        customer_store, customer_store.find_user("user1"), LinkType.DECK, "deck2", "new deck"
    )

    frame = notification_click(customer_store, notification.id)

    assert frame.view == ViewTag.DECK_GALLERY
    assert frame.props == {"userId": "user1", "deckId": "deck2"}


@pytest.mark.unit
def test_click_on_deleted_deck_only_marks_read(customer_store):
    [notification, _] = fanout_on_publish(
        customer_store, customer_store.find_user("user1"), LinkType.DECK, "deck-gone", "new deck"
    )

    assert notification_click(customer_store, notification.id) is None
    assert notification.read is True
    assert customer_store.navigation.current.view == ViewTag.FEED


@pytest.mark.unit
def test_click_unknown_notification(customer_store):
    with pytest.raises(EntityNotFound):
        notification_click(customer_store, "notif-missing")


@pytest.mark.unit
def test_mark_all_read(customer_store):
    fanout_on_publish(
        customer_store, customer_store.find_user("user1"), LinkType.PRODUCT, "prod1", "new"
    )

    assert mark_all_notifications_read(customer_store) == 2
    assert unread_notification_count(customer_store) == 0
    assert mark_all_notifications_read(customer_store) == 0
