"""Unit tests for the state snapshot codec and storage backends.

No HTTP layer involved; codec functions are called directly on state trees.
"""

import json

import pytest
from services.deck_service.codec import (
    deserialize,
    load_state,
    save_state,
    serialize,
    strip_data_uris,
)
from services.deck_service.models import LinkType
from services.deck_service.schemas import (
    AppState,
    Notification,
    NotificationLink,
    OrderedIdSet,
    UserSummary,
)
from services.deck_service.storage import FileStorage, MemoryStorage
from tests.factories import FIXED_NOW, UserFactory


class BrokenStorage:
    """Storage whose every operation fails, like a full or unavailable disk."""

    def get_item(self, key):
        raise OSError("storage unavailable")

    def set_item(self, key, value):
        raise OSError("quota exceeded")

    def remove_item(self, key):
        raise OSError("storage unavailable")


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_round_trip_keeps_sets_and_dates(store):
    """Sets come back as sets and datetimes as equal datetimes."""
    state = store.state
    state.liked_product_ids = {"prod2", "prod1"}
    state.saved_product_ids = {"prod5"}
    state.archived_chat_ids = {"chat3"}
    state.notifications = [
        Notification(
            id="notif-1",
            from_user=UserSummary(id="user1", username="AtelierAura"),
            message="published a new collection",
            link=NotificationLink(type=LinkType.DECK, id="deck1"),
            timestamp=FIXED_NOW,
        )
    ]

    restored = deserialize(serialize(state))

    assert restored.liked_product_ids == {"prod1", "prod2"}
    assert restored.saved_product_ids == {"prod5"}
    assert restored.archived_chat_ids == {"chat3"}
    assert restored.notifications[0].timestamp == FIXED_NOW
    assert restored.all_products[0].created_at == state.all_products[0].created_at
    assert restored.all_sales[0].timestamp == state.all_sales[0].timestamp


@pytest.mark.unit
def test_sets_are_written_in_insertion_order(store):
    for product_id in ("prod3", "prod1", "prod2"):
        store.state.liked_product_ids.add(product_id)

    payload = json.loads(serialize(store.state))
    restored = deserialize(serialize(store.state))

    assert payload["likedProductIds"] == ["prod3", "prod1", "prod2"]
    assert payload["archivedChatIds"] == []
    assert list(restored.liked_product_ids) == ["prod3", "prod1", "prod2"]


@pytest.mark.unit
def test_ordered_id_set_behaves_like_a_set():
    ids = OrderedIdSet(["b", "a", "b"])

    ids.discard("b")
    ids.add("b")
    ids.add("a")

    assert list(ids) == ["a", "b"]
    assert ids == {"a", "b"}
    assert {"a", "b"} == ids
    assert "c" not in ids


@pytest.mark.unit
def test_data_uris_are_blanked_not_rejected(store):
    """Inline uploads become empty strings; everything else survives."""
    user = store.state.find_user("user1")
    user.avatar_url = "data:image/png;base64,AAAA"

    payload = json.loads(serialize(store.state))
    restored = deserialize(serialize(store.state))

    stored_user = next(u for u in payload["allUsers"] if u["id"] == "user1")
    assert stored_user["avatarUrl"] == ""
    assert restored.find_user("user1").avatar_url == ""
    assert restored.find_user("user1").bio == user.bio


@pytest.mark.unit
def test_strip_data_uris_walks_nested_values():
    value = {"a": ["data:x", "https://ok"], "b": {"c": "data:y"}, "d": 3}

    assert strip_data_uris(value) == {"a": ["", "https://ok"], "b": {"c": ""}, "d": 3}


@pytest.mark.unit
def test_persisted_layout_uses_camel_case_keys(store):
    payload = json.loads(serialize(store.state))

    for key in (
        "allUsers",
        "allProducts",
        "allChats",
        "allSales",
        "allLiveStreams",
        "currentUser",
        "cart",
        "notifications",
        "language",
        "lastViewedProductId",
        "liveStreamContextId",
    ):
        assert key in payload
    assert "current_user_id" not in payload


# ---------------------------------------------------------------------------
# Session user resolution
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_current_user_is_resolved_against_loaded_users(store):
    """A stale embedded copy is ignored; the loaded user wins."""
    store.state.current_user_id = "user1"
    payload = json.loads(serialize(store.state))
    payload["currentUser"]["username"] = "Stale Name"

    restored = deserialize(json.dumps(payload))

    assert restored.current_user_id == "user1"
    assert restored.current_user.username == "AtelierAura"


@pytest.mark.unit
def test_missing_current_user_means_logged_out(store):
    ghost = UserFactory.create(id="ghost")
    store.state.all_users.append(ghost)
    store.state.current_user_id = "ghost"
    payload = json.loads(serialize(store.state))
    payload["allUsers"] = [u for u in payload["allUsers"] if u["id"] != "ghost"]

    restored = deserialize(json.dumps(payload))

    assert restored.current_user is None


@pytest.mark.unit
def test_deserialize_rejects_non_object():
    with pytest.raises(ValueError):
        deserialize("[1, 2, 3]")


# ---------------------------------------------------------------------------
# Load / save failure policy
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_load_state_treats_corrupt_json_as_cold_start():
    storage = MemoryStorage({"deckAppState": "{not json"})

    assert load_state(storage, "deckAppState") is None


@pytest.mark.unit
def test_load_state_treats_storage_errors_as_cold_start():
    assert load_state(BrokenStorage(), "deckAppState") is None


@pytest.mark.unit
def test_save_state_swallows_storage_errors():
    assert save_state(BrokenStorage(), "deckAppState", AppState()) is False


@pytest.mark.unit
def test_file_storage_round_trip(tmp_path, store):
    storage = FileStorage(tmp_path / "state")

    assert save_state(storage, "deck/App:State", store.state) is True
    restored = load_state(storage, "deck/App:State")

    assert [u.id for u in restored.all_users] == [u.id for u in store.state.all_users]
    storage.remove_item("deck/App:State")
    assert storage.get_item("deck/App:State") is None
