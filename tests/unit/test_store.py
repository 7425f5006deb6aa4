"""Unit tests for AppStore transactions, observers and cold start."""

import json

import pytest
from libs.common.config import Settings
from services.deck_service.codec import load_state, save_state
from services.deck_service.errors import InvalidOperation
from services.deck_service.models import Language, ViewTag
from services.deck_service.storage import MemoryStorage
from services.deck_service.store import AppStore, bootstrap_store

# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_commit_persists_and_bumps_version(store, storage):
    with store.transaction():
        store.state.language = Language.DE

    assert store.version == 1
    assert json.loads(storage.get_item(store.key))["language"] == "de"


@pytest.mark.unit
def test_failed_transaction_rolls_back_everything(store, storage):
    """State, navigation and session flags all return to their prior values."""
    with pytest.raises(InvalidOperation):
        with store.transaction():
            store.state.cart.clear()
            store.state.language = Language.TR
            store.navigation.push(ViewTag.BASKET)
            store.public_view = True
            raise InvalidOperation("boom")

    assert store.state.language == Language.EN
    assert store.navigation.current.view == ViewTag.FEED
    assert store.public_view is False
    assert store.version == 0
    assert storage.get_item(store.key) is None


@pytest.mark.unit
def test_rollback_restores_nested_entities(store):
    product = store.find_product("prod1")
    original_views = product.view_count

    with pytest.raises(RuntimeError):
        with store.transaction():
            store.find_product("prod1").view_count += 10
            raise RuntimeError("handler crashed")

    assert store.find_product("prod1").view_count == original_views


@pytest.mark.unit
def test_nested_transactions_commit_once(store):
    seen = []
    store.subscribe(lambda s: seen.append(s.version))

    with store.transaction():
        with store.transaction():
            store.state.language = Language.RU
        assert seen == []

    assert seen == [1]


@pytest.mark.unit
def test_outermost_persist_flag_wins(store, storage):
    """A persisting inner transaction inside a session-only one writes nothing."""
    with store.transaction(persist=False):
        with store.transaction(persist=True):
            store.state.language = Language.DE

    assert storage.get_item(store.key) is None
    assert store.version == 1


@pytest.mark.unit
def test_save_failure_does_not_break_commit(store):
    class FullStorage(MemoryStorage):
        def set_item(self, key, value):
            raise OSError("quota exceeded")

    store.storage = FullStorage()

    with store.transaction():
        store.state.language = Language.TR

    assert store.state.language == Language.TR
    assert store.version == 1


# ---------------------------------------------------------------------------
# Observers
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_unsubscribe_stops_notifications(store):
    calls = []
    unsubscribe = store.subscribe(lambda s: calls.append(s.version))

    with store.transaction():
        pass
    unsubscribe()
    with store.transaction():
        pass

    assert calls == [1]
    # Second call is a no-op.
    unsubscribe()


@pytest.mark.unit
def test_failing_subscriber_does_not_block_others(store):
    calls = []

    def broken(_):
        raise ValueError("subscriber bug")

    store.subscribe(broken)
    store.subscribe(lambda s: calls.append("ok"))

    with store.transaction():
        pass

    assert calls == ["ok"]


# ---------------------------------------------------------------------------
# Active cart
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_public_view_uses_separate_cart(store):
    persisted = list(store.state.cart)
    store.public_view = True

    assert store.active_cart == []
    store.set_active_cart(["placeholder"])

    assert store.state.cart == persisted
    assert store.public_cart == ["placeholder"]


# ---------------------------------------------------------------------------
# Cold start
# ---------------------------------------------------------------------------


def _settings(**overrides) -> Settings:
    return Settings(STATE_BACKEND="memory", **overrides)


@pytest.mark.unit
def test_bootstrap_without_snapshot_uses_seed():
    store = bootstrap_store(MemoryStorage(), _settings())

    assert store.find_user("user1").username == "AtelierAura"
    assert store.current_user is None
    assert store.state.language == Language.EN


@pytest.mark.unit
def test_bootstrap_can_start_empty():
    store = bootstrap_store(MemoryStorage(), _settings(SEED_ON_COLD_START=False))

    assert store.state.all_users == []


@pytest.mark.unit
def test_bootstrap_restores_saved_snapshot(store, storage):
    with store.transaction():
        store.state.current_user_id = "user6"
        store.state.language = Language.RU

    restored = bootstrap_store(storage, _settings())

    assert restored.current_user.id == "user6"
    assert restored.state.language == Language.RU
    assert load_state(storage, restored.key) is not None


@pytest.mark.unit
def test_bootstrap_ignores_corrupt_snapshot():
    storage = MemoryStorage()
    storage.set_item("deckAppState", "not-json")

    restored = bootstrap_store(storage, _settings())

    assert restored.find_user("user1") is not None


@pytest.mark.unit
def test_snapshot_key_is_configurable(store):
    storage = MemoryStorage()
    save_state(storage, "otherKey", store.state)

    restored = bootstrap_store(storage, _settings(APP_STATE_KEY="otherKey"))

    assert restored.key == "otherKey"
    assert len(restored.state.all_products) == len(store.state.all_products)


@pytest.mark.unit
def test_store_defaults_to_memory_storage():
    assert isinstance(AppStore().storage, MemoryStorage)
