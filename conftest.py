import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient

# Load .env.test when present; tests never touch the file backend.
env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

os.environ["STATE_BACKEND"] = "memory"
os.environ.setdefault("ENVIRONMENT", "local")

from libs.common.config import get_settings  # noqa: E402
from services.deck_service.seed import build_seed_state  # noqa: E402
from services.deck_service.services.discount_scheduler import DiscountScheduler  # noqa: E402
from services.deck_service.storage import MemoryStorage  # noqa: E402
from services.deck_service.store import AppStore  # noqa: E402
from tests.factories import FIXED_NOW  # noqa: E402

# Clear cached settings to reload with the test env vars
get_settings.cache_clear()
settings = get_settings()


def login_as(store: AppStore, user_id: str) -> AppStore:
    """Switch the session to ``user_id`` without going through the password check."""
    with store.transaction():
        store.state.current_user_id = user_id
    return store


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(storage) -> AppStore:
    """A store over the seed data, nobody logged in."""
    return AppStore(storage=storage, key=settings.APP_STATE_KEY, state=build_seed_state(FIXED_NOW))


@pytest.fixture
def empty_store(storage) -> AppStore:
    return AppStore(storage=storage, key=settings.APP_STATE_KEY)


@pytest.fixture
def brand_store(store) -> AppStore:
    """Seed store logged in as AtelierAura (user1, brand owner)."""
    return login_as(store, "user1")


@pytest.fixture
def customer_store(store) -> AppStore:
    """Seed store logged in as Alex Chen (user6, customer)."""
    return login_as(store, "user6")


@pytest.fixture
def rep_store(store) -> AppStore:
    """Seed store logged in as Sophie Dubois (user5, sales rep of user1)."""
    return login_as(store, "user5")


@pytest_asyncio.fixture
async def scheduler() -> AsyncGenerator[DiscountScheduler, None]:
    scheduler = DiscountScheduler()
    yield scheduler
    scheduler.cancel_all()


@pytest_asyncio.fixture
async def client(store, scheduler) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient bound to a fresh app instance over the seed store.
    """
    from services.deck_service.app.main import create_app

    app = create_app(store=store, scheduler=scheduler)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
