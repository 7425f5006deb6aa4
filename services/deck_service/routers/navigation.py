"""Navigation router: the view stack, product focus and creator filter."""

from fastapi import APIRouter, Depends
from services.deck_service import navigation
from services.deck_service.routers._helpers import dump_all, get_store
from services.deck_service.schemas.requests import (
    NavigateRequest,
    ProductFocusRequest,
    ResetViewRequest,
)
from services.deck_service.services import catalog_service
from services.deck_service.store import AppStore

router = APIRouter(tags=["navigation"])


def _view(store: AppStore) -> dict:
    return {
        "view": store.navigation.current.to_dict(),
        "history": store.navigation.to_list(),
    }


@router.get("/nav")
async def get_navigation(store: AppStore = Depends(get_store)):
    return _view(store)


@router.post("/nav/push")
async def navigate(payload: NavigateRequest, store: AppStore = Depends(get_store)):
    navigation.navigate_to(store, payload.view, payload.props)
    return _view(store)


@router.post("/nav/back")
async def go_back(store: AppStore = Depends(get_store)):
    navigation.go_back(store)
    return _view(store)


@router.post("/nav/reset")
async def reset_to_view(payload: ResetViewRequest, store: AppStore = Depends(get_store)):
    changed = navigation.reset_to_view(store, payload.view)
    return {"changed": changed, **_view(store)}


@router.post("/nav/tab")
async def nav_tab(payload: ResetViewRequest, store: AppStore = Depends(get_store)):
    """Bottom-bar tab; remembers a live stream the user is leaving."""
    changed = navigation.nav_tab(store, payload.view)
    return {"changed": changed, **_view(store)}


@router.post("/nav/product")
async def focus_product(payload: ProductFocusRequest, store: AppStore = Depends(get_store)):
    focus = navigation.navigate_to_product(store, payload.product_id, payload.variant_name)
    return {
        "productId": focus.product_id,
        "variantName": focus.variant_name,
        **_view(store),
    }


@router.post("/nav/creators/{creator_id}")
async def open_creator_profile(creator_id: str, store: AppStore = Depends(get_store)):
    navigation.open_creator_profile(store, creator_id)
    return _view(store)


@router.post("/nav/users/{owner_id}/decks/{deck_id}")
async def open_deck(owner_id: str, deck_id: str, store: AppStore = Depends(get_store)):
    navigation.open_deck(store, owner_id, deck_id)
    return _view(store)


# ============================================================================
# FEED
# ============================================================================


@router.get("/feed")
async def get_feed(store: AppStore = Depends(get_store)):
    return {
        "filteredCreatorId": store.filtered_creator_id,
        "lastViewedProductId": store.state.last_viewed_product_id,
        "products": dump_all(catalog_service.feed_products(store)),
    }


@router.post("/feed/filter/{creator_id}")
async def filter_by_creator(creator_id: str, store: AppStore = Depends(get_store)):
    first_product_id = navigation.filter_by_creator(store, creator_id)
    return {"filteredCreatorId": creator_id, "lastViewedProductId": first_product_id}


@router.delete("/feed/filter")
async def clear_creator_filter(store: AppStore = Depends(get_store)):
    navigation.clear_creator_filter(store)
    return {"filteredCreatorId": None}

