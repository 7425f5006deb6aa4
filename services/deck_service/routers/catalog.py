"""Catalog router: products, decks, templates and share links."""

from fastapi import APIRouter, Depends, status
from services.deck_service.errors import EntityNotFound
from services.deck_service.routers._helpers import dump, dump_all, get_current_user, get_store
from services.deck_service.schemas import User, VideoScriptRequest
from services.deck_service.schemas.requests import (
    DeckCreate,
    DeckUpdate,
    PackTemplateSave,
    ProductCreate,
    SizeGuideTemplateSave,
)
from services.deck_service.services import catalog_service, creative_service, share_service
from services.deck_service.store import AppStore

router = APIRouter(tags=["catalog"])


def _share(link: share_service.ShareLink) -> dict:
    return {"title": link.title, "text": link.text, "url": link.url}


# ============================================================================
# PRODUCTS
# ============================================================================


@router.get("/products")
async def list_products(store: AppStore = Depends(get_store)):
    return dump_all(store.state.all_products)


@router.get("/products/{product_id}")
async def get_product(product_id: str, store: AppStore = Depends(get_store)):
    product = store.find_product(product_id)
    if product is None:
        raise EntityNotFound(f"Product {product_id} not found")
    return dump(product)


@router.post("/products", status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    return dump(catalog_service.create_product(store, payload))


@router.put("/products/{product_id}")
async def update_product(
    product_id: str,
    payload: ProductCreate,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    return dump(catalog_service.update_product(store, product_id, payload))


@router.post("/products/{product_id}/featured")
async def toggle_featured(
    product_id: str,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    return {"isFeatured": catalog_service.toggle_featured(store, product_id)}


@router.post("/products/{product_id}/views")
async def record_product_view(product_id: str, store: AppStore = Depends(get_store)):
    return {"viewCount": catalog_service.record_product_view(store, product_id)}


@router.get("/products/{product_id}/share")
async def share_product(product_id: str, store: AppStore = Depends(get_store)):
    product = store.find_product(product_id)
    if product is None:
        raise EntityNotFound(f"Product {product_id} not found")
    return _share(share_service.share_product(product))


@router.get("/users/{user_id}/products")
async def products_by_creator(user_id: str, store: AppStore = Depends(get_store)):
    return dump_all(catalog_service.products_by_creator(store, user_id))


@router.get("/users/{user_id}/share")
async def share_profile(user_id: str, store: AppStore = Depends(get_store)):
    return _share(share_service.share_profile(store, user_id))


# ============================================================================
# DECKS
# ============================================================================


@router.post("/decks", status_code=status.HTTP_201_CREATED)
async def create_deck(
    payload: DeckCreate,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    return dump(catalog_service.create_deck(store, payload))


@router.patch("/decks/{deck_id}")
async def update_deck(
    deck_id: str,
    payload: DeckUpdate,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    return dump(catalog_service.update_deck(store, deck_id, payload))


@router.delete("/decks/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deck(
    deck_id: str,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    catalog_service.delete_deck(store, deck_id)


@router.get("/decks/{deck_id}/share")
async def share_deck(
    deck_id: str,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    return _share(share_service.share_deck(store, deck_id))


@router.post("/decks/{deck_id}/video-script")
async def generate_video_script(
    deck_id: str,
    payload: VideoScriptRequest,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    deck = creative_service.find_own_deck(store, deck_id)
    scenes = await creative_service.generate_video_script(
        deck,
        creative_service.deck_products(store, deck),
        style=payload.style,
        music_title=payload.music_title,
        music_genre=payload.music_genre,
    )
    return {"deckId": deck.id, "scenes": dump_all(scenes)}


# ============================================================================
# TEMPLATES
# ============================================================================


@router.post("/templates/size-guides")
async def save_size_guide_template(
    payload: SizeGuideTemplateSave,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    template = catalog_service.save_size_guide_template(
        store, payload.name, payload.size_guide, template_id=payload.id
    )
    return dump(template)


@router.delete("/templates/size-guides/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_size_guide_template(
    template_id: str,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    catalog_service.delete_size_guide_template(store, template_id)


@router.post("/templates/packs")
async def save_pack_template(
    payload: PackTemplateSave,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    template = catalog_service.save_pack_template(
        store, payload.name, payload.contents, template_id=payload.id
    )
    return dump(template)


@router.delete("/templates/packs/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pack_template(
    template_id: str,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    catalog_service.delete_pack_template(store, template_id)
