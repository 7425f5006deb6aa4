"""AI collaborator: promo video scripts for decks, scene images and scene videos."""

import asyncio
from typing import Optional

from libs.common.logging import get_logger
from pydantic import ValidationError
from services.deck_service.errors import EntityNotFound, ExternalServiceError, PermissionDenied
from services.deck_service.providers.base import call_llm
from services.deck_service.providers.media import (
    GeneratedImage,
    MediaGenerationClient,
    VideoOperation,
    poll_video_operation,
)
from services.deck_service.schemas import Deck, Product, User, VideoScene
from services.deck_service.services.session_service import can_sell, require_current_user
from services.deck_service.store import AppStore

logger = get_logger(__name__)

SCRIPT_SYSTEM_PROMPT = (
    "You are a video editor creating promotional scripts for fashion collections. "
    "Respond with a JSON array of scenes. Each scene has imageUrl (one of the "
    "provided assets), duration (2500 to 4000 milliseconds), textOverlay (a short "
    "marketing phrase) and animationStyle (one of ken-burns-right, zoom-in, "
    "pan-left, pan-right). Use 8 to 12 scenes; open with the collection and end "
    "with a call to action."
)

SCENE_IMAGE_PROMPTS = {
    "background": (
        "Photorealistic e-commerce product background photography. Scene: {prompt}. "
        "Style: clean, professional, high-resolution, suitable for placing a product on. "
        "No main object in the scene."
    ),
    "pattern": "A seamless, abstract, visually pleasing pattern. Style: {prompt}.",
    "sticker": (
        'A high-resolution, professional sticker of "{prompt}". '
        "Centered object, sticker style, on a plain white background."
    ),
}

VIDEO_SCENE_SCHEMA = {
    "type": "json_schema",
    "json_schema": {
        "name": "video_script",
        "schema": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "imageUrl": {"type": "string"},
                    "duration": {"type": "number"},
                    "textOverlay": {"type": "string"},
                    "animationStyle": {"type": "string"},
                },
                "required": ["imageUrl", "duration", "textOverlay", "animationStyle"],
            },
        },
    },
}


def require_seller(store: AppStore) -> User:
    user = require_current_user(store)
    if not can_sell(user):
        raise PermissionDenied("Only brand owners and sales reps can use the studio")
    return user


def deck_products(store: AppStore, deck: Deck) -> list[Product]:
    return [p for p in (store.find_product(i) for i in deck.product_ids) if p is not None]


def find_own_deck(store: AppStore, deck_id: str) -> Deck:
    deck = require_current_user(store).find_deck(deck_id)
    if deck is None:
        raise EntityNotFound(f"Deck {deck_id} not found")
    return deck


async def generate_video_script(
    deck: Deck,
    products: list[Product],
    style: str = "cinematic",
    music_title: str = "",
    music_genre: str = "",
) -> list[VideoScene]:
    """
    Ask the model for a scene list built only from the deck's variant images.

    Scenes pointing at images outside the deck, or not matching the scene
    shape, are dropped.

    Raises:
        ExternalServiceError: the call failed or no usable scene came back
    """
    assets = [v.media_url for p in products for v in p.variants if v.media_url]
    if not assets:
        raise ExternalServiceError(f"Deck {deck.id} has no images to build a video from")

    user_prompt = "\n".join(
        [
            f'Collection: "{deck.name}"',
            f"Video style: {style}",
            f"Music: {music_title} ({music_genre})" if music_title else "Music: none",
            "Available image assets:",
            *assets,
        ]
    )
    response = await call_llm(
        SCRIPT_SYSTEM_PROMPT, user_prompt, temperature=0.7, response_format=VIDEO_SCENE_SCHEMA
    )
    try:
        raw = response.parse_json()
    except ValueError as e:
        raise ExternalServiceError("AI returned an invalid script format") from e
    if not isinstance(raw, list) or not raw:
        raise ExternalServiceError("AI returned an invalid script format")

    allowed = set(assets)
    scenes = []
    for item in raw:
        try:
            scene = VideoScene.model_validate(item)
        except ValidationError:
            continue
        if scene.image_url in allowed:
            scenes.append(scene)

    if not scenes:
        raise ExternalServiceError("AI returned a script with invalid image URLs")
    logger.info(
        "Generated video script",
        extra={"extra_fields": {"deck_id": deck.id, "scenes": len(scenes), "model": response.model}},
    )
    return scenes


async def generate_scene_video(
    prompt: str,
    image_base64: Optional[str] = None,
    mime_type: str = "image/png",
    client: Optional[MediaGenerationClient] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> VideoOperation:
    """Start a video generation and wait for it; returns the finished operation."""
    client = client or MediaGenerationClient()
    return await poll_video_operation(
        start=lambda: client.start_video(prompt, image_base64, mime_type),
        fetch=client.get_operation,
        cancel_event=cancel_event,
    )


def build_scene_image_prompt(kind: str, prompt: str) -> str:
    template = SCENE_IMAGE_PROMPTS.get(kind)
    if template is None:
        raise ValueError(f"Unknown scene image kind: {kind}")
    return template.format(prompt=prompt.strip())


async def generate_scene_image(
    kind: str, prompt: str, client: Optional[MediaGenerationClient] = None
) -> GeneratedImage:
    """Generate one square JPEG for a studio background, pattern or sticker."""
    client = client or MediaGenerationClient()
    image = await client.generate_image(
        build_scene_image_prompt(kind, prompt), mime_type="image/jpeg", aspect_ratio="1:1"
    )
    logger.info("Generated scene image", extra={"extra_fields": {"kind": kind}})
    return image
