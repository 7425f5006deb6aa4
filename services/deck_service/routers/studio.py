"""Studio router: shopping assistant, generated scene images and videos."""

from fastapi import APIRouter, Depends, status
from services.deck_service.providers.media import MediaGenerationClient
from services.deck_service.routers._helpers import (
    dump,
    dump_all,
    get_current_user,
    get_media_client,
    get_store,
)
from services.deck_service.schemas import (
    AssistantRequest,
    SceneImageRequest,
    SceneVideoRequest,
    User,
)
from services.deck_service.services import assistant_service, creative_service
from services.deck_service.store import AppStore

router = APIRouter(tags=["studio"])


def get_seller(store: AppStore = Depends(get_store)) -> User:
    return creative_service.require_seller(store)


# ============================================================================
# ASSISTANT
# ============================================================================


@router.get("/assistant/messages")
async def list_assistant_messages(
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    return dump_all(store.assistant_history)


@router.post("/assistant/messages")
async def ask_assistant(
    payload: AssistantRequest,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    reply = await assistant_service.ask_assistant(store, payload.message)
    return {**dump(reply), "view": store.navigation.current.to_dict()}


@router.delete("/assistant/messages", status_code=status.HTTP_204_NO_CONTENT)
async def clear_assistant(
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    assistant_service.clear_assistant(store)


# ============================================================================
# GENERATED MEDIA
# ============================================================================


@router.post("/studio/images", status_code=status.HTTP_201_CREATED)
async def generate_scene_image(
    payload: SceneImageRequest,
    _: User = Depends(get_seller),
    client: MediaGenerationClient = Depends(get_media_client),
):
    image = await creative_service.generate_scene_image(payload.kind, payload.prompt, client=client)
    return {"kind": payload.kind, "mimeType": image.mime_type, "dataUrl": image.data_url}


@router.post("/studio/videos", status_code=status.HTTP_201_CREATED)
async def generate_scene_video(
    payload: SceneVideoRequest,
    _: User = Depends(get_seller),
    client: MediaGenerationClient = Depends(get_media_client),
):
    operation = await creative_service.generate_scene_video(
        payload.prompt, payload.image_base64, payload.mime_type, client=client
    )
    return {"operation": operation.name, "videoUri": operation.video_uri}
