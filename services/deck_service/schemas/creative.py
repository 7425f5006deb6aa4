"""AI studio and shopping assistant schemas."""

from typing import Literal, Optional

from pydantic import Field
from services.deck_service.schemas.base import CamelModel

AnimationStyle = Literal["ken-burns-right", "zoom-in", "pan-left", "pan-right"]


class VideoScene(CamelModel):
    image_url: str
    duration: float = Field(..., gt=0)
    text_overlay: str = ""
    animation_style: AnimationStyle = "zoom-in"


class VideoScriptRequest(CamelModel):
    deck_id: str
    style: str = "cinematic"
    music_title: str = ""
    music_genre: str = ""


SceneImageKind = Literal["background", "pattern", "sticker"]


class SceneImageRequest(CamelModel):
    kind: SceneImageKind = "background"
    prompt: str = Field(..., min_length=1)


class SceneVideoRequest(CamelModel):
    prompt: str = Field(..., min_length=1)
    image_base64: Optional[str] = None
    mime_type: str = "image/png"


# ---------------------------------------------------------------------------
# Shopping assistant
# ---------------------------------------------------------------------------


class AssistantMessage(CamelModel):
    role: Literal["user", "assistant"]
    content: str


class AssistantAction(CamelModel):
    """Structured command the model emits as ``ACTION: {...}``."""

    type: Literal["NAVIGATE_TO_PRODUCT", "NAVIGATE_TO_CREATOR", "SHOW_REPORT"]
    product_name: Optional[str] = None
    creator_name: Optional[str] = None
    report_type: Optional[str] = None


class AssistantRequest(CamelModel):
    message: str = Field(..., min_length=1)


class AssistantReply(CamelModel):
    reply: str
    action: Optional[AssistantAction] = None
