"""Live stream schemas."""

from typing import Optional

from pydantic import Field
from services.deck_service.models import CommentType, StreamStatus
from services.deck_service.schemas.base import CamelModel


class LiveComment(CamelModel):
    id: str
    user_id: str
    username: str
    avatar_url: str = ""
    text: str
    timestamp: str
    type: CommentType = CommentType.COMMENT


class ActiveDiscount(CamelModel):
    product_id: str
    discount_percentage: float
    expires_at: str


class LiveStream(CamelModel):
    id: str
    host_id: str
    title: str
    status: StreamStatus = StreamStatus.UPCOMING
    scheduled_at: Optional[str] = None
    started_at: Optional[str] = None
    ended_at: Optional[str] = None
    thumbnail_url: str = ""
    product_showcase_ids: list[str] = Field(default_factory=list)
    viewer_count: int = 0
    likes_count: int = 0
    comments: list[LiveComment] = Field(default_factory=list)
    playback_url: Optional[str] = None
    is_host_controlled: bool = False
    host_pinned_product_index: Optional[int] = None
    active_discount: Optional[ActiveDiscount] = None
