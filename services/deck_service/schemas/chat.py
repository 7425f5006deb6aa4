"""Chat schemas.

Messages are a tagged union on ``type``: each kind carries only its own
payload. Pre-order payloads may be rewritten in place ("edit and resend");
every other message is append-only.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import Field, field_validator
from services.deck_service.models import MessageType
from services.deck_service.schemas.base import CamelModel
from services.deck_service.schemas.commerce import PreOrderPayload


class ChatMessageBase(CamelModel):
    id: str
    text: str
    sender_id: str
    timestamp: str


class TextMessage(ChatMessageBase):
    type: Literal[MessageType.TEXT] = MessageType.TEXT


class AudioPayload(CamelModel):
    audio_url: str
    duration: float = Field(..., ge=0)


class AudioMessage(ChatMessageBase):
    type: Literal[MessageType.AUDIO] = MessageType.AUDIO
    payload: AudioPayload


class PreOrderMessage(ChatMessageBase):
    type: Literal[MessageType.PRE_ORDER] = MessageType.PRE_ORDER
    payload: PreOrderPayload


ChatMessage = Annotated[
    Union[TextMessage, AudioMessage, PreOrderMessage], Field(discriminator="type")
]


class Chat(CamelModel):
    id: str
    participant_ids: list[str]
    messages: list[ChatMessage] = Field(default_factory=list)
    product_id: Optional[str] = None

    @field_validator("participant_ids")
    @classmethod
    def exactly_two_participants(cls, v: list[str]) -> list[str]:
        if len(v) != 2:
            raise ValueError("A chat has exactly two participants")
        return v

    @field_validator("messages", mode="before")
    @classmethod
    def default_message_type(cls, v):
        # Older snapshots stored plain text messages without a type.
        if isinstance(v, list):
            return [
                {**m, "type": MessageType.TEXT.value}
                if isinstance(m, dict) and not m.get("type")
                else m
                for m in v
            ]
        return v

    def has_participant(self, user_id: str) -> bool:
        return user_id in self.participant_ids

    def find_message(self, message_id: str):
        return next((m for m in self.messages if m.id == message_id), None)

    @property
    def last_timestamp(self) -> str:
        return self.messages[-1].timestamp if self.messages else ""


class TextContent(CamelModel):
    type: Literal["text"] = "text"
    text: str = Field(..., min_length=1)


class AudioContent(CamelModel):
    type: Literal["audio"] = "audio"
    audio_url: str
    duration: float = Field(..., ge=0)


MessageContent = Annotated[Union[TextContent, AudioContent], Field(discriminator="type")]
