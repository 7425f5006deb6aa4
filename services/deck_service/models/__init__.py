"""Deck Service models package."""

from services.deck_service.models.enums import (
    STREAM_TRANSITIONS,
    CommentType,
    Language,
    LinkType,
    MediaType,
    MessageType,
    ReportPeriod,
    StreamStatus,
    UserRole,
    ViewTag,
    enum_values,
)

__all__ = [
    "STREAM_TRANSITIONS",
    "CommentType",
    "Language",
    "LinkType",
    "MediaType",
    "MessageType",
    "ReportPeriod",
    "StreamStatus",
    "UserRole",
    "ViewTag",
    "enum_values",
]
