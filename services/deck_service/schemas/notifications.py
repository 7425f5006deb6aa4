"""Notification schemas."""

from datetime import datetime
from typing import Optional

from services.deck_service.models import LinkType
from services.deck_service.schemas.base import CamelModel
from services.deck_service.schemas.users import UserSummary


class NotificationLink(CamelModel):
    type: LinkType
    id: str
    variant_name: Optional[str] = None


class Notification(CamelModel):
    id: str
    from_user: UserSummary
    message: str
    link: NotificationLink
    timestamp: datetime
    read: bool = False
