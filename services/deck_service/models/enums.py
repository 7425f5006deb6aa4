"""Enum definitions for the deck app state tree."""

import enum


def enum_values(enum_cls):
    """Return the persisted string values of an enum."""
    return [member.value for member in enum_cls]


class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    SALES_REP = "sales_rep"
    BRAND_OWNER = "brand_owner"


class Language(str, enum.Enum):
    TR = "tr"
    RU = "ru"
    EN = "en"
    DE = "de"


class MediaType(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"


class MessageType(str, enum.Enum):
    TEXT = "text"
    AUDIO = "audio"
    PRE_ORDER = "pre-order"


class StreamStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    LIVE = "live"
    ENDED = "ended"


class CommentType(str, enum.Enum):
    COMMENT = "comment"
    LIKE = "like"
    JOIN = "join"


class LinkType(str, enum.Enum):
    PRODUCT = "product"
    DECK = "deck"


class ReportPeriod(str, enum.Enum):
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


class ViewTag(str, enum.Enum):
    FEED = "feed"
    PROFILE = "profile"
    CREATOR_PROFILE = "creatorProfile"
    BASKET = "basket"
    CHAT = "chat"
    CHAT_LIST = "chatList"
    EDIT_PROFILE = "editProfile"
    CREATE_DECK = "createDeck"
    DECK_DETAIL = "deckDetail"
    EDIT_DECK = "editDeck"
    PUBLIC_PROFILE = "publicProfile"
    AI_STYLIST = "aiStylist"
    SETTINGS = "settings"
    SAVED = "saved"
    LIVE_FEEDS = "liveFeeds"
    LIVE_STREAM_SETUP = "liveStreamSetup"
    LIVE_STREAM_PLAYER = "liveStreamPlayer"
    DECK_GALLERY = "deckGallery"


# Forward-only stream lifecycle.
STREAM_TRANSITIONS = {
    StreamStatus.UPCOMING: {StreamStatus.LIVE},
    StreamStatus.LIVE: {StreamStatus.ENDED},
    StreamStatus.ENDED: set(),
}
