"""Direct messages between two users."""

from typing import Optional

from libs.common.datetime_utils import parse_iso, to_iso, utc_now
from libs.common.logging import get_logger
from services.deck_service.errors import (
    EntityNotFound,
    ExternalServiceError,
    InvalidOperation,
    PermissionDenied,
)
from services.deck_service.models import Language, ViewTag
from services.deck_service.providers.base import call_llm
from services.deck_service.schemas import (
    AudioContent,
    AudioMessage,
    AudioPayload,
    Chat,
    ChatMessage,
    MessageContent,
    TextMessage,
    new_id,
)
from services.deck_service.services.session_service import require_current_user
from services.deck_service.store import AppStore

logger = get_logger(__name__)

LANGUAGE_NAMES = {
    Language.TR: "Turkish",
    Language.RU: "Russian",
    Language.EN: "English",
    Language.DE: "German",
}

TRANSLATION_PROMPT = (
    "Translate the user's text from {source} to {target}. Respond with only the "
    "translated text, without explanations or quotation marks."
)


def _get_chat_for_user(store: AppStore, chat_id: str) -> Chat:
    user = require_current_user(store)
    chat = store.find_chat(chat_id)
    if chat is None:
        raise EntityNotFound(f"Chat {chat_id} not found")
    if not chat.has_participant(user.id):
        raise PermissionDenied("Not a participant of this chat")
    return chat


def open_chat(
    store: AppStore, other_user_id: str, product_id: Optional[str] = None
) -> Chat:
    """Reuse the chat for this pair and product context, or start one."""
    user = require_current_user(store)
    if store.find_user(other_user_id) is None:
        raise EntityNotFound(f"User {other_user_id} not found")
    if other_user_id == user.id:
        raise InvalidOperation("You cannot message yourself")

    with store.transaction():
        chat = next(
            (
                c
                for c in store.state.all_chats
                if c.has_participant(user.id)
                and c.has_participant(other_user_id)
                and c.product_id == product_id
            ),
            None,
        )
        if chat is None:
            chat = Chat(
                id=new_id("chat"),
                participant_ids=[user.id, other_user_id],
                product_id=product_id,
            )
            store.state.all_chats.append(chat)
        store.navigation.push(
            ViewTag.CHAT,
            {"chatId": chat.id, "otherUserId": other_user_id, "productId": product_id},
        )
    return chat


def send_message(store: AppStore, chat_id: str, content: MessageContent) -> ChatMessage:
    """Append a text or voice message and move the chat to the top."""
    chat = _get_chat_for_user(store, chat_id)
    sender_id = store.current_user.id
    timestamp = to_iso(utc_now())

    if isinstance(content, AudioContent):
        message = AudioMessage(
            id=new_id("msg"),
            text=f"Voice message ({content.duration:.1f}s)",
            sender_id=sender_id,
            timestamp=timestamp,
            payload=AudioPayload(audio_url=content.audio_url, duration=content.duration),
        )
    else:
        message = TextMessage(
            id=new_id("msg"), text=content.text, sender_id=sender_id, timestamp=timestamp
        )

    with store.transaction():
        chat.messages.append(message)
        store.state.all_chats.remove(chat)
        store.state.all_chats.insert(0, chat)
    return message


def toggle_archive(store: AppStore, chat_id: str) -> bool:
    """Returns whether the chat is archived afterwards."""
    _get_chat_for_user(store, chat_id)
    archived = store.state.archived_chat_ids
    with store.transaction():
        if chat_id in archived:
            archived.discard(chat_id)
            return False
        archived.add(chat_id)
        return True


def delete_chat(store: AppStore, chat_id: str) -> None:
    chat = _get_chat_for_user(store, chat_id)
    with store.transaction():
        store.state.all_chats.remove(chat)
        store.state.archived_chat_ids.discard(chat_id)
        editing = store.editing_pre_order
        if editing is not None and editing.chat_id == chat_id:
            store.editing_pre_order = None
    logger.info("Deleted chat %s", chat_id)


def list_chats(store: AppStore, archived: bool = False) -> list[Chat]:
    """The user's non-empty chats on one tab, most recent activity first."""
    user = require_current_user(store)
    archived_ids = store.state.archived_chat_ids
    chats = [
        c
        for c in store.state.all_chats
        if c.has_participant(user.id) and c.messages and (c.id in archived_ids) == archived
    ]
    chats.sort(key=lambda c: parse_iso(c.last_timestamp), reverse=True)
    return chats


async def translate_message(
    text: str, target: Language, source: Optional[Language] = None
) -> str:
    """Translate chat text; on any provider failure the original is returned."""
    if not text.strip() or source == target:
        return text
    system_prompt = TRANSLATION_PROMPT.format(
        source=LANGUAGE_NAMES[source] if source else "the detected language",
        target=LANGUAGE_NAMES[target],
    )
    try:
        response = await call_llm(system_prompt, text, temperature=0.0)
    except ExternalServiceError as e:
        logger.warning("Translation failed, showing original text: %s", e.message)
        return text
    return response.content.strip() or text
