"""Chats router: conversations, messages and translation."""

from fastapi import APIRouter, Depends, Query, status
from services.deck_service.routers._helpers import dump, dump_all, get_current_user, get_store
from services.deck_service.schemas import User
from services.deck_service.schemas.requests import (
    OpenChatRequest,
    SendMessageRequest,
    TranslateRequest,
)
from services.deck_service.services import chat_service
from services.deck_service.store import AppStore

router = APIRouter(tags=["chats"])


@router.get("/chats")
async def list_chats(
    archived: bool = Query(False),
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    return dump_all(chat_service.list_chats(store, archived=archived))


@router.post("/chats", status_code=status.HTTP_201_CREATED)
async def open_chat(
    payload: OpenChatRequest,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    chat = chat_service.open_chat(store, payload.other_user_id, payload.product_id)
    return dump(chat)


@router.post("/chats/{chat_id}/messages", status_code=status.HTTP_201_CREATED)
async def send_message(
    chat_id: str,
    payload: SendMessageRequest,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    return dump(chat_service.send_message(store, chat_id, payload.content))


@router.post("/chats/{chat_id}/archive")
async def toggle_archive(
    chat_id: str,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    return {"archived": chat_service.toggle_archive(store, chat_id)}


@router.delete("/chats/{chat_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chat(
    chat_id: str,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    chat_service.delete_chat(store, chat_id)


@router.post("/translate")
async def translate(payload: TranslateRequest):
    text = await chat_service.translate_message(
        payload.text, payload.target_language, payload.source_language
    )
    return {"text": text}
