"""In-app shopping assistant.

The model answers conversationally or, for navigation and seller reports,
with a single ``ACTION: {...}`` command that is carried out against the store.
The conversation is session-only and is cleared on login and logout.
"""

import json
from typing import Optional

from libs.common.logging import get_logger
from pydantic import ValidationError
from services.deck_service.errors import ExternalServiceError, InvalidOperation
from services.deck_service.navigation import filter_by_creator, navigate_to_product
from services.deck_service.providers.base import call_llm
from services.deck_service.schemas import AssistantAction, AssistantMessage, AssistantReply, User
from services.deck_service.services.chat_service import LANGUAGE_NAMES
from services.deck_service.services.session_service import can_sell, require_current_user
from services.deck_service.store import AppStore

logger = get_logger(__name__)

ACTION_PREFIX = "ACTION:"
OFFLINE_REPLY = "The stylist is currently offline. Please try again later."
REPORT_TYPES = ("most_viewed", "sales", "revenue")

SELLER_SYSTEM_PROMPT = """You are AI Stylist, an assistant for fashion brand owners and their sales reps. Always respond in {language}.

Business analyst: when asked for a data report (most viewed products, sales report, revenue summary), respond ONLY with
ACTION: {{"type": "SHOW_REPORT", "reportType": "most_viewed" | "sales" | "revenue"}}
Never answer report questions conversationally.

Copywriter: write professional, SEO-friendly product descriptions and marketing copy in an evocative fashion voice.

Market strategist: answer trend, pricing and strategy questions from this platform data.
- Popular colors this month: beige, earth tones, olive green.
- Oversized and loose-fit cuts are up 20% in sales; techwear and utility styles remain strong.
- Linen and breathable cottons are in high demand.
- Discounts of 15-25% work best for similar products; a well-timed 20% discount lifts volume by about 35%.
- Prices just below a round number (99 instead of 100) convert slightly better.

Answer any other question helpfully and professionally."""

CUSTOMER_SYSTEM_PROMPT = """You are a helpful in-app shopping assistant. Always respond in {language}.
When the user asks to find a product or a brand, respond ONLY with one of
ACTION: {{"type": "NAVIGATE_TO_PRODUCT", "productName": "Product Name"}}
ACTION: {{"type": "NAVIGATE_TO_CREATOR", "creatorName": "Creator Name"}}
Answer every other question normally."""


def system_prompt_for(store: AppStore, user: User) -> str:
    template = SELLER_SYSTEM_PROMPT if can_sell(user) else CUSTOMER_SYSTEM_PROMPT
    return template.format(language=LANGUAGE_NAMES[store.state.language])


def parse_assistant_action(text: str) -> Optional[AssistantAction]:
    """The action in a reply starting with ``ACTION:``, or None for plain text."""
    text = text.strip()
    if not text.startswith(ACTION_PREFIX):
        return None
    try:
        return AssistantAction.model_validate(json.loads(text[len(ACTION_PREFIX):].strip()))
    except (ValueError, ValidationError) as e:
        logger.warning("Could not parse assistant action: %s", e)
        return None


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


def seller_report(store: AppStore, seller_id: str, report_type: Optional[str]) -> str:
    """Plain-text report over the seller's own products."""
    products = [p for p in store.state.all_products if p.creator.id == seller_id]

    if report_type == "most_viewed":
        top = sorted(products, key=lambda p: p.view_count, reverse=True)[:5]
        lines = [f"{i}. {p.name} - {p.view_count} views" for i, p in enumerate(top, 1)]
        return "Here are your top 5 most viewed products:\n\n" + "\n".join(lines)

    if report_type == "sales":
        top = sorted(products, key=lambda p: p.sales_count, reverse=True)[:5]
        lines = [f"{i}. {p.name} - {p.sales_count} units sold" for i, p in enumerate(top, 1)]
        return "Here are your top 5 best-selling products:\n\n" + "\n".join(lines)

    if report_type == "revenue":
        units = sum(p.sales_count for p in products)
        revenue = sum(p.sales_count * p.price for p in products)
        return (
            "Your total revenue summary:\n\n"
            f"Total Products: {len(products)}\n"
            f"Total Units Sold: {units}\n"
            f"Total Revenue: ${revenue:.2f}"
        )

    return "Could not generate the report."


def apply_assistant_action(store: AppStore, action: AssistantAction) -> str:
    """Carry out an action and return the confirmation shown to the user."""
    if action.type == "NAVIGATE_TO_PRODUCT":
        query = (action.product_name or "").lower()
        product = next(
            (p for p in store.state.all_products if query and query in p.name.lower()), None
        )
        if product is None:
            return f'Sorry, I couldn\'t find a product named "{action.product_name}".'
        navigate_to_product(store, product.id, product.variants[0].name)
        return f'OK, here is "{product.name}".'

    if action.type == "NAVIGATE_TO_CREATOR":
        query = (action.creator_name or "").lower()
        creator = next(
            (u for u in store.state.all_users if query and query in u.username.lower()), None
        )
        if creator is None:
            return f'Sorry, I couldn\'t find a brand named "{action.creator_name}".'
        filter_by_creator(store, creator.id)
        return f'Sure, here is the profile for "{creator.username}".'

    user = require_current_user(store)
    if not can_sell(user):
        raise InvalidOperation("Reports are only available to sellers")
    return seller_report(store, user.id, action.report_type)


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------


async def ask_assistant(store: AppStore, message: str) -> AssistantReply:
    """Send one user turn; the reply and any action result join the history."""
    user = require_current_user(store)
    history = [{"role": m.role, "content": m.content} for m in store.assistant_history]

    action = None
    try:
        response = await call_llm(
            system_prompt_for(store, user), message, temperature=0.7, history=history
        )
    except ExternalServiceError as e:
        logger.warning("Assistant unavailable: %s", e.message)
        reply = OFFLINE_REPLY
    else:
        reply = response.content.strip()
        action = parse_assistant_action(reply)
        if action is not None:
            reply = apply_assistant_action(store, action)

    with store.transaction(persist=False):
        store.assistant_history.append(AssistantMessage(role="user", content=message))
        store.assistant_history.append(AssistantMessage(role="assistant", content=reply))

    logger.info(
        "Assistant replied",
        extra={"extra_fields": {"user_id": user.id, "action": action.type if action else None}},
    )
    return AssistantReply(reply=reply, action=action)


def clear_assistant(store: AppStore) -> None:
    with store.transaction(persist=False):
        store.assistant_history = []
