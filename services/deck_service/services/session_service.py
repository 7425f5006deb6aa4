"""Session and identity: login, registration, logout, credentials, profile."""

from typing import Optional

from libs.auth.passwords import hash_password, verify_password
from libs.common.logging import get_logger
from services.deck_service.errors import (
    EmailExists,
    IncorrectCurrentPassword,
    InvalidCredentials,
    InvalidOperation,
    NotAuthenticated,
    PhoneExists,
    UserNotFound,
)
from services.deck_service.models import Language, UserRole, ViewTag
from services.deck_service.navigation import ViewFrame
from services.deck_service.schemas import Address, Contact, OrderedIdSet, User, new_id
from services.deck_service.store import AppStore

logger = get_logger(__name__)

AVATAR_URL_TEMPLATE = "https://picsum.photos/seed/{username}/200"


# ---------------------------------------------------------------------------
# Lookups and capabilities
# ---------------------------------------------------------------------------


def _email_matches(user: User, email: str) -> bool:
    return bool(user.contact.email) and user.contact.email.lower() == email.lower()


def _phone_matches(user: User, phone: str) -> bool:
    return bool(user.contact.phone) and user.contact.phone == phone


def find_by_identifier(store: AppStore, identifier: str) -> Optional[User]:
    """An identifier containing ``@`` is an email (any case); otherwise a phone."""
    if "@" in identifier:
        return next((u for u in store.state.all_users if _email_matches(u, identifier)), None)
    return next((u for u in store.state.all_users if _phone_matches(u, identifier)), None)


def require_current_user(store: AppStore) -> User:
    user = store.current_user
    if user is None:
        raise NotAuthenticated("You need to log in first")
    return user


def can_sell(user: Optional[User]) -> bool:
    return user is not None and user.role in (UserRole.BRAND_OWNER, UserRole.SALES_REP)


def can_manage_team(user: Optional[User]) -> bool:
    return user is not None and user.role == UserRole.BRAND_OWNER


def can_go_live(user: Optional[User]) -> bool:
    return can_sell(user)


# ---------------------------------------------------------------------------
# Session transitions
# ---------------------------------------------------------------------------


def login(store: AppStore, identifier: str, password: str) -> User:
    user = find_by_identifier(store, identifier.strip())
    if user is None or not verify_password(password, user.password_salt, user.password_hash):
        logger.info("Failed login attempt")
        raise InvalidCredentials("Invalid email/phone or password")

    with store.transaction():
        store.state.current_user_id = user.id
        store.assistant_history = []
        store.navigation.replace([ViewFrame(ViewTag.FEED)])

    logger.info("User %s logged in", user.id)
    return user


def register(
    store: AppStore,
    username: str,
    password: str,
    role: UserRole = UserRole.CUSTOMER,
    email: Optional[str] = None,
    phone: Optional[str] = None,
) -> User:
    """Create an account and log it in.

    Only one contact method is checked: the email when given, else the phone.
    Sales reps cannot sign up directly; a brand owner adds them to a team.
    """
    if role == UserRole.SALES_REP:
        raise InvalidOperation("Sales reps join through a brand owner's team")
    if email:
        if any(_email_matches(u, email) for u in store.state.all_users):
            raise EmailExists("This email is already registered")
    elif phone:
        if any(_phone_matches(u, phone) for u in store.state.all_users):
            raise PhoneExists("This phone number is already registered")
    else:
        raise InvalidOperation("An email or phone number is required")

    password_hash, password_salt = hash_password(password)
    user = User(
        id=new_id("user"),
        username=username,
        avatar_url=AVATAR_URL_TEMPLATE.format(username=username),
        contact=Contact(email=email or "", phone=phone or ""),
        address=Address(),
        password_hash=password_hash,
        password_salt=password_salt,
        role=role,
    )

    root = ViewTag.PROFILE if role == UserRole.BRAND_OWNER else ViewTag.FEED
    with store.transaction():
        store.state.all_users.append(user)
        store.state.current_user_id = user.id
        store.navigation.replace([ViewFrame(root)])

    logger.info(
        "Registered user %s",
        user.id,
        extra={"extra_fields": {"role": role.value}},
    )
    return user


def logout(store: AppStore) -> None:
    """Full reset: session, carts, sets, notifications and the saved snapshot."""
    user_id = store.state.current_user_id
    with store.transaction(persist=False):
        state = store.state
        state.current_user_id = None
        state.cart = []
        state.liked_product_ids = OrderedIdSet()
        state.saved_product_ids = OrderedIdSet()
        state.archived_chat_ids = OrderedIdSet()
        state.notifications = []
        store.editing_pre_order = None
        store.assistant_history = []
        store.navigation.replace([ViewFrame(ViewTag.FEED)])
    store.purge()
    logger.info("User %s logged out", user_id)


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


def change_password(store: AppStore, current_password: str, new_password: str) -> None:
    user = require_current_user(store)
    if not verify_password(current_password, user.password_salt, user.password_hash):
        raise IncorrectCurrentPassword("Current password is incorrect")

    with store.transaction():
        user.password_hash, user.password_salt = hash_password(new_password)
    logger.info("Password changed for user %s", user.id)


def reset_password(store: AppStore, identifier: str, new_password: str) -> int:
    """Set a new password on every account matching the email or phone.

    Returns the number of accounts updated; raises ``UserNotFound`` for none.
    """
    identifier = identifier.strip()
    matches = [
        u
        for u in store.state.all_users
        if _email_matches(u, identifier) or _phone_matches(u, identifier)
    ]
    if not matches:
        raise UserNotFound("No account matches that email or phone")

    with store.transaction():
        for user in matches:
            user.password_hash, user.password_salt = hash_password(new_password)

    logger.info("Password reset for %d account(s)", len(matches))
    return len(matches)


# ---------------------------------------------------------------------------
# Profile and settings
# ---------------------------------------------------------------------------


def update_profile(
    store: AppStore,
    *,
    username: Optional[str] = None,
    bio: Optional[str] = None,
    avatar_url: Optional[str] = None,
    original_avatar_url: Optional[str] = None,
    contact: Optional[Contact] = None,
    address: Optional[Address] = None,
    go_back: bool = True,
) -> User:
    user = require_current_user(store)
    with store.transaction():
        if username is not None:
            user.username = username
        if bio is not None:
            user.bio = bio
        if avatar_url is not None:
            user.avatar_url = avatar_url
        if original_avatar_url is not None:
            user.original_avatar_url = original_avatar_url
        if contact is not None:
            user.contact = contact
        if address is not None:
            user.address = address
        if go_back:
            store.navigation.pop()
    return user


def update_settings(
    store: AppStore,
    *,
    language: Optional[Language] = None,
    voice_messages_enabled: Optional[bool] = None,
    payment_provider_id: Optional[str] = None,
) -> User:
    user = require_current_user(store)
    with store.transaction():
        if language is not None:
            user.language = language
            store.state.language = language
        if voice_messages_enabled is not None:
            user.voice_messages_enabled = voice_messages_enabled
        if payment_provider_id is not None:
            user.payment_provider_id = payment_provider_id or None
    return user


def set_language(store: AppStore, language: Language) -> Language:
    with store.transaction():
        store.state.language = language
    return language
