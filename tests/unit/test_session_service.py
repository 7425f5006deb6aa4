"""Unit tests for login, registration, logout and credential management."""

import pytest
from pydantic import ValidationError
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
from services.deck_service.schemas import CartItem, Contact
from services.deck_service.schemas.requests import RegisterRequest
from services.deck_service.services.session_service import (
    can_go_live,
    can_manage_team,
    can_sell,
    change_password,
    find_by_identifier,
    login,
    logout,
    register,
    require_current_user,
    reset_password,
    set_language,
    update_profile,
    update_settings,
)

# ---------------------------------------------------------------------------
# login
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_login_with_email_is_case_insensitive(store):
    user = login(store, "CONTACT@AtelierAura.com", "password123")

    assert user.id == "user1"
    assert store.current_user.id == "user1"
    assert store.navigation.current.view == ViewTag.FEED


@pytest.mark.unit
def test_login_with_phone(store):
    user = login(store, "555-0104", "admin123")

    assert user.id == "user4"


@pytest.mark.unit
def test_login_identifier_without_at_is_not_an_email(store):
    """Only identifiers containing '@' are matched against emails."""
    with pytest.raises(InvalidCredentials):
        login(store, "contact.atelieraura.com", "password123")


@pytest.mark.unit
def test_login_wrong_password(store):
    with pytest.raises(InvalidCredentials):
        login(store, "contact@atelieraura.com", "wrong")

    assert store.current_user is None


@pytest.mark.unit
def test_require_current_user_when_logged_out(store):
    with pytest.raises(NotAuthenticated):
        require_current_user(store)


# ---------------------------------------------------------------------------
# register
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_register_customer_logs_in_on_feed(store):
    user = register(store, "Nina", "pw12345", email="nina@example.com")

    assert store.current_user.id == user.id
    assert user.role == UserRole.CUSTOMER
    assert user.avatar_url == "https://picsum.photos/seed/Nina/200"
    assert store.navigation.current.view == ViewTag.FEED
    assert find_by_identifier(store, "NINA@example.com").id == user.id


@pytest.mark.unit
def test_register_brand_owner_lands_on_profile(store):
    register(store, "Maison", "pw12345", role=UserRole.BRAND_OWNER, phone="555-0999")

    assert store.navigation.current.view == ViewTag.PROFILE
    assert store.current_user.role == UserRole.BRAND_OWNER


@pytest.mark.unit
def test_register_duplicate_email_any_case(store):
    with pytest.raises(EmailExists):
        register(store, "Copy", "pw", email="ALEX.CHEN@example.com")


@pytest.mark.unit
def test_register_duplicate_phone(store):
    with pytest.raises(PhoneExists):
        register(store, "Copy", "pw", phone="555-0101")


@pytest.mark.unit
def test_register_checks_email_only_when_both_given(store):
    """With an email present, a taken phone is not checked."""
    user = register(store, "Both", "pw", email="both@example.com", phone="555-0101")

    assert user.contact.phone == "555-0101"


@pytest.mark.unit
def test_register_requires_a_contact(store):
    with pytest.raises(InvalidOperation):
        register(store, "Nobody", "pw")


@pytest.mark.unit
def test_register_rejects_sales_rep_role(store):
    users_before = len(store.state.all_users)

    with pytest.raises(InvalidOperation):
        register(store, "Rep", "pw", role=UserRole.SALES_REP, email="rep@example.com")

    assert len(store.state.all_users) == users_before
    assert store.current_user is None


@pytest.mark.unit
def test_register_request_rejects_sales_rep_role():
    with pytest.raises(ValidationError):
        RegisterRequest(username="Rep", password="pw", role="sales_rep", email="rep@example.com")

    assert RegisterRequest(username="Maison", password="pw", role="brand_owner").role == (
        UserRole.BRAND_OWNER
    )


@pytest.mark.unit
def test_registered_password_is_not_stored_plain(store):
    user = register(store, "Hash", "plain-secret", email="hash@example.com")

    assert "plain-secret" not in user.password_hash
    assert "passwordHash" not in user.public_dict()


# ---------------------------------------------------------------------------
# logout
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_logout_resets_session_and_purges_snapshot(brand_store, storage):
    with brand_store.transaction():
        brand_store.state.cart.append(CartItem(product_id="prod1", variant_name="Beige", size="M"))
        brand_store.state.liked_product_ids.add("prod1")
        brand_store.state.saved_product_ids.add("prod2")
        brand_store.state.archived_chat_ids.add("chat1")
    assert storage.get_item(brand_store.key) is not None

    logout(brand_store)

    state = brand_store.state
    assert brand_store.current_user is None
    assert state.cart == []
    assert state.liked_product_ids == set()
    assert state.saved_product_ids == set()
    assert state.archived_chat_ids == set()
    assert state.notifications == []
    assert storage.get_item(brand_store.key) is None
    # Catalog data survives in memory.
    assert state.find_user("user1") is not None


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_change_password(brand_store):
    change_password(brand_store, "password123", "n3w-pass")
    logout(brand_store)

    assert login(brand_store, "contact@atelieraura.com", "n3w-pass").id == "user1"


@pytest.mark.unit
def test_change_password_wrong_current(brand_store):
    with pytest.raises(IncorrectCurrentPassword):
        change_password(brand_store, "nope", "n3w-pass")


@pytest.mark.unit
def test_reset_password_by_email(store):
    updated = reset_password(store, "alex.chen@example.com", "reset-pass")

    assert updated == 1
    assert login(store, "alex.chen@example.com", "reset-pass").id == "user6"


@pytest.mark.unit
def test_reset_password_unknown_identifier(store):
    with pytest.raises(UserNotFound):
        reset_password(store, "ghost@example.com", "x")


# ---------------------------------------------------------------------------
# Profile and settings
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_update_profile_returns_to_previous_view(brand_store):
    brand_store.navigation.push(ViewTag.EDIT_PROFILE)

    user = update_profile(
        brand_store,
        bio="New bio",
        contact=Contact(email="hello@atelieraura.com", phone="555-0101"),
    )

    assert user.bio == "New bio"
    assert user.contact.email == "hello@atelieraura.com"
    assert user.username == "AtelierAura"
    assert brand_store.navigation.current.view == ViewTag.FEED


@pytest.mark.unit
def test_update_settings_changes_app_language(customer_store):
    user = update_settings(
        customer_store, language=Language.TR, voice_messages_enabled=True, payment_provider_id=""
    )

    assert user.language == Language.TR
    assert customer_store.state.language == Language.TR
    assert user.voice_messages_enabled is True
    assert user.payment_provider_id is None


@pytest.mark.unit
def test_set_language_without_session(store):
    assert set_language(store, Language.DE) == Language.DE
    assert store.state.language == Language.DE


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_capabilities_by_role(store):
    owner, rep, customer = (store.find_user(uid) for uid in ("user1", "user5", "user6"))

    assert can_sell(owner) and can_sell(rep) and not can_sell(customer)
    assert can_manage_team(owner) and not can_manage_team(rep)
    assert can_go_live(rep) and not can_go_live(None)
