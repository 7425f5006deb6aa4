"""Brand teams: sales reps attached to a brand owner, and their commission."""

from libs.common.logging import get_logger
from services.deck_service.errors import (
    EntityNotFound,
    InvalidOperation,
    PermissionDenied,
)
from services.deck_service.models import UserRole
from services.deck_service.schemas import User
from services.deck_service.services.session_service import can_manage_team
from services.deck_service.store import AppStore

logger = get_logger(__name__)

MIN_COMMISSION_RATE = 0.0
MAX_COMMISSION_RATE = 100.0


def _get_user(store: AppStore, user_id: str) -> User:
    user = store.find_user(user_id)
    if user is None:
        raise EntityNotFound(f"User {user_id} not found")
    return user


def _require_owner(store: AppStore, owner_id: str) -> User:
    current = store.current_user
    if current is None or current.id != owner_id or not can_manage_team(current):
        raise PermissionDenied("Only the brand owner can manage this team")
    return current


def team_members(store: AppStore, owner_id: str) -> list[User]:
    owner = _get_user(store, owner_id)
    return [u for u in (store.find_user(i) for i in owner.team_member_ids) if u is not None]


def add_team_member(store: AppStore, owner_id: str, member_id: str) -> User:
    """Attach ``member_id`` to the owner's team as a sales rep."""
    owner = _require_owner(store, owner_id)
    member = _get_user(store, member_id)
    if member.id == owner.id:
        raise InvalidOperation("A brand owner cannot join their own team")
    if member.role == UserRole.BRAND_OWNER or member.team_member_ids:
        raise InvalidOperation(f"{member.username} runs their own brand and cannot join a team")
    if member.company_id and member.company_id != owner.id:
        raise InvalidOperation(f"{member.username} already belongs to another team")

    with store.transaction():
        if member.id not in owner.team_member_ids:
            owner.team_member_ids = owner.team_member_ids + [member.id]
        member.role = UserRole.SALES_REP
        member.company_id = owner.id

    logger.info(
        "Team member added",
        extra={"extra_fields": {"owner_id": owner.id, "member_id": member.id}},
    )
    return member


def remove_team_member(store: AppStore, owner_id: str, member_id: str) -> User:
    """Detach a rep; they go back to being a customer."""
    owner = _require_owner(store, owner_id)
    member = _get_user(store, member_id)
    if member.id not in owner.team_member_ids:
        raise InvalidOperation(f"{member.username} is not on this team")

    with store.transaction():
        owner.team_member_ids = [i for i in owner.team_member_ids if i != member.id]
        member.company_id = None
        member.commission_rate = None
        member.role = UserRole.CUSTOMER

    logger.info(
        "Team member removed",
        extra={"extra_fields": {"owner_id": owner.id, "member_id": member.id}},
    )
    return member


def update_commission_rate(store: AppStore, member_id: str, rate: float) -> User:
    member = _get_user(store, member_id)
    if not member.company_id:
        raise InvalidOperation(f"{member.username} is not on a team")
    _require_owner(store, member.company_id)
    if not MIN_COMMISSION_RATE <= rate <= MAX_COMMISSION_RATE:
        raise InvalidOperation("Commission rate must be between 0 and 100")

    with store.transaction():
        member.commission_rate = rate
    return member
