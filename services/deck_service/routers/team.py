"""Team router: a brand owner's sales reps and their commission."""

from fastapi import APIRouter, Depends
from services.deck_service.routers._helpers import dump, dump_all, get_current_user, get_store
from services.deck_service.schemas import User
from services.deck_service.schemas.requests import CommissionRateRequest, TeamMemberRequest
from services.deck_service.services import team_service
from services.deck_service.store import AppStore

router = APIRouter(tags=["team"])


@router.get("/team")
async def list_team(
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    return dump_all(team_service.team_members(store, user.id))


@router.post("/team/members")
async def add_team_member(
    payload: TeamMemberRequest,
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    return dump(team_service.add_team_member(store, user.id, payload.member_id))


@router.delete("/team/members/{member_id}")
async def remove_team_member(
    member_id: str,
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    return dump(team_service.remove_team_member(store, user.id, member_id))


@router.put("/team/members/{member_id}/commission")
async def update_commission_rate(
    member_id: str,
    payload: CommissionRateRequest,
    store: AppStore = Depends(get_store),
    _: User = Depends(get_current_user),
):
    return dump(team_service.update_commission_rate(store, member_id, payload.rate))
