"""Reports router: sales for the logged-in rep or brand owner."""

from fastapi import APIRouter, Depends, Query
from services.deck_service.models import ReportPeriod, UserRole
from services.deck_service.routers._helpers import dump, get_current_user, get_store
from services.deck_service.schemas import User
from services.deck_service.services import report_service
from services.deck_service.store import AppStore

router = APIRouter(tags=["reports"])


@router.get("/reports/sales")
async def sales_report(
    period: ReportPeriod = Query(ReportPeriod.MONTH),
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    """Brand owners see their brand's sales; everyone else sees their own."""
    if user.role == UserRole.BRAND_OWNER:
        report = report_service.sales_report(store, period, brand_owner_id=user.id)
    else:
        report = report_service.sales_report(store, period, salesperson_id=user.id)
    return dump(report)
