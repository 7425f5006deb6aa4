"""Sales reports for reps and brand owners."""

from datetime import datetime
from typing import Optional

from libs.common.currency import round_money
from libs.common.datetime_utils import utc_now
from services.deck_service.models import ReportPeriod
from services.deck_service.schemas import (
    ProductSales,
    RepSales,
    SaleRecord,
    SalesReport,
    SalesTotals,
)
from services.deck_service.store import AppStore

TOP_N = 5
UNKNOWN_PRODUCT_NAME = "Unknown product"


def in_period(timestamp: datetime, period: ReportPeriod, now: datetime) -> bool:
    """Same calendar day, month or year as ``now`` (compared in ``now``'s zone)."""
    if timestamp.tzinfo is not None and now.tzinfo is not None:
        timestamp = timestamp.astimezone(now.tzinfo)
    if period == ReportPeriod.DAY:
        return timestamp.date() == now.date()
    if period == ReportPeriod.MONTH:
        return (timestamp.year, timestamp.month) == (now.year, now.month)
    return timestamp.year == now.year


def _totals(sales: list[SaleRecord]) -> SalesTotals:
    return SalesTotals(
        total_revenue=round_money(sum(s.total_amount for s in sales)),
        total_commission=round_money(sum(s.commission_amount for s in sales)),
        total_items_sold=sum(s.items_sold for s in sales),
    )


def _top_products(store: AppStore, sales: list[SaleRecord]) -> list[ProductSales]:
    by_product: dict[str, ProductSales] = {}
    for sale in sales:
        for item in sale.items:
            entry = by_product.get(item.product_id)
            if entry is None:
                product = store.find_product(item.product_id)
                name = item.product_name or (product.name if product else UNKNOWN_PRODUCT_NAME)
                by_product[item.product_id] = ProductSales(
                    product_id=item.product_id, name=name, quantity=item.quantity
                )
            else:
                entry.quantity += item.quantity
    ranked = sorted(by_product.values(), key=lambda p: p.quantity, reverse=True)
    return ranked[:TOP_N]


def _top_reps(store: AppStore, sales: list[SaleRecord]) -> list[RepSales]:
    by_rep: dict[str, RepSales] = {}
    for sale in sales:
        rep = store.find_user(sale.salesperson_id)
        if rep is None:
            continue
        entry = by_rep.get(rep.id)
        if entry is None:
            by_rep[rep.id] = RepSales(
                user_id=rep.id,
                name=rep.username,
                avatar_url=rep.avatar_url,
                total_sales=sale.total_amount,
                commission=sale.commission_amount,
            )
        else:
            entry.total_sales += sale.total_amount
            entry.commission += sale.commission_amount
    ranked = sorted(by_rep.values(), key=lambda r: r.total_sales, reverse=True)
    return ranked[:TOP_N]


def sales_report(
    store: AppStore,
    period: ReportPeriod,
    salesperson_id: Optional[str] = None,
    brand_owner_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> SalesReport:
    """
    Aggregate the sale records of one period.

    Filter by ``salesperson_id`` for a rep's own report or by
    ``brand_owner_id`` for a brand's report; both filters combine.
    Records keep their newest-first order.
    """
    now = now or utc_now()
    sales = [
        s
        for s in store.state.all_sales
        if (salesperson_id is None or s.salesperson_id == salesperson_id)
        and (brand_owner_id is None or s.brand_owner_id == brand_owner_id)
        and in_period(s.timestamp, period, now)
    ]
    return SalesReport(
        period=period,
        totals=_totals(sales),
        sales=sales,
        top_products=_top_products(store, sales),
        top_sales_reps=_top_reps(store, sales),
    )
