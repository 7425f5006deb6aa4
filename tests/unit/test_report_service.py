"""Unit tests for sales reports over the seeded sale records.

Seed sales are stamped relative to FIXED_NOW: sale1 at now, sale2 a day
earlier (same month), sale3 31 days earlier (same year).
"""

from datetime import datetime, timedelta, timezone

import pytest
from services.deck_service.models import ReportPeriod
from services.deck_service.services.report_service import in_period, sales_report
from tests.factories import FIXED_NOW, SaleRecordFactory


@pytest.mark.unit
@pytest.mark.parametrize(
    "period,revenue,commission,items",
    [
        (ReportPeriod.DAY, 780.0, 78.0, 3),
        (ReportPeriod.MONTH, 1200.0, 120.0, 4),
        (ReportPeriod.YEAR, 2100.0, 210.0, 9),
    ],
)
def test_totals_per_period(store, period, revenue, commission, items):
    report = sales_report(store, period, now=FIXED_NOW)

    assert report.totals.total_revenue == revenue
    assert report.totals.total_commission == commission
    assert report.totals.total_items_sold == items


@pytest.mark.unit
def test_top_products_by_quantity(store):
    report = sales_report(store, ReportPeriod.YEAR, now=FIXED_NOW)

    assert [(p.product_id, p.quantity) for p in report.top_products] == [
        ("prod2", 7),
        ("prod1", 2),
    ]


@pytest.mark.unit
def test_top_reps(store):
    report = sales_report(store, ReportPeriod.MONTH, now=FIXED_NOW)

    [rep] = report.top_sales_reps
    assert rep.user_id == "user5"
    assert rep.total_sales == 1200.0
    assert rep.commission == 120.0


@pytest.mark.unit
def test_filters_by_salesperson_and_brand(store):
    store.state.all_sales.insert(
        0, SaleRecordFactory.create(salesperson_id="user6", brand_owner_id="user2", timestamp=FIXED_NOW)
    )

    mine = sales_report(store, ReportPeriod.DAY, salesperson_id="user6", now=FIXED_NOW)
    brand = sales_report(store, ReportPeriod.DAY, brand_owner_id="user1", now=FIXED_NOW)

    assert [s.brand_owner_id for s in mine.sales] == ["user2"]
    assert [s.id for s in brand.sales] == ["sale1"]


@pytest.mark.unit
def test_report_keeps_newest_first(store):
    report = sales_report(store, ReportPeriod.YEAR, now=FIXED_NOW)

    assert [s.id for s in report.sales] == ["sale1", "sale2", "sale3"]


@pytest.mark.unit
def test_empty_report(store):
    report = sales_report(store, ReportPeriod.DAY, salesperson_id="nobody", now=FIXED_NOW)

    assert report.totals.total_revenue == 0
    assert report.sales == []
    assert report.top_products == []


@pytest.mark.unit
def test_in_period_compares_in_local_zone():
    tz = timezone(timedelta(hours=3))
    now = datetime(2024, 6, 15, 1, 0, tzinfo=tz)
    # 22:30 UTC on the 14th is 01:30 on the 15th in UTC+3.
    late_utc = datetime(2024, 6, 14, 22, 30, tzinfo=timezone.utc)

    assert in_period(late_utc, ReportPeriod.DAY, now) is True
    assert in_period(late_utc - timedelta(hours=3), ReportPeriod.DAY, now) is False
    assert in_period(datetime(2023, 12, 31, tzinfo=tz), ReportPeriod.YEAR, now) is False
