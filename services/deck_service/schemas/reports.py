"""Sales report schemas."""

from pydantic import Field
from services.deck_service.models import ReportPeriod
from services.deck_service.schemas.base import CamelModel
from services.deck_service.schemas.commerce import SaleRecord


class SalesTotals(CamelModel):
    total_revenue: float = 0.0
    total_commission: float = 0.0
    total_items_sold: int = 0


class ProductSales(CamelModel):
    product_id: str
    name: str
    quantity: int


class RepSales(CamelModel):
    user_id: str
    name: str
    avatar_url: str = ""
    total_sales: float
    commission: float


class SalesReport(CamelModel):
    period: ReportPeriod
    totals: SalesTotals
    sales: list[SaleRecord] = Field(default_factory=list)
    top_products: list[ProductSales] = Field(default_factory=list)
    top_sales_reps: list[RepSales] = Field(default_factory=list)
