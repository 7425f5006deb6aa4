"""Money helpers for prices, discounts and commissions.

Prices are plain floats in the shop currency (USD in the seed catalog), the
way the client has always stored them. Rounding to cents happens only for
display and reporting, never on stored totals.

Conversion chain
----------------
price × (1 − pct/100) → discounted price
total × (rate/100)    → commission
"""

from __future__ import annotations

# ─── constants ───────────────────────────────────────────────────────────────

CENTS_PER_UNIT: int = 100
MAX_DISCOUNT_PERCENT: int = 99
MIN_DISCOUNT_PERCENT: int = 1


# ─── helpers ─────────────────────────────────────────────────────────────────


def percentage_of(amount: float, percent: float) -> float:
    """Return ``percent`` % of ``amount``. 10% of 100.0 = 10.0."""
    return amount * (percent / 100)


def apply_discount(price: float, percent: float) -> float:
    """Return the price after a percentage discount."""
    return price * (1 - percent / 100)


def round_money(amount: float) -> float:
    """Round to cents (half-up) for display."""
    return round(amount * CENTS_PER_UNIT + 1e-9) / CENTS_PER_UNIT


def format_money(amount: float) -> str:
    """Format an amount the way the basket shows it, e.g. ``$79.00``."""
    return f"${round_money(amount):.2f}"
