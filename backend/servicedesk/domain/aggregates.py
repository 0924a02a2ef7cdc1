# backend/servicedesk/domain/aggregates.py
"""
Money math behind every derived column.

Pure functions over Decimal; the services call them after reading the
current child rows so the stored aggregates always match their inputs.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Optional, Tuple

from ..core.errors import ValidationFailed
from .constants import INV_DRAFT, INV_PAID

MONEY_PLACES = Decimal("0.01")
QTY_PLACES = Decimal("0.001")
ZERO = Decimal("0.00")


def _to_decimal(val, places: Decimal, field: str) -> Decimal:
    if val is None or isinstance(val, bool):
        raise ValidationFailed(f"{field} must be a number")
    try:
        d = val if isinstance(val, Decimal) else Decimal(str(val))
        if not d.is_finite():
            raise InvalidOperation
        return d.quantize(places, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationFailed(f"{field} must be a valid decimal")


def to_money(val, field: str = "Amount") -> Decimal:
    return _to_decimal(val, MONEY_PLACES, field)


def money_or_zero(val) -> Decimal:
    return ZERO if val is None else to_money(val)


def positive_money(val, field: str) -> Decimal:
    d = to_money(val, field)
    if d <= 0:
        raise ValidationFailed(f"{field} must be > 0")
    return d


def non_negative_money(val, field: str) -> Decimal:
    d = to_money(val, field)
    if d < 0:
        raise ValidationFailed(f"{field} must be >= 0")
    return d


def positive_quantity(val, field: str = "Quantity") -> Decimal:
    d = _to_decimal(val, QTY_PLACES, field)
    if d <= 0:
        raise ValidationFailed(f"{field} must be > 0")
    return d


# ---- Line items ----
def line_total(quantity, unit_price) -> Decimal:
    return (Decimal(quantity) * Decimal(unit_price)).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def sum_line_totals(totals: Iterable) -> Decimal:
    return sum((money_or_zero(t) for t in totals), ZERO)


# ---- Parents ----
def order_total_amount(subtotal, taxes, delivery_fee) -> Decimal:
    return money_or_zero(subtotal) + money_or_zero(taxes) + money_or_zero(delivery_fee)


def session_total_cost(labor_cost, materials_cost) -> Decimal:
    return money_or_zero(labor_cost) + money_or_zero(materials_cost)


def invoice_amounts(subtotal, tax_rate) -> Tuple[Decimal, Decimal]:
    """(TaxAmount, TotalAmount) for a subtotal and a percentage rate."""
    sub = money_or_zero(subtotal)
    tax = (sub * Decimal(tax_rate) / Decimal(100)).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
    return tax, sub + tax


def settle_invoice(
    paid_amount, total_amount, paid_at: Optional[datetime], now: datetime
) -> Tuple[str, Optional[datetime]]:
    """
    Paid iff PaidAmount >= TotalAmount, in both directions.
    PaidAt is stamped on the move to paid, kept while paid, cleared on the way back.
    """
    if money_or_zero(paid_amount) >= money_or_zero(total_amount):
        return INV_PAID, paid_at or now
    return INV_DRAFT, None
