from datetime import datetime
from decimal import Decimal

import pytest

from servicedesk.core.errors import ValidationFailed
from servicedesk.domain.aggregates import (
    invoice_amounts, line_total, order_total_amount, positive_money, positive_quantity,
    session_total_cost, settle_invoice, sum_line_totals, to_money,
)


def test_line_total_rounds_half_up_to_cents():
    assert line_total(Decimal("3"), Decimal("10.00")) == Decimal("30.00")
    assert line_total(Decimal("1.255"), Decimal("2.00")) == Decimal("2.51")
    assert line_total(Decimal("0.333"), Decimal("0.10")) == Decimal("0.03")


def test_parent_totals():
    assert sum_line_totals([Decimal("30.00"), Decimal("12.50"), None]) == Decimal("42.50")
    assert sum_line_totals([]) == Decimal("0.00")
    assert order_total_amount(Decimal("30"), Decimal("10"), Decimal("5")) == Decimal("45.00")
    assert session_total_cost(Decimal("80"), None) == Decimal("80.00")


@pytest.mark.parametrize(
    "subtotal, rate, tax, total",
    [
        ("100.00", "20", "20.00", "120.00"),
        ("100.00", "0", "0.00", "100.00"),
        ("19.99", "5.5", "1.10", "21.09"),
    ],
)
def test_invoice_amounts(subtotal, rate, tax, total):
    assert invoice_amounts(Decimal(subtotal), Decimal(rate)) == (Decimal(tax), Decimal(total))


def test_settle_invoice_is_bidirectional():
    now = datetime(2026, 5, 1, 12, 0)
    earlier = datetime(2026, 4, 1, 8, 0)

    assert settle_invoice(Decimal("119.99"), Decimal("120.00"), None, now) == ("draft", None)
    assert settle_invoice(Decimal("120.00"), Decimal("120.00"), None, now) == ("paid", now)
    # already paid keeps its original PaidAt
    assert settle_invoice(Decimal("150.00"), Decimal("120.00"), earlier, now) == ("paid", earlier)
    # reduction below the total goes back to draft
    assert settle_invoice(Decimal("10.00"), Decimal("120.00"), earlier, now) == ("draft", None)


@pytest.mark.parametrize("bad", [None, "abc", True, float("nan"), "Infinity"])
def test_to_money_rejects_garbage(bad):
    with pytest.raises(ValidationFailed):
        to_money(bad)


def test_positive_checks():
    assert positive_money("10.005", "UnitPrice") == Decimal("10.01")
    assert positive_quantity("2.5") == Decimal("2.500")
    with pytest.raises(ValidationFailed):
        positive_money(0, "UnitPrice")
    with pytest.raises(ValidationFailed):
        positive_quantity(Decimal("-1"))
