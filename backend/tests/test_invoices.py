from datetime import date, timedelta
from decimal import Decimal

import pytest

from servicedesk.core.errors import Conflict, Forbidden, NotFound, ValidationFailed
from servicedesk.models import Invoice
from servicedesk.services import invoice_service as svc


@pytest.fixture
def make_invoice(db, laundry_manager):
    def _make(**fields):
        data = {"ClientID": 501, "Subtotal": Decimal("100.00")}
        data.update(fields)
        return svc.create_invoice(db, laundry_manager, data)
    return _make


def test_defaults(make_invoice):
    inv = make_invoice()
    today = date.today()
    assert inv.InvoiceNumber == f"INV-LAU-{today.year}-0001"
    assert inv.IssueDate == today
    assert inv.DueDate == today + timedelta(days=30)
    assert inv.TaxRate == Decimal("20.00")
    assert (inv.TaxAmount, inv.TotalAmount) == (Decimal("20.00"), Decimal("120.00"))
    assert inv.Status_s == "draft" and inv.PaidAt is None
    assert make_invoice().InvoiceNumber == f"INV-LAU-{today.year}-0002"


def test_number_follows_issue_year(make_invoice):
    inv = make_invoice(IssueDate=date(2025, 12, 31))
    assert inv.InvoiceNumber == "INV-LAU-2025-0001"
    assert inv.DueDate == date(2026, 1, 30)


@pytest.mark.parametrize(
    "subtotal, rate, tax, total",
    [
        ("100.00", "0", "0.00", "100.00"),
        ("80.00", "5.5", "4.40", "84.40"),
        ("19.99", "20", "4.00", "23.99"),
    ],
)
def test_amounts(make_invoice, subtotal, rate, tax, total):
    inv = make_invoice(Subtotal=Decimal(subtotal), TaxRate=Decimal(rate))
    assert (inv.TaxAmount, inv.TotalAmount) == (Decimal(tax), Decimal(total))


def test_exact_payment_settles(make_invoice):
    inv = make_invoice(PaidAmount=Decimal("120.00"))
    assert inv.Status_s == "paid"
    assert inv.PaidAt is not None


def test_payment_reduction_moves_back_to_draft(db, laundry_manager, make_invoice):
    inv = make_invoice()
    inv = svc.update_invoice(db, laundry_manager, inv.InvoiceID, {"PaidAmount": Decimal("120.00")})
    paid_at = inv.PaidAt
    assert inv.Status_s == "paid" and paid_at is not None

    # still paid: PaidAt is kept
    inv = svc.update_invoice(db, laundry_manager, inv.InvoiceID, {"Notes": "thanks"})
    assert inv.PaidAt == paid_at

    inv = svc.update_invoice(db, laundry_manager, inv.InvoiceID, {"PaidAmount": Decimal("50.00")})
    assert inv.Status_s == "draft"
    assert inv.PaidAt is None


def test_raising_the_rate_unsettles(db, laundry_manager, make_invoice):
    inv = make_invoice(PaidAmount=Decimal("120.00"))
    inv = svc.update_invoice(db, laundry_manager, inv.InvoiceID, {"TaxRate": Decimal("21")})
    assert inv.TotalAmount == Decimal("121.00")
    assert inv.Status_s == "draft"


def test_record_payment_accumulates(db, laundry_manager, make_invoice):
    inv = make_invoice()
    inv = svc.record_payment(db, laundry_manager, inv.InvoiceID, Decimal("70"))
    assert (inv.PaidAmount, inv.Status_s) == (Decimal("70.00"), "draft")
    inv = svc.record_payment(db, laundry_manager, inv.InvoiceID, "50")
    assert (inv.PaidAmount, inv.Status_s) == (Decimal("120.00"), "paid")
    with pytest.raises(ValidationFailed):
        svc.record_payment(db, laundry_manager, inv.InvoiceID, Decimal("0"))


def test_delete_guard(db, laundry_manager, make_invoice):
    partly = make_invoice()
    svc.record_payment(db, laundry_manager, partly.InvoiceID, Decimal("1"))
    with pytest.raises(Conflict):
        svc.delete_invoice(db, laundry_manager, partly.InvoiceID)

    draft = make_invoice()
    invoice_id, number = draft.InvoiceID, draft.InvoiceNumber
    out = svc.delete_invoice(db, laundry_manager, invoice_id)
    assert out["InvoiceNumber"] == number
    assert db.get(Invoice, invoice_id) is None
    with pytest.raises(NotFound):
        svc.get_invoice(db, laundry_manager, invoice_id)


@pytest.mark.parametrize(
    "fields",
    [
        {"IssueDate": date(2026, 3, 10), "DueDate": date(2026, 3, 1)},
        {"Subtotal": Decimal("0")},
        {"TaxRate": Decimal("-1")},
        {"PaidAmount": Decimal("-5")},
        {"TaxAmount": Decimal("1")},
        {"Status_s": "paid"},
    ],
)
def test_create_validation(make_invoice, fields):
    with pytest.raises(ValidationFailed):
        make_invoice(**fields)


def test_due_date_checked_on_update(db, laundry_manager, make_invoice):
    inv = make_invoice(IssueDate=date(2026, 3, 10))
    with pytest.raises(ValidationFailed):
        svc.update_invoice(db, laundry_manager, inv.InvoiceID, {"DueDate": date(2026, 3, 9)})
    db.expire_all()
    assert db.get(Invoice, inv.InvoiceID).DueDate == date(2026, 4, 9)


def test_billing_capability_required(db, laundry_viewer, make_invoice):
    inv = make_invoice()
    with pytest.raises(Forbidden):
        svc.create_invoice(db, laundry_viewer, {"ClientID": 1, "Subtotal": Decimal("10")})
    with pytest.raises(Forbidden):
        svc.get_invoice(db, laundry_viewer, inv.InvoiceID)


def test_list_filters(db, laundry_manager, make_invoice):
    make_invoice(ClientID=1)
    make_invoice(ClientID=2, PaidAmount=Decimal("500"))
    assert [i.ClientID for i in svc.list_invoices(db, laundry_manager, status_s="paid")] == [2]
    assert [i.ClientID for i in svc.list_invoices(db, laundry_manager, client_id=1)] == [1]
