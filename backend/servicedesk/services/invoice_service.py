# backend/servicedesk/services/invoice_service.py
"""
Laundry invoices.

TaxAmount, TotalAmount, Status_s and PaidAt are derived on every write:
paid iff PaidAmount >= TotalAmount. A payment reduction (or a bigger
subtotal/tax rate) moves a paid invoice back to draft and clears PaidAt.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from servicedesk.core.capabilities import (
    LAUNDRY, MANAGE_BILLING, Caller, CapabilityCheck, authorize, grant_check,
)
from servicedesk.core.config import INVOICE_DEFAULT_TAX_RATE, INVOICE_DUE_DAYS
from servicedesk.core.errors import NotFound, ValidationFailed
from servicedesk.core.tx import lock_for_update, run_atomic
from servicedesk.domain.aggregates import (
    ZERO, invoice_amounts, money_or_zero, non_negative_money, positive_money, settle_invoice,
)
from servicedesk.domain.constants import INV_PAID, INVOICE_SEQ
from servicedesk.domain.lifecycle import ensure_invoice_deletable
from servicedesk.models import Invoice
from servicedesk.schemas.billing import InvoiceCreate, InvoiceUpdate
from servicedesk.services.common import apply, parse
from servicedesk.services.sequence_service import next_number

logger = logging.getLogger(__name__)

LABEL = "Invoice"


def _quantize(fields: dict) -> dict:
    if "Subtotal" in fields:
        fields["Subtotal"] = positive_money(fields["Subtotal"], "Subtotal")
    if fields.get("TaxRate") is not None:
        fields["TaxRate"] = non_negative_money(fields["TaxRate"], "TaxRate")
    if "PaidAmount" in fields:
        # an explicit null clears the payments
        fields["PaidAmount"] = money_or_zero(fields["PaidAmount"])
    return fields


def _derive(invoice: Invoice, now: datetime) -> Invoice:
    if invoice.DueDate < invoice.IssueDate:
        raise ValidationFailed("DueDate must not be before IssueDate")
    invoice.TaxAmount, invoice.TotalAmount = invoice_amounts(invoice.Subtotal, invoice.TaxRate)
    invoice.Status_s, invoice.PaidAt = settle_invoice(invoice.PaidAmount, invoice.TotalAmount, invoice.PaidAt, now)
    return invoice


def _locked(db: Session, invoice_id: int) -> Invoice:
    invoice = lock_for_update(db, Invoice, invoice_id)
    if not invoice:
        raise NotFound(f"{LABEL} not found")
    return invoice


def _log_settlement(invoice: Invoice, previous: Optional[str]) -> None:
    if previous == INV_PAID and invoice.Status_s != INV_PAID:
        logger.warning(
            "invoice %s moved back from paid to %s", invoice.InvoiceNumber, invoice.Status_s,
            extra={"entity": "Invoice", "entity_id": invoice.InvoiceID, "status": invoice.Status_s},
        )


# -------- Queries --------
def get_invoice(db: Session, caller: Caller, invoice_id: int, *, check: CapabilityCheck = grant_check):
    authorize(caller, LAUNDRY, MANAGE_BILLING, check=check)
    invoice = db.get(Invoice, invoice_id)
    if not invoice:
        raise NotFound(f"{LABEL} not found")
    return invoice


def list_invoices(
    db: Session,
    caller: Caller,
    *,
    status_s: Optional[str] = None,
    client_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    check: CapabilityCheck = grant_check,
) -> List[Invoice]:
    authorize(caller, LAUNDRY, MANAGE_BILLING, check=check)
    q = db.query(Invoice)
    if status_s:
        q = q.filter(Invoice.Status_s == status_s)
    if client_id:
        q = q.filter(Invoice.ClientID == client_id)
    return q.order_by(Invoice.IssueDate.desc(), Invoice.InvoiceID.desc()).offset(skip).limit(limit).all()


# -------- Commands --------
def create_invoice(db: Session, caller: Caller, data: dict, *, check: CapabilityCheck = grant_check) -> Invoice:
    authorize(caller, LAUNDRY, MANAGE_BILLING, check=check)
    fields = _quantize(parse(InvoiceCreate, data, LABEL))
    issue = fields.pop("IssueDate", None) or date.today()
    due = fields.pop("DueDate", None) or issue + timedelta(days=INVOICE_DUE_DAYS)
    if fields.get("TaxRate") is None:
        fields["TaxRate"] = non_negative_money(INVOICE_DEFAULT_TAX_RATE, "TaxRate")
    fields.setdefault("PaidAmount", ZERO)

    def work():
        invoice = Invoice(
            InvoiceNumber=next_number(db, prefix=INVOICE_SEQ[0], width=INVOICE_SEQ[1],
                                      column=Invoice.InvoiceNumber, year=issue.year),
            IssueDate=issue,
            DueDate=due,
            **fields,
        )
        _derive(invoice, datetime.utcnow())
        db.add(invoice)
        db.flush()
        return invoice

    invoice = run_atomic(db, work, label="create_invoice")
    logger.info(
        "invoice %s created (%s)", invoice.InvoiceNumber, invoice.Status_s,
        extra={"entity": "Invoice", "entity_id": invoice.InvoiceID, "status": invoice.Status_s},
    )
    return invoice


def update_invoice(
    db: Session, caller: Caller, invoice_id: int, data: dict, *, check: CapabilityCheck = grant_check
) -> Invoice:
    """Partial update; PaidAmount is taken as the new absolute amount."""
    authorize(caller, LAUNDRY, MANAGE_BILLING, check=check)
    fields = _quantize(parse(InvoiceUpdate, data, LABEL))

    def work():
        invoice = _locked(db, invoice_id)
        previous = invoice.Status_s
        apply(invoice, fields)
        _derive(invoice, datetime.utcnow())
        db.flush()
        _log_settlement(invoice, previous)
        return invoice

    invoice = run_atomic(db, work, label="update_invoice")
    logger.info(
        "invoice %s updated (%s)", invoice.InvoiceNumber, invoice.Status_s,
        extra={"entity": "Invoice", "entity_id": invoice_id, "status": invoice.Status_s},
    )
    return invoice


def record_payment(
    db: Session, caller: Caller, invoice_id: int, amount, *, check: CapabilityCheck = grant_check
) -> Invoice:
    authorize(caller, LAUNDRY, MANAGE_BILLING, check=check)
    amount = positive_money(amount, "Amount")

    def work():
        invoice = _locked(db, invoice_id)
        invoice.PaidAmount = non_negative_money(invoice.PaidAmount or ZERO, "PaidAmount") + amount
        _derive(invoice, datetime.utcnow())
        db.flush()
        return invoice

    invoice = run_atomic(db, work, label="record_payment")
    logger.info(
        "invoice %s payment %s recorded (%s)", invoice.InvoiceNumber, amount, invoice.Status_s,
        extra={"entity": "Invoice", "entity_id": invoice_id, "status": invoice.Status_s},
    )
    return invoice


def delete_invoice(db: Session, caller: Caller, invoice_id: int, *, check: CapabilityCheck = grant_check) -> dict:
    authorize(caller, LAUNDRY, MANAGE_BILLING, check=check)

    def work():
        invoice = _locked(db, invoice_id)
        ensure_invoice_deletable(invoice.Status_s, invoice.PaidAmount)
        out = {"InvoiceID": invoice_id, "InvoiceNumber": invoice.InvoiceNumber}
        db.delete(invoice)
        db.flush()
        return out

    out = run_atomic(db, work, label="delete_invoice")
    logger.info("invoice %s deleted", out["InvoiceNumber"], extra={"entity": "Invoice", "entity_id": invoice_id})
    return out
