# backend/servicedesk/services/receipt_service.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import List

from sqlalchemy.orm import Session

from servicedesk.core.capabilities import (
    LAUNDRY, MANAGE_CLIENTS, Caller, CapabilityCheck, authorize, grant_check,
)
from servicedesk.core.errors import NotFound
from servicedesk.core.tx import lock_for_update, run_atomic
from servicedesk.domain.constants import RECEIPT_SEQ
from servicedesk.models import DeliveryReceipt, ServiceOrder
from servicedesk.schemas.laundry import ReceiptCreate, ReceiptUpdate
from servicedesk.services.common import apply, get_scoped, in_scope, lock_scoped, parse
from servicedesk.services.sequence_service import next_number

logger = logging.getLogger(__name__)

LABEL = "Receipt"


def _receipt_in_scope(db: Session, receipt_id: int, manager_id: int, *, lock: bool = False) -> DeliveryReceipt:
    receipt = lock_for_update(db, DeliveryReceipt, receipt_id) if lock else db.get(DeliveryReceipt, receipt_id)
    if receipt is None or not in_scope(db.get(ServiceOrder, receipt.OrderID), manager_id):
        raise NotFound(f"{LABEL} not found")
    return receipt


def list_receipts(
    db: Session, caller: Caller, order_id: int, *, check: CapabilityCheck = grant_check
) -> List[DeliveryReceipt]:
    manager_id = authorize(caller, LAUNDRY, check=check)
    get_scoped(db, ServiceOrder, order_id, manager_id, "Order")
    return (
        db.query(DeliveryReceipt)
        .filter(DeliveryReceipt.OrderID == order_id)
        .order_by(DeliveryReceipt.ReceiptID)
        .all()
    )


def create_receipt(
    db: Session, caller: Caller, order_id: int, data: dict, *, check: CapabilityCheck = grant_check
) -> DeliveryReceipt:
    """Delivery slip for an order; totals are not affected."""
    manager_id = authorize(caller, LAUNDRY, MANAGE_CLIENTS, check=check)
    fields = parse(ReceiptCreate, data, LABEL)

    def work():
        lock_scoped(db, ServiceOrder, order_id, manager_id, "Order")
        receipt = DeliveryReceipt(
            ReceiptNumber=next_number(db, prefix=RECEIPT_SEQ[0], width=RECEIPT_SEQ[1],
                                      column=DeliveryReceipt.ReceiptNumber),
            OrderID=order_id,
            ReceiptDate=fields.get("ReceiptDate") or datetime.utcnow(),
            Notes=fields.get("Notes"),
        )
        db.add(receipt)
        db.flush()
        return receipt

    receipt = run_atomic(db, work, label="create_receipt")
    logger.info(
        "receipt %s created for order %s", receipt.ReceiptNumber, order_id,
        extra={"entity": "DeliveryReceipt", "entity_id": receipt.ReceiptID, "parent_id": order_id},
    )
    return receipt


def update_receipt(
    db: Session, caller: Caller, receipt_id: int, data: dict, *, check: CapabilityCheck = grant_check
) -> DeliveryReceipt:
    manager_id = authorize(caller, LAUNDRY, MANAGE_CLIENTS, check=check)
    fields = parse(ReceiptUpdate, data, LABEL)

    def work():
        receipt = _receipt_in_scope(db, receipt_id, manager_id, lock=True)
        apply(receipt, fields)
        db.flush()
        return receipt

    receipt = run_atomic(db, work, label="update_receipt")
    logger.info("receipt %s updated", receipt.ReceiptNumber, extra={"entity": "DeliveryReceipt", "entity_id": receipt_id})
    return receipt


def delete_receipt(db: Session, caller: Caller, receipt_id: int, *, check: CapabilityCheck = grant_check) -> dict:
    manager_id = authorize(caller, LAUNDRY, MANAGE_CLIENTS, check=check)

    def work():
        receipt = _receipt_in_scope(db, receipt_id, manager_id, lock=True)
        out = {"ReceiptID": receipt_id, "ReceiptNumber": receipt.ReceiptNumber}
        db.delete(receipt)
        db.flush()
        return out

    out = run_atomic(db, work, label="delete_receipt")
    logger.info("receipt %s deleted", out["ReceiptNumber"], extra={"entity": "DeliveryReceipt", "entity_id": receipt_id})
    return out
