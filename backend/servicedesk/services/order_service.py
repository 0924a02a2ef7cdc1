# backend/servicedesk/services/order_service.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from servicedesk.core.capabilities import (
    LAUNDRY, MANAGE_CLIENTS, Caller, CapabilityCheck, authorize, grant_check,
)
from servicedesk.core.config import ORDER_STATUS_MODE
from servicedesk.core.tx import run_atomic
from servicedesk.domain.aggregates import ZERO, non_negative_money, order_total_amount
from servicedesk.domain.constants import ORD_DELIVERED, ORD_RECEIVED, ORDER_SEQ
from servicedesk.domain.lifecycle import ensure_order_deletable, initial_order_stamps, plan_order_status
from servicedesk.models import ServiceOrder
from servicedesk.schemas.laundry import OrderCreate, OrderUpdate
from servicedesk.services.aggregate_service import refresh_order_total
from servicedesk.services.common import apply, get_scoped, lock_scoped, parse
from servicedesk.services.sequence_service import next_number

logger = logging.getLogger(__name__)

LABEL = "Order"


def _quantize(fields: dict) -> dict:
    for key in ("Taxes", "DeliveryFee"):
        if key in fields:
            fields[key] = non_negative_money(fields[key], key)
    return fields


# -------- Queries --------
def get_order(db: Session, caller: Caller, order_id: int, *, check: CapabilityCheck = grant_check):
    manager_id = authorize(caller, LAUNDRY, check=check)
    return get_scoped(db, ServiceOrder, order_id, manager_id, LABEL)


def list_orders(
    db: Session,
    caller: Caller,
    *,
    status_s: Optional[str] = None,
    client_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    check: CapabilityCheck = grant_check,
) -> List[ServiceOrder]:
    manager_id = authorize(caller, LAUNDRY, check=check)
    q = db.query(ServiceOrder).filter(ServiceOrder.ManagerID == manager_id)
    if status_s:
        q = q.filter(ServiceOrder.Status_s == status_s)
    if client_id:
        q = q.filter(ServiceOrder.ClientID == client_id)
    return q.order_by(ServiceOrder.OrderID.desc()).offset(skip).limit(limit).all()


# -------- Commands --------
def create_order(db: Session, caller: Caller, data: dict, *, check: CapabilityCheck = grant_check):
    manager_id = authorize(caller, LAUNDRY, MANAGE_CLIENTS, check=check)
    fields = _quantize(parse(OrderCreate, data, LABEL))
    client_id = fields.pop("ClientID")
    taxes = fields.pop("Taxes", ZERO)
    fee = fields.pop("DeliveryFee", ZERO)
    status_s = fields.pop("Status_s", ORD_RECEIVED)

    def work():
        now = datetime.utcnow()
        order = ServiceOrder(
            OrderNumber=next_number(db, prefix=ORDER_SEQ[0], width=ORDER_SEQ[1], column=ServiceOrder.OrderNumber),
            Status_s=status_s,
            ClientID=client_id,
            ManagerID=manager_id,
            Subtotal=ZERO,
            Taxes=taxes,
            DeliveryFee=fee,
            TotalAmount=order_total_amount(ZERO, taxes, fee),
            ReceivedByClient=False,
            CreatedAt=now,
            **fields,
        )
        apply(order, initial_order_stamps(status_s, now))
        db.add(order)
        db.flush()
        return order

    order = run_atomic(db, work, label="create_order")
    logger.info(
        "order %s created", order.OrderNumber,
        extra={"entity": "ServiceOrder", "entity_id": order.OrderID, "manager_id": manager_id},
    )
    return order


def update_order(
    db: Session, caller: Caller, order_id: int, data: dict, *, check: CapabilityCheck = grant_check
):
    manager_id = authorize(caller, LAUNDRY, check=check)
    fields = _quantize(parse(OrderUpdate, data, LABEL))
    status_s = fields.pop("Status_s", None)

    def work():
        order = lock_scoped(db, ServiceOrder, order_id, manager_id, LABEL)
        apply(order, fields)
        if "Taxes" in fields or "DeliveryFee" in fields:
            refresh_order_total(order)
        if status_s is not None:
            apply(order, plan_order_status(order.Status_s, status_s, now=datetime.utcnow(),
                                           mode=ORDER_STATUS_MODE))
        db.flush()
        return order

    order = run_atomic(db, work, label="update_order")
    logger.info(
        "order %s updated", order.OrderNumber,
        extra={"entity": "ServiceOrder", "entity_id": order.OrderID, "status": order.Status_s},
    )
    return order


def mark_delivered(db: Session, caller: Caller, order_id: int, *, check: CapabilityCheck = grant_check):
    return update_order(db, caller, order_id, {"Status_s": ORD_DELIVERED}, check=check)


def delete_order(db: Session, caller: Caller, order_id: int, *, check: CapabilityCheck = grant_check) -> dict:
    manager_id = authorize(caller, LAUNDRY, MANAGE_CLIENTS, check=check)

    def work():
        order = lock_scoped(db, ServiceOrder, order_id, manager_id, LABEL)
        ensure_order_deletable(order.Status_s)
        out = {
            "OrderID": order_id,
            "OrderNumber": order.OrderNumber,
            "LinesDeleted": len(order.lines),
            "ReceiptsDeleted": len(order.receipts),
        }
        # lines and receipts go with the order (delete-orphan cascade)
        db.delete(order)
        db.flush()
        return out

    out = run_atomic(db, work, label="delete_order")
    logger.info(
        "order %s deleted (%s lines, %s receipts)",
        out["OrderNumber"], out["LinesDeleted"], out["ReceiptsDeleted"],
        extra={"entity": "ServiceOrder", "entity_id": order_id},
    )
    return out
