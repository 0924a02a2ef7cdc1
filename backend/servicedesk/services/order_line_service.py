# backend/servicedesk/services/order_line_service.py
"""
Lines of a laundry order.

The order row is locked first; the line write and the Subtotal/TotalAmount
recompute then commit together. AGGREGATE_STRATEGY picks resum (default)
or delta for the recompute.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from servicedesk.core.capabilities import (
    LAUNDRY, MANAGE_CLIENTS, Caller, CapabilityCheck, authorize, grant_check,
)
from servicedesk.core.errors import NotFound
from servicedesk.core.tx import run_atomic
from servicedesk.domain.aggregates import line_total, positive_money, positive_quantity
from servicedesk.domain.lifecycle import ensure_order_lines_mutable
from servicedesk.models import OrderLine, Product, ServiceOrder
from servicedesk.schemas.laundry import OrderLineCreate, OrderLineUpdate
from servicedesk.services.aggregate_service import update_order_after_line_change
from servicedesk.services.common import apply, get_scoped, in_scope, lock_scoped, parse

logger = logging.getLogger(__name__)

LABEL = "Order line"


def _quantize(fields: dict) -> dict:
    if "Quantity" in fields:
        fields["Quantity"] = positive_quantity(fields["Quantity"])
    if fields.get("UnitPrice") is not None:
        fields["UnitPrice"] = positive_money(fields["UnitPrice"], "UnitPrice")
    return fields


def _active_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product or not product.IsActive:
        raise NotFound("Product not found or inactive")
    return product


def _line_in_scope(db: Session, line_id: int, manager_id: int) -> OrderLine:
    line = db.get(OrderLine, line_id)
    if line is None or not in_scope(db.get(ServiceOrder, line.OrderID), manager_id):
        raise NotFound(f"{LABEL} not found")
    return line


# -------- Queries --------
def list_lines(
    db: Session, caller: Caller, order_id: int, *, check: CapabilityCheck = grant_check
) -> List[OrderLine]:
    manager_id = authorize(caller, LAUNDRY, check=check)
    get_scoped(db, ServiceOrder, order_id, manager_id, "Order")
    return db.query(OrderLine).filter(OrderLine.OrderID == order_id).order_by(OrderLine.LineID).all()


def get_line(db: Session, caller: Caller, line_id: int, *, check: CapabilityCheck = grant_check):
    manager_id = authorize(caller, LAUNDRY, check=check)
    return _line_in_scope(db, line_id, manager_id)


# -------- Commands --------
def add_line(
    db: Session,
    caller: Caller,
    order_id: int,
    data: dict,
    *,
    strategy: Optional[str] = None,
    check: CapabilityCheck = grant_check,
) -> OrderLine:
    """UnitPrice defaults to the product's current price."""
    manager_id = authorize(caller, LAUNDRY, MANAGE_CLIENTS, check=check)
    fields = _quantize(parse(OrderLineCreate, data, LABEL))
    product_id = fields.pop("ProductID")

    def work():
        order = lock_scoped(db, ServiceOrder, order_id, manager_id, "Order")
        ensure_order_lines_mutable(order.Status_s)
        product = _active_product(db, product_id)
        price = fields.get("UnitPrice") or positive_money(product.Price, "UnitPrice")
        line = OrderLine(
            OrderID=order_id,
            ProductID=product_id,
            Quantity=fields["Quantity"],
            UnitPrice=price,
            LineTotal=line_total(fields["Quantity"], price),
            Notes=fields.get("Notes"),
        )
        db.add(line)
        update_order_after_line_change(db, order, line.LineTotal, strategy=strategy)
        db.flush()
        return line

    line = run_atomic(db, work, label="add_order_line")
    logger.info(
        "line %s added to order %s", line.LineID, order_id,
        extra={"entity": "OrderLine", "entity_id": line.LineID, "parent_id": order_id},
    )
    return line


def update_line(
    db: Session,
    caller: Caller,
    line_id: int,
    data: dict,
    *,
    strategy: Optional[str] = None,
    check: CapabilityCheck = grant_check,
) -> OrderLine:
    manager_id = authorize(caller, LAUNDRY, MANAGE_CLIENTS, check=check)
    fields = _quantize(parse(OrderLineUpdate, data, LABEL))

    def work():
        order_id = _line_in_scope(db, line_id, manager_id).OrderID
        order = lock_scoped(db, ServiceOrder, order_id, manager_id, "Order")
        ensure_order_lines_mutable(order.Status_s)
        line = db.get(OrderLine, line_id, populate_existing=True)
        if line is None:
            raise NotFound(f"{LABEL} not found")
        old_total = line.LineTotal
        apply(line, fields)
        line.LineTotal = line_total(line.Quantity, line.UnitPrice)
        update_order_after_line_change(db, order, line.LineTotal - old_total, strategy=strategy)
        db.flush()
        return line

    line = run_atomic(db, work, label="update_order_line")
    logger.info(
        "line %s updated", line_id,
        extra={"entity": "OrderLine", "entity_id": line_id, "parent_id": line.OrderID},
    )
    return line


def remove_line(
    db: Session,
    caller: Caller,
    line_id: int,
    *,
    strategy: Optional[str] = None,
    check: CapabilityCheck = grant_check,
) -> ServiceOrder:
    """Delete the line; returns the recomputed order."""
    manager_id = authorize(caller, LAUNDRY, MANAGE_CLIENTS, check=check)

    def work():
        order_id = _line_in_scope(db, line_id, manager_id).OrderID
        order = lock_scoped(db, ServiceOrder, order_id, manager_id, "Order")
        ensure_order_lines_mutable(order.Status_s)
        line = db.get(OrderLine, line_id, populate_existing=True)
        if line is None:
            raise NotFound(f"{LABEL} not found")
        old_total = line.LineTotal
        db.delete(line)
        update_order_after_line_change(db, order, -old_total, strategy=strategy)
        db.flush()
        return order

    order = run_atomic(db, work, label="remove_order_line")
    logger.info(
        "line %s removed from order %s", line_id, order.OrderID,
        extra={"entity": "OrderLine", "entity_id": line_id, "parent_id": order.OrderID},
    )
    return order
