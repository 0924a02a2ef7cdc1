# backend/servicedesk/services/product_service.py
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from servicedesk.core.capabilities import (
    LAUNDRY, MANAGE_CLIENTS, Caller, CapabilityCheck, authorize, grant_check,
)
from servicedesk.core.errors import Conflict, NotFound
from servicedesk.core.tx import lock_for_update, run_atomic
from servicedesk.domain.aggregates import positive_money
from servicedesk.domain.lifecycle import ORDER_INACTIVE
from servicedesk.models import OrderLine, Product, ServiceOrder
from servicedesk.schemas.laundry import ProductCreate, ProductUpdate
from servicedesk.services.common import apply, parse

logger = logging.getLogger(__name__)

LABEL = "Product"


def _quantize(fields: dict) -> dict:
    if "Price" in fields:
        fields["Price"] = positive_money(fields["Price"], "Price")
    return fields


def _in_use(db: Session, product_id: int) -> int:
    """Lines of orders that still hold on to the product."""
    return (
        db.query(OrderLine.LineID)
        .join(ServiceOrder, ServiceOrder.OrderID == OrderLine.OrderID)
        .filter(OrderLine.ProductID == product_id)
        .filter(ServiceOrder.Status_s.notin_(ORDER_INACTIVE))
        .count()
    )


def list_products(
    db: Session,
    caller: Caller,
    *,
    category: Optional[str] = None,
    include_inactive: bool = False,
    check: CapabilityCheck = grant_check,
) -> List[Product]:
    authorize(caller, LAUNDRY, check=check)
    q = db.query(Product)
    if not include_inactive:
        q = q.filter(Product.IsActive.is_(True))
    if category:
        q = q.filter(Product.Category == category)
    return q.order_by(Product.Name, Product.ProductID).all()


def get_product(db: Session, caller: Caller, product_id: int, *, check: CapabilityCheck = grant_check):
    authorize(caller, LAUNDRY, check=check)
    product = db.get(Product, product_id)
    if not product:
        raise NotFound(f"{LABEL} not found")
    return product


def create_product(db: Session, caller: Caller, data: dict, *, check: CapabilityCheck = grant_check):
    authorize(caller, LAUNDRY, MANAGE_CLIENTS, check=check)
    fields = _quantize(parse(ProductCreate, data, LABEL))
    fields.setdefault("IsActive", True)

    def work():
        product = Product(**fields)
        db.add(product)
        db.flush()
        return product

    product = run_atomic(db, work, label="create_product")
    logger.info("product %s created", product.ProductID, extra={"entity": "Product", "entity_id": product.ProductID})
    return product


def update_product(
    db: Session, caller: Caller, product_id: int, data: dict, *, check: CapabilityCheck = grant_check
):
    """Price changes apply to new lines only; existing lines keep their UnitPrice."""
    authorize(caller, LAUNDRY, MANAGE_CLIENTS, check=check)
    fields = _quantize(parse(ProductUpdate, data, LABEL))

    def work():
        product = lock_for_update(db, Product, product_id)
        if not product:
            raise NotFound(f"{LABEL} not found")
        if fields.get("IsActive") is False and product.IsActive and _in_use(db, product_id):
            raise Conflict("Product is used by open orders")
        apply(product, fields)
        db.flush()
        return product

    product = run_atomic(db, work, label="update_product")
    logger.info("product %s updated", product_id, extra={"entity": "Product", "entity_id": product_id})
    return product


def delete_product(db: Session, caller: Caller, product_id: int, *, check: CapabilityCheck = grant_check):
    """Soft delete: the row stays for the order lines that reference it."""
    authorize(caller, LAUNDRY, MANAGE_CLIENTS, check=check)

    def work():
        product = lock_for_update(db, Product, product_id)
        if not product:
            raise NotFound(f"{LABEL} not found")
        if _in_use(db, product_id):
            raise Conflict("Product is used by open orders")
        product.IsActive = False
        db.flush()
        return product

    product = run_atomic(db, work, label="delete_product")
    logger.info("product %s deactivated", product_id, extra={"entity": "Product", "entity_id": product_id})
    return product
