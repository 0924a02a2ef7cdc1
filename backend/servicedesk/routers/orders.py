# backend/servicedesk/routers/orders.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from servicedesk.core.api import ok
from servicedesk.core.capabilities import Caller, CapabilityCheck
from servicedesk.core.db import get_db
from servicedesk.core.security import get_caller, get_capability_check
from servicedesk.schemas.laundry import (
    OrderCreate, OrderLineCreate, OrderLineOut, OrderOut, OrderStatus, OrderUpdate, ReceiptCreate, ReceiptOut,
)
from servicedesk.services import order_line_service, order_service as svc, receipt_service

router = APIRouter(prefix="/orders", tags=["Laundry Orders"])


@router.get("", response_model=List[OrderOut])
def list_orders(
    status_s: Optional[OrderStatus] = Query(None),
    client_id: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.list_orders(db, caller, status_s=status_s, client_id=client_id, skip=skip, limit=limit, check=check)


@router.post("", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.create_order(db, caller, payload.model_dump(exclude_none=True), check=check)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.get_order(db, caller, order_id, check=check)


@router.patch("/{order_id}", response_model=OrderOut)
def update_order(
    payload: OrderUpdate,
    order_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.update_order(db, caller, order_id, payload.model_dump(exclude_unset=True), check=check)


@router.post("/{order_id}/deliver", response_model=OrderOut)
def deliver_order(
    order_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.mark_delivered(db, caller, order_id, check=check)


@router.delete("/{order_id}")
def delete_order(
    order_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return ok(svc.delete_order(db, caller, order_id, check=check))


# ---- Lines ----
@router.get("/{order_id}/lines", response_model=List[OrderLineOut])
def list_lines(
    order_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return order_line_service.list_lines(db, caller, order_id, check=check)


@router.post("/{order_id}/lines", response_model=OrderLineOut, status_code=201)
def add_line(
    payload: OrderLineCreate,
    order_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return order_line_service.add_line(db, caller, order_id, payload.model_dump(exclude_none=True), check=check)


# ---- Delivery receipts ----
@router.get("/{order_id}/receipts", response_model=List[ReceiptOut])
def list_receipts(
    order_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return receipt_service.list_receipts(db, caller, order_id, check=check)


@router.post("/{order_id}/receipts", response_model=ReceiptOut, status_code=201)
def create_receipt(
    payload: ReceiptCreate,
    order_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return receipt_service.create_receipt(db, caller, order_id, payload.model_dump(exclude_none=True), check=check)
