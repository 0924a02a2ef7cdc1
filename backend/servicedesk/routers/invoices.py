# backend/servicedesk/routers/invoices.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from servicedesk.core.api import ok
from servicedesk.core.capabilities import Caller, CapabilityCheck
from servicedesk.core.db import get_db
from servicedesk.core.security import get_caller, get_capability_check
from servicedesk.schemas.billing import InvoiceCreate, InvoiceOut, InvoiceStatus, InvoiceUpdate, PaymentIn
from servicedesk.services import invoice_service as svc

router = APIRouter(prefix="/invoices", tags=["Laundry Invoices"])


@router.get("", response_model=List[InvoiceOut])
def list_invoices(
    status_s: Optional[InvoiceStatus] = Query(None),
    client_id: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.list_invoices(db, caller, status_s=status_s, client_id=client_id, skip=skip, limit=limit, check=check)


@router.post("", response_model=InvoiceOut, status_code=201)
def create_invoice(
    payload: InvoiceCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.create_invoice(db, caller, payload.model_dump(exclude_none=True), check=check)


@router.get("/{invoice_id}", response_model=InvoiceOut)
def get_invoice(
    invoice_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.get_invoice(db, caller, invoice_id, check=check)


@router.patch("/{invoice_id}", response_model=InvoiceOut)
def update_invoice(
    payload: InvoiceUpdate,
    invoice_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.update_invoice(db, caller, invoice_id, payload.model_dump(exclude_unset=True), check=check)


@router.post("/{invoice_id}/payments", response_model=InvoiceOut)
def record_payment(
    payload: PaymentIn,
    invoice_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.record_payment(db, caller, invoice_id, payload.Amount, check=check)


@router.delete("/{invoice_id}")
def delete_invoice(
    invoice_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return ok(svc.delete_invoice(db, caller, invoice_id, check=check))
