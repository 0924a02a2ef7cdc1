# backend/servicedesk/routers/receipts.py
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from servicedesk.core.api import ok
from servicedesk.core.capabilities import Caller, CapabilityCheck
from servicedesk.core.db import get_db
from servicedesk.core.security import get_caller, get_capability_check
from servicedesk.schemas.laundry import ReceiptOut, ReceiptUpdate
from servicedesk.services import receipt_service as svc

router = APIRouter(prefix="/receipts", tags=["Delivery Receipts"])


@router.patch("/{receipt_id}", response_model=ReceiptOut)
def update_receipt(
    payload: ReceiptUpdate,
    receipt_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.update_receipt(db, caller, receipt_id, payload.model_dump(exclude_unset=True), check=check)


@router.delete("/{receipt_id}")
def delete_receipt(
    receipt_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return ok(svc.delete_receipt(db, caller, receipt_id, check=check))
