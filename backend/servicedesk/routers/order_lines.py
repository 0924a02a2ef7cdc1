# backend/servicedesk/routers/order_lines.py
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from servicedesk.core.api import ok
from servicedesk.core.capabilities import Caller, CapabilityCheck
from servicedesk.core.db import get_db
from servicedesk.core.security import get_caller, get_capability_check
from servicedesk.schemas.laundry import OrderLineOut, OrderLineUpdate, OrderOut
from servicedesk.services import order_line_service as svc

router = APIRouter(prefix="/order-lines", tags=["Laundry Order Lines"])


@router.get("/{line_id}", response_model=OrderLineOut)
def get_line(
    line_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.get_line(db, caller, line_id, check=check)


@router.patch("/{line_id}", response_model=OrderLineOut)
def update_line(
    payload: OrderLineUpdate,
    line_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.update_line(db, caller, line_id, payload.model_dump(exclude_unset=True), check=check)


@router.delete("/{line_id}")
def remove_line(
    line_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    order = svc.remove_line(db, caller, line_id, check=check)
    return ok({"LineID": line_id, "order": OrderOut.model_validate(order).model_dump(mode="json")})
