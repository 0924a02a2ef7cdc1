# backend/servicedesk/routers/materials.py
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from servicedesk.core.api import ok
from servicedesk.core.capabilities import Caller, CapabilityCheck
from servicedesk.core.db import get_db
from servicedesk.core.security import get_caller, get_capability_check
from servicedesk.schemas.maintenance import MaterialOut, MaterialUpdate, SessionOut
from servicedesk.services import material_service as svc

router = APIRouter(prefix="/materials", tags=["Materials"])


@router.get("/{material_id}", response_model=MaterialOut)
def get_material(
    material_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.get_material(db, caller, material_id, check=check)


@router.patch("/{material_id}", response_model=MaterialOut)
def update_material(
    payload: MaterialUpdate,
    material_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.update_material(db, caller, material_id, payload.model_dump(exclude_unset=True), check=check)


@router.delete("/{material_id}")
def remove_material(
    material_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    ws = svc.remove_material(db, caller, material_id, check=check)
    # the recomputed session comes back so callers see the new totals
    return ok({"MaterialID": material_id, "session": SessionOut.model_validate(ws).model_dump(mode="json")})
