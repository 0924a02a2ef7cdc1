# backend/servicedesk/routers/sessions.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from servicedesk.core.api import ok
from servicedesk.core.capabilities import Caller, CapabilityCheck
from servicedesk.core.db import get_db
from servicedesk.core.security import get_caller, get_capability_check
from servicedesk.schemas.maintenance import (
    MaterialCreate, MaterialOut, SessionCreate, SessionOut, SessionStatus, SessionUpdate,
)
from servicedesk.services import material_service, session_service as svc

router = APIRouter(prefix="/sessions", tags=["Work Sessions"])


@router.get("", response_model=List[SessionOut])
def list_sessions(
    status_s: Optional[SessionStatus] = Query(None),
    agent_id: Optional[int] = Query(None, ge=1),
    request_id: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.list_sessions(
        db, caller, status_s=status_s, agent_id=agent_id, request_id=request_id,
        skip=skip, limit=limit, check=check,
    )


@router.post("", response_model=SessionOut, status_code=201)
def create_session(
    payload: SessionCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.create_session(db, caller, payload.model_dump(exclude_none=True), check=check)


@router.get("/{session_id}", response_model=SessionOut)
def get_session(
    session_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.get_session(db, caller, session_id, check=check)


@router.patch("/{session_id}", response_model=SessionOut)
def update_session(
    payload: SessionUpdate,
    session_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.update_session(db, caller, session_id, payload.model_dump(exclude_unset=True), check=check)


@router.delete("/{session_id}")
def delete_session(
    session_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return ok(svc.delete_session(db, caller, session_id, check=check))


# ---- Materials of a session ----
@router.get("/{session_id}/materials", response_model=List[MaterialOut])
def list_materials(
    session_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return material_service.list_materials(db, caller, session_id, check=check)


@router.post("/{session_id}/materials", response_model=MaterialOut, status_code=201)
def add_material(
    payload: MaterialCreate,
    session_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return material_service.add_material(db, caller, session_id, payload.model_dump(exclude_none=True), check=check)
