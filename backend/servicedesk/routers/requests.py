# backend/servicedesk/routers/requests.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from servicedesk.core.api import ok
from servicedesk.core.capabilities import Caller, CapabilityCheck
from servicedesk.core.db import get_db
from servicedesk.core.security import get_caller, get_capability_check
from servicedesk.schemas.maintenance import (
    AssignIn, Priority, RequestCreate, RequestOut, RequestStatus, RequestUpdate, ResolveIn,
)
from servicedesk.services import request_service as svc

router = APIRouter(prefix="/requests", tags=["Requests"])


@router.get("", response_model=List[RequestOut])
def list_requests(
    status_s: Optional[RequestStatus] = Query(None),
    priority_s: Optional[Priority] = Query(None),
    property_id: Optional[int] = Query(None, ge=1),
    agent_id: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.list_requests(
        db, caller,
        status_s=status_s, priority_s=priority_s, property_id=property_id, agent_id=agent_id,
        skip=skip, limit=limit, check=check,
    )


@router.post("", response_model=RequestOut, status_code=201)
def create_request(
    payload: RequestCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.create_request(db, caller, payload.model_dump(exclude_none=True), check=check)


@router.get("/{request_id}", response_model=RequestOut)
def get_request(
    request_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.get_request(db, caller, request_id, check=check)


@router.patch("/{request_id}", response_model=RequestOut)
def update_request(
    payload: RequestUpdate,
    request_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.update_request(db, caller, request_id, payload.model_dump(exclude_unset=True), check=check)


@router.post("/{request_id}/assign", response_model=RequestOut)
def assign_request(
    payload: AssignIn,
    request_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.assign_request(db, caller, request_id, payload.AgentID, check=check)


@router.post("/{request_id}/resolve", response_model=RequestOut)
def resolve_request(
    payload: ResolveIn,
    request_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.resolve_request(db, caller, request_id, payload.Resolution, check=check)


@router.delete("/{request_id}")
def delete_request(
    request_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return ok(svc.delete_request(db, caller, request_id, check=check))
