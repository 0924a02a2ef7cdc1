# backend/servicedesk/services/request_service.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from servicedesk.core.capabilities import MAINTENANCE, Caller, CapabilityCheck, authorize, grant_check
from servicedesk.core.config import REQUEST_STATUS_MODE
from servicedesk.core.errors import ValidationFailed
from servicedesk.core.tx import run_atomic
from servicedesk.domain.aggregates import to_money
from servicedesk.domain.constants import DEFAULT_PRIORITY, REQ_OPEN, REQ_RESOLVED, REQUEST_SEQ
from servicedesk.domain.lifecycle import (
    ensure_request_deletable, plan_agent_assignment, plan_request_status,
)
from servicedesk.models import ServiceRequest, WorkSession
from servicedesk.schemas.maintenance import RequestCreate, RequestUpdate
from servicedesk.services.common import apply, get_scoped, lock_scoped, parse
from servicedesk.services.sequence_service import next_number

logger = logging.getLogger(__name__)

LABEL = "Request"


def _quantize(fields: dict) -> dict:
    if fields.get("EstimatedCost") is not None:
        fields["EstimatedCost"] = to_money(fields["EstimatedCost"], "EstimatedCost")
    return fields


# -------- Queries --------
def get_request(db: Session, caller: Caller, request_id: int, *, check: CapabilityCheck = grant_check):
    manager_id = authorize(caller, MAINTENANCE, check=check)
    return get_scoped(db, ServiceRequest, request_id, manager_id, LABEL)


def list_requests(
    db: Session,
    caller: Caller,
    *,
    status_s: Optional[str] = None,
    priority_s: Optional[str] = None,
    property_id: Optional[int] = None,
    agent_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    check: CapabilityCheck = grant_check,
) -> List[ServiceRequest]:
    manager_id = authorize(caller, MAINTENANCE, check=check)
    q = db.query(ServiceRequest).filter(ServiceRequest.ManagerID == manager_id)
    if status_s:
        q = q.filter(ServiceRequest.Status_s == status_s)
    if priority_s:
        q = q.filter(ServiceRequest.Priority_s == priority_s)
    if property_id:
        q = q.filter(ServiceRequest.PropertyID == property_id)
    if agent_id:
        q = q.filter(ServiceRequest.AgentID == agent_id)
    return q.order_by(ServiceRequest.RequestID.desc()).offset(skip).limit(limit).all()


# -------- Commands --------
def create_request(db: Session, caller: Caller, data: dict, *, check: CapabilityCheck = grant_check):
    manager_id = authorize(caller, MAINTENANCE, check=check)
    fields = _quantize(parse(RequestCreate, data, LABEL))
    fields.setdefault("Priority_s", DEFAULT_PRIORITY)
    agent_id = fields.pop("AgentID", None)

    def work():
        now = datetime.utcnow()
        req = ServiceRequest(
            RequestNumber=next_number(db, prefix=REQUEST_SEQ[0], width=REQUEST_SEQ[1],
                                      column=ServiceRequest.RequestNumber),
            Status_s=REQ_OPEN,
            ManagerID=manager_id,
            ReportedAt=now,
            **fields,
        )
        if agent_id is not None:
            apply(req, plan_agent_assignment(REQ_OPEN, None, agent_id, now))
        db.add(req)
        db.flush()
        return req

    req = run_atomic(db, work, label="create_request")
    logger.info(
        "request %s created", req.RequestNumber,
        extra={"entity": "ServiceRequest", "entity_id": req.RequestID, "manager_id": manager_id},
    )
    return req


def update_request(
    db: Session, caller: Caller, request_id: int, data: dict, *, check: CapabilityCheck = grant_check
):
    """
    Partial update. An AgentID is applied before a Status_s change, so
    giving an agent to an open ticket and moving it on works in one call.
    """
    manager_id = authorize(caller, MAINTENANCE, check=check)
    fields = _quantize(parse(RequestUpdate, data, LABEL))
    has_agent = "AgentID" in fields
    agent_id = fields.pop("AgentID", None)
    status_s = fields.pop("Status_s", None)

    def work():
        req = lock_scoped(db, ServiceRequest, request_id, manager_id, LABEL)
        now = datetime.utcnow()
        apply(req, fields)
        if has_agent:
            apply(req, plan_agent_assignment(req.Status_s, req.AssignedAt, agent_id, now))
        if status_s is not None:
            apply(req, plan_request_status(
                req.Status_s, status_s,
                agent_id=req.AgentID, resolved_at=req.ResolvedAt, now=now, mode=REQUEST_STATUS_MODE,
            ))
        db.flush()
        return req

    req = run_atomic(db, work, label="update_request")
    logger.info(
        "request %s updated", req.RequestNumber,
        extra={"entity": "ServiceRequest", "entity_id": req.RequestID, "status": req.Status_s},
    )
    return req


def assign_request(
    db: Session, caller: Caller, request_id: int, agent_id: int, *, check: CapabilityCheck = grant_check
):
    if agent_id is None:
        raise ValidationFailed("AgentID is required")
    return update_request(db, caller, request_id, {"AgentID": agent_id}, check=check)


def resolve_request(
    db: Session, caller: Caller, request_id: int, resolution: Optional[str] = None,
    *, check: CapabilityCheck = grant_check,
):
    data = {"Status_s": REQ_RESOLVED}
    if resolution is not None:
        data["Resolution"] = resolution
    return update_request(db, caller, request_id, data, check=check)


def delete_request(db: Session, caller: Caller, request_id: int, *, check: CapabilityCheck = grant_check) -> dict:
    manager_id = authorize(caller, MAINTENANCE, check=check)

    def work():
        req = lock_scoped(db, ServiceRequest, request_id, manager_id, LABEL)
        has_session = (
            db.query(WorkSession.SessionID).filter(WorkSession.RequestID == request_id).first() is not None
        )
        ensure_request_deletable(has_session)
        number = req.RequestNumber
        db.delete(req)
        db.flush()
        return {"RequestID": request_id, "RequestNumber": number}

    out = run_atomic(db, work, label="delete_request")
    logger.info("request %s deleted", out["RequestNumber"], extra={"entity": "ServiceRequest", "entity_id": request_id})
    return out
