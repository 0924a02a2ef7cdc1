# backend/servicedesk/services/session_service.py
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from servicedesk.core.capabilities import (
    MAINTENANCE, MANAGE_AGENTS, Caller, CapabilityCheck, authorize, grant_check,
)
from servicedesk.core.config import SESSION_STATUS_MODE
from servicedesk.core.errors import ValidationFailed
from servicedesk.core.tx import run_atomic
from servicedesk.domain.aggregates import ZERO, non_negative_money, session_total_cost
from servicedesk.domain.constants import SES_PLANNED, SESSION_SEQ
from servicedesk.domain.lifecycle import (
    ensure_request_accepts_session, ensure_session_deletable, plan_session_status,
)
from servicedesk.models import ServiceRequest, WorkSession
from servicedesk.schemas.maintenance import SessionCreate, SessionUpdate
from servicedesk.services.aggregate_service import refresh_session_total
from servicedesk.services.common import apply, get_scoped, lock_scoped, parse
from servicedesk.services.sequence_service import next_number

logger = logging.getLogger(__name__)

LABEL = "Session"


def _quantize(fields: dict) -> dict:
    if "LaborCost" in fields:
        fields["LaborCost"] = non_negative_money(fields["LaborCost"], "LaborCost")
    return fields


def _check_times(start, end) -> None:
    if start and end and end < start:
        raise ValidationFailed("EndTime must not be before StartTime")


# -------- Queries --------
def get_session(db: Session, caller: Caller, session_id: int, *, check: CapabilityCheck = grant_check):
    manager_id = authorize(caller, MAINTENANCE, check=check)
    return get_scoped(db, WorkSession, session_id, manager_id, LABEL)


def list_sessions(
    db: Session,
    caller: Caller,
    *,
    status_s: Optional[str] = None,
    agent_id: Optional[int] = None,
    request_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    check: CapabilityCheck = grant_check,
) -> List[WorkSession]:
    manager_id = authorize(caller, MAINTENANCE, check=check)
    q = db.query(WorkSession).filter(WorkSession.ManagerID == manager_id)
    if status_s:
        q = q.filter(WorkSession.Status_s == status_s)
    if agent_id:
        q = q.filter(WorkSession.AgentID == agent_id)
    if request_id:
        q = q.filter(WorkSession.RequestID == request_id)
    return q.order_by(WorkSession.ScheduledDate.desc(), WorkSession.SessionID.desc()).offset(skip).limit(limit).all()


# -------- Commands --------
def create_session(db: Session, caller: Caller, data: dict, *, check: CapabilityCheck = grant_check):
    manager_id = authorize(caller, MAINTENANCE, MANAGE_AGENTS, check=check)
    fields = _quantize(parse(SessionCreate, data, LABEL))
    request_id = fields.pop("RequestID")
    property_id = fields.pop("PropertyID", None)
    labor = fields.pop("LaborCost", ZERO)
    status_s = fields.pop("Status_s", SES_PLANNED)
    _check_times(fields.get("StartTime"), fields.get("EndTime"))

    def work():
        # the ticket row is the lock that serializes "one session per request"
        req = lock_scoped(db, ServiceRequest, request_id, manager_id, "Request")
        has_session = (
            db.query(WorkSession.SessionID).filter(WorkSession.RequestID == request_id).first() is not None
        )
        ensure_request_accepts_session(req.Status_s, has_session)

        ws = WorkSession(
            SessionNumber=next_number(db, prefix=SESSION_SEQ[0], width=SESSION_SEQ[1],
                                      column=WorkSession.SessionNumber),
            RequestID=request_id,
            PropertyID=property_id or req.PropertyID,
            ManagerID=manager_id,
            Status_s=status_s,
            LaborCost=labor,
            MaterialsCost=ZERO,
            TotalCost=session_total_cost(labor, ZERO),
            **fields,
        )
        db.add(ws)
        db.flush()
        return ws

    ws = run_atomic(db, work, label="create_session")
    logger.info(
        "session %s created for request %s", ws.SessionNumber, request_id,
        extra={"entity": "WorkSession", "entity_id": ws.SessionID, "parent_id": request_id, "manager_id": manager_id},
    )
    return ws


def update_session(
    db: Session, caller: Caller, session_id: int, data: dict, *, check: CapabilityCheck = grant_check
):
    manager_id = authorize(caller, MAINTENANCE, check=check)
    fields = _quantize(parse(SessionUpdate, data, LABEL))
    status_s = fields.pop("Status_s", None)

    def work():
        ws = lock_scoped(db, WorkSession, session_id, manager_id, LABEL)
        apply(ws, fields)
        _check_times(ws.StartTime, ws.EndTime)
        if status_s is not None:
            apply(ws, plan_session_status(ws.Status_s, status_s, mode=SESSION_STATUS_MODE))
        if "LaborCost" in fields:
            refresh_session_total(ws)
        db.flush()
        return ws

    ws = run_atomic(db, work, label="update_session")
    logger.info(
        "session %s updated", ws.SessionNumber,
        extra={"entity": "WorkSession", "entity_id": ws.SessionID, "status": ws.Status_s},
    )
    return ws


def delete_session(db: Session, caller: Caller, session_id: int, *, check: CapabilityCheck = grant_check) -> dict:
    manager_id = authorize(caller, MAINTENANCE, MANAGE_AGENTS, check=check)

    def work():
        ws = lock_scoped(db, WorkSession, session_id, manager_id, LABEL)
        ensure_session_deletable(ws.Status_s)
        out = {"SessionID": session_id, "SessionNumber": ws.SessionNumber, "MaterialsDeleted": len(ws.materials)}
        # delete-orphan cascade: material lines are deleted before the session row
        db.delete(ws)
        db.flush()
        return out

    out = run_atomic(db, work, label="delete_session")
    logger.info(
        "session %s deleted (%s material lines)", out["SessionNumber"], out["MaterialsDeleted"],
        extra={"entity": "WorkSession", "entity_id": session_id},
    )
    return out
