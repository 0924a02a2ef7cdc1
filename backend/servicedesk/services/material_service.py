# backend/servicedesk/services/material_service.py
"""
Material lines of a work session.

Every mutation locks the owning session, writes the line and recomputes
MaterialsCost / TotalCost before the single commit.
"""
from __future__ import annotations

import logging
from typing import List

from sqlalchemy.orm import Session

from servicedesk.core.capabilities import MAINTENANCE, Caller, CapabilityCheck, authorize, grant_check
from servicedesk.core.errors import NotFound
from servicedesk.core.tx import run_atomic
from servicedesk.domain.aggregates import line_total, positive_money, positive_quantity
from servicedesk.domain.lifecycle import ensure_session_lines_mutable
from servicedesk.models import MaterialLine, WorkSession
from servicedesk.schemas.maintenance import MaterialCreate, MaterialUpdate
from servicedesk.services.aggregate_service import recompute_session_costs
from servicedesk.services.common import apply, get_scoped, in_scope, lock_scoped, parse

logger = logging.getLogger(__name__)

LABEL = "Material"


def _quantize(fields: dict) -> dict:
    if "Quantity" in fields:
        fields["Quantity"] = positive_quantity(fields["Quantity"])
    if "UnitPrice" in fields:
        fields["UnitPrice"] = positive_money(fields["UnitPrice"], "UnitPrice")
    return fields


def _line_in_scope(db: Session, material_id: int, manager_id: int) -> MaterialLine:
    line = db.get(MaterialLine, material_id)
    if line is None or not in_scope(db.get(WorkSession, line.SessionID), manager_id):
        raise NotFound(f"{LABEL} not found")
    return line


# -------- Queries --------
def list_materials(
    db: Session, caller: Caller, session_id: int, *, check: CapabilityCheck = grant_check
) -> List[MaterialLine]:
    manager_id = authorize(caller, MAINTENANCE, check=check)
    get_scoped(db, WorkSession, session_id, manager_id, "Session")
    return (
        db.query(MaterialLine)
        .filter(MaterialLine.SessionID == session_id)
        .order_by(MaterialLine.MaterialID)
        .all()
    )


def get_material(db: Session, caller: Caller, material_id: int, *, check: CapabilityCheck = grant_check):
    manager_id = authorize(caller, MAINTENANCE, check=check)
    return _line_in_scope(db, material_id, manager_id)


# -------- Commands --------
def add_material(
    db: Session, caller: Caller, session_id: int, data: dict, *, check: CapabilityCheck = grant_check
) -> MaterialLine:
    manager_id = authorize(caller, MAINTENANCE, check=check)
    fields = _quantize(parse(MaterialCreate, data, LABEL))

    def work():
        ws = lock_scoped(db, WorkSession, session_id, manager_id, "Session")
        ensure_session_lines_mutable(ws.Status_s)
        line = MaterialLine(
            SessionID=session_id,
            LineTotal=line_total(fields["Quantity"], fields["UnitPrice"]),
            **fields,
        )
        db.add(line)
        recompute_session_costs(db, ws)
        db.flush()
        return line

    line = run_atomic(db, work, label="add_material")
    logger.info(
        "material %s added to session %s", line.MaterialID, session_id,
        extra={"entity": "MaterialLine", "entity_id": line.MaterialID, "parent_id": session_id},
    )
    return line


def update_material(
    db: Session, caller: Caller, material_id: int, data: dict, *, check: CapabilityCheck = grant_check
) -> MaterialLine:
    manager_id = authorize(caller, MAINTENANCE, check=check)
    fields = _quantize(parse(MaterialUpdate, data, LABEL))

    def work():
        session_id = _line_in_scope(db, material_id, manager_id).SessionID
        ws = lock_scoped(db, WorkSession, session_id, manager_id, "Session")
        ensure_session_lines_mutable(ws.Status_s)
        line = db.get(MaterialLine, material_id, populate_existing=True)
        if line is None:
            raise NotFound(f"{LABEL} not found")
        apply(line, fields)
        line.LineTotal = line_total(line.Quantity, line.UnitPrice)
        recompute_session_costs(db, ws)
        db.flush()
        return line

    line = run_atomic(db, work, label="update_material")
    logger.info(
        "material %s updated", material_id,
        extra={"entity": "MaterialLine", "entity_id": material_id, "parent_id": line.SessionID},
    )
    return line


def remove_material(db: Session, caller: Caller, material_id: int, *, check: CapabilityCheck = grant_check):
    """Delete the line; returns the recomputed session."""
    manager_id = authorize(caller, MAINTENANCE, check=check)

    def work():
        session_id = _line_in_scope(db, material_id, manager_id).SessionID
        ws = lock_scoped(db, WorkSession, session_id, manager_id, "Session")
        ensure_session_lines_mutable(ws.Status_s)
        line = db.get(MaterialLine, material_id)
        if line is None:
            raise NotFound(f"{LABEL} not found")
        db.delete(line)
        recompute_session_costs(db, ws)
        db.flush()
        return ws

    ws = run_atomic(db, work, label="remove_material")
    logger.info(
        "material %s removed from session %s", material_id, ws.SessionID,
        extra={"entity": "MaterialLine", "entity_id": material_id, "parent_id": ws.SessionID},
    )
    return ws
