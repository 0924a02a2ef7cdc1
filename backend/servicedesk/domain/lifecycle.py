# backend/servicedesk/domain/lifecycle.py
"""
Status lifecycle of tickets, work sessions, orders and invoices.

The plan_* functions never touch the database: they take the current
state and the requested change and return the column updates the
transition implies (new status plus the timestamps/flags it stamps), or
raise ValidationFailed / Conflict. Services apply the returned dict to
the locked row. The ensure_* guards protect deletions and line edits.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, FrozenSet, Mapping, Optional

from ..core.errors import Conflict, ValidationFailed
from .constants import (
    REQUEST_STATUSES, REQ_OPEN, REQ_ASSIGNED, REQ_IN_PROGRESS, REQ_RESOLVED, REQ_CLOSED, REQ_CANCELLED,
    SESSION_STATUSES, SES_PLANNED, SES_IN_PROGRESS, SES_COMPLETED, SES_CANCELLED, SES_PAUSED,
    SES_PENDING_VALIDATION,
    ORDER_STATUSES, ORD_RECEIVED, ORD_PROCESSING, ORD_READY, ORD_PICKUP_SCHEDULED, ORD_IN_DELIVERY,
    ORD_DELIVERED, ORD_COMPLETED, ORD_CANCELLED, ORD_RETURNED,
    INV_PAID,
)

STRICT = "strict"
PERMISSIVE = "permissive"

Graph = Mapping[str, FrozenSet[str]]

# Any ticket state may be cancelled; the main line is open -> ... -> closed
REQUEST_GRAPH: Graph = {
    REQ_OPEN: frozenset({REQ_ASSIGNED, REQ_CANCELLED}),
    REQ_ASSIGNED: frozenset({REQ_IN_PROGRESS, REQ_CANCELLED}),
    REQ_IN_PROGRESS: frozenset({REQ_RESOLVED, REQ_CANCELLED}),
    REQ_RESOLVED: frozenset({REQ_CLOSED, REQ_CANCELLED}),
    REQ_CLOSED: frozenset({REQ_CANCELLED}),
    REQ_CANCELLED: frozenset(),
}

SESSION_GRAPH: Graph = {
    SES_PLANNED: frozenset({SES_IN_PROGRESS, SES_CANCELLED}),
    SES_IN_PROGRESS: frozenset({SES_COMPLETED, SES_PAUSED, SES_PENDING_VALIDATION, SES_CANCELLED}),
    SES_PAUSED: frozenset({SES_IN_PROGRESS, SES_CANCELLED}),
    SES_PENDING_VALIDATION: frozenset({SES_IN_PROGRESS, SES_COMPLETED, SES_CANCELLED}),
    SES_COMPLETED: frozenset(),
    SES_CANCELLED: frozenset(),
}

ORDER_GRAPH: Graph = {
    ORD_RECEIVED: frozenset({ORD_PROCESSING, ORD_CANCELLED}),
    ORD_PROCESSING: frozenset({ORD_READY, ORD_CANCELLED}),
    ORD_READY: frozenset({ORD_PICKUP_SCHEDULED, ORD_IN_DELIVERY, ORD_DELIVERED, ORD_CANCELLED}),
    ORD_PICKUP_SCHEDULED: frozenset({ORD_IN_DELIVERY, ORD_CANCELLED}),
    ORD_IN_DELIVERY: frozenset({ORD_DELIVERED, ORD_RETURNED}),
    ORD_DELIVERED: frozenset({ORD_COMPLETED, ORD_RETURNED}),
    ORD_COMPLETED: frozenset({ORD_RETURNED}),
    ORD_RETURNED: frozenset({ORD_PROCESSING, ORD_CANCELLED}),
    ORD_CANCELLED: frozenset(),
}

# Milestone column stamped when an order enters the status
ORDER_MILESTONES: Dict[str, str] = {
    ORD_PROCESSING: "ProcessedDate",
    ORD_READY: "ReadyDate",
    ORD_DELIVERED: "DeliveryDate",
}

SESSION_DELETE_BLOCKED = frozenset({SES_IN_PROGRESS, SES_COMPLETED})
SESSION_LINES_FROZEN = frozenset({SES_COMPLETED, SES_CANCELLED})
REQUEST_NO_NEW_SESSION = frozenset({REQ_CLOSED, REQ_CANCELLED})
ORDER_DELETABLE = frozenset({ORD_RECEIVED, ORD_CANCELLED})
ORDER_LINES_FROZEN = frozenset({ORD_DELIVERED, ORD_COMPLETED, ORD_CANCELLED, ORD_RETURNED})
# orders in these states no longer hold on to their products
ORDER_INACTIVE = frozenset({ORD_COMPLETED, ORD_CANCELLED})


def check_status(value, allowed, entity: str) -> str:
    if not isinstance(value, str) or value not in allowed:
        raise ValidationFailed(f"{entity} status must be one of {', '.join(allowed)}")
    return value


def check_transition(entity: str, graph: Graph, current: str, target: str, mode: str) -> None:
    if mode == STRICT and target not in graph.get(current, frozenset()):
        raise Conflict(f"{entity} cannot move from '{current}' to '{target}'")


# -------- ServiceRequest --------
def plan_agent_assignment(
    current_status: str, assigned_at: Optional[datetime], agent_id: Optional[int], now: datetime
) -> dict:
    """
    Attaching an agent to an open ticket assigns it; AssignedAt is stamped once.
    Detaching the agent of an assigned ticket puts it back in the open queue.
    """
    updates: dict = {"AgentID": agent_id}
    if agent_id is None:
        if current_status == REQ_ASSIGNED:
            updates["Status_s"] = REQ_OPEN
        return updates
    if assigned_at is None:
        updates["AssignedAt"] = now
    if current_status == REQ_OPEN:
        updates["Status_s"] = REQ_ASSIGNED
    return updates


def plan_request_status(
    current: str,
    target,
    *,
    agent_id: Optional[int],
    resolved_at: Optional[datetime],
    now: datetime,
    mode: str = STRICT,
) -> dict:
    target = check_status(target, REQUEST_STATUSES, "Request")
    if target == current:
        return {}
    check_transition("Request", REQUEST_GRAPH, current, target, mode)
    if target == REQ_ASSIGNED and agent_id is None:
        raise Conflict("Request cannot be assigned without an agent")

    updates: dict = {"Status_s": target}
    if target == REQ_RESOLVED and resolved_at is None:
        updates["ResolvedAt"] = now
    return updates


def ensure_request_deletable(has_session: bool) -> None:
    if has_session:
        raise Conflict("Cannot delete a request that has a work session")


def ensure_request_accepts_session(status: str, has_session: bool) -> None:
    if has_session:
        raise Conflict("This request already has a work session")
    if status in REQUEST_NO_NEW_SESSION:
        raise Conflict(f"Cannot schedule a session for a '{status}' request")


# -------- WorkSession --------
def plan_session_status(current: str, target, *, mode: str = PERMISSIVE) -> dict:
    target = check_status(target, SESSION_STATUSES, "Session")
    if target == current:
        return {}
    check_transition("Session", SESSION_GRAPH, current, target, mode)
    return {"Status_s": target}


def ensure_session_deletable(status: str) -> None:
    if status in SESSION_DELETE_BLOCKED:
        raise Conflict(f"Cannot delete a session that is '{status}'")


def ensure_session_lines_mutable(status: str) -> None:
    if status in SESSION_LINES_FROZEN:
        raise Conflict(f"Materials of a '{status}' session cannot change")


# -------- ServiceOrder --------
def initial_order_stamps(status: str, now: datetime) -> dict:
    stamps: dict = {}
    if status == ORD_RECEIVED:
        stamps["ReceivedDate"] = now
    milestone = ORDER_MILESTONES.get(status)
    if milestone:
        stamps[milestone] = now
    if status == ORD_COMPLETED:
        stamps.update(ReceivedByClient=True, ReceivedAt=now)
    return stamps


def plan_order_status(current: str, target, *, now: datetime, mode: str = PERMISSIVE) -> dict:
    target = check_status(target, ORDER_STATUSES, "Order")
    if target == current:
        return {}
    check_transition("Order", ORDER_GRAPH, current, target, mode)

    updates: dict = {"Status_s": target}
    milestone = ORDER_MILESTONES.get(target)
    if milestone:
        updates[milestone] = now
    if target == ORD_COMPLETED:
        updates["ReceivedByClient"] = True
        updates["ReceivedAt"] = now
    return updates


def ensure_order_deletable(status: str) -> None:
    if status not in ORDER_DELETABLE:
        raise Conflict(f"Cannot delete an order that is '{status}'")


def ensure_order_lines_mutable(status: str) -> None:
    if status in ORDER_LINES_FROZEN:
        raise Conflict(f"Lines of a '{status}' order cannot change")


# -------- Invoice --------
def ensure_invoice_deletable(status: str, paid_amount) -> None:
    if status == INV_PAID or (paid_amount or 0) > 0:
        raise Conflict("Cannot delete an invoice that is paid or partially paid")
