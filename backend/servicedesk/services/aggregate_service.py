# backend/servicedesk/services/aggregate_service.py
"""
Parent recomputation after a line mutation.

Called inside the same atomic unit as the child write, after the parent
row was locked. `resum` re-reads every sibling line; `delta` adds the
change of one line to the stored subtotal and trusts the parent snapshot.
"""
from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from servicedesk.core.config import AGGREGATE_STRATEGY
from servicedesk.domain.aggregates import (
    money_or_zero, order_total_amount, session_total_cost, sum_line_totals,
)
from servicedesk.models import MaterialLine, OrderLine, ServiceOrder, WorkSession

RESUM = "resum"
DELTA = "delta"


def _sum_lines(db: Session, column, fk_column, parent_id: int) -> Decimal:
    db.flush()
    total = db.execute(select(func.sum(column)).where(fk_column == parent_id)).scalar()
    return sum_line_totals([total])


# -------- WorkSession --------
def recompute_session_costs(db: Session, session: WorkSession) -> WorkSession:
    session.MaterialsCost = _sum_lines(db, MaterialLine.LineTotal, MaterialLine.SessionID, session.SessionID)
    session.TotalCost = session_total_cost(session.LaborCost, session.MaterialsCost)
    return session


def refresh_session_total(session: WorkSession) -> WorkSession:
    """LaborCost changed; MaterialsCost is unaffected."""
    session.TotalCost = session_total_cost(session.LaborCost, session.MaterialsCost)
    return session


# -------- ServiceOrder --------
def recompute_order_totals(db: Session, order: ServiceOrder) -> ServiceOrder:
    order.Subtotal = _sum_lines(db, OrderLine.LineTotal, OrderLine.OrderID, order.OrderID)
    order.TotalAmount = order_total_amount(order.Subtotal, order.Taxes, order.DeliveryFee)
    return order


def apply_order_delta(order: ServiceOrder, delta) -> ServiceOrder:
    order.Subtotal = money_or_zero(order.Subtotal) + money_or_zero(delta)
    order.TotalAmount = order_total_amount(order.Subtotal, order.Taxes, order.DeliveryFee)
    return order


def refresh_order_total(order: ServiceOrder) -> ServiceOrder:
    """Taxes or DeliveryFee changed; Subtotal is unaffected."""
    order.TotalAmount = order_total_amount(order.Subtotal, order.Taxes, order.DeliveryFee)
    return order


def update_order_after_line_change(
    db: Session, order: ServiceOrder, delta, *, strategy: str = None
) -> ServiceOrder:
    strategy = strategy or AGGREGATE_STRATEGY
    if strategy == DELTA:
        return apply_order_delta(order, delta)
    return recompute_order_totals(db, order)
