from decimal import Decimal

import pytest
from fastapi import HTTPException

from servicedesk.core.capabilities import (
    LAUNDRY, MAINTENANCE, MANAGE_CLIENTS, Caller, CapabilityDecision, authorize, grant_check,
)
from servicedesk.core.errors import Forbidden, NotFound
from servicedesk.core.security import create_caller_token, decode_caller
from servicedesk.services import invoice_service, order_service, request_service, session_service


def test_grant_check_needs_department_and_capability(maint_manager, laundry_viewer):
    assert grant_check(maint_manager, MAINTENANCE).manager_id == 3
    assert not grant_check(maint_manager, LAUNDRY).allowed
    assert grant_check(laundry_viewer, LAUNDRY).allowed
    decision = grant_check(laundry_viewer, LAUNDRY, MANAGE_CLIENTS)
    assert not decision.allowed and MANAGE_CLIENTS in decision.reason


def test_authorize_returns_manager_scope(laundry_manager):
    assert authorize(laundry_manager, LAUNDRY, MANAGE_CLIENTS) == 5
    with pytest.raises(Forbidden):
        authorize(laundry_manager, MAINTENANCE)


def test_allowed_without_scope_is_refused():
    def no_scope(caller, department, capability=None):
        return CapabilityDecision(True)

    with pytest.raises(Forbidden):
        authorize(Caller(user_id="x"), LAUNDRY, check=no_scope)


def test_caller_from_claims_skips_broken_grants():
    caller = Caller.from_claims({
        "sub": "u1",
        "grants": {
            MAINTENANCE: {"manager_id": "7", "capabilities": ["manage_agents"]},
            LAUNDRY: {"capabilities": ["manage_clients"]},
            "garden": "yes",
        },
    })
    assert caller.user_id == "u1"
    assert set(caller.grants) == {MAINTENANCE}
    assert caller.grants[MAINTENANCE].manager_id == 7


@pytest.mark.parametrize("grants", [{MAINTENANCE: {"manager_id": "abc"}}, {MAINTENANCE: {"manager_id": [7]}}, ["maintenance"]])
def test_token_with_malformed_grants_is_rejected(grants):
    with pytest.raises(HTTPException) as exc:
        decode_caller(create_caller_token("u1", grants))
    assert exc.value.status_code == 401


def test_wrong_department_is_forbidden(db, maint_manager, laundry_manager):
    with pytest.raises(Forbidden):
        order_service.list_orders(db, maint_manager)
    with pytest.raises(Forbidden):
        request_service.create_request(db, laundry_manager, {"Title": "x", "PropertyID": 1})


def test_viewer_cannot_create_orders_or_invoices(db, laundry_viewer):
    with pytest.raises(Forbidden):
        order_service.create_order(db, laundry_viewer, {"ClientID": 1, "DeliveryAddress": "Somewhere"})
    with pytest.raises(Forbidden):
        invoice_service.create_invoice(db, laundry_viewer, {"ClientID": 1, "Subtotal": Decimal("5")})


def test_staff_cannot_schedule_sessions(db, maint_staff, make_request):
    req = make_request()
    with pytest.raises(Forbidden):
        session_service.create_session(db, maint_staff, {"RequestID": req.RequestID, "AgentID": 1})


def test_other_manager_sees_nothing(db, other_maint_manager, make_session):
    ws = make_session()
    with pytest.raises(NotFound):
        request_service.get_request(db, other_maint_manager, ws.RequestID)
    with pytest.raises(NotFound):
        session_service.get_session(db, other_maint_manager, ws.SessionID)
    assert session_service.list_sessions(db, other_maint_manager) == []


def test_injected_check_decides(db, make_order):
    order = make_order()
    calls = []

    def check(caller, department, capability=None):
        calls.append((department, capability))
        if caller.user_id == "auditor":
            return CapabilityDecision(True, manager_id=5)
        return CapabilityDecision(False, reason="blocked by policy")

    auditor = Caller(user_id="auditor")
    assert order_service.get_order(db, auditor, order.OrderID, check=check).OrderID == order.OrderID
    with pytest.raises(Forbidden) as exc:
        order_service.get_order(db, Caller(user_id="someone"), order.OrderID, check=check)
    assert exc.value.reason == "blocked by policy"
    assert calls == [(LAUNDRY, None), (LAUNDRY, None)]
