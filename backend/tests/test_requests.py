from decimal import Decimal

import pytest

from servicedesk.core.errors import Conflict, NotFound, ValidationFailed
from servicedesk.models import ServiceRequest
from servicedesk.services import request_service as svc


def test_create_defaults(make_request):
    req = make_request(EstimatedCost="150.456")
    assert req.Status_s == "open"
    assert req.Priority_s == "medium"
    assert req.ManagerID == 3
    assert req.ReportedAt is not None
    assert req.AgentID is None and req.AssignedAt is None
    assert req.EstimatedCost == Decimal("150.46")


def test_create_with_agent_is_assigned(make_request):
    req = make_request(AgentID=12)
    assert req.Status_s == "assigned"
    assert req.AgentID == 12
    assert req.AssignedAt is not None


@pytest.mark.parametrize(
    "fields",
    [{"Title": ""}, {"Priority_s": "whenever"}, {"PropertyID": 0}, {"EstimatedCost": -1}, {"RequestNumber": "X"}],
)
def test_create_validation(make_request, fields):
    with pytest.raises(ValidationFailed):
        make_request(**fields)


def test_assign_moves_open_to_assigned_once(db, maint_manager, make_request):
    req = make_request()
    req = svc.assign_request(db, maint_manager, req.RequestID, 5)
    first_assigned_at = req.AssignedAt
    assert (req.Status_s, req.AgentID) == ("assigned", 5)

    req = svc.update_request(db, maint_manager, req.RequestID, {"Status_s": "in_progress"})
    req = svc.assign_request(db, maint_manager, req.RequestID, 6)
    assert req.Status_s == "in_progress"
    assert req.AgentID == 6
    assert req.AssignedAt == first_assigned_at


def test_unassigning_returns_ticket_to_open(db, maint_manager, make_request):
    req = make_request(AgentID=5)
    first_assigned_at = req.AssignedAt
    req = svc.update_request(db, maint_manager, req.RequestID, {"AgentID": None})
    assert (req.Status_s, req.AgentID) == ("open", None)
    assert req.AssignedAt == first_assigned_at

    req = svc.assign_request(db, maint_manager, req.RequestID, 7)
    assert (req.Status_s, req.AgentID) == ("assigned", 7)
    assert req.AssignedAt == first_assigned_at


def test_agent_and_status_in_one_update(db, maint_manager, make_request):
    req = make_request()
    req = svc.update_request(db, maint_manager, req.RequestID, {"AgentID": 9, "Status_s": "in_progress"})
    assert (req.Status_s, req.AgentID) == ("in_progress", 9)


@pytest.mark.parametrize("fields", [{"Title": None}, {"Title": "   "}, {"Status_s": None}, {"PropertyID": None}])
def test_update_refuses_nulls_on_required_columns(db, maint_manager, make_request, fields):
    req = make_request()
    with pytest.raises(ValidationFailed):
        svc.update_request(db, maint_manager, req.RequestID, fields)


def test_text_is_trimmed_and_blank_is_null(make_request):
    req = make_request(Title="  Leaking tap  ", Category="", RoomLocation=" Kitchen ")
    assert req.Title == "Leaking tap"
    assert req.Category is None
    assert req.RoomLocation == "Kitchen"


def test_manual_assigned_without_agent_conflicts(db, maint_manager, make_request):
    req = make_request()
    with pytest.raises(Conflict):
        svc.update_request(db, maint_manager, req.RequestID, {"Status_s": "assigned"})
    db.expire_all()
    assert db.get(ServiceRequest, req.RequestID).Status_s == "open"


def test_strict_graph_rejects_skips(db, maint_manager, make_request):
    req = make_request(AgentID=1)
    with pytest.raises(Conflict):
        svc.update_request(db, maint_manager, req.RequestID, {"Status_s": "closed"})
    req = svc.update_request(db, maint_manager, req.RequestID, {"Status_s": "cancelled"})
    with pytest.raises(Conflict):
        svc.update_request(db, maint_manager, req.RequestID, {"Status_s": "open"})


def test_resolve_stamps_once(db, maint_manager, make_request, monkeypatch):
    req = make_request(AgentID=1)
    svc.update_request(db, maint_manager, req.RequestID, {"Status_s": "in_progress"})
    req = svc.resolve_request(db, maint_manager, req.RequestID, "Replaced washer")
    stamped = req.ResolvedAt
    assert req.Status_s == "resolved" and req.Resolution == "Replaced washer"
    assert stamped is not None

    # resolving again (same status) changes nothing
    req = svc.resolve_request(db, maint_manager, req.RequestID)
    assert req.ResolvedAt == stamped

    monkeypatch.setattr(svc, "REQUEST_STATUS_MODE", "permissive")
    svc.update_request(db, maint_manager, req.RequestID, {"Status_s": "in_progress"})
    req = svc.resolve_request(db, maint_manager, req.RequestID)
    assert req.ResolvedAt == stamped


def test_delete_guard_when_session_exists(db, maint_manager, make_request, make_session):
    lonely = make_request()
    request_id, number = lonely.RequestID, lonely.RequestNumber
    out = svc.delete_request(db, maint_manager, request_id)
    assert out["RequestNumber"] == number
    assert db.get(ServiceRequest, request_id) is None

    ws = make_session()
    with pytest.raises(Conflict):
        svc.delete_request(db, maint_manager, ws.RequestID)


def test_scope(db, maint_manager, other_maint_manager, make_request):
    req = make_request()
    with pytest.raises(NotFound):
        svc.get_request(db, other_maint_manager, req.RequestID)
    with pytest.raises(NotFound):
        svc.update_request(db, other_maint_manager, req.RequestID, {"Title": "hijack"})
    assert svc.list_requests(db, other_maint_manager) == []
    assert [r.RequestID for r in svc.list_requests(db, maint_manager)] == [req.RequestID]


def test_list_filters(db, maint_manager, make_request):
    make_request(Priority_s="urgent")
    make_request(AgentID=3)
    make_request(PropertyID=99)
    assert len(svc.list_requests(db, maint_manager, priority_s="urgent")) == 1
    assert len(svc.list_requests(db, maint_manager, status_s="assigned")) == 1
    assert len(svc.list_requests(db, maint_manager, property_id=99)) == 1
    assert len(svc.list_requests(db, maint_manager, limit=2)) == 2
