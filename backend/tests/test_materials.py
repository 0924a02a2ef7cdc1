from decimal import Decimal

import pytest
from sqlalchemy import func, select

from servicedesk.core.errors import Conflict, NotFound, ValidationFailed
from servicedesk.models import MaterialLine, WorkSession
from servicedesk.services import material_service as materials, session_service


def assert_session_consistent(db, session_id):
    db.expire_all()
    ws = db.get(WorkSession, session_id)
    total = db.execute(
        select(func.sum(MaterialLine.LineTotal)).where(MaterialLine.SessionID == session_id)
    ).scalar()
    assert ws.MaterialsCost == (total or Decimal("0"))
    assert ws.TotalCost == ws.LaborCost + ws.MaterialsCost
    return ws


def pipe(**overrides):
    data = {"Name": "Copper pipe", "Quantity": Decimal("2"), "Unit": "m", "UnitPrice": Decimal("7.25")}
    data.update(overrides)
    return data


def test_material_lifecycle_keeps_session_costs(db, maint_staff, make_session):
    ws = make_session(LaborCost=Decimal("80"))
    assert (ws.MaterialsCost, ws.TotalCost) == (Decimal("0"), Decimal("80"))

    line = materials.add_material(db, maint_staff, ws.SessionID, pipe())
    assert line.LineTotal == Decimal("14.50")
    ws = assert_session_consistent(db, ws.SessionID)
    assert ws.TotalCost == Decimal("94.50")

    materials.add_material(db, maint_staff, ws.SessionID, pipe(Name="Seal", Quantity=3, Unit="pcs", UnitPrice="0.99"))
    assert assert_session_consistent(db, ws.SessionID).MaterialsCost == Decimal("17.47")

    line = materials.update_material(db, maint_staff, line.MaterialID, {"Quantity": Decimal("4.5")})
    assert line.LineTotal == Decimal("32.63")
    assert_session_consistent(db, ws.SessionID)

    ws = materials.remove_material(db, maint_staff, line.MaterialID)
    assert ws.MaterialsCost == Decimal("2.97")
    assert ws.TotalCost == Decimal("82.97")
    assert_session_consistent(db, ws.SessionID)


def test_labor_cost_change_recomputes_total(db, maint_manager, maint_staff, make_session):
    ws = make_session()
    materials.add_material(db, maint_staff, ws.SessionID, pipe())
    ws = session_service.update_session(db, maint_staff, ws.SessionID, {"LaborCost": Decimal("120.00")})
    assert ws.TotalCost == Decimal("134.50")
    assert_session_consistent(db, ws.SessionID)


@pytest.mark.parametrize(
    "payload",
    [pipe(Quantity=0), pipe(UnitPrice=Decimal("-1")), pipe(Name="  "), pipe(Unit=""), pipe(MaterialsCost=1)],
)
def test_invalid_material_is_rejected(db, maint_staff, make_session, payload):
    ws = make_session()
    with pytest.raises(ValidationFailed):
        materials.add_material(db, maint_staff, ws.SessionID, payload)
    assert assert_session_consistent(db, ws.SessionID).MaterialsCost == 0


@pytest.mark.parametrize("status", ["completed", "cancelled"])
def test_materials_frozen_on_closed_session(db, maint_staff, make_session, status):
    ws = make_session()
    line = materials.add_material(db, maint_staff, ws.SessionID, pipe())
    session_service.update_session(db, maint_staff, ws.SessionID, {"Status_s": status})

    with pytest.raises(Conflict):
        materials.add_material(db, maint_staff, ws.SessionID, pipe())
    with pytest.raises(Conflict):
        materials.update_material(db, maint_staff, line.MaterialID, {"Quantity": 1})
    with pytest.raises(Conflict):
        materials.remove_material(db, maint_staff, line.MaterialID)


def test_list_and_get(db, maint_staff, make_session):
    ws = make_session()
    first = materials.add_material(db, maint_staff, ws.SessionID, pipe())
    materials.add_material(db, maint_staff, ws.SessionID, pipe(Name="Tape"))
    assert [m.Name for m in materials.list_materials(db, maint_staff, ws.SessionID)] == ["Copper pipe", "Tape"]
    assert materials.get_material(db, maint_staff, first.MaterialID).Name == "Copper pipe"


def test_materials_outside_scope_look_missing(db, maint_staff, other_maint_manager, make_session):
    ws = make_session()
    line = materials.add_material(db, maint_staff, ws.SessionID, pipe())
    with pytest.raises(NotFound):
        materials.add_material(db, other_maint_manager, ws.SessionID, pipe())
    with pytest.raises(NotFound):
        materials.update_material(db, other_maint_manager, line.MaterialID, {"Quantity": 1})
    with pytest.raises(NotFound):
        materials.list_materials(db, other_maint_manager, ws.SessionID)
