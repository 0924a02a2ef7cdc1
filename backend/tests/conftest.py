# backend/tests/conftest.py
import os
import tempfile
from datetime import datetime
from decimal import Decimal

import pytest

# The engine is built at import time: point it at a throwaway SQLite file first
_DB_DIR = tempfile.mkdtemp(prefix="servicedesk-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_DB_DIR, "servicedesk.db")
os.environ.setdefault("JWT_SECRET", "test-secret")

from fastapi.testclient import TestClient  # noqa: E402

from servicedesk.core.capabilities import (  # noqa: E402
    MAINTENANCE, LAUNDRY, MANAGE_AGENTS, MANAGE_CLIENTS, MANAGE_BILLING, Caller, DepartmentGrant,
)
from servicedesk.core.db import Base, SessionLocal, engine  # noqa: E402
from servicedesk.core.security import create_caller_token  # noqa: E402
from servicedesk import models  # noqa: E402,F401
from servicedesk.services import (  # noqa: E402
    order_service, product_service, request_service, session_service,
)

MAINT_MANAGER_ID = 3
LAUNDRY_MANAGER_ID = 5


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    engine.dispose()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


# ---------- callers ----------

def _caller(user_id, **grants):
    return Caller(
        user_id=user_id,
        grants={dept: DepartmentGrant(manager_id=mid, capabilities=frozenset(caps)) for dept, (mid, caps) in grants.items()},
    )


@pytest.fixture
def maint_manager():
    return _caller("maint-manager", **{MAINTENANCE: (MAINT_MANAGER_ID, {MANAGE_AGENTS})})


@pytest.fixture
def maint_staff():
    """Same scope as maint_manager, without manage_agents."""
    return _caller("maint-staff", **{MAINTENANCE: (MAINT_MANAGER_ID, set())})


@pytest.fixture
def other_maint_manager():
    return _caller("other-maint", **{MAINTENANCE: (99, {MANAGE_AGENTS})})


@pytest.fixture
def laundry_manager():
    return _caller("laundry-manager", **{LAUNDRY: (LAUNDRY_MANAGER_ID, {MANAGE_CLIENTS, MANAGE_BILLING})})


@pytest.fixture
def laundry_viewer():
    return _caller("laundry-viewer", **{LAUNDRY: (LAUNDRY_MANAGER_ID, set())})


@pytest.fixture
def other_laundry_manager():
    return _caller("other-laundry", **{LAUNDRY: (77, {MANAGE_CLIENTS, MANAGE_BILLING})})


# ---------- HTTP ----------

@pytest.fixture
def client():
    from servicedesk.main import app
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def bearer(sub, grants):
    return {"Authorization": f"Bearer {create_caller_token(sub, grants)}"}


@pytest.fixture
def maint_headers():
    return bearer("maint-manager", {MAINTENANCE: {"manager_id": MAINT_MANAGER_ID, "capabilities": [MANAGE_AGENTS]}})


@pytest.fixture
def laundry_headers():
    return bearer(
        "laundry-manager",
        {LAUNDRY: {"manager_id": LAUNDRY_MANAGER_ID, "capabilities": [MANAGE_CLIENTS, MANAGE_BILLING]}},
    )


# ---------- builders ----------

@pytest.fixture
def make_request(db, maint_manager):
    def _make(caller=None, **fields):
        data = {"Title": "Leaking tap", "Description_s": "Kitchen tap drips", "PropertyID": 12}
        data.update(fields)
        return request_service.create_request(db, caller or maint_manager, data)
    return _make


@pytest.fixture
def make_session(db, maint_manager, make_request):
    def _make(request=None, caller=None, **fields):
        request = request or make_request()
        data = {"RequestID": request.RequestID, "AgentID": 41, "ScheduledDate": datetime(2026, 3, 2, 9, 0)}
        data.update(fields)
        return session_service.create_session(db, caller or maint_manager, data)
    return _make


@pytest.fixture
def make_product(db, laundry_manager):
    def _make(name="Shirt", price="10.00", **fields):
        return product_service.create_product(db, laundry_manager, {"Name": name, "Price": Decimal(price), **fields})
    return _make


@pytest.fixture
def make_order(db, laundry_manager):
    def _make(caller=None, **fields):
        data = {"ClientID": 501, "DeliveryAddress": "12 Rue des Lilas"}
        data.update(fields)
        return order_service.create_order(db, caller or laundry_manager, data)
    return _make
