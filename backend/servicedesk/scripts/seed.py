import logging
from contextlib import contextmanager
from decimal import Decimal

from sqlalchemy import select

from servicedesk.core.db import SessionLocal
from servicedesk.core.logging_config import configure_logging
from servicedesk.models import Product

logger = logging.getLogger(__name__)

# ---------- small helpers ----------

@contextmanager
def session_scope():
    """One-off session (rollback on error)."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def get_one(db, model, **by):
    """Row matching the given columns, or None."""
    return db.execute(select(model).filter_by(**by)).scalars().first()

def get_or_create(db, model, unique_by: dict, defaults: dict | None = None):
    """Look up by unique_by, create when missing (idempotent)."""
    inst = get_one(db, model, **unique_by)
    if inst:
        return inst, False
    inst = model(**{**unique_by, **(defaults or {})})
    db.add(inst)
    # the caller commits
    return inst, True

# ---------- laundry catalogue (idempotent) ----------

PRODUCTS = [
    {"Name": "Shirt",            "Category": "garment",  "Price": Decimal("3.50")},
    {"Name": "Trousers",         "Category": "garment",  "Price": Decimal("4.20")},
    {"Name": "Suit (2 pieces)",  "Category": "garment",  "Price": Decimal("12.00")},
    {"Name": "Duvet cover",      "Category": "linen",    "Price": Decimal("8.90")},
    {"Name": "Bed sheet",        "Category": "linen",    "Price": Decimal("5.00")},
    {"Name": "Bath towel",       "Category": "linen",    "Price": Decimal("2.40")},
    {"Name": "Curtain (per m2)", "Category": "home",     "Price": Decimal("6.75")},
]

def run():
    with session_scope() as db:
        created = 0
        for p in PRODUCTS:
            _, new = get_or_create(db, Product, {"Name": p["Name"]}, defaults={**p, "IsActive": True})
            created += int(new)
    logger.info("seed done: %s new products, %s total in catalogue", created, len(PRODUCTS))

if __name__ == "__main__":
    configure_logging()
    run()
