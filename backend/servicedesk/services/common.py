# backend/servicedesk/services/common.py
from __future__ import annotations

from typing import Optional, Type

from pydantic import ValidationError
from sqlalchemy.orm import Session

from servicedesk.core.errors import NotFound, ValidationFailed
from servicedesk.core.tx import lock_for_update
from servicedesk.schemas.base import WriteModel


def in_scope(obj, manager_id: Optional[int]) -> bool:
    return obj is not None and (manager_id is None or obj.ManagerID == manager_id)


def get_scoped(db: Session, model, pk, manager_id: Optional[int], label: str):
    """Row by primary key; rows outside the caller's scope look missing."""
    obj = db.get(model, pk)
    if not in_scope(obj, manager_id):
        raise NotFound(f"{label} not found")
    return obj


def lock_scoped(db: Session, model, pk, manager_id: Optional[int], label: str):
    obj = lock_for_update(db, model, pk)
    if not in_scope(obj, manager_id):
        raise NotFound(f"{label} not found")
    return obj


def parse(schema: Type[WriteModel], data: dict, label: str) -> dict:
    """
    Run a write payload through its schema; only the keys the caller sent
    come back, already typed (Decimal, naive-UTC datetime, trimmed text).
    """
    try:
        model = schema.model_validate(data)
    except ValidationError as e:
        err = e.errors()[0]
        where = ".".join(str(p) for p in err["loc"])
        reason = f"{where}: {err['msg']}" if where else err["msg"]
        raise ValidationFailed(f"{label}: {reason}") from e
    return model.model_dump(exclude_unset=True)


def apply(obj, updates: dict):
    for k, v in updates.items():
        setattr(obj, k, v)
    return obj
