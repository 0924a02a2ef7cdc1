# backend/servicedesk/core/tx.py
"""
Atomic units of work.

A unit is a callable that performs every read/write of one operation
(child mutation + parent recompute) without committing. `run_atomic`
commits it once, rolls back on any failure and re-runs the whole unit
on transaction conflicts (deadlock, serialization failure, unique
collision) up to TX_MAX_ATTEMPTS times.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import Session

from .config import TX_MAX_ATTEMPTS
from .db import Base
from .errors import Conflict, InternalError, ServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _dialect(db: Session) -> str:
    return db.get_bind().dialect.name


def lock_for_update(db: Session, model, pk):
    """
    Lock the row for update and read it fresh.
    SQL Server uses UPDLOCK+ROWLOCK; the others SELECT ... FOR UPDATE
    (SQLite ignores it and serializes writers itself).
    """
    pk_col = model.__mapper__.primary_key[0]
    if _dialect(db) == "mssql":
        db.execute(
            text(f"SELECT {pk_col.name} FROM {model.__tablename__} WITH (UPDLOCK, ROWLOCK) WHERE {pk_col.name}=:pk"),
            {"pk": pk},
        )
        return db.get(model, pk, populate_existing=True)
    return (
        db.query(model)
        .filter(pk_col == pk)
        .with_for_update()
        .populate_existing()
        .one_or_none()
    )


def run_atomic(db: Session, work: Callable[[], T], *, label: str, attempts: Optional[int] = None) -> T:
    attempts = attempts or TX_MAX_ATTEMPTS
    attempt = 0
    while True:
        attempt += 1
        try:
            result = work()
            db.commit()
            if isinstance(result, Base):
                db.refresh(result)
            return result
        except ServiceError:
            db.rollback()
            raise
        except (IntegrityError, OperationalError) as e:
            db.rollback()
            msg = str(getattr(e, "orig", e))
            if attempt < attempts:
                logger.warning(
                    "%s: transaction conflict, retrying (%s/%s): %s",
                    label, attempt, attempts, msg,
                    extra={"attempt": attempt},
                )
                continue
            if isinstance(e, IntegrityError):
                raise Conflict(f"{label}: conflicting concurrent write: {msg}") from e
            logger.exception("%s: giving up after %s attempts", label, attempts)
            raise InternalError(f"{label}: db_error: {msg}") from e
        except DBAPIError as e:
            db.rollback()
            logger.exception("%s: database error", label)
            raise InternalError(f"{label}: db_error: {getattr(e, 'orig', e)}") from e
        except Exception as e:
            db.rollback()
            logger.exception("%s: unexpected error", label)
            raise InternalError(f"{label}_error: {type(e).__name__}: {e}") from e
