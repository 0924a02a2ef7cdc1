# backend/servicedesk/services/sequence_service.py
"""
Human-readable sequential numbers: PREFIX-YEAR-NNN.

One SequenceCounter row per 'PREFIX-YEAR-' key. The next ordinal is taken
with an atomic UPDATE ... SET LastValue = LastValue + 1 and read back in
the same transaction, so two writers never get the same value. A missing
row is seeded from the number of records already carrying the prefix;
two writers seeding the same key collide on the primary key and the
caller's atomic unit retries.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from servicedesk.models import SequenceCounter

logger = logging.getLogger(__name__)


def sequence_key(prefix: str, year: int) -> str:
    return f"{prefix}-{year}-"


def format_number(prefix: str, year: int, ordinal: int, width: int) -> str:
    return f"{sequence_key(prefix, year)}{ordinal:0{width}d}"


def _count_existing(db: Session, column, key: str) -> int:
    return db.execute(select(func.count(column)).where(column.like(f"{key}%"))).scalar_one()


def next_number(db: Session, *, prefix: str, width: int, column, year: Optional[int] = None) -> str:
    """
    Take the next number for `prefix` inside the caller's transaction.
    `column` is the number column of the owning table (used to seed a new counter).
    Does not commit.
    """
    year = year or datetime.utcnow().year
    key = sequence_key(prefix, year)

    bumped = db.execute(
        update(SequenceCounter)
        .where(SequenceCounter.SeqKey == key)
        .values(LastValue=SequenceCounter.LastValue + 1)
        .execution_options(synchronize_session=False)
    )
    if bumped.rowcount:
        ordinal = db.execute(
            select(SequenceCounter.LastValue).where(SequenceCounter.SeqKey == key)
        ).scalar_one()
    else:
        ordinal = _count_existing(db, column, key) + 1
        db.add(SequenceCounter(SeqKey=key, LastValue=ordinal))
        db.flush()
        logger.info("sequence %s seeded at %s", key, ordinal)

    return format_number(prefix, year, ordinal, width)
