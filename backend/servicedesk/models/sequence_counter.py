from sqlalchemy import Column, Integer, String
from ..core.db import Base


class SequenceCounter(Base):
    """One row per 'PREFIX-YEAR-' key; LastValue is the last ordinal handed out."""
    __tablename__ = "SequenceCounter"

    SeqKey    = Column(String(30), primary_key=True)
    LastValue = Column(Integer, nullable=False, default=0)
