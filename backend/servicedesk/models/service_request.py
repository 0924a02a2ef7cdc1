from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, DECIMAL, CheckConstraint
from sqlalchemy.orm import relationship
from ..core.db import Base


class ServiceRequest(Base):
    __tablename__ = "ServiceRequest"

    RequestID         = Column(Integer, primary_key=True, autoincrement=True)
    RequestNumber     = Column(String(20),  nullable=False, unique=True)
    Title             = Column(String(200), nullable=False)
    Description_s     = Column(String(2000), nullable=False)
    Status_s          = Column(String(20),  nullable=False, default="open")
    Priority_s        = Column(String(20),  nullable=False, default="medium")
    Category          = Column(String(100))
    IssueType         = Column(String(100))
    RoomLocation      = Column(String(100))
    PropertyID        = Column(Integer, nullable=False, index=True)
    ManagerID         = Column(Integer, nullable=False, index=True)
    ReporterRole      = Column(String(50))
    ReportedAt        = Column(DateTime, nullable=False, default=datetime.utcnow)
    AgentID           = Column(Integer, index=True)
    AssignedAt        = Column(DateTime)
    Resolution        = Column(String(2000))
    ResolvedAt        = Column(DateTime)
    EstimatedCost     = Column(DECIMAL(12, 2))
    EstimatedDuration = Column(Integer)  # minutes

    __table_args__ = (
        CheckConstraint(
            "Status_s in ('open','assigned','in_progress','resolved','closed','cancelled')",
            name="CK_Request_Status",
        ),
        CheckConstraint(
            "Priority_s in ('low','medium','high','urgent','critical')",
            name="CK_Request_Priority",
        ),
    )

    # 1-1 (a second session for the same request is refused)
    session = relationship("WorkSession", back_populates="request", uselist=False)
