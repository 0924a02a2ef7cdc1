from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean, DECIMAL, ForeignKey, CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from ..core.db import Base


class WorkSession(Base):
    __tablename__ = "WorkSession"

    SessionID         = Column(Integer, primary_key=True, autoincrement=True)
    SessionNumber     = Column(String(20), nullable=False, unique=True)
    RequestID         = Column(Integer, ForeignKey("ServiceRequest.RequestID"), nullable=False)
    PropertyID        = Column(Integer, nullable=False)
    AgentID           = Column(Integer, nullable=False, index=True)
    ManagerID         = Column(Integer, nullable=False, index=True)
    ScheduledDate     = Column(DateTime, nullable=False)
    StartTime         = Column(DateTime)
    EndTime           = Column(DateTime)
    Status_s          = Column(String(20), nullable=False, default="planned")
    EstimatedDuration = Column(Integer)  # minutes
    ActualDuration    = Column(Integer)  # minutes
    LaborCost         = Column(DECIMAL(12, 2), nullable=False, default=0)
    MaterialsCost     = Column(DECIMAL(12, 2), nullable=False, default=0)  # Σ MaterialLine.LineTotal
    TotalCost         = Column(DECIMAL(12, 2), nullable=False, default=0)  # LaborCost + MaterialsCost
    OwnerApproval     = Column(Boolean)
    ManagerApproval   = Column(Boolean)
    Notes             = Column(String(2000))
    WorkDescription   = Column(String(2000))
    AgentNotes        = Column(String(2000))

    __table_args__ = (
        CheckConstraint(
            "Status_s in ('planned','in_progress','completed','cancelled','paused','pending_validation')",
            name="CK_Session_Status",
        ),
        CheckConstraint("LaborCost >= 0", name="CK_Session_LaborCost_NonNegative"),
        UniqueConstraint("RequestID", name="UQ_WorkSession_RequestID"),
    )

    request   = relationship("ServiceRequest", back_populates="session")
    materials = relationship(
        "MaterialLine",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="MaterialLine.MaterialID",
    )
