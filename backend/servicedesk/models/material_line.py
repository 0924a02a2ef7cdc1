from sqlalchemy import Column, Integer, String, DECIMAL, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from ..core.db import Base


class MaterialLine(Base):
    __tablename__ = "MaterialLine"

    MaterialID = Column(Integer, primary_key=True, autoincrement=True)
    SessionID  = Column(Integer, ForeignKey("WorkSession.SessionID"), nullable=False, index=True)
    Name       = Column(String(200), nullable=False)
    Quantity   = Column(DECIMAL(12, 3), nullable=False)
    Unit       = Column(String(20), nullable=False)
    UnitPrice  = Column(DECIMAL(12, 2), nullable=False)
    LineTotal  = Column(DECIMAL(12, 2), nullable=False)  # Quantity * UnitPrice
    Supplier   = Column(String(200))

    __table_args__ = (
        CheckConstraint("Quantity > 0", name="CK_Material_Quantity_Positive"),
        CheckConstraint("UnitPrice > 0", name="CK_Material_UnitPrice_Positive"),
    )

    session = relationship("WorkSession", back_populates="materials")
