from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from ..core.db import Base


class DeliveryReceipt(Base):
    __tablename__ = "DeliveryReceipt"

    ReceiptID     = Column(Integer, primary_key=True, autoincrement=True)
    ReceiptNumber = Column(String(20), nullable=False, unique=True)
    ReceiptDate   = Column(DateTime, nullable=False, default=datetime.utcnow)
    Notes         = Column(String(1000))
    OrderID       = Column(Integer, ForeignKey("ServiceOrder.OrderID"), nullable=False, index=True)

    order = relationship("ServiceOrder", back_populates="receipts")
