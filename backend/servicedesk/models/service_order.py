from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Boolean, DECIMAL, CheckConstraint, text
from sqlalchemy.orm import relationship
from ..core.db import Base


class ServiceOrder(Base):
    __tablename__ = "ServiceOrder"

    OrderID          = Column(Integer, primary_key=True, autoincrement=True)
    OrderNumber      = Column(String(20), nullable=False, unique=True)
    Status_s         = Column(String(20), nullable=False, default="received")
    PickupAddress    = Column(String(500))
    DeliveryAddress  = Column(String(500), nullable=False)
    Instructions     = Column(String(1000))
    Notes            = Column(String(1000))
    Subtotal         = Column(DECIMAL(12, 2), nullable=False, default=0)  # Σ OrderLine.LineTotal
    Taxes            = Column(DECIMAL(12, 2), nullable=False, default=0)
    DeliveryFee      = Column(DECIMAL(12, 2), nullable=False, default=0)
    TotalAmount      = Column(DECIMAL(12, 2), nullable=False, default=0)  # Subtotal + Taxes + DeliveryFee
    ReceivedByClient = Column(Boolean, nullable=False, default=False, server_default=text("0"))
    ReceivedDate     = Column(DateTime)
    ProcessedDate    = Column(DateTime)
    ReadyDate        = Column(DateTime)
    DeliveryDate     = Column(DateTime)
    ReceivedAt       = Column(DateTime)
    ManagerID        = Column(Integer, nullable=False, index=True)
    ClientID         = Column(Integer, nullable=False, index=True)
    CreatedAt        = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint(
            "Status_s in ('received','processing','ready','pickup_scheduled','in_delivery',"
            "'delivered','completed','cancelled','returned')",
            name="CK_Order_Status",
        ),
        CheckConstraint("Taxes >= 0", name="CK_Order_Taxes_NonNegative"),
        CheckConstraint("DeliveryFee >= 0", name="CK_Order_DeliveryFee_NonNegative"),
    )

    lines    = relationship(
        "OrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.LineID",
    )
    receipts = relationship(
        "DeliveryReceipt",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="DeliveryReceipt.ReceiptID",
    )
