from sqlalchemy import Column, Integer, String, DECIMAL, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from ..core.db import Base


class OrderLine(Base):
    __tablename__ = "OrderLine"

    LineID    = Column(Integer, primary_key=True, autoincrement=True)
    OrderID   = Column(Integer, ForeignKey("ServiceOrder.OrderID"), nullable=False, index=True)
    ProductID = Column(Integer, ForeignKey("LaundryProduct.ProductID"), nullable=False, index=True)
    Quantity  = Column(DECIMAL(12, 3), nullable=False)
    UnitPrice = Column(DECIMAL(12, 2), nullable=False)
    LineTotal = Column(DECIMAL(12, 2), nullable=False)  # Quantity * UnitPrice
    Notes     = Column(String(500))

    __table_args__ = (
        CheckConstraint("Quantity > 0", name="CK_OrderLine_Quantity_Positive"),
        CheckConstraint("UnitPrice > 0", name="CK_OrderLine_UnitPrice_Positive"),
    )

    order   = relationship("ServiceOrder", back_populates="lines")
    product = relationship("Product", back_populates="order_lines")
