from sqlalchemy import Column, Integer, String, Boolean, DECIMAL, CheckConstraint, text
from sqlalchemy.orm import relationship
from ..core.db import Base


class Product(Base):
    __tablename__ = "LaundryProduct"

    ProductID   = Column(Integer, primary_key=True, autoincrement=True)
    Name        = Column(String(200), nullable=False)
    Description = Column(String(1000))
    Category    = Column(String(100))
    Price       = Column(DECIMAL(12, 2), nullable=False)
    IsActive    = Column(Boolean, nullable=False, default=True, server_default=text("1"))

    __table_args__ = (
        CheckConstraint("Price > 0", name="CK_Product_Price_Positive"),
    )

    order_lines = relationship("OrderLine", back_populates="product")
