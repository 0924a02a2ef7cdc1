from sqlalchemy import Column, Integer, String, Date, DateTime, DECIMAL, CheckConstraint
from ..core.db import Base


class Invoice(Base):
    __tablename__ = "Invoice"

    InvoiceID     = Column(Integer, primary_key=True, autoincrement=True)
    InvoiceNumber = Column(String(20), nullable=False, unique=True)
    Status_s      = Column(String(10), nullable=False, default="draft")
    IssueDate     = Column(Date, nullable=False)
    DueDate       = Column(Date, nullable=False)
    Subtotal      = Column(DECIMAL(12, 2), nullable=False)
    TaxRate       = Column(DECIMAL(5, 2), nullable=False, default=20)
    TaxAmount     = Column(DECIMAL(12, 2), nullable=False)  # Subtotal * TaxRate / 100
    TotalAmount   = Column(DECIMAL(12, 2), nullable=False)  # Subtotal + TaxAmount
    PaidAmount    = Column(DECIMAL(12, 2), nullable=False, default=0)
    PaidAt        = Column(DateTime)
    ClientID      = Column(Integer, nullable=False, index=True)
    Notes         = Column(String(1000))

    __table_args__ = (
        CheckConstraint("Status_s in ('draft','paid')", name="CK_Invoice_Status"),
        CheckConstraint("Subtotal > 0", name="CK_Invoice_Subtotal_Positive"),
        CheckConstraint("TaxRate >= 0", name="CK_Invoice_TaxRate_NonNegative"),
        CheckConstraint("PaidAmount >= 0", name="CK_Invoice_PaidAmount_NonNegative"),
    )
