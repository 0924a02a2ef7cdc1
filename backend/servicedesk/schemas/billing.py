# backend/servicedesk/schemas/billing.py
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from servicedesk.schemas.base import WriteModel

InvoiceStatus = Literal["draft", "paid"]


class InvoiceCreate(WriteModel):
    ClientID: int = Field(gt=0)
    Subtotal: Decimal = Field(gt=0)
    # server defaults: TaxRate 20, IssueDate today, DueDate IssueDate + 30 days
    TaxRate: Optional[Decimal] = Field(default=None, ge=0)
    IssueDate: Optional[date] = None
    DueDate: Optional[date] = None
    PaidAmount: Optional[Decimal] = Field(default=None, ge=0)
    Notes: Optional[str] = None


class InvoiceUpdate(WriteModel):
    NOT_NULL = ("ClientID", "Subtotal", "TaxRate", "IssueDate", "DueDate")

    ClientID: Optional[int] = Field(default=None, gt=0)
    Subtotal: Optional[Decimal] = Field(default=None, gt=0)
    TaxRate: Optional[Decimal] = Field(default=None, ge=0)
    IssueDate: Optional[date] = None
    DueDate: Optional[date] = None
    PaidAmount: Optional[Decimal] = Field(default=None, ge=0)
    Notes: Optional[str] = None


class PaymentIn(BaseModel):
    Amount: Decimal = Field(gt=0)


class InvoiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    InvoiceID: int
    InvoiceNumber: str
    Status_s: InvoiceStatus
    IssueDate: date
    DueDate: date
    Subtotal: Decimal
    TaxRate: Decimal
    TaxAmount: Decimal
    TotalAmount: Decimal
    PaidAmount: Decimal
    PaidAt: Optional[datetime] = None
    ClientID: int
    Notes: Optional[str] = None

    @field_serializer("Subtotal", "TaxRate", "TaxAmount", "TotalAmount", "PaidAmount")
    def _ser_amounts(self, v: Decimal):
        return float(v)
