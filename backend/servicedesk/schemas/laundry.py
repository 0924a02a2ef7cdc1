# backend/servicedesk/schemas/laundry.py
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from servicedesk.schemas.base import UtcDateTime, WriteModel

OrderStatus = Literal[
    "received", "processing", "ready", "pickup_scheduled", "in_delivery",
    "delivered", "completed", "cancelled", "returned",
]


# ---- Products ----
class ProductCreate(WriteModel):
    Name: str = Field(min_length=1, max_length=200)
    Price: Decimal = Field(gt=0)
    Description: Optional[str] = None
    Category: Optional[str] = None
    IsActive: bool = True


class ProductUpdate(WriteModel):
    NOT_NULL = ("Name", "Price", "IsActive")

    Name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    Price: Optional[Decimal] = Field(default=None, gt=0)
    Description: Optional[str] = None
    Category: Optional[str] = None
    IsActive: Optional[bool] = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ProductID: int
    Name: str
    Description: Optional[str] = None
    Category: Optional[str] = None
    Price: Decimal
    IsActive: bool

    @field_serializer("Price")
    def _ser_price(self, v: Decimal):
        return float(v)


# ---- Orders ----
class OrderCreate(WriteModel):
    ClientID: int = Field(gt=0)
    DeliveryAddress: str = Field(min_length=1, max_length=500)
    PickupAddress: Optional[str] = None
    Instructions: Optional[str] = None
    Notes: Optional[str] = None
    Taxes: Decimal = Field(default=Decimal("0"), ge=0)
    DeliveryFee: Decimal = Field(default=Decimal("0"), ge=0)
    Status_s: OrderStatus = "received"


class OrderUpdate(WriteModel):
    NOT_NULL = ("DeliveryAddress", "Taxes", "DeliveryFee", "Status_s")

    DeliveryAddress: Optional[str] = Field(default=None, min_length=1, max_length=500)
    PickupAddress: Optional[str] = None
    Instructions: Optional[str] = None
    Notes: Optional[str] = None
    Taxes: Optional[Decimal] = Field(default=None, ge=0)
    DeliveryFee: Optional[Decimal] = Field(default=None, ge=0)
    Status_s: Optional[OrderStatus] = None


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    OrderID: int
    OrderNumber: str
    Status_s: OrderStatus
    PickupAddress: Optional[str] = None
    DeliveryAddress: str
    Instructions: Optional[str] = None
    Notes: Optional[str] = None
    Subtotal: Decimal
    Taxes: Decimal
    DeliveryFee: Decimal
    TotalAmount: Decimal
    ReceivedByClient: bool
    ReceivedDate: Optional[datetime] = None
    ProcessedDate: Optional[datetime] = None
    ReadyDate: Optional[datetime] = None
    DeliveryDate: Optional[datetime] = None
    ReceivedAt: Optional[datetime] = None
    ManagerID: int
    ClientID: int
    CreatedAt: datetime

    @field_serializer("Subtotal", "Taxes", "DeliveryFee", "TotalAmount")
    def _ser_amounts(self, v: Decimal):
        return float(v)


# ---- Order lines ----
class OrderLineCreate(WriteModel):
    ProductID: int = Field(gt=0)
    Quantity: Decimal = Field(gt=0)
    # defaults to the product price
    UnitPrice: Optional[Decimal] = Field(default=None, gt=0)
    Notes: Optional[str] = None


class OrderLineUpdate(WriteModel):
    NOT_NULL = ("Quantity", "UnitPrice")

    Quantity: Optional[Decimal] = Field(default=None, gt=0)
    UnitPrice: Optional[Decimal] = Field(default=None, gt=0)
    Notes: Optional[str] = None


class OrderLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    LineID: int
    OrderID: int
    ProductID: int
    Quantity: Decimal
    UnitPrice: Decimal
    LineTotal: Decimal
    Notes: Optional[str] = None

    @field_serializer("Quantity", "UnitPrice", "LineTotal")
    def _ser_amounts(self, v: Decimal):
        return float(v)


# ---- Delivery receipts ----
class ReceiptCreate(WriteModel):
    ReceiptDate: Optional[UtcDateTime] = None
    Notes: Optional[str] = None


class ReceiptUpdate(ReceiptCreate):
    NOT_NULL = ("ReceiptDate",)


class ReceiptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ReceiptID: int
    ReceiptNumber: str
    ReceiptDate: datetime
    Notes: Optional[str] = None
    OrderID: int
