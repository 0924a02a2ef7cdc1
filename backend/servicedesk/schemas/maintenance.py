# backend/servicedesk/schemas/maintenance.py
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from servicedesk.schemas.base import UtcDateTime, WriteModel

RequestStatus = Literal["open", "assigned", "in_progress", "resolved", "closed", "cancelled"]
SessionStatus = Literal["planned", "in_progress", "completed", "cancelled", "paused", "pending_validation"]
Priority = Literal["low", "medium", "high", "urgent", "critical"]


def _money(v: Optional[Decimal]):
    return None if v is None else float(v)


# ---- Requests ----
class RequestCreate(WriteModel):
    Title: str = Field(min_length=1, max_length=200)
    Description_s: str = Field(min_length=1, max_length=2000)
    PropertyID: int = Field(gt=0)
    Priority_s: Priority = "medium"
    Category: Optional[str] = None
    IssueType: Optional[str] = None
    RoomLocation: Optional[str] = None
    ReporterRole: Optional[str] = None
    AgentID: Optional[int] = Field(default=None, gt=0)
    EstimatedCost: Optional[Decimal] = Field(default=None, ge=0)
    EstimatedDuration: Optional[int] = Field(default=None, ge=0)


class RequestUpdate(WriteModel):
    NOT_NULL = ("Title", "Description_s", "PropertyID", "Priority_s", "Status_s")

    Title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    Description_s: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    PropertyID: Optional[int] = Field(default=None, gt=0)
    Priority_s: Optional[Priority] = None
    Status_s: Optional[RequestStatus] = None
    Category: Optional[str] = None
    IssueType: Optional[str] = None
    RoomLocation: Optional[str] = None
    ReporterRole: Optional[str] = None
    AgentID: Optional[int] = Field(default=None, gt=0)
    Resolution: Optional[str] = None
    EstimatedCost: Optional[Decimal] = Field(default=None, ge=0)
    EstimatedDuration: Optional[int] = Field(default=None, ge=0)


class AssignIn(BaseModel):
    AgentID: int = Field(gt=0)


class ResolveIn(BaseModel):
    Resolution: Optional[str] = None


class RequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    RequestID: int
    RequestNumber: str
    Title: str
    Description_s: str
    Status_s: RequestStatus
    Priority_s: Priority
    Category: Optional[str] = None
    IssueType: Optional[str] = None
    RoomLocation: Optional[str] = None
    PropertyID: int
    ManagerID: int
    ReporterRole: Optional[str] = None
    ReportedAt: datetime
    AgentID: Optional[int] = None
    AssignedAt: Optional[datetime] = None
    Resolution: Optional[str] = None
    ResolvedAt: Optional[datetime] = None
    EstimatedCost: Optional[Decimal] = None
    EstimatedDuration: Optional[int] = None

    @field_serializer("EstimatedCost")
    def _ser_cost(self, v: Optional[Decimal]):
        return _money(v)


# ---- Sessions ----
class SessionCreate(WriteModel):
    RequestID: int = Field(gt=0)
    AgentID: int = Field(gt=0)
    ScheduledDate: UtcDateTime
    PropertyID: Optional[int] = Field(default=None, gt=0)
    Status_s: SessionStatus = "planned"
    StartTime: Optional[UtcDateTime] = None
    EndTime: Optional[UtcDateTime] = None
    EstimatedDuration: Optional[int] = Field(default=None, ge=0)
    ActualDuration: Optional[int] = Field(default=None, ge=0)
    LaborCost: Decimal = Field(default=Decimal("0"), ge=0)
    OwnerApproval: Optional[bool] = None
    ManagerApproval: Optional[bool] = None
    Notes: Optional[str] = None
    WorkDescription: Optional[str] = None
    AgentNotes: Optional[str] = None


class SessionUpdate(WriteModel):
    NOT_NULL = ("AgentID", "ScheduledDate", "Status_s", "LaborCost")

    AgentID: Optional[int] = Field(default=None, gt=0)
    ScheduledDate: Optional[UtcDateTime] = None
    Status_s: Optional[SessionStatus] = None
    StartTime: Optional[UtcDateTime] = None
    EndTime: Optional[UtcDateTime] = None
    EstimatedDuration: Optional[int] = Field(default=None, ge=0)
    ActualDuration: Optional[int] = Field(default=None, ge=0)
    LaborCost: Optional[Decimal] = Field(default=None, ge=0)
    OwnerApproval: Optional[bool] = None
    ManagerApproval: Optional[bool] = None
    Notes: Optional[str] = None
    WorkDescription: Optional[str] = None
    AgentNotes: Optional[str] = None


class SessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    SessionID: int
    SessionNumber: str
    RequestID: int
    PropertyID: int
    AgentID: int
    ManagerID: int
    ScheduledDate: datetime
    StartTime: Optional[datetime] = None
    EndTime: Optional[datetime] = None
    Status_s: SessionStatus
    EstimatedDuration: Optional[int] = None
    ActualDuration: Optional[int] = None
    LaborCost: Decimal
    MaterialsCost: Decimal
    TotalCost: Decimal
    OwnerApproval: Optional[bool] = None
    ManagerApproval: Optional[bool] = None
    Notes: Optional[str] = None
    WorkDescription: Optional[str] = None
    AgentNotes: Optional[str] = None

    @field_serializer("LaborCost", "MaterialsCost", "TotalCost")
    def _ser_costs(self, v: Decimal):
        return _money(v)


# ---- Materials ----
class MaterialCreate(WriteModel):
    Name: str = Field(min_length=1, max_length=200)
    Quantity: Decimal = Field(gt=0)
    Unit: str = Field(min_length=1, max_length=20)
    UnitPrice: Decimal = Field(gt=0)
    Supplier: Optional[str] = None


class MaterialUpdate(WriteModel):
    NOT_NULL = ("Name", "Quantity", "Unit", "UnitPrice")

    Name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    Quantity: Optional[Decimal] = Field(default=None, gt=0)
    Unit: Optional[str] = Field(default=None, min_length=1, max_length=20)
    UnitPrice: Optional[Decimal] = Field(default=None, gt=0)
    Supplier: Optional[str] = None


class MaterialOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    MaterialID: int
    SessionID: int
    Name: str
    Quantity: Decimal
    Unit: str
    UnitPrice: Decimal
    LineTotal: Decimal
    Supplier: Optional[str] = None

    @field_serializer("Quantity", "UnitPrice", "LineTotal")
    def _ser_amounts(self, v: Decimal):
        return _money(v)
