# backend/servicedesk/domain/constants.py

"""
Single source of status values and sequential number formats.
"""

from typing import Final, Tuple

# ---- Sequential numbers: (prefix, zero-pad width) ----
REQUEST_SEQ: Final[Tuple[str, int]] = ("MAINT", 3)
SESSION_SEQ: Final[Tuple[str, int]] = ("SESSION", 3)
ORDER_SEQ: Final[Tuple[str, int]] = ("LAU", 3)
INVOICE_SEQ: Final[Tuple[str, int]] = ("INV-LAU", 4)
RECEIPT_SEQ: Final[Tuple[str, int]] = ("BL", 4)

# ---- ServiceRequest ----
REQ_OPEN: Final[str] = "open"
REQ_ASSIGNED: Final[str] = "assigned"
REQ_IN_PROGRESS: Final[str] = "in_progress"
REQ_RESOLVED: Final[str] = "resolved"
REQ_CLOSED: Final[str] = "closed"
REQ_CANCELLED: Final[str] = "cancelled"
REQUEST_STATUSES: Final = (REQ_OPEN, REQ_ASSIGNED, REQ_IN_PROGRESS, REQ_RESOLVED, REQ_CLOSED, REQ_CANCELLED)

PRIORITIES: Final = ("low", "medium", "high", "urgent", "critical")
DEFAULT_PRIORITY: Final[str] = "medium"

# ---- WorkSession ----
SES_PLANNED: Final[str] = "planned"
SES_IN_PROGRESS: Final[str] = "in_progress"
SES_COMPLETED: Final[str] = "completed"
SES_CANCELLED: Final[str] = "cancelled"
SES_PAUSED: Final[str] = "paused"
SES_PENDING_VALIDATION: Final[str] = "pending_validation"
SESSION_STATUSES: Final = (
    SES_PLANNED, SES_IN_PROGRESS, SES_COMPLETED, SES_CANCELLED, SES_PAUSED, SES_PENDING_VALIDATION,
)

# ---- ServiceOrder ----
ORD_RECEIVED: Final[str] = "received"
ORD_PROCESSING: Final[str] = "processing"
ORD_READY: Final[str] = "ready"
ORD_PICKUP_SCHEDULED: Final[str] = "pickup_scheduled"
ORD_IN_DELIVERY: Final[str] = "in_delivery"
ORD_DELIVERED: Final[str] = "delivered"
ORD_COMPLETED: Final[str] = "completed"
ORD_CANCELLED: Final[str] = "cancelled"
ORD_RETURNED: Final[str] = "returned"
ORDER_STATUSES: Final = (
    ORD_RECEIVED, ORD_PROCESSING, ORD_READY, ORD_PICKUP_SCHEDULED, ORD_IN_DELIVERY,
    ORD_DELIVERED, ORD_COMPLETED, ORD_CANCELLED, ORD_RETURNED,
)

# ---- Invoice ----
INV_DRAFT: Final[str] = "draft"
INV_PAID: Final[str] = "paid"
INVOICE_STATUSES: Final = (INV_DRAFT, INV_PAID)
