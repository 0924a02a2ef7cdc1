"""initial servicedesk schema: tickets, sessions, materials, laundry orders, invoices, counters

Revision ID: a1c4e2f09b11
Revises:
Create Date: 2026-10-17 09:12:40.118274

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c4e2f09b11'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.DECIMAL(12, 2)
QTY = sa.DECIMAL(12, 3)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "SequenceCounter",
        sa.Column("SeqKey", sa.String(30), primary_key=True),
        sa.Column("LastValue", sa.Integer, nullable=False),
    )

    op.create_table(
        "ServiceRequest",
        sa.Column("RequestID", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("RequestNumber", sa.String(20), nullable=False),
        sa.Column("Title", sa.String(200), nullable=False),
        sa.Column("Description_s", sa.String(2000), nullable=False),
        sa.Column("Status_s", sa.String(20), nullable=False),
        sa.Column("Priority_s", sa.String(20), nullable=False),
        sa.Column("Category", sa.String(100)),
        sa.Column("IssueType", sa.String(100)),
        sa.Column("RoomLocation", sa.String(100)),
        sa.Column("PropertyID", sa.Integer, nullable=False),
        sa.Column("ManagerID", sa.Integer, nullable=False),
        sa.Column("ReporterRole", sa.String(50)),
        sa.Column("ReportedAt", sa.DateTime, nullable=False),
        sa.Column("AgentID", sa.Integer),
        sa.Column("AssignedAt", sa.DateTime),
        sa.Column("Resolution", sa.String(2000)),
        sa.Column("ResolvedAt", sa.DateTime),
        sa.Column("EstimatedCost", MONEY),
        sa.Column("EstimatedDuration", sa.Integer),
        sa.UniqueConstraint("RequestNumber", name="UQ_ServiceRequest_RequestNumber"),
        sa.CheckConstraint(
            "Status_s in ('open','assigned','in_progress','resolved','closed','cancelled')",
            name="CK_Request_Status",
        ),
        sa.CheckConstraint(
            "Priority_s in ('low','medium','high','urgent','critical')",
            name="CK_Request_Priority",
        ),
    )
    op.create_index("IX_ServiceRequest_ManagerID", "ServiceRequest", ["ManagerID"])
    op.create_index("IX_ServiceRequest_PropertyID", "ServiceRequest", ["PropertyID"])
    op.create_index("IX_ServiceRequest_AgentID", "ServiceRequest", ["AgentID"])

    op.create_table(
        "WorkSession",
        sa.Column("SessionID", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("SessionNumber", sa.String(20), nullable=False),
        sa.Column("RequestID", sa.Integer, sa.ForeignKey("ServiceRequest.RequestID"), nullable=False),
        sa.Column("PropertyID", sa.Integer, nullable=False),
        sa.Column("AgentID", sa.Integer, nullable=False),
        sa.Column("ManagerID", sa.Integer, nullable=False),
        sa.Column("ScheduledDate", sa.DateTime, nullable=False),
        sa.Column("StartTime", sa.DateTime),
        sa.Column("EndTime", sa.DateTime),
        sa.Column("Status_s", sa.String(20), nullable=False),
        sa.Column("EstimatedDuration", sa.Integer),
        sa.Column("ActualDuration", sa.Integer),
        sa.Column("LaborCost", MONEY, nullable=False),
        sa.Column("MaterialsCost", MONEY, nullable=False),
        sa.Column("TotalCost", MONEY, nullable=False),
        sa.Column("OwnerApproval", sa.Boolean),
        sa.Column("ManagerApproval", sa.Boolean),
        sa.Column("Notes", sa.String(2000)),
        sa.Column("WorkDescription", sa.String(2000)),
        sa.Column("AgentNotes", sa.String(2000)),
        sa.UniqueConstraint("SessionNumber", name="UQ_WorkSession_SessionNumber"),
        sa.UniqueConstraint("RequestID", name="UQ_WorkSession_RequestID"),
        sa.CheckConstraint(
            "Status_s in ('planned','in_progress','completed','cancelled','paused','pending_validation')",
            name="CK_Session_Status",
        ),
        sa.CheckConstraint("LaborCost >= 0", name="CK_Session_LaborCost_NonNegative"),
    )
    op.create_index("IX_WorkSession_ManagerID", "WorkSession", ["ManagerID"])
    op.create_index("IX_WorkSession_AgentID", "WorkSession", ["AgentID"])

    op.create_table(
        "MaterialLine",
        sa.Column("MaterialID", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("SessionID", sa.Integer, sa.ForeignKey("WorkSession.SessionID"), nullable=False),
        sa.Column("Name", sa.String(200), nullable=False),
        sa.Column("Quantity", QTY, nullable=False),
        sa.Column("Unit", sa.String(20), nullable=False),
        sa.Column("UnitPrice", MONEY, nullable=False),
        sa.Column("LineTotal", MONEY, nullable=False),
        sa.Column("Supplier", sa.String(200)),
        sa.CheckConstraint("Quantity > 0", name="CK_Material_Quantity_Positive"),
        sa.CheckConstraint("UnitPrice > 0", name="CK_Material_UnitPrice_Positive"),
    )
    op.create_index("IX_MaterialLine_SessionID", "MaterialLine", ["SessionID"])

    op.create_table(
        "LaundryProduct",
        sa.Column("ProductID", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("Name", sa.String(200), nullable=False),
        sa.Column("Description", sa.String(1000)),
        sa.Column("Category", sa.String(100)),
        sa.Column("Price", MONEY, nullable=False),
        sa.Column("IsActive", sa.Boolean, nullable=False, server_default=sa.text("1")),
        sa.CheckConstraint("Price > 0", name="CK_Product_Price_Positive"),
    )

    op.create_table(
        "ServiceOrder",
        sa.Column("OrderID", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("OrderNumber", sa.String(20), nullable=False),
        sa.Column("Status_s", sa.String(20), nullable=False),
        sa.Column("PickupAddress", sa.String(500)),
        sa.Column("DeliveryAddress", sa.String(500), nullable=False),
        sa.Column("Instructions", sa.String(1000)),
        sa.Column("Notes", sa.String(1000)),
        sa.Column("Subtotal", MONEY, nullable=False),
        sa.Column("Taxes", MONEY, nullable=False),
        sa.Column("DeliveryFee", MONEY, nullable=False),
        sa.Column("TotalAmount", MONEY, nullable=False),
        sa.Column("ReceivedByClient", sa.Boolean, nullable=False, server_default=sa.text("0")),
        sa.Column("ReceivedDate", sa.DateTime),
        sa.Column("ProcessedDate", sa.DateTime),
        sa.Column("ReadyDate", sa.DateTime),
        sa.Column("DeliveryDate", sa.DateTime),
        sa.Column("ReceivedAt", sa.DateTime),
        sa.Column("ManagerID", sa.Integer, nullable=False),
        sa.Column("ClientID", sa.Integer, nullable=False),
        sa.Column("CreatedAt", sa.DateTime, nullable=False),
        sa.UniqueConstraint("OrderNumber", name="UQ_ServiceOrder_OrderNumber"),
        sa.CheckConstraint(
            "Status_s in ('received','processing','ready','pickup_scheduled','in_delivery',"
            "'delivered','completed','cancelled','returned')",
            name="CK_Order_Status",
        ),
        sa.CheckConstraint("Taxes >= 0", name="CK_Order_Taxes_NonNegative"),
        sa.CheckConstraint("DeliveryFee >= 0", name="CK_Order_DeliveryFee_NonNegative"),
    )
    op.create_index("IX_ServiceOrder_ManagerID", "ServiceOrder", ["ManagerID"])
    op.create_index("IX_ServiceOrder_ClientID", "ServiceOrder", ["ClientID"])

    op.create_table(
        "OrderLine",
        sa.Column("LineID", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("OrderID", sa.Integer, sa.ForeignKey("ServiceOrder.OrderID"), nullable=False),
        sa.Column("ProductID", sa.Integer, sa.ForeignKey("LaundryProduct.ProductID"), nullable=False),
        sa.Column("Quantity", QTY, nullable=False),
        sa.Column("UnitPrice", MONEY, nullable=False),
        sa.Column("LineTotal", MONEY, nullable=False),
        sa.Column("Notes", sa.String(500)),
        sa.CheckConstraint("Quantity > 0", name="CK_OrderLine_Quantity_Positive"),
        sa.CheckConstraint("UnitPrice > 0", name="CK_OrderLine_UnitPrice_Positive"),
    )
    op.create_index("IX_OrderLine_OrderID", "OrderLine", ["OrderID"])
    op.create_index("IX_OrderLine_ProductID", "OrderLine", ["ProductID"])

    op.create_table(
        "DeliveryReceipt",
        sa.Column("ReceiptID", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("ReceiptNumber", sa.String(20), nullable=False),
        sa.Column("ReceiptDate", sa.DateTime, nullable=False),
        sa.Column("Notes", sa.String(1000)),
        sa.Column("OrderID", sa.Integer, sa.ForeignKey("ServiceOrder.OrderID"), nullable=False),
        sa.UniqueConstraint("ReceiptNumber", name="UQ_DeliveryReceipt_ReceiptNumber"),
    )
    op.create_index("IX_DeliveryReceipt_OrderID", "DeliveryReceipt", ["OrderID"])

    op.create_table(
        "Invoice",
        sa.Column("InvoiceID", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("InvoiceNumber", sa.String(20), nullable=False),
        sa.Column("Status_s", sa.String(10), nullable=False),
        sa.Column("IssueDate", sa.Date, nullable=False),
        sa.Column("DueDate", sa.Date, nullable=False),
        sa.Column("Subtotal", MONEY, nullable=False),
        sa.Column("TaxRate", sa.DECIMAL(5, 2), nullable=False),
        sa.Column("TaxAmount", MONEY, nullable=False),
        sa.Column("TotalAmount", MONEY, nullable=False),
        sa.Column("PaidAmount", MONEY, nullable=False),
        sa.Column("PaidAt", sa.DateTime),
        sa.Column("ClientID", sa.Integer, nullable=False),
        sa.Column("Notes", sa.String(1000)),
        sa.UniqueConstraint("InvoiceNumber", name="UQ_Invoice_InvoiceNumber"),
        sa.CheckConstraint("Status_s in ('draft','paid')", name="CK_Invoice_Status"),
        sa.CheckConstraint("Subtotal > 0", name="CK_Invoice_Subtotal_Positive"),
        sa.CheckConstraint("TaxRate >= 0", name="CK_Invoice_TaxRate_NonNegative"),
        sa.CheckConstraint("PaidAmount >= 0", name="CK_Invoice_PaidAmount_NonNegative"),
    )
    op.create_index("IX_Invoice_ClientID", "Invoice", ["ClientID"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("Invoice")
    op.drop_table("DeliveryReceipt")
    op.drop_table("OrderLine")
    op.drop_table("ServiceOrder")
    op.drop_table("LaundryProduct")
    op.drop_table("MaterialLine")
    op.drop_table("WorkSession")
    op.drop_table("ServiceRequest")
    op.drop_table("SequenceCounter")
