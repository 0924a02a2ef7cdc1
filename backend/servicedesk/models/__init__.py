from .service_request import ServiceRequest
from .work_session import WorkSession
from .material_line import MaterialLine
from .product import Product
from .service_order import ServiceOrder
from .order_line import OrderLine
from .delivery_receipt import DeliveryReceipt
from .invoice import Invoice
from .sequence_counter import SequenceCounter
__all__ = [
    "ServiceRequest", "WorkSession", "MaterialLine", "Product", "ServiceOrder",
    "OrderLine", "DeliveryReceipt", "Invoice", "SequenceCounter",
]
