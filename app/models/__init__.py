"""Models Package - Export all models for easy imports"""

from app.models.base import BaseModel
from app.models.enums import InvoiceStatus
from app.models.customer import Customer
from app.models.invoice import Invoice


__all__ = [
    "BaseModel",
    "InvoiceStatus",
    "Customer",
    "Invoice",
]
