"""Invoice Model"""

from sqlalchemy import Column, Date, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.models.base import BaseModel
from app.models.enums import InvoiceStatus


class Invoice(BaseModel):
    """
    An amount billed to a customer.

    ``amount`` is stored in integer cents. ``date`` is stamped on creation
    and never updated.
    """
    __tablename__ = "invoices"

    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    status = Column(
        Enum(
            InvoiceStatus,
            name="invoice_status",
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        index=True,
    )
    date = Column(Date, nullable=False)

    customer = relationship("Customer", back_populates="invoices")

    def __repr__(self) -> str:
        return f"<Invoice {self.amount} - {self.status}>"
