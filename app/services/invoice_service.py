"""Invoice Service - SQL for the invoices table"""

import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import String, cast, delete, func, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.customer import Customer
from app.models.enums import InvoiceStatus
from app.models.invoice import Invoice


def _search_filter(query: str):
    pattern = f"%{query.strip()}%"
    return or_(
        Customer.name.ilike(pattern),
        Customer.email.ilike(pattern),
        cast(Invoice.amount, String).ilike(pattern),
        cast(Invoice.date, String).ilike(pattern),
        cast(Invoice.status, String).ilike(pattern),
    )


class InvoiceService:
    """Single-statement reads and writes; every write commits on its own"""

    @staticmethod
    async def insert_invoice(
        db: AsyncSession,
        customer_id: str,
        amount_in_cents: int,
        status: InvoiceStatus,
        date: datetime.date,
    ) -> None:
        await db.execute(
            insert(Invoice).values(
                customer_id=customer_id,
                amount=amount_in_cents,
                status=status,
                date=date,
            )
        )
        await db.commit()

    @staticmethod
    async def update_invoice(
        db: AsyncSession,
        invoice_id: str,
        customer_id: str,
        amount_in_cents: int,
        status: InvoiceStatus,
    ) -> int:
        """Overwrite customer, amount and status. Returns rows matched."""
        result = await db.execute(
            update(Invoice)
            .where(Invoice.id == invoice_id)
            .values(customer_id=customer_id, amount=amount_in_cents, status=status)
        )
        await db.commit()
        return result.rowcount

    @staticmethod
    async def delete_invoice(db: AsyncSession, invoice_id: str) -> int:
        result = await db.execute(delete(Invoice).where(Invoice.id == invoice_id))
        await db.commit()
        return result.rowcount

    @staticmethod
    async def get_invoice_by_id(db: AsyncSession, invoice_id: str) -> Optional[Invoice]:
        result = await db.execute(select(Invoice).where(Invoice.id == invoice_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_invoices(
        db: AsyncSession,
        query: str = "",
        page: int = 1,
        page_size: int = 6,
    ) -> List[Dict[str, Any]]:
        """
        One page of invoices joined to their customer, newest first.

        ``query`` matches customer name or email, amount, date or status,
        case-insensitively.
        """
        stmt = (
            select(
                Invoice.id,
                Invoice.customer_id,
                Customer.name,
                Customer.email,
                Customer.image_url,
                Invoice.amount,
                Invoice.date,
                Invoice.status,
            )
            .join(Customer, Invoice.customer_id == Customer.id)
            .order_by(Invoice.date.desc(), Invoice.id)
            .limit(page_size)
            .offset((page - 1) * page_size)
        )
        if query:
            stmt = stmt.where(_search_filter(query))
        result = await db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    @staticmethod
    async def count_invoices(db: AsyncSession, query: str = "") -> int:
        stmt = (
            select(func.count(Invoice.id))
            .select_from(Invoice)
            .join(Customer, Invoice.customer_id == Customer.id)
        )
        if query:
            stmt = stmt.where(_search_filter(query))
        return await db.scalar(stmt) or 0
