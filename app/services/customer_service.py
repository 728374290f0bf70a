"""Customer Service - lookups for the invoice form"""

from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.customer import Customer


class CustomerService:
    @staticmethod
    async def list_customers(db: AsyncSession) -> List[Customer]:
        result = await db.execute(select(Customer).order_by(Customer.name.asc()))
        return list(result.scalars().all())
