"""Customer endpoints - options for the invoice form"""

from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.schemas.invoice import CustomerOption
from app.schemas.responses import SuccessResponse
from app.services.customer_service import CustomerService

router = APIRouter()


@router.get("", response_model=SuccessResponse[list[CustomerOption]])
async def list_customers(db: AsyncSession = Depends(deps.get_db)) -> Any:
    """Customers for the invoice form's customer picker, by name."""
    customers = await CustomerService.list_customers(db)
    return SuccessResponse(data=[CustomerOption.model_validate(c) for c in customers])
