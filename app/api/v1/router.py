"""API V1 Router"""

from fastapi import APIRouter

from app.api.v1.endpoints import customers, invoices

api_router = APIRouter()

api_router.include_router(invoices.router, prefix="/invoices", tags=["Invoices"])
api_router.include_router(customers.router, prefix="/customers", tags=["Customers"])
