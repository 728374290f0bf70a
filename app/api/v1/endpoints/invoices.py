"""Invoice endpoints - listing view and form submissions"""

import math
from decimal import Decimal
from typing import Any
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.actions import invoices as actions
from app.api import deps
from app.config import settings
from app.core.rate_limit import MUTATION_LIMIT, limiter
from app.schemas.invoice import (
    ActionRedirect,
    InvoiceDetail,
    InvoiceFormState,
    InvoiceRow,
)
from app.schemas.responses import PaginatedResponse, PaginationMeta, SuccessResponse
from app.services.invoice_service import InvoiceService

router = APIRouter()

CACHE_HEADER = "X-Route-Cache"


def form_response(result: actions.ActionResult) -> Response:
    """Turn a handler outcome into a redirect or a form-state reply"""
    if isinstance(result, ActionRedirect):
        return RedirectResponse(result.location, status_code=status.HTTP_303_SEE_OTHER)
    code = (
        status.HTTP_422_UNPROCESSABLE_ENTITY
        if result.errors
        else status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return JSONResponse(status_code=code, content=result.model_dump(exclude_none=True))


@router.get("", response_model=PaginatedResponse[InvoiceRow])
async def list_invoices(
    query: str = "",
    page: int = Query(1, ge=1, le=settings.INVOICES_MAX_PAGE),
    db: AsyncSession = Depends(deps.get_db),
    cache: deps.RouteCache = Depends(deps.get_route_cache),
) -> Any:
    """Invoice listing, newest first. Served from the route cache until a mutation drops it."""
    query = query.strip()
    variant = urlencode({"query": query, "page": page}) if query or page > 1 else ""

    # Pin the generation before reading so a concurrent mutation orphans this render
    generation = await cache.generation(settings.invoices_route)
    cached = await cache.get(settings.invoices_route, variant, generation)
    if cached is not None:
        return Response(content=cached, media_type="application/json", headers={CACHE_HEADER: "hit"})

    page_size = settings.INVOICES_PAGE_SIZE
    rows = await InvoiceService.list_invoices(db, query, page, page_size)
    total = await InvoiceService.count_invoices(db, query)
    body = PaginatedResponse[InvoiceRow](
        data=[InvoiceRow.model_validate(row) for row in rows],
        meta=PaginationMeta(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=math.ceil(total / page_size),
        ),
    )
    payload = body.model_dump_json()
    await cache.set(settings.invoices_route, payload, variant, generation=generation)
    return Response(content=payload, media_type="application/json", headers={CACHE_HEADER: "miss"})


@router.get("/{invoice_id}", response_model=SuccessResponse[InvoiceDetail])
async def get_invoice(invoice_id: str, db: AsyncSession = Depends(deps.get_db)) -> Any:
    """Invoice for the edit form, amount converted back to currency units."""
    invoice = await InvoiceService.get_invoice_by_id(db, invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return SuccessResponse(
        data=InvoiceDetail(
            id=invoice.id,
            customer_id=invoice.customer_id,
            amount=Decimal(invoice.amount) / 100,
            status=invoice.status,
            date=invoice.date,
        )
    )


@router.post(
    "",
    status_code=status.HTTP_303_SEE_OTHER,
    responses={422: {"model": InvoiceFormState}, 500: {"model": InvoiceFormState}},
)
@limiter.limit(MUTATION_LIMIT)
async def create_invoice(
    request: Request,
    db: AsyncSession = Depends(deps.get_db),
    cache: deps.RouteCache = Depends(deps.get_route_cache),
) -> Response:
    """Create an invoice from form fields customerId, amount, status."""
    form = await request.form()
    result = await actions.create_invoice(None, form, db=db, cache=cache)
    return form_response(result)


@router.post(
    "/{invoice_id}",
    status_code=status.HTTP_303_SEE_OTHER,
    responses={422: {"model": InvoiceFormState}, 500: {"model": InvoiceFormState}},
)
@limiter.limit(MUTATION_LIMIT)
async def update_invoice(
    request: Request,
    invoice_id: str,
    db: AsyncSession = Depends(deps.get_db),
    cache: deps.RouteCache = Depends(deps.get_route_cache),
) -> Response:
    """Update customer, amount and status of an invoice. The date is kept."""
    form = await request.form()
    result = await actions.update_invoice(invoice_id, None, form, db=db, cache=cache)
    return form_response(result)


@router.post("/{invoice_id}/delete", response_model=SuccessResponse)
@limiter.limit(MUTATION_LIMIT)
async def delete_invoice(
    request: Request,
    invoice_id: str,
    db: AsyncSession = Depends(deps.get_db),
    cache: deps.RouteCache = Depends(deps.get_route_cache),
) -> Any:
    await actions.delete_invoice(invoice_id, db=db, cache=cache)
    return SuccessResponse(message="Invoice deleted")
