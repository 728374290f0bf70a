"""Invoice mutation handlers bound to the create/edit/delete forms.

Each handler ends in one of three ways:

* success: the write is committed, the listing route is dropped from the
  route cache and an ``ActionRedirect`` to the listing is returned;
* validation failure: an ``InvoiceFormState`` with per-field errors, nothing
  written;
* database failure: an ``InvoiceFormState`` with a generic message, the
  cache left alone.

Navigation is a return value rather than an exception, so the ``except``
around the write can never swallow it. Callers perform the redirect.
"""

from typing import Any, Dict, Mapping, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.cache import RouteCache
from app.core.logging import get_logger
from app.schemas.invoice import (
    FORM_FIELDS,
    ActionRedirect,
    CreateInvoice,
    InvoiceFormState,
    UpdateInvoice,
    to_cents,
    validate_invoice_form,
)
from app.services.invoice_service import InvoiceService
from app.utils.time import get_utc_today

logger = get_logger(__name__)

CREATE_INVALID_MESSAGE = "Missing fields. Failed to create invoice."
CREATE_DB_ERROR_MESSAGE = "Database Error: Failed to create invoice."
UPDATE_INVALID_MESSAGE = "Missing fields. Failed to update invoice."
UPDATE_DB_ERROR_MESSAGE = "Database Error: Failed to Update Invoice."

ActionResult = Union[ActionRedirect, InvoiceFormState]


def read_form(form: Mapping[str, Any]) -> Dict[str, Any]:
    """Pick the user-editable fields out of a submitted form"""
    return {field: form.get(field) for field in FORM_FIELDS}


async def create_invoice(
    prev_state: Optional[InvoiceFormState],
    form: Mapping[str, Any],
    *,
    db: AsyncSession,
    cache: RouteCache,
) -> ActionResult:
    raw = read_form(form)
    logger.debug("Create invoice submitted", extra={"fields": raw})

    validated = validate_invoice_form(CreateInvoice, raw)
    if not validated.success:
        logger.info("Invoice create rejected", extra={"errors": validated.errors})
        return InvoiceFormState(errors=validated.errors, message=CREATE_INVALID_MESSAGE)

    data = validated.data
    amount_in_cents = to_cents(data.amount)
    date = get_utc_today()

    try:
        await InvoiceService.insert_invoice(
            db,
            customer_id=data.customer_id,
            amount_in_cents=amount_in_cents,
            status=data.status,
            date=date,
        )
    except SQLAlchemyError:
        await db.rollback()
        logger.error("Failed to create invoice", exc_info=True)
        return InvoiceFormState(message=CREATE_DB_ERROR_MESSAGE)

    logger.info(
        "Invoice created",
        extra={"customer_id": data.customer_id, "amount": amount_in_cents, "date": date.isoformat()},
    )
    await cache.invalidate(settings.invoices_route)
    return ActionRedirect(location=settings.invoices_route)


async def update_invoice(
    invoice_id: str,
    prev_state: Optional[InvoiceFormState],
    form: Mapping[str, Any],
    *,
    db: AsyncSession,
    cache: RouteCache,
) -> ActionResult:
    validated = validate_invoice_form(UpdateInvoice, read_form(form))
    if not validated.success:
        logger.info(
            "Invoice update rejected",
            extra={"invoice_id": invoice_id, "errors": validated.errors},
        )
        return InvoiceFormState(errors=validated.errors, message=UPDATE_INVALID_MESSAGE)

    data = validated.data
    amount_in_cents = to_cents(data.amount)

    try:
        await InvoiceService.update_invoice(
            db,
            invoice_id,
            customer_id=data.customer_id,
            amount_in_cents=amount_in_cents,
            status=data.status,
        )
    except SQLAlchemyError:
        await db.rollback()
        logger.error("Failed to update invoice", extra={"invoice_id": invoice_id}, exc_info=True)
        return InvoiceFormState(message=UPDATE_DB_ERROR_MESSAGE)

    logger.info("Invoice updated", extra={"invoice_id": invoice_id})
    await cache.invalidate(settings.invoices_route)
    return ActionRedirect(location=settings.invoices_route)


async def delete_invoice(invoice_id: str, *, db: AsyncSession, cache: RouteCache) -> None:
    """Delete by id. Database errors propagate to the caller."""
    deleted = await InvoiceService.delete_invoice(db, invoice_id)
    logger.info("Invoice deleted", extra={"invoice_id": invoice_id, "rows": deleted})
    await cache.invalidate(settings.invoices_route)
