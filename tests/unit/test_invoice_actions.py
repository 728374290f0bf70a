"""Unit tests for the invoice mutation handlers."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.actions import invoices as actions
from app.config import settings
from app.core.cache import RouteCache
from app.models.enums import InvoiceStatus
from app.schemas.invoice import AMOUNT_MESSAGE, ActionRedirect, InvoiceFormState


@pytest.fixture
def db():
    session = AsyncMock(spec=AsyncSession)
    session.execute.return_value = MagicMock(rowcount=1)
    return session


@pytest.fixture
def cache():
    return AsyncMock(spec=RouteCache)


def _params(db) -> dict:
    """Bound parameters of the single statement the handler executed."""
    assert db.execute.await_count == 1
    stmt = db.execute.await_args.args[0]
    return stmt.compile().params


@pytest.mark.parametrize(
    "amount, cents",
    [(Decimal("49.99"), 4999), (Decimal("0.01"), 1), (Decimal("10"), 1000), (Decimal("1.005"), 101)],
)
def test_to_cents(amount, cents):
    assert actions.to_cents(amount) == cents


def test_read_form_keeps_only_user_fields():
    form = {"customerId": "c1", "amount": "1", "status": "paid", "id": "x", "date": "2020-01-01"}
    assert actions.read_form(form) == {"customerId": "c1", "amount": "1", "status": "paid"}
    assert actions.read_form({}) == {"customerId": None, "amount": None, "status": None}


# ---------------------------------------------------------------------------
# create_invoice
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_invoice_persists_cents_and_today(db, cache):
    form = {"customerId": "c1", "amount": "49.99", "status": "pending"}

    with patch("app.actions.invoices.get_utc_today", return_value=date(2026, 10, 18)):
        result = await actions.create_invoice(None, form, db=db, cache=cache)

    assert result == ActionRedirect(location=settings.invoices_route)
    params = _params(db)
    assert params["customer_id"] == "c1"
    assert params["amount"] == 4999
    assert params["status"] == InvoiceStatus.PENDING
    assert params["date"] == date(2026, 10, 18)
    db.commit.assert_awaited_once()
    cache.invalidate.assert_awaited_once_with(settings.invoices_route)


@pytest.mark.asyncio
async def test_create_invoice_validation_failure_skips_database(db, cache):
    form = {"customerId": "", "amount": "0", "status": "paid"}

    result = await actions.create_invoice(None, form, db=db, cache=cache)

    assert isinstance(result, InvoiceFormState)
    assert result.message == actions.CREATE_INVALID_MESSAGE
    assert set(result.errors) == {"customerId", "amount"}
    db.execute.assert_not_awaited()
    cache.invalidate.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_invoice_database_error_returns_generic_message(db, cache):
    db.execute.side_effect = OperationalError("INSERT INTO invoices", {}, Exception("connection refused"))

    result = await actions.create_invoice(
        None, {"customerId": "c1", "amount": "12", "status": "paid"}, db=db, cache=cache
    )

    assert result == InvoiceFormState(message=actions.CREATE_DB_ERROR_MESSAGE)
    assert result.errors is None
    db.rollback.assert_awaited_once()
    cache.invalidate.assert_not_awaited()


# ---------------------------------------------------------------------------
# update_invoice
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_update_invoice_never_sets_date(db, cache):
    form = {"customerId": "c2", "amount": "100.50", "status": "paid"}

    result = await actions.update_invoice("inv-1", None, form, db=db, cache=cache)

    assert result == ActionRedirect(location=settings.invoices_route)
    params = _params(db)
    assert params["customer_id"] == "c2"
    assert params["amount"] == 10050
    assert params["status"] == InvoiceStatus.PAID
    assert params["id_1"] == "inv-1"
    assert "date" not in params
    cache.invalidate.assert_awaited_once_with(settings.invoices_route)


@pytest.mark.asyncio
async def test_update_invoice_rejects_non_numeric_amount(db, cache):
    form = {"customerId": "c2", "amount": "ten", "status": "paid"}

    result = await actions.update_invoice("inv-1", None, form, db=db, cache=cache)

    assert result.message == actions.UPDATE_INVALID_MESSAGE
    assert result.errors == {"amount": [AMOUNT_MESSAGE]}
    db.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_invoice_database_error(db, cache):
    db.commit.side_effect = SQLAlchemyError("deadlock detected")

    result = await actions.update_invoice(
        "inv-1", None, {"customerId": "c2", "amount": "5", "status": "pending"}, db=db, cache=cache
    )

    assert result == InvoiceFormState(message=actions.UPDATE_DB_ERROR_MESSAGE)
    db.rollback.assert_awaited_once()
    cache.invalidate.assert_not_awaited()


# ---------------------------------------------------------------------------
# delete_invoice
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_delete_invoice_invalidates_listing_once(db, cache):
    await actions.delete_invoice("inv-1", db=db, cache=cache)

    assert _params(db) == {"id_1": "inv-1"}
    db.commit.assert_awaited_once()
    cache.invalidate.assert_awaited_once_with(settings.invoices_route)


@pytest.mark.asyncio
async def test_delete_invoice_database_error_propagates(db, cache):
    db.execute.side_effect = SQLAlchemyError("connection lost")

    with pytest.raises(SQLAlchemyError):
        await actions.delete_invoice("inv-1", db=db, cache=cache)

    cache.invalidate.assert_not_awaited()
