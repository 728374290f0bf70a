"""Invoice form schemas and validation outcomes"""

import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from app.models.enums import InvoiceStatus

CUSTOMER_MESSAGE = "Please select a customer."
AMOUNT_MESSAGE = "Please enter an amount greater than $0."
STATUS_MESSAGE = "Please select an invoice status."

# Form field name -> message shown next to that input, whatever the failure
FIELD_MESSAGES: Dict[str, str] = {
    "customerId": CUSTOMER_MESSAGE,
    "amount": AMOUNT_MESSAGE,
    "status": STATUS_MESSAGE,
}

FORM_FIELDS = tuple(FIELD_MESSAGES)

FieldErrors = Dict[str, List[str]]


def to_cents(amount: Decimal) -> int:
    """Currency units to integer cents, rounding half up"""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class InvoiceFields(BaseModel):
    """User-editable invoice fields, coerced from raw form strings"""
    customer_id: str = Field(..., alias="customerId", min_length=1)
    amount: Decimal = Field(..., gt=0, allow_inf_nan=False)
    status: InvoiceStatus

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    @field_validator("amount")
    @classmethod
    def at_least_one_cent(cls, v: Decimal) -> Decimal:
        # Stored as whole cents, so anything rounding to 0 is not a positive amount
        try:
            cents = to_cents(v)
        except InvalidOperation:
            raise ValueError("amount is out of range")
        if cents < 1:
            raise ValueError("amount rounds to less than one cent")
        return v


class InvoiceForm(InvoiceFields):
    """Every invoice field, including the server-assigned ones"""
    id: str
    date: str


# Create and update take the same shape: id and date are never user input
class CreateInvoice(InvoiceFields):
    pass


class UpdateInvoice(InvoiceFields):
    pass


class InvoiceValidation(BaseModel):
    """Outcome of validating a submitted form without raising"""
    success: bool
    data: Optional[InvoiceFields] = None
    errors: FieldErrors = Field(default_factory=dict)


def field_errors(exc: ValidationError) -> FieldErrors:
    """Collapse pydantic errors to one message list per form field"""
    errors: FieldErrors = {}
    for error in exc.errors():
        loc = error.get("loc") or ("",)
        field = str(loc[0])
        message = FIELD_MESSAGES.get(field, error.get("msg", "Invalid value."))
        messages = errors.setdefault(field, [])
        if message not in messages:
            messages.append(message)
    return errors


def validate_invoice_form(
    schema: Type[InvoiceFields], raw: Mapping[str, Any]
) -> InvoiceValidation:
    """
    Validate raw form values against ``schema``.

    Unlike ``schema.model_validate`` this never raises: failures come back
    as a field -> messages mapping.
    """
    try:
        data = schema.model_validate(dict(raw))
    except ValidationError as exc:
        return InvoiceValidation(success=False, errors=field_errors(exc))
    return InvoiceValidation(success=True, data=data)


class InvoiceFormState(BaseModel):
    """State handed back to the form when a mutation does not go through"""
    errors: Optional[FieldErrors] = None
    message: Optional[str] = None


class ActionRedirect(BaseModel):
    """A mutation succeeded; the caller should navigate to ``location``"""
    location: str


class InvoiceRow(BaseModel):
    """One line of the invoice listing, amount in cents"""
    id: str
    customer_id: str
    name: str
    email: str
    image_url: Optional[str] = None
    amount: int
    date: datetime.date
    status: InvoiceStatus

    model_config = ConfigDict(from_attributes=True)


class InvoiceDetail(BaseModel):
    """Invoice as loaded into the edit form, amount in currency units"""
    id: str
    customer_id: str
    amount: Decimal
    status: InvoiceStatus
    date: datetime.date

    model_config = ConfigDict(from_attributes=True)


class CustomerOption(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)
