"""
Pydantic schemas for customer ledger operations.

These define the API contract, what data comes in and
what data goes out. They are separate from the database
models because the API shape and the storage shape
are often different.
"""

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from billing_ledger.models.enums import LedgerEntryType

MONEY_QUANTUM = Decimal("0.0001")


def quantize_money(value: Decimal) -> Decimal:
    """Round half up to the Numeric(19, 4) scale of the money columns."""
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


# --- Request Schemas ---

class LedgerEntryCreate(BaseModel):
    """A single debit or credit posting against a customer."""
    tenant_id: int
    customer_id: int
    entry_date: dt.date
    entry_type: LedgerEntryType
    reference: str = Field(min_length=1, max_length=100)
    debit: Decimal = Field(default=Decimal("0"), ge=0)
    credit: Decimal = Field(default=Decimal("0"), ge=0)
    invoice_id: int | None = None
    payment_id: int | None = None

    @field_validator("debit", "credit")
    @classmethod
    def round_to_scale(cls, v: Decimal) -> Decimal:
        return quantize_money(v)

    @model_validator(mode="after")
    def exactly_one_side(self) -> "LedgerEntryCreate":
        if (self.debit > 0) == (self.credit > 0):
            raise ValueError(
                "ledger entry must have exactly one of debit or credit"
            )
        return self


# --- Response Schemas ---

class CustomerLedgerLine(BaseModel):
    """One row of the customer ledger with its running balance."""
    date: dt.date
    type: LedgerEntryType
    reference: str
    debit: Decimal
    credit: Decimal
    balance: Decimal
    invoice_id: int | None = None
    payment_id: int | None = None

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }
