"""
Pydantic schemas for the sales ledger import.

The import endpoints speak camelCase on the wire (columnMapping,
salesCreated, ...) because that is what the upload screen sends.
populate_by_name lets Python code use the snake_case names.
"""

from datetime import date
from decimal import Decimal
from typing import Generic, TypeVar

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from billing_ledger.schemas.ledger import quantize_money

T = TypeVar("T")

CAMEL_CASE = {
    "alias_generator": to_camel,
    "populate_by_name": True,
}


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by the import endpoints."""
    success: bool
    message: str = ""
    data: T | None = None


# --- Parse ---

class ParseResult(BaseModel):
    """Header row plus a bounded sample of raw rows, or an error."""
    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)
    error: str | None = None

    model_config = CAMEL_CASE


# --- Apply ---

class ApplyRequest(BaseModel):
    column_mapping: dict[str, int]
    rows: list[list[str]]
    skip_duplicates: bool = True

    model_config = CAMEL_CASE

    @field_validator("rows", mode="before")
    @classmethod
    def cells_as_text(cls, v):
        # Spreadsheet exports often arrive with numeric cells
        if not isinstance(v, list):
            return v
        return [
            [
                "" if cell is None else str(cell)
                for cell in row
            ] if isinstance(row, list) else row
            for row in v
        ]


class ImportRecord(BaseModel):
    """
    One normalized, validated row of a legacy sales ledger.

    Key fields are guaranteed non-empty. Amounts are already
    defaulted: an absent or unparseable amount is 0, and an
    absent gross sales figure is net sales plus VAT. Amounts are
    rounded half up to four decimal places.
    """
    row_index: int
    invoice_no: str = Field(min_length=1)
    customer_name: str = Field(min_length=1)
    payment_type: str = "Credit"
    payment_date: date | None = None
    net_sales: Decimal = Decimal("0")
    vat: Decimal = Decimal("0")
    sales: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    cost: Decimal = Decimal("0")
    warnings: list[str] = Field(default_factory=list)

    @field_validator("net_sales", "vat", "sales", "discount", "cost")
    @classmethod
    def round_to_scale(cls, v: Decimal) -> Decimal:
        return quantize_money(v)

    @property
    def is_credit_sale(self) -> bool:
        """Sold on account: the invoice stays open whatever the date."""
        return "CREDIT" in self.payment_type.upper()

    @property
    def gross_amount(self) -> Decimal:
        """Amount the invoice debits: gross sales less discount."""
        return self.sales - self.discount


class ImportReport(BaseModel):
    """
    Outcome of an apply call.

    Always returned, even when every row failed. Duplicates are
    counted in skipped and are not errors.
    """
    sales_created: int = 0
    customers_created: int = 0
    payments_created: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    model_config = CAMEL_CASE

    def message(self) -> str:
        return (
            f"Imported: {self.sales_created} sales, "
            f"{self.customers_created} customers, "
            f"{self.payments_created} payments. "
            f"Skipped: {self.skipped}. Errors: {len(self.errors)}"
        )
