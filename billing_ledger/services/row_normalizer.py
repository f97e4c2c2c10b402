"""
Row normalizer: raw string row + column mapping -> ImportRecord.

All "garbage input" handling lives here so the reconciliation
engine only ever sees records with non-empty keys and defaulted
amounts:
- strings are trimmed
- amounts are parsed tolerantly and rounded to four places; failures
  become 0 plus a warning
- dates are tried against an ordered list of formats; failures become None
- rows with an empty invoice number or customer name are rejected
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from billing_ledger.schemas.imports import ImportRecord
from billing_ledger.schemas.ledger import quantize_money
from billing_ledger.services.column_mapping import ColumnMapping, FieldKey

DEFAULT_PAYMENT_TYPE = "Credit"

# First success wins, so day-first beats month-first for 01/06/2024
DATE_FORMATS = (
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%Y/%m/%d",
    "%d-%b-%Y",
    "%d %b %Y",
    "%d %B %Y",
    "%d/%m/%y",
)
TIME_SUFFIXES = ("", " %H:%M", " %H:%M:%S")

CURRENCY_SYMBOLS = re.compile(r"[$€£¥₹]")
CURRENCY_CODE = re.compile(r"^[A-Za-z]{1,4}\.?|[A-Za-z]{1,4}\.?$")
AMOUNT_PATTERN = re.compile(r"^-?[\d.,]+-?$")


class RowValidationError(ValueError):
    """A row that cannot be imported at all."""


def parse_amount(text: str | None) -> Decimal | None:
    """
    Parse an amount the way it is typically written in an export.

    Accepts currency symbols or codes ("$1,200.50", "AED 1200"),
    thousands separators in either convention ("1,234.56",
    "1.234,56", "1 234,56", "1'234.56") and negatives written as
    "-100", "100-" or "(100)". Returns None if nothing parses.
    """
    if text is None:
        return None
    value = text.strip()
    if not value:
        return None

    negative = False
    if value.startswith("(") and value.endswith(")"):
        negative = True
        value = value[1:-1]

    value = CURRENCY_SYMBOLS.sub("", value).strip()
    value = CURRENCY_CODE.sub("", value).strip()
    value = re.sub(r"[\s' ]", "", value)

    if not AMOUNT_PATTERN.match(value) or not any(c.isdigit() for c in value):
        return None

    if value.endswith("-"):
        negative = not value.startswith("-")
        value = value.strip("-")
    elif value.startswith("-"):
        negative = True
        value = value[1:]

    last_comma = value.rfind(",")
    last_dot = value.rfind(".")
    if last_comma >= 0 and last_dot >= 0:
        if last_comma > last_dot:
            value = value.replace(".", "").replace(",", ".")
        else:
            value = value.replace(",", "")
    elif last_comma >= 0:
        digits_after = len(value) - last_comma - 1
        if value.count(",") == 1 and digits_after != 3:
            value = value.replace(",", ".")
        else:
            value = value.replace(",", "")
    elif value.count(".") > 1:
        value = value.replace(".", "")

    try:
        amount = Decimal(value)
    except InvalidOperation:
        return None
    return -amount if negative else amount


def parse_date(text: str | None) -> date | None:
    """Parse a locale-ambiguous date; ISO first, then DD/MM, then MM/DD."""
    if text is None:
        return None
    value = text.strip()
    if not value:
        return None

    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        for suffix in TIME_SUFFIXES:
            try:
                return datetime.strptime(value, fmt + suffix).date()
            except ValueError:
                continue
    return None


def collapse_whitespace(value: str) -> str:
    return " ".join(value.split())


def _amount(
    row: list[str],
    mapping: ColumnMapping,
    field: FieldKey,
    warnings: list[str],
) -> Decimal | None:
    text = mapping.cell(row, field)
    if text is None:
        return None
    fallback = (
        "deriving from netSales + vat" if field == FieldKey.SALES
        else "using 0"
    )
    amount = parse_amount(text)
    if amount is None:
        warnings.append(
            f"{field.value} value '{text}' is not a number; {fallback}"
        )
        return None
    try:
        return quantize_money(amount)
    except InvalidOperation:
        warnings.append(
            f"{field.value} value '{text}' is out of range; {fallback}"
        )
        return None


def normalize_row(
    row: list[str],
    mapping: ColumnMapping,
    row_index: int,
) -> ImportRecord:
    """
    Convert one raw row into an ImportRecord.

    Raises RowValidationError if the invoice number or the
    customer name is empty after trimming.
    """
    invoice_no = mapping.cell(row, FieldKey.INVOICE_NO)
    customer_name = mapping.cell(row, FieldKey.CUSTOMER_NAME)

    if not invoice_no:
        raise RowValidationError("Invoice number is empty")
    if not customer_name:
        raise RowValidationError("Customer name is empty")

    warnings: list[str] = []
    net_sales = _amount(row, mapping, FieldKey.NET_SALES, warnings) or Decimal("0")
    vat = _amount(row, mapping, FieldKey.VAT, warnings) or Decimal("0")
    sales = _amount(row, mapping, FieldKey.SALES, warnings)
    discount = _amount(row, mapping, FieldKey.DISCOUNT, warnings) or Decimal("0")
    cost = _amount(row, mapping, FieldKey.COST, warnings) or Decimal("0")

    if sales is None:
        sales = net_sales + vat

    date_text = mapping.cell(row, FieldKey.PAYMENT_DATE)
    payment_date = parse_date(date_text)
    if date_text and payment_date is None:
        warnings.append(
            f"paymentDate value '{date_text}' is not a date; treated as unpaid"
        )

    return ImportRecord(
        row_index=row_index,
        invoice_no=invoice_no,
        customer_name=collapse_whitespace(customer_name),
        payment_type=(
            mapping.cell(row, FieldKey.PAYMENT_TYPE) or DEFAULT_PAYMENT_TYPE
        ),
        payment_date=payment_date,
        net_sales=net_sales,
        vat=vat,
        sales=sales,
        discount=discount,
        cost=cost,
        warnings=warnings,
    )
