"""
Column mapping between a legacy export and the canonical import fields.

The user confirms which source column holds each canonical field.
Fields without a column are simply absent from every row.
"""

import enum
import logging

logger = logging.getLogger(__name__)


class FieldKey(str, enum.Enum):
    """Canonical fields a sales ledger row can be mapped to."""
    INVOICE_NO = "invoiceNo"
    CUSTOMER_NAME = "customerName"
    PAYMENT_TYPE = "paymentType"
    PAYMENT_DATE = "paymentDate"
    NET_SALES = "netSales"
    VAT = "vat"
    SALES = "sales"
    DISCOUNT = "discount"
    COST = "cost"


REQUIRED_FIELDS = (FieldKey.INVOICE_NO, FieldKey.CUSTOMER_NAME)


class ColumnMappingError(ValueError):
    """The mapping cannot be applied to any row."""


class ColumnMapping:
    """A validated lookup from canonical field to source column index."""

    def __init__(self, columns: dict[FieldKey, int]):
        self.columns = columns

    def __contains__(self, field: FieldKey) -> bool:
        return field in self.columns

    def cell(self, row: list[str], field: FieldKey) -> str | None:
        """Return the trimmed cell for a field, or None if absent or blank."""
        index = self.columns.get(field)
        if index is None or index >= len(row):
            return None
        value = row[index]
        if value is None:
            return None
        value = str(value).strip()
        return value or None


def validate_column_mapping(mapping: dict[str, int]) -> ColumnMapping:
    """
    Build a ColumnMapping from the raw {fieldKey: columnIndex} dict.

    Unknown keys are ignored and negative indices mean "not mapped".
    Raises ColumnMappingError if invoiceNo or customerName is missing.
    """
    columns: dict[FieldKey, int] = {}
    for key, index in mapping.items():
        try:
            field = FieldKey(key)
        except ValueError:
            logger.info("Ignoring unknown mapping key %r", key)
            continue
        if index is None or index < 0:
            continue
        columns[field] = index

    if any(field not in columns for field in REQUIRED_FIELDS):
        raise ColumnMappingError(
            "Column mapping must include invoiceNo and customerName."
        )
    return ColumnMapping(columns)
