"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored.
"""

import enum


class LedgerEntryType(str, enum.Enum):
    """What produced a customer ledger entry."""
    INVOICE = "Invoice"
    PAYMENT = "Payment"


class PaymentStatus(str, enum.Enum):
    """Settlement state of an invoice."""
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"


class InvoiceSource(str, enum.Enum):
    """Where an invoice came from."""
    IMPORT = "IMPORT"
    MANUAL = "MANUAL"
