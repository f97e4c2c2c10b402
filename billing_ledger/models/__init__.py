"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from billing_ledger.models.base import Base
from billing_ledger.models.enums import (
    LedgerEntryType,
    PaymentStatus,
    InvoiceSource,
)
from billing_ledger.models.audit_log import AuditLog
from billing_ledger.models.customer import Customer
from billing_ledger.models.invoice import Invoice
from billing_ledger.models.payment import Payment
from billing_ledger.models.ledger_entry import LedgerEntry

__all__ = [
    "Base",
    "LedgerEntryType",
    "PaymentStatus",
    "InvoiceSource",
    "AuditLog",
    "Customer",
    "Invoice",
    "Payment",
    "LedgerEntry",
]
