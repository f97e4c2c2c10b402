"""Business logic services."""

from billing_ledger.services.ledger_service import LedgerService
from billing_ledger.services.customer_service import CustomerService
from billing_ledger.services.invoice_service import InvoiceService
from billing_ledger.services.import_service import LedgerImportService

__all__ = [
    "LedgerService",
    "CustomerService",
    "InvoiceService",
    "LedgerImportService",
]
