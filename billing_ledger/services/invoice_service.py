"""
Invoice service: invoices, payments, and their ledger postings.

Each operation:
1. Validates the business rules (unique invoice number,
   payment not larger than what is outstanding)
2. Creates the invoice or payment record
3. Posts the matching ledger entry through LedgerService

The caller controls the commit.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from billing_ledger.models.customer import Customer
from billing_ledger.models.invoice import Invoice
from billing_ledger.models.payment import Payment
from billing_ledger.models.enums import LedgerEntryType, PaymentStatus
from billing_ledger.schemas.invoice import InvoiceCreate, PaymentCreate
from billing_ledger.schemas.ledger import LedgerEntryCreate
from billing_ledger.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


class DuplicateInvoiceError(ValueError):
    """An invoice with this number already exists for the tenant."""

    def __init__(self, invoice_no: str):
        super().__init__(f"Invoice '{invoice_no}' already exists")
        self.invoice_no = invoice_no


class InvoiceService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger_service = LedgerService(db)

    def find_by_invoice_no(self, tenant_id: int, invoice_no: str) -> Invoice | None:
        """Duplicate lookup by the tenant's natural invoice key."""
        return self.db.execute(
            select(Invoice).where(
                Invoice.tenant_id == tenant_id,
                Invoice.invoice_no == invoice_no.strip(),
            )
        ).scalar_one_or_none()

    def create_invoice(
        self, tenant_id: int, customer: Customer, request: InvoiceCreate
    ) -> Invoice:
        """
        Create an invoice and debit the customer by its grand total.

        The insert runs in a savepoint: if a concurrent session
        already inserted the same (tenant_id, invoice_no), the
        unique constraint rejects ours and DuplicateInvoiceError
        is raised without disturbing the surrounding transaction.
        """
        invoice_no = request.invoice_no.strip()
        if self.find_by_invoice_no(tenant_id, invoice_no):
            raise DuplicateInvoiceError(invoice_no)

        invoice = Invoice(
            tenant_id=tenant_id,
            customer_id=customer.id,
            invoice_no=invoice_no,
            invoice_date=request.invoice_date,
            payment_type=request.payment_type,
            net_sales=request.net_sales,
            vat_total=request.vat_total,
            discount=request.discount,
            cost=request.cost,
            grand_total=request.grand_total,
            paid_amount=Decimal("0"),
            payment_status=PaymentStatus.PENDING,
            source=request.source,
        )
        try:
            with self.db.begin_nested():
                self.db.add(invoice)
                self.db.flush()
        except IntegrityError:
            raise DuplicateInvoiceError(invoice_no)

        self.ledger_service.post_entry(LedgerEntryCreate(
            tenant_id=tenant_id,
            customer_id=customer.id,
            entry_date=invoice.invoice_date,
            entry_type=LedgerEntryType.INVOICE,
            reference=invoice_no,
            debit=invoice.grand_total,
            invoice_id=invoice.id,
        ))
        logger.debug(
            "Created invoice %s for customer %s: %s",
            invoice_no, customer.id, invoice.grand_total,
        )
        return invoice

    def record_payment(
        self, tenant_id: int, invoice_id: int, request: PaymentCreate
    ) -> Payment:
        """
        Record a payment against an invoice and credit the customer.

        Accounting:
            CREDIT Customer (balance owed decreases)
        """
        invoice = self.get_invoice(tenant_id, invoice_id)

        if request.amount > invoice.outstanding_amount:
            raise ValueError(
                f"Payment exceeds outstanding amount: "
                f"outstanding={invoice.outstanding_amount}, "
                f"requested={request.amount}"
            )

        payment = Payment(
            tenant_id=tenant_id,
            customer_id=invoice.customer_id,
            invoice_id=invoice.id,
            amount=request.amount,
            mode=request.mode.upper(),
            payment_date=request.payment_date,
            reference=request.reference or invoice.invoice_no,
        )
        self.db.add(payment)
        self.db.flush()

        self.ledger_service.post_entry(LedgerEntryCreate(
            tenant_id=tenant_id,
            customer_id=invoice.customer_id,
            entry_date=payment.payment_date,
            entry_type=LedgerEntryType.PAYMENT,
            reference=invoice.invoice_no,
            credit=payment.amount,
            invoice_id=invoice.id,
            payment_id=payment.id,
        ))

        invoice.paid_amount = invoice.paid_amount + payment.amount
        invoice.payment_status = (
            PaymentStatus.PAID if invoice.outstanding_amount <= 0
            else PaymentStatus.PARTIAL
        )
        self.db.flush()
        return payment

    def get_invoice(self, tenant_id: int, invoice_id: int) -> Invoice:
        """Get an invoice by ID within a tenant."""
        invoice = self.db.get(Invoice, invoice_id)
        if not invoice or invoice.tenant_id != tenant_id:
            raise ValueError(f"Invoice {invoice_id} not found")
        return invoice
