"""
Sales ledger import: reconcile legacy rows into the customer ledger.

For each record, in order:
1. Skip it if the tenant already has an invoice with that number
2. Resolve the customer by normalized name, creating it if needed
3. Create the invoice and debit the customer
4. If the row carries a payment date and is not a credit sale,
   record the payment and credit the customer

Each record runs in its own SAVEPOINT. A failing record is rolled
back on its own and reported as "Row {n}: {message}"; the rest of
the batch carries on. Only structural problems (an unusable column
mapping, an oversized batch) raise before any row is processed.

Re-running the same import is a no-op: every invoice number is
already present, so every row is skipped.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from billing_ledger.config import get_settings
from billing_ledger.models.audit_log import AuditLog
from billing_ledger.models.customer import Customer
from billing_ledger.models.enums import InvoiceSource
from billing_ledger.schemas.imports import ImportRecord, ImportReport
from billing_ledger.schemas.invoice import InvoiceCreate, PaymentCreate
from billing_ledger.services.column_mapping import validate_column_mapping
from billing_ledger.services.customer_service import CustomerService
from billing_ledger.services.invoice_service import (
    InvoiceService,
    DuplicateInvoiceError,
)
from billing_ledger.services.row_normalizer import (
    normalize_row,
    RowValidationError,
)

logger = logging.getLogger(__name__)

IMPORT_EVENT_TYPE = "LEDGER_IMPORT"

# name -> (customer, created)
CustomerResolver = Callable[[str], tuple[Customer, bool]]


@dataclass
class RowOutcome:
    customer_created: bool = False
    payment_created: bool = False


class LedgerImportService:
    """
    Applies a batch of import records for one tenant.

    Customer matching is pluggable: pass resolve_customer to use
    something other than exact normalized-name matching.
    """

    def __init__(
        self,
        db: Session,
        tenant_id: int,
        resolve_customer: CustomerResolver | None = None,
    ):
        self.db = db
        self.tenant_id = tenant_id
        self.customer_service = CustomerService(db)
        self.invoice_service = InvoiceService(db)
        self.resolve_customer = resolve_customer or (
            lambda name: self.customer_service.resolve_customer(tenant_id, name)
        )

    def apply_rows(
        self,
        column_mapping: dict[str, int],
        rows: list[list[str]],
        skip_duplicates: bool = True,
        import_date: date | None = None,
    ) -> ImportReport:
        """
        Normalize and reconcile raw rows.

        Raises ColumnMappingError if invoiceNo or customerName is not
        mapped, and ValueError if the batch exceeds the configured
        row limit. Row numbers in messages are 1-based positions in
        rows.
        """
        mapping = validate_column_mapping(column_mapping)

        max_rows = get_settings().IMPORT_MAX_APPLY_ROWS
        if len(rows) > max_rows:
            raise ValueError(
                f"Too many rows: {len(rows)} submitted, limit is {max_rows}"
            )

        report = ImportReport()
        import_date = import_date or date.today()
        logger.info(
            "Starting ledger import for tenant %s: %d rows",
            self.tenant_id, len(rows),
        )

        for row_index, row in enumerate(rows, start=1):
            try:
                record = normalize_row(row, mapping, row_index)
            except RowValidationError as e:
                self._row_failed(report, row_index, e)
                continue
            self._apply_record(record, report, skip_duplicates, import_date)

        self._finish(report)
        return report

    def apply(
        self,
        records: Iterable[ImportRecord],
        skip_duplicates: bool = True,
        import_date: date | None = None,
    ) -> ImportReport:
        """Reconcile already-normalized records in order."""
        report = ImportReport()
        import_date = import_date or date.today()

        for record in records:
            self._apply_record(record, report, skip_duplicates, import_date)

        self._finish(report)
        return report

    def _apply_record(
        self,
        record: ImportRecord,
        report: ImportReport,
        skip_duplicates: bool,
        import_date: date,
    ) -> None:
        """Run one record in a savepoint and fold the outcome into report."""
        try:
            with self.db.begin_nested():
                outcome = self._reconcile(record, import_date)
        except DuplicateInvoiceError as e:
            if skip_duplicates:
                report.skipped += 1
                return
            self._row_failed(report, record.row_index, e)
            return
        except (ValueError, SQLAlchemyError) as e:
            self._row_failed(report, record.row_index, e)
            return
        except Exception as e:
            # Anything else, e.g. from a custom resolver
            logger.exception(
                "Unexpected error importing row %d for tenant %s",
                record.row_index, self.tenant_id,
            )
            self._row_failed(report, record.row_index, e)
            return

        report.sales_created += 1
        if outcome.customer_created:
            report.customers_created += 1
        if outcome.payment_created:
            report.payments_created += 1
        report.warnings.extend(
            f"Row {record.row_index}: {warning}" for warning in record.warnings
        )

    def _reconcile(self, record: ImportRecord, import_date: date) -> RowOutcome:
        # 1. Duplicate check. The unique index on (tenant_id, invoice_no)
        # catches the race this lookup alone would miss.
        if self.invoice_service.find_by_invoice_no(self.tenant_id, record.invoice_no):
            raise DuplicateInvoiceError(record.invoice_no)

        gross_amount = record.gross_amount
        if gross_amount <= 0:
            message = f"Invoice amount must be positive (got {gross_amount})"
            if record.warnings:
                message += "; " + "; ".join(record.warnings)
            raise RowValidationError(message)

        # 2. Customer
        customer, created = self.resolve_customer(record.customer_name)
        outcome = RowOutcome(customer_created=created)

        # 3. Invoice (debit)
        invoice = self.invoice_service.create_invoice(
            self.tenant_id,
            customer,
            InvoiceCreate(
                invoice_no=record.invoice_no,
                invoice_date=record.payment_date or import_date,
                payment_type=record.payment_type[:50],
                net_sales=record.net_sales,
                vat_total=record.vat,
                discount=record.discount,
                cost=record.cost,
                grand_total=gross_amount,
                source=InvoiceSource.IMPORT,
            ),
        )

        # 4. Payment (credit) for invoices the export shows as settled.
        # Credit sales stay open even when the row carries a date.
        if record.payment_date is not None and not record.is_credit_sale:
            self.invoice_service.record_payment(
                self.tenant_id,
                invoice.id,
                PaymentCreate(
                    amount=gross_amount,
                    mode=record.payment_type[:50],
                    payment_date=record.payment_date,
                    reference=record.invoice_no[:100],
                ),
            )
            outcome.payment_created = True

        return outcome

    def _row_failed(
        self, report: ImportReport, row_index: int, error: Exception
    ) -> None:
        message = f"Row {row_index}: {error}"
        report.errors.append(message)
        logger.warning("Ledger import for tenant %s: %s", self.tenant_id, message)

    def _finish(self, report: ImportReport) -> None:
        """Write the audit record for the batch."""
        self.db.add(AuditLog(
            tenant_id=self.tenant_id,
            event_type=IMPORT_EVENT_TYPE,
            details=json.dumps({
                "sales_created": report.sales_created,
                "customers_created": report.customers_created,
                "payments_created": report.payments_created,
                "skipped": report.skipped,
                "error_count": len(report.errors),
            }),
        ))
        self.db.flush()
        logger.info(
            "Finished ledger import for tenant %s: %s",
            self.tenant_id, report.message(),
        )
