"""
Customer ledger service.

This service enforces the ledger rules:
1. Every entry is one-sided: a debit or a credit, never both
2. Entries are immutable (append-only)
3. A customer's stored balance always equals the sum of
   debit - credit over all of its entries

No other service writes ledger entries directly, and nothing
else changes Customer.balance.
"""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from billing_ledger.models.customer import Customer
from billing_ledger.models.ledger_entry import LedgerEntry
from billing_ledger.schemas.customer import BalanceValidation
from billing_ledger.schemas.ledger import LedgerEntryCreate, CustomerLedgerLine

logger = logging.getLogger(__name__)


class LedgerService:
    """
    All ledger operations pass through this service.

    The service takes a database session as a constructor
    argument. This means the caller controls the transaction
    boundary: they decide when to commit or rollback.
    """

    def __init__(self, db: Session):
        self.db = db

    def _get_customer(self, customer_id: int) -> Customer:
        customer = self.db.get(Customer, customer_id)
        if not customer:
            raise ValueError(f"Customer {customer_id} not found")
        return customer

    def post_entry(self, request: LedgerEntryCreate) -> LedgerEntry:
        """
        Post a single entry and move the customer's balance with it.

        The entry and the balance change are flushed together, so
        they are committed or rolled back together.
        """
        customer = self._get_customer(request.customer_id)
        if customer.tenant_id != request.tenant_id:
            raise ValueError(
                f"Customer {customer.id} does not belong to tenant "
                f"{request.tenant_id}"
            )

        entry = LedgerEntry(
            tenant_id=request.tenant_id,
            customer_id=customer.id,
            entry_date=request.entry_date,
            entry_type=request.entry_type,
            reference=request.reference,
            debit=request.debit,
            credit=request.credit,
            invoice_id=request.invoice_id,
            payment_id=request.payment_id,
        )
        self.db.add(entry)
        customer.balance = (customer.balance or Decimal("0")) + (
            request.debit - request.credit
        )
        self.db.flush()
        return entry

    def get_entries(self, customer_id: int) -> list[LedgerEntry]:
        """All entries for a customer in ledger order: date, then insertion."""
        entries = self.db.execute(
            select(LedgerEntry)
            .where(LedgerEntry.customer_id == customer_id)
            .order_by(LedgerEntry.entry_date, LedgerEntry.id)
        ).scalars().all()
        return list(entries)

    def get_customer_ledger(
        self,
        customer_id: int,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> list[CustomerLedgerLine]:
        """
        Return the customer's ledger with a running balance per line.

        The balance is recomputed from the first entry every time,
        never cached. The date range only filters which lines are
        returned, so the first line in a range carries the opening
        balance of everything before it.
        """
        self._get_customer(customer_id)

        lines = []
        running = Decimal("0")
        for entry in self.get_entries(customer_id):
            running += entry.debit - entry.credit
            if from_date and entry.entry_date < from_date:
                continue
            if to_date and entry.entry_date > to_date:
                continue
            lines.append(CustomerLedgerLine(
                date=entry.entry_date,
                type=entry.entry_type,
                reference=entry.reference,
                debit=entry.debit,
                credit=entry.credit,
                balance=running,
                invoice_id=entry.invoice_id,
                payment_id=entry.payment_id,
            ))
        return lines

    def get_ledger_balance(self, customer_id: int) -> Decimal:
        """
        Sum debit - credit over every entry for the customer.

        This is the balance a full replay of the ledger produces.
        Summed in Python so the result stays an exact Decimal on
        backends whose SUM returns floats.
        """
        return sum(
            (entry.debit - entry.credit for entry in self.get_entries(customer_id)),
            Decimal("0"),
        )

    def validate_customer_balance(self, customer_id: int) -> BalanceValidation:
        """Compare the stored balance with a replay of the ledger."""
        customer = self._get_customer(customer_id)
        ledger_balance = self.get_ledger_balance(customer_id)
        stored = customer.balance or Decimal("0")
        difference = stored - ledger_balance

        return BalanceValidation(
            customer_id=customer.id,
            customer_name=customer.name,
            stored_balance=stored,
            ledger_balance=ledger_balance,
            difference=difference,
            is_consistent=difference == 0,
        )

    def detect_balance_mismatches(self, tenant_id: int) -> list[BalanceValidation]:
        """Every customer in the tenant whose stored balance has drifted."""
        customer_ids = self.db.execute(
            select(Customer.id)
            .where(Customer.tenant_id == tenant_id)
            .order_by(Customer.id)
        ).scalars().all()

        mismatches = []
        for customer_id in customer_ids:
            validation = self.validate_customer_balance(customer_id)
            if not validation.is_consistent:
                logger.warning(
                    "Balance mismatch for customer %s: stored=%s ledger=%s",
                    customer_id,
                    validation.stored_balance,
                    validation.ledger_balance,
                )
                mismatches.append(validation)
        return mismatches

    def recalculate_customer_balance(self, customer_id: int) -> Decimal:
        """Reset the stored balance to the replayed ledger balance."""
        customer = self._get_customer(customer_id)
        ledger_balance = self.get_ledger_balance(customer_id)
        if customer.balance != ledger_balance:
            logger.info(
                "Recalculated balance for customer %s: %s -> %s",
                customer_id, customer.balance, ledger_balance,
            )
        customer.balance = ledger_balance
        self.db.flush()
        return ledger_balance
