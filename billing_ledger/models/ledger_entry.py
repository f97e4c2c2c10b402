"""
Customer ledger entry model.

Each entry is a single posting against one customer: an invoice
debits the customer, a payment credits them. Entries are
immutable. A mistake is corrected with a new offsetting entry,
never by editing or deleting the original.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, ForeignKey,
    CheckConstraint, Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from billing_ledger.models.base import Base
from billing_ledger.models.enums import LedgerEntryType


class LedgerEntry(Base):
    """
    An immutable debit or credit against a customer.

    Exactly one of debit/credit is non-zero. The check constraint
    backs up the validation in LedgerService.post_entry.
    """

    __tablename__ = "ledger_entries"
    __table_args__ = (
        CheckConstraint(
            "(debit > 0 AND credit = 0) OR (debit = 0 AND credit > 0)",
            name="ck_ledger_entries_one_sided",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    tenant_id: Mapped[int] = mapped_column(nullable=False, index=True)
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id"), nullable=False, index=True
    )
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    entry_type: Mapped[LedgerEntryType] = mapped_column(
        SAEnum(LedgerEntryType, name="ledger_entry_type_enum"),
        nullable=False,
    )
    reference: Mapped[str] = mapped_column(String(100), nullable=False)
    debit: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    credit: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    invoice_id: Mapped[int | None] = mapped_column(
        ForeignKey("invoices.id"), nullable=True
    )
    payment_id: Mapped[int | None] = mapped_column(
        ForeignKey("payments.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    def __repr__(self) -> str:
        return (
            f"<LedgerEntry {self.entry_type.value} {self.reference} "
            f"D{self.debit} C{self.credit}>"
        )
