"""
Invoice model.

An invoice (a sale, in the billing tool's vocabulary) debits the
customer's ledger by its grand total. The invoice number is the
natural key within a tenant: the unique constraint on
(tenant_id, invoice_no) is what makes repeated imports idempotent
even when two imports race each other.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, ForeignKey,
    UniqueConstraint, Enum as SAEnum, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billing_ledger.models.base import Base
from billing_ledger.models.enums import PaymentStatus, InvoiceSource


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "invoice_no", name="uq_invoices_tenant_invoice_no"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    external_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, unique=True, nullable=False, default=uuid.uuid4
    )
    tenant_id: Mapped[int] = mapped_column(nullable=False, index=True)
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id"), nullable=False, index=True
    )
    invoice_no: Mapped[str] = mapped_column(String(100), nullable=False)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_type: Mapped[str] = mapped_column(
        String(50), nullable=False, default="Credit"
    )
    net_sales: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    vat_total: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    discount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    cost: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    grand_total: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    paid_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(
            PaymentStatus,
            name="payment_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    source: Mapped[InvoiceSource] = mapped_column(
        SAEnum(
            InvoiceSource,
            name="invoice_source_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=InvoiceSource.MANUAL,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    # Relationships
    customer: Mapped["Customer"] = relationship(back_populates="invoices")
    payments: Mapped[list["Payment"]] = relationship(back_populates="invoice")

    @property
    def outstanding_amount(self) -> Decimal:
        return self.grand_total - self.paid_amount

    def __repr__(self) -> str:
        return (
            f"<Invoice {self.invoice_no} "
            f"{self.grand_total} ({self.payment_status.value})>"
        )
