"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tenant_id", sa.Integer(), nullable=True),
        sa.Column("event_type", sa.String(length=100), nullable=False),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_audit_log_tenant_id", "audit_log", ["tenant_id"])

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("external_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("normalized_name", sa.String(length=200), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("balance", sa.Numeric(19, 4), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "tenant_id", "normalized_name",
            name="uq_customers_tenant_normalized_name",
        ),
    )
    op.create_index("ix_customers_tenant_id", "customers", ["tenant_id"])

    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("external_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column(
            "customer_id", sa.Integer(),
            sa.ForeignKey("customers.id"), nullable=False,
        ),
        sa.Column("invoice_no", sa.String(length=100), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("payment_type", sa.String(length=50), nullable=False),
        sa.Column("net_sales", sa.Numeric(19, 4), nullable=False),
        sa.Column("vat_total", sa.Numeric(19, 4), nullable=False),
        sa.Column("discount", sa.Numeric(19, 4), nullable=False),
        sa.Column("cost", sa.Numeric(19, 4), nullable=False),
        sa.Column("grand_total", sa.Numeric(19, 4), nullable=False),
        sa.Column("paid_amount", sa.Numeric(19, 4), nullable=False),
        sa.Column(
            "payment_status",
            sa.Enum(
                "PENDING", "PARTIAL", "PAID",
                name="payment_status_enum", create_constraint=True,
            ),
            nullable=False,
        ),
        sa.Column(
            "source",
            sa.Enum(
                "IMPORT", "MANUAL",
                name="invoice_source_enum", create_constraint=True,
            ),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "tenant_id", "invoice_no", name="uq_invoices_tenant_invoice_no"
        ),
    )
    op.create_index("ix_invoices_tenant_id", "invoices", ["tenant_id"])
    op.create_index("ix_invoices_customer_id", "invoices", ["customer_id"])

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("external_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column(
            "customer_id", sa.Integer(),
            sa.ForeignKey("customers.id"), nullable=False,
        ),
        sa.Column(
            "invoice_id", sa.Integer(),
            sa.ForeignKey("invoices.id"), nullable=True,
        ),
        sa.Column("amount", sa.Numeric(19, 4), nullable=False),
        sa.Column("mode", sa.String(length=50), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("reference", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_payments_tenant_id", "payments", ["tenant_id"])
    op.create_index("ix_payments_customer_id", "payments", ["customer_id"])
    op.create_index("ix_payments_invoice_id", "payments", ["invoice_id"])

    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column(
            "customer_id", sa.Integer(),
            sa.ForeignKey("customers.id"), nullable=False,
        ),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column(
            "entry_type",
            sa.Enum("INVOICE", "PAYMENT", name="ledger_entry_type_enum"),
            nullable=False,
        ),
        sa.Column("reference", sa.String(length=100), nullable=False),
        sa.Column("debit", sa.Numeric(19, 4), nullable=False),
        sa.Column("credit", sa.Numeric(19, 4), nullable=False),
        sa.Column(
            "invoice_id", sa.Integer(),
            sa.ForeignKey("invoices.id"), nullable=True,
        ),
        sa.Column(
            "payment_id", sa.Integer(),
            sa.ForeignKey("payments.id"), nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "(debit > 0 AND credit = 0) OR (debit = 0 AND credit > 0)",
            name="ck_ledger_entries_one_sided",
        ),
    )
    op.create_index("ix_ledger_entries_tenant_id", "ledger_entries", ["tenant_id"])
    op.create_index("ix_ledger_entries_customer_id", "ledger_entries", ["customer_id"])


def downgrade() -> None:
    op.drop_table("ledger_entries")
    op.drop_table("payments")
    op.drop_table("invoices")
    op.drop_table("customers")
    op.drop_table("audit_log")
    sa.Enum(name="ledger_entry_type_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="invoice_source_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="payment_status_enum").drop(op.get_bind(), checkfirst=True)
