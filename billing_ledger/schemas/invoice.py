"""
Pydantic schemas for invoice and payment operations.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from billing_ledger.models.enums import PaymentStatus, InvoiceSource
from billing_ledger.schemas.ledger import quantize_money


class InvoiceCreate(BaseModel):
    invoice_no: str = Field(min_length=1, max_length=100)
    invoice_date: date
    payment_type: str = Field(default="Credit", max_length=50)
    net_sales: Decimal = Decimal("0")
    vat_total: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    cost: Decimal = Decimal("0")
    grand_total: Decimal = Field(gt=0)
    source: InvoiceSource = InvoiceSource.MANUAL

    @field_validator("net_sales", "vat_total", "discount", "cost", "grand_total")
    @classmethod
    def round_to_scale(cls, v: Decimal) -> Decimal:
        return quantize_money(v)


class PaymentCreate(BaseModel):
    amount: Decimal = Field(gt=0, decimal_places=4)
    mode: str = Field(default="CASH", min_length=1, max_length=50)
    payment_date: date
    reference: str | None = Field(default=None, max_length=100)


class InvoiceResponse(BaseModel):
    id: int
    external_id: uuid.UUID
    tenant_id: int
    customer_id: int
    invoice_no: str
    invoice_date: date
    payment_type: str
    net_sales: Decimal
    vat_total: Decimal
    discount: Decimal
    cost: Decimal
    grand_total: Decimal
    paid_amount: Decimal
    payment_status: PaymentStatus
    source: InvoiceSource
    created_at: datetime

    model_config = {"from_attributes": True}


class PaymentResponse(BaseModel):
    id: int
    external_id: uuid.UUID
    customer_id: int
    invoice_id: int | None
    amount: Decimal
    mode: str
    payment_date: date
    reference: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
