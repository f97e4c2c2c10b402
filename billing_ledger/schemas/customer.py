"""
Pydantic schemas for customer operations.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class CustomerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    phone: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=255)


class CustomerResponse(BaseModel):
    id: int
    external_id: uuid.UUID
    tenant_id: int
    name: str
    phone: str | None
    email: str | None
    balance: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class BalanceValidation(BaseModel):
    """Stored balance compared against a replay of the ledger."""
    customer_id: int
    customer_name: str
    stored_balance: Decimal
    ledger_balance: Decimal
    difference: Decimal
    is_consistent: bool
