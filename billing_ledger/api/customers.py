"""
Customer and customer ledger API endpoints.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from billing_ledger.api.tenancy import get_tenant_id
from billing_ledger.models.base import get_db
from billing_ledger.services.customer_service import CustomerService
from billing_ledger.services.ledger_service import LedgerService
from billing_ledger.schemas.customer import (
    CustomerCreate,
    CustomerResponse,
    BalanceValidation,
)
from billing_ledger.schemas.ledger import CustomerLedgerLine

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.post("", response_model=CustomerResponse, status_code=201)
def create_customer(
    request: CustomerCreate,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Create a new customer with a zero balance."""
    service = CustomerService(db)
    try:
        customer = service.create_customer(tenant_id, request)
        db.commit()
        return customer
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=list[CustomerResponse])
def list_customers(
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    return CustomerService(db).list_customers(tenant_id)


# Registered before /{customer_id} so "balance" isn't parsed as an ID
@router.get("/balance/mismatches", response_model=list[BalanceValidation])
def get_balance_mismatches(
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Customers whose stored balance differs from their ledger."""
    return LedgerService(db).detect_balance_mismatches(tenant_id)


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: int,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Get customer details."""
    try:
        return CustomerService(db).get_customer(tenant_id, customer_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get(
    "/{customer_id}/ledger",
    response_model=list[CustomerLedgerLine],
)
def get_customer_ledger(
    customer_id: int,
    from_date: date | None = Query(default=None),
    to_date: date | None = Query(default=None),
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """
    Get the customer's ledger, oldest first, with running balances.

    Balances always include entries before from_date.
    """
    try:
        CustomerService(db).get_customer(tenant_id, customer_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return LedgerService(db).get_customer_ledger(
        customer_id, from_date=from_date, to_date=to_date
    )


@router.get(
    "/{customer_id}/balance/validate",
    response_model=BalanceValidation,
)
def validate_customer_balance(
    customer_id: int,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Compare the stored balance with a replay of the ledger."""
    try:
        CustomerService(db).get_customer(tenant_id, customer_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return LedgerService(db).validate_customer_balance(customer_id)


@router.post(
    "/{customer_id}/balance/recalculate",
    response_model=BalanceValidation,
)
def recalculate_customer_balance(
    customer_id: int,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Reset the stored balance to the ledger replay."""
    try:
        CustomerService(db).get_customer(tenant_id, customer_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    service = LedgerService(db)
    service.recalculate_customer_balance(customer_id)
    db.commit()
    return service.validate_customer_balance(customer_id)
