"""
Invoice API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from billing_ledger.api.tenancy import get_tenant_id
from billing_ledger.models.base import get_db
from billing_ledger.services.invoice_service import InvoiceService
from billing_ledger.schemas.invoice import (
    InvoiceResponse,
    PaymentCreate,
    PaymentResponse,
)

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: int,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Get invoice details."""
    service = InvoiceService(db)
    try:
        return service.get_invoice(tenant_id, invoice_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post(
    "/{invoice_id}/payments",
    response_model=PaymentResponse,
    status_code=201,
)
def record_payment(
    invoice_id: int,
    request: PaymentCreate,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Record a payment against an outstanding invoice."""
    service = InvoiceService(db)
    try:
        payment = service.record_payment(tenant_id, invoice_id, request)
        db.commit()
        return payment
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
