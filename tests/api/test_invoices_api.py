"""
Tests for invoice and payment endpoints.
"""

from decimal import Decimal

from billing_ledger.services.invoice_service import InvoiceService


def import_invoice(client, db_session, invoice_no="INV-1", net="100"):
    client.post("/import/sales-ledger/apply", json={
        "columnMapping": {"invoiceNo": 0, "customerName": 1, "netSales": 2},
        "rows": [[invoice_no, "Acme Co", net]],
    })
    return InvoiceService(db_session).find_by_invoice_no(1, invoice_no)


class TestGetInvoice:

    def test_get_invoice(self, client, db_session):
        invoice = import_invoice(client, db_session)

        response = client.get(f"/invoices/{invoice.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["invoice_no"] == "INV-1"
        assert data["payment_status"] == "PENDING"
        assert data["source"] == "IMPORT"
        assert Decimal(data["grand_total"]) == Decimal("100")

    def test_missing_invoice_is_404(self, client):
        response = client.get("/invoices/999")

        assert response.status_code == 404

    def test_other_tenant_gets_404(self, client, db_session):
        invoice = import_invoice(client, db_session)

        response = client.get(
            f"/invoices/{invoice.id}", headers={"X-Tenant-Id": "2"}
        )

        assert response.status_code == 404


class TestRecordPayment:

    def test_partial_payment_returns_201(self, client, db_session):
        invoice = import_invoice(client, db_session)

        response = client.post(f"/invoices/{invoice.id}/payments", json={
            "amount": "40.00",
            "mode": "bank",
            "payment_date": "2024-06-15",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["mode"] == "BANK"
        assert data["reference"] == "INV-1"
        assert Decimal(data["amount"]) == Decimal("40")

        invoice_data = client.get(f"/invoices/{invoice.id}").json()
        assert invoice_data["payment_status"] == "PARTIAL"

        customer = client.get(f"/customers/{invoice.customer_id}").json()
        assert Decimal(customer["balance"]) == Decimal("60")

    def test_overpayment_returns_400(self, client, db_session):
        invoice = import_invoice(client, db_session)

        response = client.post(f"/invoices/{invoice.id}/payments", json={
            "amount": "500",
            "payment_date": "2024-06-15",
        })

        assert response.status_code == 400
        assert "exceeds outstanding amount" in response.json()["detail"]

    def test_non_positive_amount_returns_422(self, client, db_session):
        invoice = import_invoice(client, db_session)

        response = client.post(f"/invoices/{invoice.id}/payments", json={
            "amount": "0",
            "payment_date": "2024-06-15",
        })

        assert response.status_code == 422
