"""
Tests for the health check endpoint.
"""


def test_health_check_returns_200(client):
    """Can the application receive a request and respond at all?"""
    response = client.get("/health")
    assert response.status_code == 200


def test_health_check_returns_service_name(client):
    """
    Verify the response includes the correct service name.

    Monitoring parses this field, so a renamed service shows up here.
    """
    response = client.get("/health")
    data = response.json()
    assert data["service"] == "billing-ledger-import"


def test_health_check_reports_database_status(client):
    response = client.get("/health")
    data = response.json()
    assert data["database"] == "healthy"
    assert data["status"] == "healthy"
