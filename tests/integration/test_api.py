"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient
from loan_engine.api.main import create_app
from loan_engine.config import Settings
from loan_engine.infrastructure.database.session import get_db

USER = {"X-User-ID": "user_1"}
OTHER_USER = {"X-User-ID": "user_2"}


@pytest.fixture
def loan(client: TestClient) -> dict:
    """1000 VND over 3 terms originated 2024-01-15"""
    response = client.post(
        "/v1/loans",
        json={"amount": 1000, "currency_code": "VND", "terms": 3, "processed_at": "2024-01-15"},
        headers=USER,
    )
    assert response.status_code == 201
    return response.json()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient, loan: dict):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "loan_engine_loans_created_total" in response.text
    assert "loan_engine_repayment_amount" in response.text


def test_request_id_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert client.get("/health").headers["X-Request-ID"]


def test_create_loan_endpoint(loan: dict):
    """Test POST /v1/loans returns the schedule"""
    assert loan["user_id"] == "user_1"
    assert loan["outstanding_amount"] == 1000
    assert loan["status"] == "due"
    assert [(s["amount"], s["due_date"], s["status"]) for s in loan["scheduled_repayments"]] == [
        (333, "2024-02-15", "due"),
        (333, "2024-03-15", "due"),
        (334, "2024-04-15", "due"),
    ]


@pytest.mark.parametrize(
    "body",
    [
        {"amount": 1000, "currency_code": "VND", "terms": 4, "processed_at": "2024-01-15"},
        {"amount": 1000, "currency_code": "USD", "terms": 3, "processed_at": "2024-01-15"},
        {"amount": 0, "currency_code": "VND", "terms": 3, "processed_at": "2024-01-15"},
        {"amount": 1000, "currency_code": "VND", "terms": 3, "processed_at": "yesterday"},
    ],
)
def test_create_loan_invalid(client: TestClient, body: dict):
    response = client.post("/v1/loans", json=body, headers=USER)
    assert response.status_code == 422
    assert client.get("/v1/loans", headers=USER).json()["loans"] == []


def test_create_loan_requires_user(client: TestClient):
    response = client.post(
        "/v1/loans",
        json={"amount": 1000, "currency_code": "VND", "terms": 3, "processed_at": "2024-01-15"},
    )
    assert response.status_code == 422


def test_get_loan_endpoint(client: TestClient, loan: dict):
    response = client.get(f"/v1/loans/{loan['id']}", headers=USER)

    assert response.status_code == 200
    assert response.json() == loan


def test_get_loan_other_user_forbidden(client: TestClient, loan: dict):
    response = client.get(f"/v1/loans/{loan['id']}", headers=OTHER_USER)
    assert response.status_code == 403


def test_get_loan_not_found(client: TestClient):
    fake_uuid = "00000000-0000-0000-0000-000000000000"
    response = client.get(f"/v1/loans/{fake_uuid}", headers=USER)
    assert response.status_code == 404


def test_get_loan_invalid_id(client: TestClient):
    response = client.get("/v1/loans/not-a-uuid", headers=USER)
    assert response.status_code == 400


def test_list_loans_endpoint(client: TestClient, loan: dict):
    client.post(
        "/v1/loans",
        json={"amount": 600, "currency_code": "SGD", "terms": 6, "processed_at": "2024-02-01"},
        headers=OTHER_USER,
    )

    response = client.get("/v1/loans", headers=USER)

    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == "user_1"
    assert [l["id"] for l in data["loans"]] == [loan["id"]]


def test_repayment_endpoint_allocates(client: TestClient, loan: dict):
    response = client.post(
        f"/v1/loans/{loan['id']}/repayments",
        json={"amount": 400, "currency_code": "VND", "received_at": "2024-02-10"},
        headers=USER,
    )

    assert response.status_code == 201
    assert response.json()["amount"] == 400
    assert response.json()["received_at"] == "2024-02-10"

    data = client.get(f"/v1/loans/{loan['id']}", headers=USER).json()
    assert data["outstanding_amount"] == 600
    assert [(s["outstanding_amount"], s["status"]) for s in data["scheduled_repayments"]] == [
        (0, "repaid"),
        (266, "partial"),
        (334, "due"),
    ]


def test_repayment_endpoint_clamps_and_records_received_amount(client: TestClient, loan: dict):
    response = client.post(
        f"/v1/loans/{loan['id']}/repayments",
        json={"amount": 5000, "currency_code": "VND", "received_at": "2024-02-10"},
        headers=USER,
    )

    assert response.status_code == 201
    assert response.json()["amount"] == 5000
    data = client.get(f"/v1/loans/{loan['id']}", headers=USER).json()
    assert data["outstanding_amount"] == 0
    assert data["status"] == "repaid"


def test_repayment_endpoint_already_repaid(client: TestClient, loan: dict):
    url = f"/v1/loans/{loan['id']}/repayments"
    client.post(url, json={"amount": 1000, "currency_code": "VND", "received_at": "2024-02-10"}, headers=USER)

    response = client.post(url, json={"amount": 10, "currency_code": "VND", "received_at": "2024-03-10"}, headers=USER)

    assert response.status_code == 409
    assert len(client.get(url, headers=USER).json()["repayments"]) == 1


def test_repayment_endpoint_currency_mismatch(client: TestClient, loan: dict):
    url = f"/v1/loans/{loan['id']}/repayments"
    response = client.post(url, json={"amount": 100, "currency_code": "SGD"}, headers=USER)

    assert response.status_code == 422
    assert client.get(url, headers=USER).json()["repayments"] == []


def test_repayment_endpoint_other_user_forbidden(client: TestClient, loan: dict):
    url = f"/v1/loans/{loan['id']}/repayments"
    response = client.post(url, json={"amount": 100, "currency_code": "VND"}, headers=OTHER_USER)

    assert response.status_code == 403
    assert client.get(f"/v1/loans/{loan['id']}", headers=USER).json()["outstanding_amount"] == 1000


def test_list_repayments_endpoint(client: TestClient, loan: dict):
    url = f"/v1/loans/{loan['id']}/repayments"
    client.post(url, json={"amount": 100, "currency_code": "VND", "received_at": "2024-02-01"}, headers=USER)
    client.post(url, json={"amount": 250, "currency_code": "VND", "received_at": "2024-03-01"}, headers=USER)

    response = client.get(url, headers=USER)

    assert response.status_code == 200
    data = response.json()
    assert data["loan_id"] == loan["id"]
    assert [r["amount"] for r in data["repayments"]] == [100, 250]


def test_ready_endpoint(client: TestClient):
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready", "database": "up"}


def test_health_reports_configured_policy():
    app = create_app(Settings(service_name="loans-test", allowed_terms=[6, 3, 12], allowed_currencies=["VND"]))
    data = TestClient(app).get("/health").json()

    assert data["service"] == "loans-test"
    assert data["allowed_terms"] == [3, 6, 12]
    assert data["allowed_currencies"] == ["VND"]


def test_domain_errors_recorded_against_route(client: TestClient, loan: dict):
    response = client.get(f"/v1/loans/{loan['id']}", headers=OTHER_USER)
    assert response.status_code == 403
    assert "does not belong" in response.json()["detail"]

    metrics = client.get("/metrics").text
    assert 'loan_engine_rejected_operations_total{operation="get_loan",reason="LoanAccessDeniedError"}' in metrics


def test_app_settings_drive_loan_policy(db):
    app = create_app(Settings(allowed_terms=[12], allowed_currencies=["USD"]))
    app.dependency_overrides[get_db] = lambda: db
    client = TestClient(app)

    accepted = client.post(
        "/v1/loans",
        json={"amount": 1200, "currency_code": "USD", "terms": 12, "processed_at": "2024-01-15"},
        headers=USER,
    )
    rejected = client.post(
        "/v1/loans",
        json={"amount": 1200, "currency_code": "VND", "terms": 3, "processed_at": "2024-01-15"},
        headers=USER,
    )

    assert accepted.status_code == 201
    assert len(accepted.json()["scheduled_repayments"]) == 12
    assert rejected.status_code == 422
