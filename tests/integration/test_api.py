"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY
from tally_gateway.config import settings

pytestmark = pytest.mark.integration


def _create(client: TestClient, payload: dict) -> dict:
    response = client.post("/v1/subscriptions", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "tally_unknown_cadence_total" in response.text


def test_create_and_list_subscriptions(client: TestClient, sample_subscriptions: list[dict]):
    for payload in sample_subscriptions:
        _create(client, payload)
    _create(client, {**sample_subscriptions[0], "user_id": "someone_else"})

    response = client.get("/v1/subscriptions", params={"user_id": "user_1"})

    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == "user_1"
    assert sorted(s["name"] for s in data["subscriptions"]) == ["Gym", "Hulu", "Netflix"]


def test_get_subscription_scoped_to_user(client: TestClient, sample_subscriptions: list[dict]):
    created = _create(client, sample_subscriptions[0])

    own = client.get(f"/v1/subscriptions/{created['id']}", params={"user_id": "user_1"})
    other = client.get(f"/v1/subscriptions/{created['id']}", params={"user_id": "intruder"})

    assert own.status_code == 200
    assert own.json()["amount"] == pytest.approx(15.99)
    assert other.status_code == 404


def test_create_subscription_rejects_invalid_payload(client: TestClient, sample_subscriptions: list[dict]):
    negative = {**sample_subscriptions[0], "amount": -1}
    backwards = {**sample_subscriptions[0], "start_date": "2024-05-01", "end_date": "2024-04-01"}

    assert client.post("/v1/subscriptions", json=negative).status_code == 422
    assert client.post("/v1/subscriptions", json=backwards).status_code == 422


def test_roi_endpoint_monthly_scenario(client: TestClient, sample_subscriptions: list[dict]):
    """$15.99/month since Jan 2024, evaluated on the pinned date of 2024-04-01"""
    created = _create(client, sample_subscriptions[0])

    response = client.post(
        "/v1/subscriptions/roi",
        json={"user_id": "user_1", "subscription_id": created["id"]},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["subscription_id"] == created["id"]
    assert data["duration_months"] == 3
    assert data["monthly_cost"] == pytest.approx(15.99)
    assert data["annual_cost"] == pytest.approx(191.88)
    assert data["total_cost"] == pytest.approx(47.97)
    assert data["roi_percentage"] == 0
    assert data["break_even_months"] is None
    assert data["roi_status"] == "pending"
    assert data["subscription_status"] == "active"
    assert data["category"] == "Streaming"


def test_roi_endpoint_with_expected_return(client: TestClient, sample_subscriptions: list[dict]):
    """$120/year since Apr 2023 with $30 expected return"""
    created = _create(client, sample_subscriptions[1])

    response = client.post(
        "/v1/subscriptions/roi",
        json={"user_id": "user_1", "subscription_id": created["id"]},
    )

    data = response.json()
    assert data["duration_months"] == 12
    assert data["monthly_cost"] == pytest.approx(10)
    assert data["total_cost"] == pytest.approx(120)
    assert data["roi_percentage"] == pytest.approx(-75)
    assert data["roi_ratio"] == pytest.approx(0.25)
    assert data["break_even_months"] == pytest.approx(3)


def test_roi_endpoint_not_found(client: TestClient, sample_subscriptions: list[dict]):
    created = _create(client, sample_subscriptions[0])

    other_user = client.post(
        "/v1/subscriptions/roi",
        json={"user_id": "intruder", "subscription_id": created["id"]},
    )
    missing = client.post(
        "/v1/subscriptions/roi",
        json={"user_id": "user_1", "subscription_id": "00000000-0000-0000-0000-000000000000"},
    )
    malformed = client.post(
        "/v1/subscriptions/roi",
        json={"user_id": "user_1", "subscription_id": "not-a-uuid"},
    )

    assert other_user.status_code == 404
    assert missing.status_code == 404
    assert malformed.status_code == 400


def test_roi_list_endpoint(client: TestClient, sample_subscriptions: list[dict]):
    for payload in sample_subscriptions:
        _create(client, payload)

    response = client.get("/v1/subscriptions/roi", params={"user_id": "user_1"})

    assert response.status_code == 200
    data = response.json()
    assert data["as_of"] == "2024-04-01"
    assert len(data["results"]) == 3
    by_name = {r["name"]: r for r in data["results"]}
    assert by_name["Gym"]["monthly_cost"] == pytest.approx(43.3)
    assert by_name["Gym"]["duration_months"] == 2


def test_roi_list_endpoint_empty(client: TestClient):
    response = client.get("/v1/subscriptions/roi", params={"user_id": "nobody"})
    assert response.status_code == 200
    assert response.json()["results"] == []


def test_roi_preview_endpoint(client: TestClient):
    """Unsaved obligation: $10/month for one month with $5 expected return"""
    response = client.post(
        "/v1/subscriptions/roi/preview",
        json={
            "amount": 10,
            "recurrence": "monthly",
            "start_date": "2024-03-01",
            "roi_expected": 5,
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total_cost"] == 10
    assert data["roi_percentage"] == -50
    assert data["roi_ratio"] == 0.5


def test_roi_preview_explicit_as_of_and_unknown_cadence(client: TestClient):
    response = client.post(
        "/v1/subscriptions/roi/preview",
        json={"amount": 25, "recurrence": "fortnightly", "start_date": "2024-01-15", "as_of": "2024-07-01"},
    )

    data = response.json()
    assert data["duration_months"] == 6
    assert data["monthly_cost"] == 25


def test_unknown_cadence_counter_skips_absent_recurrence(client: TestClient):
    """A null recurrence is the monthly default; only unrecognised values are counted"""

    def unknown_cadence_total() -> float:
        return REGISTRY.get_sample_value("tally_unknown_cadence_total")

    before = unknown_cadence_total()
    absent = client.post(
        "/v1/subscriptions/roi/preview",
        json={"amount": 10, "recurrence": None, "start_date": "2024-03-01"},
    )
    after_absent = unknown_cadence_total()
    client.post(
        "/v1/subscriptions/roi/preview",
        json={"amount": 10, "recurrence": "fortnightly", "start_date": "2024-03-01"},
    )

    assert absent.status_code == 200
    assert absent.json()["monthly_cost"] == 10
    assert after_absent == before
    assert unknown_cadence_total() == before + 1


def test_roi_preview_rejects_invalid_input(client: TestClient):
    negative = client.post(
        "/v1/subscriptions/roi/preview",
        json={"amount": -10, "start_date": "2024-03-01"},
    )
    backwards = client.post(
        "/v1/subscriptions/roi/preview",
        json={"amount": 10, "start_date": "2024-03-01", "end_date": "2024-02-01"},
    )

    assert negative.status_code == 422
    assert backwards.status_code == 422


def test_summary_endpoint(client: TestClient, sample_subscriptions: list[dict]):
    for payload in sample_subscriptions:
        _create(client, payload)
    _create(client, {**sample_subscriptions[0], "name": "Old", "status": "cancelled", "is_active": False})

    response = client.get("/v1/subscriptions/summary", params={"user_id": "user_1"})

    assert response.status_code == 200
    data = response.json()
    assert data["subscription_count"] == 3
    assert data["total_monthly_cost"] == pytest.approx(15.99 + 10 + 43.3)
    assert data["count_by_cadence"] == {"monthly": 1, "annual": 1, "weekly": 1}
    assert data["monthly_cost_by_category"][0]["category"] == "Fitness"


def test_aggregates_ignore_list_limit(client: TestClient, sample_subscriptions: list[dict], monkeypatch):
    """The row cap applies to listings; summary and timeline see every subscription"""
    for payload in sample_subscriptions:
        _create(client, payload)
    monkeypatch.setattr(settings, "list_limit", 2)

    listing = client.get("/v1/subscriptions", params={"user_id": "user_1"})
    summary = client.get("/v1/subscriptions/summary", params={"user_id": "user_1"})
    timeline = client.get("/v1/payments/timeline", params={"user_id": "user_1"})

    assert len(listing.json()["subscriptions"]) == 2
    assert summary.json()["subscription_count"] == 3
    assert timeline.json()["total"] == pytest.approx(145.99)


def test_duplicates_endpoint(client: TestClient, sample_subscriptions: list[dict]):
    for payload in sample_subscriptions:
        _create(client, payload)

    response = client.get("/v1/subscriptions/duplicates", params={"user_id": "user_1"})

    assert response.status_code == 200
    groups = response.json()["groups"]
    assert len(groups) == 1
    assert groups[0]["category"] == "Streaming"
    assert groups[0]["combined_monthly_cost"] == pytest.approx(25.99)
    assert groups[0]["estimated_monthly_savings"] == pytest.approx(12.995)
    assert sorted(s["name"] for s in groups[0]["subscriptions"]) == ["Hulu", "Netflix"]


def test_overlaps_endpoint(client: TestClient, sample_subscriptions: list[dict]):
    for payload in sample_subscriptions:
        _create(client, payload)

    response = client.get("/v1/subscriptions/overlaps", params={"user_id": "user_1"})

    assert response.status_code == 200
    groups = response.json()["groups"]
    assert [(g["category"], g["count"]) for g in groups] == [("streaming", 2)]


def test_payment_timeline_endpoint(client: TestClient, sample_subscriptions: list[dict]):
    for payload in sample_subscriptions:
        _create(client, payload)

    response = client.get("/v1/payments/timeline", params={"user_id": "user_1"})

    assert response.status_code == 200
    data = response.json()
    assert len(data["days"]) == 31
    day_5 = data["days"][4]
    assert day_5["payment_count"] == 2
    assert day_5["subscription_total"] == pytest.approx(135.99)
    assert all(d["bill_total"] == 0 for d in data["days"])
    assert data["days"][19]["running_balance"] == pytest.approx(-145.99)
    assert data["total"] == pytest.approx(145.99)
    assert data["max_daily_total"] == pytest.approx(135.99)


def test_list_endpoints_require_user_id(client: TestClient):
    assert client.get("/v1/subscriptions").status_code == 422
    assert client.get("/v1/subscriptions/summary").status_code == 422
