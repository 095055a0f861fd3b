import pytest
from fastapi.testclient import TestClient

from main import app

client = TestClient(app)


# ------------------------------------------------------------
# Helper: request body for a financed proposal
# ------------------------------------------------------------
def make_proposal_request():
    return {
        "system_value": 40000,
        "tariff": 0.95,
        "monthly_generation_kwh": 1100,
        "location": "MG",
        "installments": 72,
        "installment_value": 950,
    }


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


# ------------------------------------------------------------
# Rate / installment
# ------------------------------------------------------------
def test_detect_rate():
    response = client.post("/detect_rate", json={
        "financed_value": 30000, "installments": 48, "installment_value": 789.91,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["monthly_rate_percent"] == pytest.approx(1.0, abs=0.01)
    assert data["semaphore"] == "excellent"


def test_detect_rate_degenerate_is_not_an_error():
    response = client.post("/detect_rate", json={
        "financed_value": 0, "installments": 0, "installment_value": 0,
    })
    assert response.status_code == 200
    assert response.json()["monthly_rate_percent"] == 0


def test_installment():
    response = client.post("/installment", json={
        "financed_value": 30000, "monthly_rate_percent": 0, "installments": 60,
    })
    assert response.json()["installment_value"] == pytest.approx(500)


# ------------------------------------------------------------
# Payback
# ------------------------------------------------------------
def test_payback():
    response = client.post("/payback", json={
        "total_cost": 31000, "monthly_saving": 500, "annual_tariff_increase_percent": 0,
    })
    assert response.json() == {"months": 62, "years": 5, "display": "5 years and 2 months"}


def test_payback_unreachable_is_null():
    response = client.post("/payback", json={"total_cost": 30000, "monthly_saving": 0})
    data = response.json()
    assert data["months"] is None
    assert data["display"] == "N/A"


def test_detailed_payback():
    response = client.post("/detailed_payback", json={
        "system_value": 30000,
        "installment_value": 800,
        "installments": 60,
        "monthly_saving": 600,
        "annual_tariff_increase_percent": 8,
    })
    data = response.json()
    assert data["total_paid"] == pytest.approx(48000)
    assert data["break_even_month"] == 65


# ------------------------------------------------------------
# Sizing / locations
# ------------------------------------------------------------
def test_sizing_by_state():
    response = client.post("/sizing", json={"monthly_consumption_kwh": 500, "location": "SP"})
    data = response.json()
    assert data["recommended_power_kwp"] == 4.34
    assert data["hsp_used"] == 4.8


def test_location_listings():
    assert len(client.get("/locations/states").json()) == 27
    assert len(client.get("/locations/cities").json()) > 27


# ------------------------------------------------------------
# Reverse calculator
# ------------------------------------------------------------
def test_reverse_calculate():
    response = client.post("/reverse_calculate", json={
        "monthly_budget": 500, "tariff": 0.90, "location": 5.0,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["recommendation"]["recommended_power_kwp"] == 5.45
    assert len(data["financing_options"]) == 7


def test_reverse_calculate_rejects_invalid_compensation_factor():
    response = client.post("/reverse_calculate", json={
        "monthly_budget": 500, "tariff": 0.90, "compensation_factor": 1.5,
    })
    assert response.status_code == 422


# ------------------------------------------------------------
# Proposal
# ------------------------------------------------------------
def test_proposal():
    response = client.post("/proposal", json=make_proposal_request())
    assert response.status_code == 200
    data = response.json()
    assert data["monthly_saving"] == pytest.approx(888.25)
    assert data["rate"]["semaphore"] == "average"


def test_proposal_missing_tariff_returns_error_code():
    req = make_proposal_request()
    req["tariff"] = 0
    response = client.post("/proposal", json=req)
    assert response.status_code == 200
    assert response.json() == {"error": "TARIFF_EMPTY"}
