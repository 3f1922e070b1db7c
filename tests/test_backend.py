import pytest

from pension_backend import backend
from pension_backend.engine.context import PAYMENT_INTERVAL
from pension_backend.engine.rates import FixedRateConverter
from pension_backend.engine.service import RetirementEngine
from pension_backend.engine.state import VaultState

HOLDER = "0xholder"

PLAN_PAYLOAD = {
    "lifeExpectancyYears": 20,
    "monthlySpending": 5000,
    "retirementAge": 65,
    "currentAge": 30,
    "expectedYieldRate": 500,
    "inflationRate": 200,
}


@pytest.fixture
def client(monkeypatch, engine):
    monkeypatch.setattr(backend, "engine", engine)
    return backend.app.test_client()


def test_health_and_schema(client):
    assert client.get("/api/health").get_json() == {"status": "ok"}

    schema = client.get("/api/schema").get_json()
    fields = [item["field"] for item in schema["plan"]["fields"]]
    assert "monthlySpending" in fields
    assert schema["plan"]["defaults"]["retirementAge"] == 65
    assert len(schema["plan"]["presets"]) == 3


def test_quote_matches_engine(client, engine):
    resp = client.post("/api/quote", json=PLAN_PAYLOAD)

    assert resp.status_code == 200
    data = resp.get_json()
    params = backend.parse_plan_parameters(PLAN_PAYLOAD)
    assert data["targetSettlement"] == str(engine.quote(params).target_settlement)
    assert int(data["targetReference"]) > 0


def test_plan_lifecycle_over_http(client, clock):
    resp = client.post(f"/api/plans/{HOLDER}", json=PLAN_PAYLOAD)
    assert resp.status_code == 201
    target = int(resp.get_json()["savings"]["target_amount"])

    resp = client.post(f"/api/plans/{HOLDER}/contributions", json={"amount": str(target // 2)})
    assert resp.status_code == 200
    dashboard = client.get(f"/api/plans/{HOLDER}").get_json()
    assert dashboard["status"] == "not_armed"
    assert dashboard["progressPercentage"] == pytest.approx(50.0, abs=0.01)

    resp = client.post(f"/api/plans/{HOLDER}/contributions", json={"amount": str(target - target // 2)})
    assert resp.get_json()["savings"]["payments_started"] is True

    resp = client.post(f"/api/plans/{HOLDER}/disburse")
    assert resp.status_code == 425
    assert resp.get_json()["code"] == "too_early"

    clock.advance(PAYMENT_INTERVAL)
    resp = client.post(f"/api/plans/{HOLDER}/disburse")
    assert resp.status_code == 200
    assert resp.get_json()["savings"]["payments_remaining"] == 238

    totals = client.get("/api/totals").get_json()
    assert totals["total_payments_processed"] == 2


def test_engine_errors_map_to_status_codes(client):
    resp = client.post(f"/api/plans/{HOLDER}/contributions", json={"amount": "100"})
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "no_active_plan"

    client.post(f"/api/plans/{HOLDER}", json=PLAN_PAYLOAD)
    resp = client.post(f"/api/plans/{HOLDER}/contributions", json={"amount": "0"})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "zero_amount"

    resp = client.post(f"/api/plans/{HOLDER}/contributions", json={"amount": 1.5})
    assert resp.status_code == 400

    resp = client.post(f"/api/plans/{HOLDER}/reclaim")
    assert resp.status_code == 409

    resp = client.put(f"/api/plans/{HOLDER}", json={**PLAN_PAYLOAD, "currentAge": 70})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "invalid_parameters"


def test_deactivate_and_reclaim_over_http(client):
    client.post(f"/api/plans/{HOLDER}", json=PLAN_PAYLOAD)
    client.post(f"/api/plans/{HOLDER}/contributions", json={"amount": "1000"})

    assert client.post(f"/api/plans/{HOLDER}/deactivate").status_code == 200
    resp = client.post(f"/api/plans/{HOLDER}/reclaim")

    assert resp.get_json()["amount"] == "1000"
    assert client.post(f"/api/plans/{HOLDER}/reclaim").get_json()["code"] == "nothing_to_reclaim"


def test_schedule_endpoint(client):
    assert client.get(f"/api/plans/{HOLDER}/schedule").status_code == 404

    client.post(f"/api/plans/{HOLDER}", json={**PLAN_PAYLOAD, "lifeExpectancyYears": 2})
    resp = client.get(f"/api/plans/{HOLDER}/schedule?freq=Y")

    data = resp.get_json()
    assert resp.status_code == 200
    assert sum(row["PaymentCount"] for row in data["data"]) == 24
    assert all(isinstance(row["Payment"], str) for row in data["data"])
    assert client.get(f"/api/plans/{HOLDER}/schedule?freq=W").status_code == 400


def test_to_reference_units_is_exact():
    assert backend.to_reference_units("5000.25") == 500025000000
    assert backend.to_reference_units(0.1) == 10_000_000


def test_rates_endpoint_converts_amounts(client):
    resp = client.get("/api/rates?reference=30000000000&settlement=500000000000000000")

    data = resp.get_json()
    assert resp.status_code == 200
    assert data["price"] == str(3000 * 10 ** 8)
    assert data["referenceDecimals"] == 8
    assert data["settlementDecimals"] == 18
    assert data["toSettlement"] == {"reference": "30000000000", "settlement": str(10 ** 17)}
    assert data["toReference"] == {"settlement": "500000000000000000", "reference": str(1500 * 10 ** 8)}
    assert client.get("/api/rates?reference=abc").status_code == 400


def test_rates_endpoint_reports_unavailable_price(monkeypatch, vault_path, clock, transfer):
    broken = RetirementEngine(VaultState(vault_path), FixedRateConverter(0), transfer, clock=clock)
    monkeypatch.setattr(backend, "engine", broken)

    resp = backend.app.test_client().get("/api/rates")

    assert resp.status_code == 503
    assert resp.get_json()["code"] == "rate_unavailable"


def test_reclaim_without_plan_is_a_conflict(client):
    resp = client.post("/api/plans/stranger/reclaim")

    assert resp.status_code == 409
    assert resp.get_json()["code"] == "nothing_to_reclaim"
