"""
End-to-end API tests — AY 2025-26

Tests the full stack: HTTP request → schema validation → business-rule
validation → aggregation / tax engine → HTTP response. No external services;
the app is driven in-process through httpx's ASGI transport.

Run from the project root: pytest taxplanner/tests/test_api_calculate.py -v
"""
from __future__ import annotations

import json

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from taxplanner.config import Settings
from taxplanner.income.aggregator import RENTAL_KEY
from taxplanner.main import app
from taxplanner.tests.demo_profiles import DEMO_LEDGERS


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def client():
    """Async httpx client using ASGI transport — no live server needed."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ---------------------------------------------------------------------------
# Test Group 1: Health
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["assessment_year"] == "AY2025-26"


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", " http://a.test, ,http://b.test ")
    monkeypatch.setenv("DEBUG", "false")
    config = Settings(_env_file=None)
    assert config.cors_origins_list == ["http://a.test", "http://b.test"]
    assert config.debug is False


# ---------------------------------------------------------------------------
# Test Group 2: POST /api/calculate — aggregated profile
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_calculate_worked_example(client: AsyncClient) -> None:
    response = await client.post(
        "/api/calculate",
        json={"salary": 1_500_000, "ltcg": 300_000, "is_salaried": True},
    )
    assert response.status_code == 200, response.text

    body = response.json()
    result = body["result"]
    assert result["slab_tax_before_rebate"] == 93_750
    assert result["ltcg_tax"] == 21_875
    assert result["cess"] == 4_625
    assert result["total_tax_payable"] == 120_250
    assert body["profile"]["is_salaried"] is True
    assert body["statement"][-1] == "Total Tax Payable: ₹1,20,250.00"


@pytest.mark.asyncio
async def test_calculate_accepts_string_amounts(client: AsyncClient) -> None:
    response = await client.post(
        "/api/calculate",
        json={"salary": "1275001", "is_salaried": True},
    )
    assert response.status_code == 200
    assert response.json()["result"]["total_tax_payable"] == pytest.approx(62_400.156)


@pytest.mark.asyncio
async def test_calculate_rejects_negative_salary(client: AsyncClient) -> None:
    response = await client.post(
        "/api/calculate",
        json={"salary": -1, "fd_income": -2, "stcg": -50_000},
    )
    assert response.status_code == 422

    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["message"] == "Profile validation failed"
    assert [d["field"] for d in error["details"]] == ["salary", "fd_income"]


@pytest.mark.asyncio
@pytest.mark.parametrize("bad", ["NaN", "Infinity", "abc"])
async def test_calculate_rejects_non_finite(client: AsyncClient, bad: str) -> None:
    response = await client.post("/api/calculate", json={"salary": bad})
    assert response.status_code == 422

    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["field"] == "salary"


@pytest.mark.asyncio
async def test_calculate_rejects_amount_beyond_limit(client: AsyncClient) -> None:
    response = await client.post("/api/calculate", json={"salary": "1e27"})
    assert response.status_code == 422

    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["field"] == "salary"


@pytest.mark.asyncio
async def test_calculate_accepts_amount_at_limit(client: AsyncClient) -> None:
    response = await client.post("/api/calculate", json={"salary": "1e15", "ltcg": "1e15"})
    assert response.status_code == 200, response.text
    assert response.json()["statement"][-1].startswith("Total Tax Payable: ₹")


@pytest.mark.asyncio
async def test_calculate_rejects_unknown_field(client: AsyncClient) -> None:
    response = await client.post("/api/calculate", json={"salary": 1, "hra": 2})
    assert response.status_code == 422
    assert response.json()["error"]["details"][0]["field"] == "hra"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client: AsyncClient) -> None:
    response = await client.get("/api/nope")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_wrong_method_uses_error_envelope(client: AsyncClient) -> None:
    response = await client.get("/api/calculate")
    assert response.status_code == 405
    assert response.json()["error"]["code"] == "METHOD_NOT_ALLOWED"


# ---------------------------------------------------------------------------
# Test Group 3: /api/income — ledger and browser-storage snapshot
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["asha", "ravi", "meera"])
async def test_income_calculate_demo_ledgers(client: AsyncClient, name: str) -> None:
    data = DEMO_LEDGERS[name]
    response = await client.post("/api/income/calculate", json=data["ledger"])
    assert response.status_code == 200, (
        f"{name}: Expected 200, got {response.status_code}. Body: {response.text}"
    )

    body = response.json()
    expected = data["expected"]
    assert body["profile"]["is_salaried"] is expected["is_salaried"]
    assert body["result"]["total_tax_payable"] == pytest.approx(expected["total_tax_payable"]), (
        f"{name}: expected ₹{expected['total_tax_payable']:,}, "
        f"got ₹{body['result']['total_tax_payable']:,}"
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["asha", "ravi", "meera"])
async def test_storage_calculate_demo_snapshots(client: AsyncClient, name: str) -> None:
    data = DEMO_LEDGERS[name]
    response = await client.post(
        "/api/income/storage/calculate",
        json={"snapshot": data["snapshot"], "is_salaried": data["ledger"].get("is_salaried")},
    )
    assert response.status_code == 200, response.text
    assert response.json()["result"]["total_tax_payable"] == pytest.approx(
        data["expected"]["total_tax_payable"]
    )


@pytest.mark.asyncio
async def test_income_summary_ravi(client: AsyncClient) -> None:
    response = await client.post("/api/income/summary", json=DEMO_LEDGERS["ravi"]["ledger"])
    assert response.status_code == 200

    body = response.json()
    assert body["rental"]["total_net_income"] == 406_000
    assert body["rental"]["total_interest_on_loan"] == 100_000
    assert body["dividends_by_source"] == {"pms": 25_000, "broker1": 15_000}
    assert body["total_slab_income"] == 506_000
    assert body["total_stcg"] == -50_000


@pytest.mark.asyncio
async def test_storage_calculate_invalid_payload(client: AsyncClient) -> None:
    snapshot = {RENTAL_KEY: json.dumps([{"monthlyRent": "abc"}])}
    response = await client.post("/api/income/storage/calculate", json={"snapshot": snapshot})
    assert response.status_code == 422

    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["message"] == "Stored income data is invalid"
    assert error["details"][0]["field"] == f"{RENTAL_KEY}.0.monthlyRent"


@pytest.mark.asyncio
async def test_income_calculate_rejects_negative_rows(client: AsyncClient) -> None:
    response = await client.post(
        "/api/income/calculate",
        json={"bonds": [{"name": "X", "income": -10}]},
    )
    assert response.status_code == 422
    assert response.json()["error"]["details"][0]["field"] == "bonds.0.income"


@pytest.mark.asyncio
async def test_income_calculate_vacant_property(client: AsyncClient) -> None:
    """Municipal tax on an unlet property is a house-property loss, not an error."""
    ledger = {
        "salary": 1_500_000,
        "rental_properties": [{"monthlyRent": 0, "monthsRented": 0, "propertyTax": 5_000}],
    }
    response = await client.post("/api/income/calculate", json=ledger)
    assert response.status_code == 200, response.text

    body = response.json()
    assert body["profile"]["rental_income"] == -5_000
    assert body["result"]["total_tax_payable"] == 96_720


@pytest.mark.asyncio
async def test_storage_calculate_vacant_property(client: AsyncClient) -> None:
    snapshot = {
        "dyad-salary-income": "1500000",
        RENTAL_KEY: json.dumps([{"monthlyRent": "", "monthsRented": "", "propertyTax": "5000"}]),
    }
    response = await client.post("/api/income/storage/calculate", json={"snapshot": snapshot})
    assert response.status_code == 200, response.text
    assert response.json()["result"]["total_tax_payable"] == 96_720


# ---------------------------------------------------------------------------
# Test Group 4: /api/planning
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_advance_tax_from_total(client: AsyncClient) -> None:
    response = await client.post(
        "/api/planning/advance-tax",
        json={"total_tax": 100_000},
    )
    assert response.status_code == 200

    body = response.json()
    assert body["is_advance_tax_due"] is True
    assert [i["amount"] for i in body["instalments"]] == [15_000, 30_000, 30_000, 25_000]


@pytest.mark.asyncio
async def test_advance_tax_from_profile(client: AsyncClient) -> None:
    # Asha's total 126490 less TDS 100000 → 26490
    response = await client.post(
        "/api/planning/advance-tax",
        json={"profile": {"salary": 1_540_000, "ltcg": 300_000, "is_salaried": True}, "tds": 100_000},
    )
    assert response.status_code == 200

    body = response.json()
    assert body["total_tax"] == 126_490
    assert body["net_tax_liability"] == 26_490
    assert [i["amount"] for i in body["instalments"]] == [3_974, 7_947, 7_947, 6_622]


@pytest.mark.asyncio
async def test_advance_tax_requires_one_source(client: AsyncClient) -> None:
    response = await client.post("/api/planning/advance-tax", json={"tds": 5_000})
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_advance_tax_profile_business_rules(client: AsyncClient) -> None:
    response = await client.post(
        "/api/planning/advance-tax",
        json={"profile": {"dividend_income": -1}},
    )
    assert response.status_code == 422
    assert response.json()["error"]["details"][0]["field"] == "dividend_income"


@pytest.mark.asyncio
async def test_section_54f(client: AsyncClient) -> None:
    response = await client.post(
        "/api/planning/section-54f",
        json={
            "sale_consideration": 10_000_000,
            "transfer_expenses": 200_000,
            "cost_of_new_house": 4_900_000,
            "capital_gains": 3_000_000,
        },
    )
    assert response.status_code == 200

    body = response.json()
    assert body["exemption"] == 1_500_000
    assert body["taxable_gains"] == 1_500_000
    assert body["is_fully_exempt"] is False
