"""Integration tests for the configuration metadata endpoints."""

from __future__ import annotations

from http import HTTPStatus

from flask.testing import FlaskClient


def test_brackets_endpoint_lists_schedule(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/brackets")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["locale"] == "en"
    assert payload["currency"] == "ETB"
    brackets = payload["brackets"]
    assert len(brackets) == 6
    assert [entry["deductible"] for entry in brackets] == [0, 300, 500, 850, 1350, 2050]
    assert brackets[0]["min"] == 0
    assert brackets[-1]["max"] is None
    assert brackets[-1]["label"] == "Over 14,000 ETB (35%)"


def test_brackets_endpoint_localises_labels(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/brackets?locale=am")

    payload = response.get_json()
    assert payload["locale"] == "am"
    assert payload["brackets"][-1]["label"] == "ከ14,000 ብር በላይ (35%)"


def test_payroll_parameters_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/payroll")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["pension_rate"] == 0.07
    assert payload["allowance_exemption"] == 600
    assert payload["solver"]["max_iterations"] == 20
    assert payload["overtime"]["hours_per_month"] == 240
    assert payload["overtime"]["default_multiplier"] == "standard"
    assert payload["overtime"]["multipliers"] == {
        "standard": 1.5,
        "holiday_night": 2.0,
        "special": 2.5,
    }


def test_exchange_rates_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/exchange-rates")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["base"] == "ETB"
    assert payload["indicative"] is True
    assert set(payload["rates"]) == {"USD", "EUR", "GBP"}
