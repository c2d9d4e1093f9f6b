"""Unit tests for calculation request parsing helpers."""

from __future__ import annotations

import pytest
from flask import Flask, request
from werkzeug.exceptions import BadRequest

from ethiosalary.backend.services.request_parser import (
    parse_calculation_payload,
    resolve_request_locale,
)


def test_parse_payload_uses_accept_language(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations",
        method="POST",
        json={"gross_salary": 5000},
        headers={"Accept-Language": "am-ET,en;q=0.8"},
    ):
        payload = parse_calculation_payload(request)

    assert payload == {"gross_salary": 5000, "locale": "am"}


def test_parse_payload_prefers_explicit_locale(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations?locale=en",
        method="POST",
        json={"gross_salary": 5000, "locale": "Amharic"},
        headers={"Accept-Language": "en"},
    ):
        payload = parse_calculation_payload(request)

    assert payload["locale"] == "am"


def test_query_string_locale_beats_header(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations?locale=am",
        method="POST",
        json={"gross_salary": 5000},
        headers={"Accept-Language": "en"},
    ):
        payload = parse_calculation_payload(request)

    assert payload["locale"] == "am"


def test_unsupported_locale_falls_back_to_english(app: Flask) -> None:
    with app.test_request_context("/", headers={"Accept-Language": "fr-FR,de;q=0.5"}):
        assert resolve_request_locale(request) == "en"


def test_parse_payload_rejects_non_object(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations",
        method="POST",
        json=["not", "an", "object"],
    ):
        with pytest.raises(BadRequest):
            parse_calculation_payload(request)


def test_parse_payload_rejects_invalid_json(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations",
        method="POST",
        data="{not json",
        content_type="application/json",
    ):
        with pytest.raises(BadRequest, match="valid JSON"):
            parse_calculation_payload(request)
