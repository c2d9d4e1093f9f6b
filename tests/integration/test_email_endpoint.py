"""Integration tests for the salary slip email endpoint."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

import pytest
from flask.testing import FlaskClient

from ethiosalary.backend.app.services import email_service

CREDENTIAL_VARS = ("SMTP_USER", "GMAIL_USER", "SMTP_APP_PASSWORD", "GMAIL_PASS", "MAIL_FROM")


class RecordingSMTP:
    sent: list[Any] = []

    def __init__(self, host: str, port: int, **kwargs: Any) -> None:
        self.host = host
        self.port = port

    def __enter__(self) -> "RecordingSMTP":
        return self

    def __exit__(self, *exc_info: object) -> bool:
        return False

    def login(self, user: str, password: str) -> None:
        return None

    def send_message(self, message: Any) -> None:
        RecordingSMTP.sent.append(message)


@pytest.fixture(autouse=True)
def _clear_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)
    RecordingSMTP.sent = []


def test_diagnostics_only_report_booleans(
    client: FlaskClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("GMAIL_USER", "payroll@example.com")

    response = client.get("/api/v1/email")

    assert response.status_code == HTTPStatus.OK
    assert response.get_json() == {
        "GMAIL_USER": True,
        "GMAIL_PASS": False,
        "SMTP_USER": False,
        "SMTP_APP_PASSWORD": False,
        "MAIL_FROM": False,
    }


def test_missing_credentials_are_reported(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/email",
        json={"to": "employee@example.com", "subject": "Salary slip"},
    )

    assert response.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert response.get_json()["error"] == "email_not_configured"


def test_invalid_recipient_is_rejected(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/email",
        json={"to": "not-an-address", "subject": "Salary slip"},
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["issues"][0].startswith("to:")


def test_email_is_sent_with_calculation(
    client: FlaskClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SMTP_USER", "payroll@example.com")
    monkeypatch.setenv("SMTP_APP_PASSWORD", "abcd efgh ijkl mnop")
    monkeypatch.setattr(email_service.smtplib, "SMTP_SSL", RecordingSMTP)

    response = client.post(
        "/api/v1/email",
        json={
            "to": "employee@example.com",
            "subject": "Salary slip",
            "calculation": {"gross_salary": 5000},
        },
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["ok"] is True
    assert payload["message_id"]
    assert len(RecordingSMTP.sent) == 1
    html_part = RecordingSMTP.sent[0].get_body(preferencelist=("html",))
    assert "ETB 4,150.00" in html_part.get_content()
