"""Unit tests for salary slip email delivery."""

from __future__ import annotations

import logging
import smtplib
from typing import Any

import pytest

from ethiosalary.backend.app.services import email_service
from ethiosalary.backend.app.services.email_service import (
    EmailConfigurationError,
    EmailDeliveryError,
    email_diagnostics,
    load_email_settings,
    interpolate_template,
    send_salary_slip,
)

CREDENTIAL_VARS = ("SMTP_USER", "GMAIL_USER", "SMTP_APP_PASSWORD", "GMAIL_PASS", "MAIL_FROM")


class FakeSMTP:
    """Records SMTP_SSL usage instead of opening a connection."""

    instances: list["FakeSMTP"] = []
    fail_login = False

    def __init__(self, host: str, port: int, **kwargs: Any) -> None:
        self.host = host
        self.port = port
        self.credentials: tuple[str, str] | None = None
        self.messages: list[Any] = []
        FakeSMTP.instances.append(self)

    def __enter__(self) -> "FakeSMTP":
        return self

    def __exit__(self, *exc_info: object) -> bool:
        return False

    def login(self, user: str, password: str) -> None:
        if FakeSMTP.fail_login:
            raise smtplib.SMTPAuthenticationError(535, b"rejected")
        self.credentials = (user, password)

    def send_message(self, message: Any) -> None:
        self.messages.append(message)


@pytest.fixture()
def smtp(monkeypatch: pytest.MonkeyPatch) -> type[FakeSMTP]:
    for name in CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SMTP_USER", "payroll@example.com")
    monkeypatch.setenv("SMTP_APP_PASSWORD", "abcd efgh ijkl mnop")
    FakeSMTP.instances = []
    FakeSMTP.fail_login = False
    monkeypatch.setattr(email_service.smtplib, "SMTP_SSL", FakeSMTP)
    return FakeSMTP


def _html_body(message: Any) -> str:
    return message.get_body(preferencelist=("html",)).get_content()


def test_settings_strip_whitespace_and_use_gmail_defaults() -> None:
    settings = load_email_settings(
        {"GMAIL_USER": " me@example.com ", "GMAIL_PASS": "abcd efgh\tijkl mnop"}
    )

    assert settings.user == "me@example.com"
    assert settings.password == "abcdefghijklmnop"
    assert settings.host == "smtp.gmail.com"
    assert settings.port == 465
    assert settings.sender == "me@example.com"


def test_smtp_variables_take_precedence() -> None:
    settings = load_email_settings(
        {
            "SMTP_USER": "smtp@example.com",
            "GMAIL_USER": "gmail@example.com",
            "SMTP_APP_PASSWORD": "secret",
            "GMAIL_PASS": "other",
            "MAIL_FROM": "noreply@example.com",
            "SMTP_HOST": "mail.example.com",
            "SMTP_PORT": "2465",
        }
    )

    assert (settings.user, settings.password) == ("smtp@example.com", "secret")
    assert settings.sender == "noreply@example.com"
    assert (settings.host, settings.port) == ("mail.example.com", 2465)


@pytest.mark.parametrize(
    "environ",
    [{}, {"SMTP_USER": "a@example.com"}, {"SMTP_APP_PASSWORD": "secret"}],
)
def test_missing_credentials_raise(environ: dict[str, str]) -> None:
    with pytest.raises(EmailConfigurationError, match="not configured"):
        load_email_settings(environ)


def test_invalid_port_raises() -> None:
    with pytest.raises(EmailConfigurationError, match="SMTP_PORT"):
        load_email_settings({"SMTP_USER": "a@example.com", "SMTP_APP_PASSWORD": "x", "SMTP_PORT": "ssl"})


def test_diagnostics_only_report_booleans() -> None:
    report = email_diagnostics({"GMAIL_USER": "me@example.com", "GMAIL_PASS": "secret"})

    assert report == {
        "GMAIL_USER": True,
        "GMAIL_PASS": True,
        "SMTP_USER": False,
        "SMTP_APP_PASSWORD": False,
        "MAIL_FROM": False,
    }


def test_interpolate_template_escapes_and_blanks_unknown_keys() -> None:
    rendered = interpolate_template("Hi {{ name }}!{{missing}} {{name}}", {"name": "<Abebe>"})

    assert rendered == "Hi &lt;Abebe&gt;! &lt;Abebe&gt;"


def test_send_uses_template_and_calculation(smtp: type[FakeSMTP]) -> None:
    result = send_salary_slip(
        {
            "to": "employee@example.com",
            "subject": "Your salary slip",
            "variables": {"userName": "Almaz"},
            "calculation": {"gross_salary": 5000, "housing": {"amount": 1000, "taxable": True}},
        }
    )

    assert result["ok"] is True
    client = smtp.instances[0]
    assert (client.host, client.port) == ("smtp.gmail.com", 465)
    assert client.credentials == ("payroll@example.com", "abcdefghijklmnop")

    message = client.messages[0]
    assert message["To"] == "employee@example.com"
    assert message["Subject"] == "Your salary slip"
    assert "Ethiopian Salary Calculator" in message["From"]
    body = _html_body(message)
    assert "Hello Almaz," in body
    assert "ETB 5,070.00" in body
    assert "{{" not in body


def test_send_uses_template_defaults(smtp: type[FakeSMTP]) -> None:
    send_salary_slip({"to": "employee@example.com", "subject": "Slip", "locale": "am"})

    body = _html_body(smtp.instances[0].messages[0])
    assert "ETB 0.00" in body
    assert "ደንበኛ" in body


def test_caller_html_overrides_template(smtp: type[FakeSMTP]) -> None:
    send_salary_slip({"to": "employee@example.com", "subject": "Slip", "html": "<p>Custom</p>"})

    assert _html_body(smtp.instances[0].messages[0]).strip() == "<p>Custom</p>"


def test_invalid_recipient_is_a_validation_error(smtp: type[FakeSMTP]) -> None:
    with pytest.raises(ValueError, match="valid email address"):
        send_salary_slip({"to": "not-an-email", "subject": "Slip"})

    assert smtp.instances == []


def test_delivery_failures_are_logged_and_wrapped(
    smtp: type[FakeSMTP], caplog: pytest.LogCaptureFixture
) -> None:
    smtp.fail_login = True
    caplog.set_level(logging.ERROR, logger="ethiosalary.backend.app.services.email_service")

    with pytest.raises(EmailDeliveryError):
        send_salary_slip({"to": "employee@example.com", "subject": "Slip"})

    assert any("Failed to send salary slip email" in r.getMessage() for r in caplog.records)
