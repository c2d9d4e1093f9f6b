"""Send salary slip emails over SMTP.

Credentials come from the environment so deployments can reuse a Gmail app
password. ``SMTP_USER``/``SMTP_APP_PASSWORD`` take precedence over the legacy
``GMAIL_USER``/``GMAIL_PASS`` names. Messages are delivered with implicit TLS
(``smtplib.SMTP_SSL``) to ``SMTP_HOST:SMTP_PORT``.
"""

from __future__ import annotations

import html
import logging
import os
import re
import smtplib
import ssl
from dataclasses import dataclass
from datetime import date
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from ethiosalary.backend.app.localization import get_translator
from ethiosalary.backend.app.models import EmailRequest, format_validation_error
from ethiosalary.backend.services import compute_salary
from ethiosalary.backend.services.calculators import format_currency, format_percentage

_LOGGER = logging.getLogger(__name__)

TEMPLATE_PATH = Path(__file__).resolve().parents[1] / "templates" / "salary_slip.html"
SENDER_NAME = "Ethiopian Salary Calculator"
DEFAULT_SMTP_HOST = "smtp.gmail.com"
DEFAULT_SMTP_PORT = 465

_PLACEHOLDER = re.compile(r"{{\s*(\w+)\s*}}")
_DIAGNOSTIC_ENV_VARS = (
    "GMAIL_USER",
    "GMAIL_PASS",
    "SMTP_USER",
    "SMTP_APP_PASSWORD",
    "MAIL_FROM",
)


class EmailConfigurationError(RuntimeError):
    """Raised when SMTP credentials are missing or malformed."""


class EmailDeliveryError(RuntimeError):
    """Raised when the SMTP server rejects or fails to accept a message."""


@dataclass(frozen=True)
class EmailSettings:
    host: str
    port: int
    user: str
    password: str
    sender: str


def load_email_settings(environ: Mapping[str, str] | None = None) -> EmailSettings:
    """Resolve SMTP settings from ``environ`` (``os.environ`` by default)."""

    env = os.environ if environ is None else environ

    user = (env.get("SMTP_USER") or env.get("GMAIL_USER") or "").strip()
    # App passwords are often pasted with the grouping spaces Google shows.
    password = re.sub(r"\s+", "", env.get("SMTP_APP_PASSWORD") or env.get("GMAIL_PASS") or "")
    if not user or not password:
        raise EmailConfigurationError("Email credentials are not configured")

    host = (env.get("SMTP_HOST") or DEFAULT_SMTP_HOST).strip()
    raw_port = (env.get("SMTP_PORT") or "").strip()
    try:
        port = int(raw_port) if raw_port else DEFAULT_SMTP_PORT
    except ValueError as exc:
        raise EmailConfigurationError(f"SMTP_PORT must be an integer, got '{raw_port}'") from exc

    sender = (env.get("MAIL_FROM") or "").strip() or user
    return EmailSettings(host=host, port=port, user=user, password=password, sender=sender)


def email_diagnostics(environ: Mapping[str, str] | None = None) -> dict[str, bool]:
    """Report which mail variables are set without revealing their values."""

    env = os.environ if environ is None else environ
    return {name: bool(env.get(name)) for name in _DIAGNOSTIC_ENV_VARS}


def default_variables(locale: str | None = None, *, today: date | None = None) -> dict[str, str]:
    translator = get_translator(locale)
    issued = today or date.today()
    return {
        "companyName": SENDER_NAME,
        "userName": translator("email.customer"),
        "invoiceDate": issued.strftime("%m/%d/%Y"),
        "grossSalary": format_currency(0),
        "totalAllowances": format_currency(0),
        "incomeTax": format_currency(0),
        "pension": format_currency(0),
        "netSalary": format_currency(0),
        "effectiveTaxRate": format_percentage(0, 1),
        "marginalTaxRate": format_percentage(0, 0),
    }


def calculation_variables(payload: Mapping[str, Any]) -> dict[str, str]:
    """Return template variables describing the calculation in ``payload``."""

    calculation = compute_salary(payload).calculation
    return {
        "grossSalary": format_currency(calculation.gross_salary),
        "totalAllowances": format_currency(calculation.total_allowances),
        "incomeTax": format_currency(calculation.income_tax),
        "pension": format_currency(calculation.pension_contribution),
        "netSalary": format_currency(calculation.net_salary),
        "effectiveTaxRate": format_percentage(calculation.effective_tax_rate, 1),
        "marginalTaxRate": format_percentage(calculation.marginal_tax_rate, 0),
    }


def interpolate_template(template: str, variables: Mapping[str, Any]) -> str:
    """Substitute ``{{ key }}`` placeholders; unknown keys become empty strings."""

    def _replace(match: re.Match[str]) -> str:
        value = variables.get(match.group(1))
        if value is None:
            return ""
        return html.escape(str(value))

    return _PLACEHOLDER.sub(_replace, template)


def load_template() -> str:
    return TEMPLATE_PATH.read_text(encoding="utf-8")


def build_message(request: EmailRequest, settings: EmailSettings) -> EmailMessage:
    """Compose the HTML message for ``request``."""

    body = request.html
    if not body:
        variables: dict[str, Any] = default_variables(request.locale)
        if request.calculation is not None:
            variables.update(calculation_variables(request.calculation.model_dump()))
        variables.update(request.variables)
        body = interpolate_template(load_template(), variables)

    message = EmailMessage()
    message["Subject"] = request.subject
    message["From"] = formataddr((SENDER_NAME, settings.sender))
    message["To"] = request.to
    message["Message-ID"] = make_msgid(domain=settings.sender.rpartition("@")[2] or None)
    message.set_content("This message contains an HTML salary slip.")
    message.add_alternative(body, subtype="html")
    return message


def send_salary_slip(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Validate ``payload`` and deliver the salary slip email.

    Raises ``ValueError`` for an invalid payload, :class:`EmailConfigurationError`
    when credentials are missing and :class:`EmailDeliveryError` when the SMTP
    exchange fails.
    """

    try:
        request = EmailRequest.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc

    settings = load_email_settings()
    message = build_message(request, settings)

    try:
        with smtplib.SMTP_SSL(
            settings.host, settings.port, context=ssl.create_default_context(), timeout=30
        ) as client:
            client.login(settings.user, settings.password)
            client.send_message(message)
    except (smtplib.SMTPException, OSError) as exc:
        _LOGGER.exception("Failed to send salary slip email via %s:%s", settings.host, settings.port)
        raise EmailDeliveryError("Failed to send email") from exc

    _LOGGER.info("Salary slip email sent (message id %s)", message["Message-ID"])
    return {"ok": True, "message_id": message["Message-ID"]}


__all__ = [
    "DEFAULT_SMTP_HOST",
    "DEFAULT_SMTP_PORT",
    "EmailConfigurationError",
    "EmailDeliveryError",
    "EmailSettings",
    "build_message",
    "calculation_variables",
    "default_variables",
    "email_diagnostics",
    "interpolate_template",
    "load_email_settings",
    "load_template",
    "send_salary_slip",
]
