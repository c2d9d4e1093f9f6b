"""Salary slip email delivery and credential diagnostics."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from ethiosalary.backend.app.http import problem_response
from ethiosalary.backend.app.services.email_service import (
    EmailConfigurationError,
    EmailDeliveryError,
    email_diagnostics,
    send_salary_slip,
)
from ethiosalary.backend.services import parse_calculation_payload

blueprint = Blueprint("email", __name__, url_prefix="/api/v1/email")


@blueprint.get("")
def get_email_diagnostics():
    """Report which mail variables are configured (booleans only)."""

    return jsonify(email_diagnostics()), 200


@blueprint.post("")
def send_email():
    payload = parse_calculation_payload(request)
    try:
        result = send_salary_slip(payload)
    except EmailConfigurationError as exc:
        return problem_response("email_not_configured", status=500, message=str(exc)).to_response()
    except EmailDeliveryError as exc:
        return problem_response("email_delivery_failed", status=500, message=str(exc)).to_response()
    return jsonify(result), 200
