"""Stateless salary slip exports."""

from __future__ import annotations

from flask import Blueprint, Response, request

from ethiosalary.backend.app.http import problem_response
from ethiosalary.backend.app.services.payslip_service import PAYSLIP_FORMATS, export_payslip
from ethiosalary.backend.services import parse_calculation_payload

blueprint = Blueprint("payslips", __name__, url_prefix="/api/v1/payslips")


@blueprint.post("/<fmt>")
def create_payslip(fmt: str):
    """Render the submitted salary profile as a downloadable slip."""

    fmt = fmt.lower()
    if fmt not in PAYSLIP_FORMATS:
        return problem_response(
            "not_found",
            status=404,
            message=f"Unsupported payslip format '{fmt}'",
            supported_formats=sorted(PAYSLIP_FORMATS),
        ).to_response()

    payload = parse_calculation_payload(request)
    rendered = export_payslip(payload, fmt)

    response = Response(rendered.body, mimetype=rendered.mimetype)
    disposition = "inline" if fmt in {"text", "html"} else "attachment"
    response.headers["Content-Disposition"] = f'{disposition}; filename="{rendered.filename}"'
    return response
