"""Currency conversion endpoint backed by the configured indicative rates."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from ethiosalary.backend.services import (
    build_calculation_response,
    convert_amount,
    parse_calculation_payload,
)

blueprint = Blueprint("conversions", __name__, url_prefix="/api/v1/conversions")


@blueprint.post("")
def create_conversion() -> tuple[Any, int]:
    """Convert an ETB amount into the requested foreign currency."""

    payload = parse_calculation_payload(request)
    return build_calculation_response(convert_amount(payload))
