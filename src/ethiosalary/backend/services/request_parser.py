"""Helpers for normalising incoming calculation requests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest

from ethiosalary.backend.app.localization import (
    locale_from_accept_language,
    normalise_locale,
)


def resolve_request_locale(req: Request, payload: Mapping[str, Any] | None = None) -> str:
    """Return the locale hinted by ``payload``, the query string or headers."""

    if payload is not None:
        locale = payload.get("locale")
        if isinstance(locale, str) and locale.strip():
            return normalise_locale(locale)

    locale_param = req.args.get("locale")
    if locale_param:
        return normalise_locale(locale_param)

    header_locale = locale_from_accept_language(req.accept_languages)
    return normalise_locale(header_locale)


def parse_calculation_payload(req: Request) -> dict[str, Any]:
    """Extract and validate a JSON payload from ``req``."""

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    payload = dict(data)
    payload["locale"] = resolve_request_locale(req, payload)

    return payload
