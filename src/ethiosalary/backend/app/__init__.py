"""Application factory for the Ethiopian salary calculator API."""

import os
from importlib import util as importlib_util
from typing import Callable, cast
from warnings import warn

from flask import Flask, Response, jsonify, request
from flask.typing import ResponseReturnValue
from werkzeug.exceptions import BadRequest

from .http import problem_response, validation_problem

CORS: Callable[..., None] | None

if importlib_util.find_spec("flask_cors") is not None:
    from flask_cors import CORS as _cors

    CORS = cast(Callable[..., None], _cors)
else:  # pragma: no cover - executed only when optional dependency missing
    CORS = None

ALLOWED_ORIGINS_ENV = "ETHIOSALARY_ALLOWED_ORIGINS"
_CORS_HEADERS = (
    "Access-Control-Allow-Origin",
    "Access-Control-Allow-Credentials",
    "Access-Control-Allow-Headers",
    "Access-Control-Allow-Methods",
)


def _parse_allowed_origins(raw: str | None) -> set[str]:
    """Convert an environment variable into a normalised set of origins."""

    if not raw:
        return set()

    return {origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()}


def _apply_default_cors_headers(
    response: ResponseReturnValue,
    allowed_origins: set[str],
) -> ResponseReturnValue:
    """Attach CORS headers for allowed origins when Flask-Cors is unavailable."""

    if not isinstance(response, Response):
        return response

    origin = request.headers.get("Origin")
    if origin and origin in allowed_origins and request.path.startswith("/api/"):
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers.add("Vary", "Origin")
        response.headers["Access-Control-Allow-Credentials"] = "false"
        response.headers["Access-Control-Allow-Headers"] = request.headers.get(
            "Access-Control-Request-Headers",
            "Content-Type",
        )
        response.headers["Access-Control-Allow-Methods"] = "GET, OPTIONS, POST"
        return response

    for header in _CORS_HEADERS:
        response.headers.pop(header, None)

    if origin and request.method == "OPTIONS":
        response.status_code = 403

    return response


def _configure_cors(app: Flask, allowed_origins: set[str]) -> None:
    if CORS is not None:
        CORS(
            app,
            resources={r"/api/*": {"origins": sorted(allowed_origins)}},
            supports_credentials=False,
            methods=["GET", "OPTIONS", "POST"],
            allow_headers=["Content-Type"],
        )
        return

    warn(
        "Flask-Cors is not installed; falling back to a minimal CORS implementation. "
        "Install the 'cors' extra for production use.",
        stacklevel=2,
    )

    @app.before_request
    def _handle_preflight() -> ResponseReturnValue | None:
        if request.method != "OPTIONS":
            return None
        origin = request.headers.get("Origin")
        if origin and origin not in allowed_origins:
            response = app.make_response(("", 403))
        else:
            response = app.make_default_options_response()
        return _apply_default_cors_headers(response, allowed_origins)

    @app.after_request
    def _attach_cors_headers(response: ResponseReturnValue) -> ResponseReturnValue:
        return _apply_default_cors_headers(response, allowed_origins)


def create_app() -> Flask:
    """Create and configure the Flask application instance."""

    # Blueprints pull in the calculators, which import ``app.models``; import
    # them only once this package has finished initialising.
    from .routes import register_routes
    from .routes.config import get_configuration_metadata

    app = Flask(__name__)
    app.json.ensure_ascii = False

    allowed_origins = _parse_allowed_origins(os.getenv(ALLOWED_ORIGINS_ENV))
    if not allowed_origins:
        warn(
            "No allowed origins configured; cross-origin requests will be rejected.",
            stacklevel=2,
        )

    _configure_cors(app, allowed_origins)
    register_routes(app)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        payload = {"status": "ok", **get_configuration_metadata()}
        return jsonify(payload)

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest):
        """Return consistent JSON responses for malformed payloads."""

        message = error.description or "Invalid request"
        return problem_response("bad_request", status=400, message=message).to_response()

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        """Surface domain validation errors to clients as 400 problems."""

        return validation_problem(str(error)).to_response()

    return app


__all__ = ["create_app"]
