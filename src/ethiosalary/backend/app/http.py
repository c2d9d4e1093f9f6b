"""HTTP helper utilities shared across Flask blueprints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from flask import jsonify

_PAYLOAD_PREFIX = "Invalid calculation payload: "


@dataclass(frozen=True)
class ProblemResponse:
    """Lightweight representation of an RFC 7807-style error payload."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return the serialisable payload for this problem response."""

        payload: dict[str, Any] = {"error": self.error, "status": self.status}
        if self.message:
            payload["message"] = self.message
        if self.extra:
            payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    """Convenience factory mirroring Flask's ``jsonify`` interface."""

    additional: Mapping[str, Any] | None = extra or None
    return ProblemResponse(error=error, status=status, message=message, extra=additional)


def validation_problem(message: str) -> ProblemResponse:
    """Return a 400 problem, listing each field issue when the message has several."""

    if not message.startswith(_PAYLOAD_PREFIX):
        return problem_response("validation_error", status=400, message=message)

    issues = [part.strip() for part in message[len(_PAYLOAD_PREFIX):].split("; ")]
    return problem_response(
        "validation_error",
        status=400,
        message=message,
        issues=[issue for issue in issues if issue],
    )


__all__ = ["ProblemResponse", "problem_response", "validation_problem"]
