"""Request parsing and response shaping helpers shared by every router."""

from __future__ import annotations

import json
import re
from typing import Any, Type, TypeVar

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from .errors import AppError, InvalidBody, InvalidPath, MethodNotAllowed

MAX_BODY_BYTES = 1 << 20

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

_SIGNED_INT = re.compile(r"([+-]?)([0-9]+)")

MAX_ID = (1 << 63) - 1
_MAX_ID_DIGITS = len(str(MAX_ID))

ModelT = TypeVar("ModelT", bound=BaseModel)


class PrettyJSONResponse(JSONResponse):
    """JSON response rendered with two-space indentation and a trailing newline."""

    def render(self, content: Any) -> bytes:
        return (json.dumps(content, ensure_ascii=False, indent=2) + "\n").encode("utf-8")


def json_response(payload: Any, status_code: int = 200) -> PrettyJSONResponse:
    return PrettyJSONResponse(content=payload, status_code=status_code)


def error_response(error: AppError) -> PrettyJSONResponse:
    return PrettyJSONResponse(
        content=error.to_response(),
        status_code=error.status,
        headers=error.headers or None,
    )


def require_methods(request: Request, *allowed: str) -> None:
    """Raise :class:`MethodNotAllowed` unless the request uses one of ``allowed``."""

    if request.method not in allowed:
        raise MethodNotAllowed(request.method, allowed)


def parse_positive_int(raw: str, *, field: str = "user id") -> int:
    """Parse a path segment as an identifier between 1 and :data:`MAX_ID`."""

    match = _SIGNED_INT.fullmatch(raw.strip())
    if match is None:
        raise InvalidPath(f"{field} must be a positive integer")

    sign, digits = match.group(1), match.group(2).lstrip("0")
    if sign == "-" or not digits or len(digits) > _MAX_ID_DIGITS or int(digits) > MAX_ID:
        raise InvalidPath(f"{field} must be a positive integer")
    return int(digits)


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    kind = first.get("type")
    if kind == "json_invalid":
        reason = str((first.get("ctx") or {}).get("error", "invalid JSON"))
        if reason.startswith("trailing characters"):
            return "unexpected extra JSON content"
        return f"malformed JSON: {reason}"
    if kind == "model_type":
        return "request body must be a JSON object"

    location = ".".join(str(part) for part in first.get("loc", ())) or "body"
    if kind == "extra_forbidden":
        return f'unknown field "{location}"'
    return f'invalid value for "{location}": {first.get("msg", "invalid value")}'


async def read_body(request: Request, *, limit: int = MAX_BODY_BYTES) -> bytes:
    """Read the request body, refusing to buffer more than ``limit`` bytes."""

    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise InvalidBody("request body too large")

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise InvalidBody("request body too large")
    return bytes(body)


async def read_json(
    request: Request,
    model: Type[ModelT],
    *,
    limit: int = MAX_BODY_BYTES,
) -> ModelT:
    """Decode exactly one JSON object from the body into ``model``.

    Oversized bodies, malformed JSON (including invalid UTF-8 and lone
    surrogate escapes), unknown fields and trailing content after the first
    JSON value are reported as :class:`InvalidBody`.
    """

    raw = await read_body(request, limit=limit)
    if not raw.strip():
        raise InvalidBody("request body must not be empty")

    try:
        return model.model_validate_json(raw)
    except ValidationError as exc:
        raise InvalidBody(_describe_validation_error(exc)) from exc
    except ValueError as exc:
        raise InvalidBody("malformed JSON: number out of range") from exc


__all__ = [
    "ALL_METHODS",
    "MAX_BODY_BYTES",
    "MAX_ID",
    "PrettyJSONResponse",
    "error_response",
    "json_response",
    "parse_positive_int",
    "read_body",
    "read_json",
    "require_methods",
]
