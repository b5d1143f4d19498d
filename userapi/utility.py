"""Stateless helper endpoints served next to the users resource."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, List, Optional

from fastapi import FastAPI, Request, Response
from pydantic import BaseModel, ConfigDict, Field

from .errors import ValidationFailed
from .transport import ALL_METHODS, MAX_BODY_BYTES, json_response, read_json, require_methods

MIN_OPERAND = -(1 << 63)
MAX_OPERAND = (1 << 63) - 1

ROUTES = [
    "GET /health",
    "GET /time",
    "GET /echo?name=",
    "POST /sum",
    "POST /mul",
    "GET /users",
    "POST /users",
    "GET /users/{id}",
    "DELETE /users/{id}",
    "GET /users/{id}/profile",
    "GET /users/{id}/orders/{orderId}",
]


class OperandsRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    a: Optional[int] = Field(default=None, ge=MIN_OPERAND, le=MAX_OPERAND)
    b: Optional[int] = Field(default=None, ge=MIN_OPERAND, le=MAX_OPERAND)

    def require_operands(self) -> tuple[int, int]:
        problems: List[str] = []
        if self.a is None:
            problems.append("a is required")
        if self.b is None:
            problems.append("b is required")
        if problems:
            raise ValidationFailed(problems)
        return self.a, self.b  # type: ignore[return-value]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def register_utility_routes(
    app: FastAPI,
    *,
    service_name: str,
    max_body_bytes: int = MAX_BODY_BYTES,
    clock: Callable[[], datetime] = _utcnow,
) -> None:
    """Expose the banner, health, time, echo and arithmetic endpoints."""

    @app.api_route("/", methods=ALL_METHODS)
    async def banner(request: Request) -> Response:
        require_methods(request, "GET")
        return json_response({"service": service_name, "routes": ROUTES})

    @app.api_route("/health", methods=ALL_METHODS)
    async def healthcheck(request: Request) -> Response:
        require_methods(request, "GET")
        return json_response({"status": "ok"})

    @app.api_route("/time", methods=ALL_METHODS)
    async def current_time(request: Request) -> Response:
        require_methods(request, "GET")
        now = clock().astimezone(timezone.utc).replace(microsecond=0)
        return json_response({"time": now.strftime("%Y-%m-%dT%H:%M:%SZ")})

    @app.api_route("/echo", methods=ALL_METHODS)
    async def echo(request: Request) -> Response:
        require_methods(request, "GET")
        name = request.query_params.get("name", "").strip()
        if not name:
            raise ValidationFailed(["name is required"])
        return json_response({"name": name})

    @app.api_route("/sum", methods=ALL_METHODS)
    async def add(request: Request) -> Response:
        require_methods(request, "POST")
        payload = await read_json(request, OperandsRequest, limit=max_body_bytes)
        a, b = payload.require_operands()
        return json_response({"result": a + b})

    @app.api_route("/mul", methods=ALL_METHODS)
    async def multiply(request: Request) -> Response:
        require_methods(request, "POST")
        payload = await read_json(request, OperandsRequest, limit=max_body_bytes)
        a, b = payload.require_operands()
        return json_response({"result": a * b})


__all__ = ["MAX_OPERAND", "MIN_OPERAND", "OperandsRequest", "ROUTES", "register_utility_routes"]
