"""Application factory wiring the store, service and routers together."""
from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import ServerConfig
from .errors import AppError, InternalError, NotFound
from .service import UserService
from .store import UserStore
from .transport import PrettyJSONResponse, error_response
from .users import register_user_routes
from .utility import register_utility_routes

logger = logging.getLogger("userapi.application")

_HTTP_ERROR_CODES = {404: "not_found", 405: "method_not_allowed"}


def _register_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"

        start = time.perf_counter()
        logger.info("IN  %s %s", request.method, target)
        try:
            return await call_next(request)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info("OUT %s %s (%.3fms)", request.method, target, elapsed_ms)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> PrettyJSONResponse:
        logger.debug("%s %s failed: %s", request.method, request.url.path, exc)
        return error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> PrettyJSONResponse:
        if exc.status_code == 404:
            return error_response(NotFound(details={"path": request.url.path}))

        payload = {
            "error": _HTTP_ERROR_CODES.get(exc.status_code, "http_error"),
            "message": str(exc.detail).lower(),
        }
        return PrettyJSONResponse(
            content=payload,
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> PrettyJSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(InternalError())


def create_app(
    *,
    store: UserStore | None = None,
    service: UserService | None = None,
    config: ServerConfig | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application for the users service."""

    settings = config or ServerConfig()
    if service is None:
        service = UserService(store if store is not None else UserStore())
    elif store is not None and service.store is not store:
        raise ValueError("store and service must share the same UserStore instance")

    app = FastAPI(
        title="Users API",
        version="0.1.0",
        description="In-memory users resource with JSON validation and routing.",
        default_response_class=PrettyJSONResponse,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.service = service
    app.state.store = service.store
    app.state.config = settings

    _register_request_logging(app)
    _register_error_handlers(app)

    register_utility_routes(
        app,
        service_name=settings.service_name,
        max_body_bytes=settings.max_body_bytes,
    )
    register_user_routes(app, service, max_body_bytes=settings.max_body_bytes)

    return app


__all__ = ["create_app"]
