"""Error taxonomy shared by the service and HTTP layers."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional


class AppError(Exception):
    """Base class for failures that map onto a structured JSON error response."""

    status: int = 500
    code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        details: object = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.headers = dict(headers or {})

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_response(self) -> Dict[str, object]:
        payload: Dict[str, object] = {"error": self.code, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationFailed(AppError):
    """Caller-supplied data failed a precondition."""

    status = 400
    code = "validation_failed"

    def __init__(self, problems: Iterable[str], message: str = "missing required fields") -> None:
        super().__init__(message, details=list(problems))


class NotFound(AppError):
    status = 404
    code = "not_found"

    def __init__(self, message: str = "resource not found", *, details: object = None) -> None:
        super().__init__(message, details=details)


class InvalidPath(AppError):
    """A URL path segment could not be parsed into the expected type."""

    status = 400
    code = "invalid_path"


class InvalidBody(AppError):
    """The request body was oversized, malformed or carried unexpected content."""

    status = 400
    code = "invalid_json"


class MethodNotAllowed(AppError):
    status = 405
    code = "method_not_allowed"

    def __init__(self, method: str, allowed: Iterable[str]) -> None:
        allow: List[str] = list(allowed)
        super().__init__(
            "method not allowed",
            details={"method": method, "allow": allow},
            headers={"Allow": ", ".join(allow)},
        )
        self.method = method
        self.allowed = allow


class InternalError(AppError):
    status = 500
    code = "internal_error"

    def __init__(self, message: str = "unexpected error") -> None:
        super().__init__(message)


__all__ = [
    "AppError",
    "InternalError",
    "InvalidBody",
    "InvalidPath",
    "MethodNotAllowed",
    "NotFound",
    "ValidationFailed",
]
