"""HTTP client for talking to a running users service."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

import httpx

from .models import User


class ServiceError(Exception):
    """Raised when the users service answers with an error envelope."""

    def __init__(self, status_code: int, code: str, message: str) -> None:
        super().__init__(f"{code}: {message} (HTTP {status_code})")
        self.status_code = status_code
        self.code = code
        self.message = message


def _normalize_base_url(base_url: str) -> str:
    cleaned = (base_url or "").strip()
    if not cleaned:
        raise ValueError("Service base URL must not be empty")
    return cleaned.rstrip("/")


def _parse_timestamp(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _user_from_payload(payload: object) -> User:
    if not isinstance(payload, dict):
        raise ServiceError(200, "invalid_response", "expected a user object")
    try:
        return User(
            id=int(payload["id"]),
            name=str(payload["name"]),
            created_at=_parse_timestamp(str(payload["createdAt"])),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ServiceError(200, "invalid_response", "user payload was missing required fields") from exc


class UsersClient:
    """Thin wrapper over :mod:`httpx` exposing the ``/users`` endpoints."""

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        *,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ) -> None:
        if client is None:
            client = httpx.Client(base_url=_normalize_base_url(base_url), timeout=timeout)
            self._owns_client = True
        else:
            self._owns_client = False
        self._client = client

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "UsersClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> object:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:  # pragma: no cover - network failure
            raise ServiceError(0, "connection_error", f"Failed to contact users service: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400:
            code = "http_error"
            message = f"request failed with status {response.status_code}"
            if isinstance(payload, dict):
                code = str(payload.get("error") or code)
                message = str(payload.get("message") or message)
            raise ServiceError(response.status_code, code, message)

        if payload is None:
            raise ServiceError(response.status_code, "invalid_response", "service returned invalid JSON")
        return payload

    def list_users(self) -> List[User]:
        payload = self._request("GET", "/users")
        if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
            raise ServiceError(200, "invalid_response", "expected a user listing")
        return [_user_from_payload(item) for item in payload["items"]]

    def get_user(self, user_id: int) -> User:
        return _user_from_payload(self._request("GET", f"/users/{user_id}"))

    def create_user(self, name: str) -> User:
        return _user_from_payload(self._request("POST", "/users", json={"name": name}))

    def delete_user(self, user_id: int) -> None:
        self._request("DELETE", f"/users/{user_id}")


__all__ = ["ServiceError", "UsersClient"]
