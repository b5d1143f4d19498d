"""HTTP routes for the users resource."""

from __future__ import annotations

from typing import List, Optional

from fastapi import FastAPI, Request, Response
from pydantic import BaseModel, ConfigDict

from .errors import InvalidPath, NotFound
from .service import UserService
from .transport import (
    ALL_METHODS,
    MAX_BODY_BYTES,
    json_response,
    parse_positive_int,
    read_json,
    require_methods,
)


class CreateUserRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    name: Optional[str] = None


def split_user_path(subpath: str) -> List[str]:
    """Split the remainder of a ``/users/...`` path into its segments."""

    return subpath.strip("/").split("/")


def register_user_routes(
    app: FastAPI,
    service: UserService,
    *,
    max_body_bytes: int = MAX_BODY_BYTES,
) -> None:
    """Expose ``/users`` and its sub-resources on ``app``."""

    async def _list_users() -> Response:
        users = service.list_users()
        return json_response(
            {"items": [user.to_dict() for user in users], "count": len(users)}
        )

    async def _create_user(request: Request) -> Response:
        payload = await read_json(request, CreateUserRequest, limit=max_body_bytes)
        user = service.create_user(payload.name)
        return json_response(user.to_dict(), status_code=201)

    async def _user_item(request: Request, user_id: int) -> Response:
        require_methods(request, "GET", "DELETE")

        if request.method == "GET":
            return json_response(service.get_user(user_id).to_dict())

        service.delete_user(user_id)
        return json_response({"deleted": True, "id": user_id})

    async def _user_profile(request: Request, user_id: int) -> Response:
        require_methods(request, "GET")
        service.get_user(user_id)
        return json_response({"id": user_id, "profile": True})

    async def _user_order(request: Request, user_id: int, raw_order_id: str) -> Response:
        require_methods(request, "GET")

        order_id = raw_order_id.strip()
        if not order_id:
            raise InvalidPath("orderId is required")

        service.get_user(user_id)
        return json_response({"id": user_id, "orderId": order_id})

    @app.api_route("/users", methods=ALL_METHODS)
    async def users_collection(request: Request) -> Response:
        require_methods(request, "GET", "POST")

        if request.method == "GET":
            return await _list_users()
        return await _create_user(request)

    @app.api_route("/users/{subpath:path}", methods=ALL_METHODS)
    async def user_routes(request: Request, subpath: str) -> Response:
        if not subpath:
            raise InvalidPath("user id is required")

        parts = split_user_path(subpath)
        user_id = parse_positive_int(parts[0])

        if len(parts) == 1:
            return await _user_item(request, user_id)
        if len(parts) == 2 and parts[1] == "profile":
            return await _user_profile(request, user_id)
        if len(parts) == 3 and parts[1] == "orders":
            return await _user_order(request, user_id, parts[2])

        raise NotFound(details={"path": request.url.path})


__all__ = ["CreateUserRequest", "register_user_routes", "split_user_path"]
