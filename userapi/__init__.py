"""In-memory users service with JSON routing and validation."""

from __future__ import annotations

from typing import Any

from .models import User
from .service import UserService
from .store import UserStore


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the users service application."""

    from .application import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "User",
    "UserService",
    "UserStore",
    "create_app",
]
