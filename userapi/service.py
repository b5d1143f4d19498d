"""Validation and domain outcomes on top of the user store."""

from __future__ import annotations

import logging
from typing import List, Optional

from .errors import NotFound, ValidationFailed
from .models import User
from .store import UserStore

logger = logging.getLogger("userapi.service")


class UserService:
    """Validate input before delegating to :class:`UserStore`."""

    def __init__(self, store: UserStore) -> None:
        self._store = store

    @property
    def store(self) -> UserStore:
        return self._store

    def create_user(self, name: Optional[str]) -> User:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationFailed(["name is required"])

        user = self._store.create(cleaned)
        logger.info("Created user %s (%s)", user.id, user.name)
        return user

    def get_user(self, user_id: int) -> User:
        user = self._store.get(user_id)
        if user is None:
            raise NotFound()
        return user

    def delete_user(self, user_id: int) -> None:
        if not self._store.delete(user_id):
            raise NotFound()
        logger.info("Deleted user %s", user_id)

    def list_users(self) -> List[User]:
        return self._store.list()


__all__ = ["UserService"]
