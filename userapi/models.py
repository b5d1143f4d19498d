"""Domain models for the users service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict


def format_timestamp(value: datetime) -> str:
    """Render ``value`` as an RFC 3339 UTC timestamp with a ``Z`` suffix."""

    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class User:
    """Represents a user record held by the entity store."""

    id: int
    name: str
    created_at: datetime

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": format_timestamp(self.created_at),
        }


__all__ = ["User", "format_timestamp"]
