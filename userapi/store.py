"""In-memory entity store for user records."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator, List, Optional

from .models import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _ReadWriteLock:
    """Readers-writer lock: many concurrent readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            # Pending writers block new readers.
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class UserStore:
    """Thread-safe, memory-resident collection of :class:`User` records.

    Identifiers start at 1 and increase by one for every call to
    :meth:`create`. They are never reused, even after the record that held
    them has been deleted.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = _ReadWriteLock()
        self._next_id = 1
        self._items: Dict[int, User] = {}

    def create(self, name: str) -> User:
        with self._lock.write():
            user = User(id=self._next_id, name=name, created_at=self._clock())
            self._items[user.id] = user
            self._next_id += 1
        return user

    def get(self, user_id: int) -> Optional[User]:
        with self._lock.read():
            return self._items.get(user_id)

    def delete(self, user_id: int) -> bool:
        with self._lock.write():
            return self._items.pop(user_id, None) is not None

    def list(self) -> List[User]:
        with self._lock.read():
            return list(self._items.values())

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._items)


__all__ = ["UserStore"]
