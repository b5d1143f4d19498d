from __future__ import annotations

import sys
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from userapi.store import UserStore


class _FixedClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


@pytest.fixture()
def store() -> UserStore:
    return UserStore(clock=_FixedClock())


def test_create_assigns_sequential_ids_starting_at_one(store: UserStore) -> None:
    first = store.create("Ada")
    second = store.create("Grace")

    assert first.id == 1
    assert second.id == 2
    assert first.created_at == datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert second.created_at.tzinfo == timezone.utc


def test_get_returns_the_created_record(store: UserStore) -> None:
    created = store.create("Ada")

    fetched = store.get(created.id)

    assert fetched == created
    assert store.get(created.id + 1) is None


def test_delete_succeeds_exactly_once(store: UserStore) -> None:
    user = store.create("Ada")

    assert store.delete(user.id) is True
    assert store.delete(user.id) is False
    assert store.get(user.id) is None
    assert store.delete(999) is False


def test_ids_are_not_reused_after_delete(store: UserStore) -> None:
    first = store.create("Ada")
    store.delete(first.id)

    second = store.create("Grace")

    assert second.id == 2


def test_list_contains_every_record_once(store: UserStore) -> None:
    created = [store.create(f"user-{index}") for index in range(5)]

    listed = store.list()

    assert len(listed) == 5
    assert len(store) == 5
    assert {user.id for user in listed} == {user.id for user in created}


def test_list_returns_a_snapshot(store: UserStore) -> None:
    store.create("Ada")
    snapshot = store.list()

    store.create("Grace")

    assert len(snapshot) == 1


def test_concurrent_creates_receive_unique_increasing_ids() -> None:
    store = UserStore()
    per_thread = 200
    thread_count = 8
    results: dict[int, list[int]] = {}
    barrier = threading.Barrier(thread_count)

    def worker(index: int) -> None:
        barrier.wait()
        ids = [store.create(f"worker-{index}").id for _ in range(per_thread)]
        results[index] = ids

    threads = [threading.Thread(target=worker, args=(index,)) for index in range(thread_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    all_ids = [user_id for ids in results.values() for user_id in ids]
    assert sorted(all_ids) == list(range(1, per_thread * thread_count + 1))
    for ids in results.values():
        assert ids == sorted(ids)
    assert len(store.list()) == per_thread * thread_count


def test_concurrent_reads_and_deletes_stay_consistent() -> None:
    store = UserStore()
    users = [store.create(f"user-{index}") for index in range(100)]
    deleted: list[bool] = []
    lock = threading.Lock()

    def deleter() -> None:
        for user in users:
            outcome = store.delete(user.id)
            with lock:
                deleted.append(outcome)

    def reader() -> None:
        for _ in range(50):
            listed = store.list()
            assert len({user.id for user in listed}) == len(listed)

    threads = [threading.Thread(target=deleter) for _ in range(3)]
    threads += [threading.Thread(target=reader) for _ in range(3)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert deleted.count(True) == len(users)
    assert len(store) == 0
