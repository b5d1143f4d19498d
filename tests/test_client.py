from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from userapi.application import create_app
from userapi.client import ServiceError, UsersClient
from userapi.store import UserStore


@pytest.fixture()
def store() -> UserStore:
    return UserStore()


@pytest.fixture()
def users_client(store: UserStore):
    with TestClient(create_app(store=store)) as test_client:
        yield UsersClient(client=test_client)


def test_client_round_trip(users_client: UsersClient, store: UserStore) -> None:
    created = users_client.create_user("  Ada ")

    assert created.id == 1
    assert created.name == "Ada"
    assert users_client.get_user(created.id) == store.get(created.id)
    assert [user.id for user in users_client.list_users()] == [1]

    users_client.delete_user(created.id)
    assert users_client.list_users() == []


def test_client_raises_service_errors(users_client: UsersClient) -> None:
    with pytest.raises(ServiceError) as excinfo:
        users_client.get_user(42)

    assert excinfo.value.status_code == 404
    assert excinfo.value.code == "not_found"
    assert excinfo.value.message == "resource not found"

    with pytest.raises(ServiceError) as excinfo:
        users_client.create_user("   ")
    assert excinfo.value.code == "validation_failed"


def test_client_rejects_empty_base_url() -> None:
    with pytest.raises(ValueError):
        UsersClient("  ")
