"""
Pytest configuration and fixtures.

Every test gets a fresh in-memory store (tests/fake_supabase.py). Services
are built around per-caller clients so row-level rules apply, and the API
client swaps the Supabase dependencies for clients of the same store.
"""

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from teamtodo.core.dependencies import get_current_token, get_user_supabase
from teamtodo.database.supabase_client import get_service_supabase, get_supabase
from teamtodo.main import app, limiter
from teamtodo.modules.auth.service import _AUTH_USER_CACHE
from tests.fake_supabase import FakeStore


@pytest.fixture(autouse=True)
def clear_auth_cache():
    _AUTH_USER_CACHE.clear()
    yield
    _AUTH_USER_CACHE.clear()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def alice(store: FakeStore) -> str:
    return store.add_user("alice@example.com", username="alice", display_name="Alice")


@pytest.fixture
def bob(store: FakeStore) -> str:
    return store.add_user("bob@example.com", username="bob", display_name="Bob")


@pytest.fixture
def carol(store: FakeStore) -> str:
    return store.add_user("carol@example.com", username="carol", display_name="Carol")


@pytest.fixture
def client(store: FakeStore):
    """
    TestClient whose Supabase dependencies are clients of the fake store.

    Usage:
        def test_endpoint(client, store, alice):
            response = client.get("/api/v1/teams", headers=auth_headers(store, alice))
    """

    def override_user_supabase(token: str = Depends(get_current_token)):
        return store.client_for_token(token)

    app.dependency_overrides[get_supabase] = lambda: store.client()
    app.dependency_overrides[get_service_supabase] = lambda: store.client(service_role=True)
    app.dependency_overrides[get_user_supabase] = override_user_supabase

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
