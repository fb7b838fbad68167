"""
Integration tests for /api/v1/auth and /api/v1/profiles.
"""

import pytest

from tests.factories import auth_headers

API = "/api/v1"


@pytest.mark.integration
def test_register_login_me_logout(client, store):
    response = client.post(f"{API}/auth/register", json={"email": "erin@example.com", "password": "hunter22"})
    assert response.status_code == 201
    user_id = response.json()["user_id"]

    response = client.post(f"{API}/auth/login", json={"email": "erin@example.com", "password": "hunter22"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"}).json()
    assert me["id"] == user_id
    assert me["email"] == "erin@example.com"

    response = client.post(f"{API}/auth/logout", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


@pytest.mark.integration
def test_register_twice(client, store, alice):
    response = client.post(f"{API}/auth/register", json={"email": "alice@example.com", "password": "hunter22"})
    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists"


@pytest.mark.integration
def test_register_short_password(client):
    response = client.post(f"{API}/auth/register", json={"email": "erin@example.com", "password": "123"})
    assert response.status_code == 422


@pytest.mark.integration
def test_login_wrong_password(client, store, alice):
    response = client.post(f"{API}/auth/login", json={"email": "alice@example.com", "password": "wrong"})
    assert response.status_code == 401


@pytest.mark.integration
def test_profile_roundtrip(client, store):
    user_id = store.add_user("frank@example.com")
    headers = auth_headers(store, user_id)

    response = client.get(f"{API}/profiles/me", headers=headers)
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "PROFILE_NOT_FOUND"

    response = client.put(f"{API}/profiles/me", json={"username": "frank", "display_name": "Frank"}, headers=headers)
    assert response.status_code == 200
    assert client.get(f"{API}/profiles/me", headers=headers).json()["username"] == "frank"


@pytest.mark.integration
def test_profile_username_conflict(client, store, alice, bob):
    response = client.put(f"{API}/profiles/me", json={"username": "bob"}, headers=auth_headers(store, alice))
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "USERNAME_TAKEN"
