"""
Unit tests for ProfileService.
"""

import pytest

from teamtodo.core.errors import ErrorCode, ServiceError
from teamtodo.modules.profiles.schemas import ProfileUpdate
from tests.factories import profile_service


@pytest.mark.unit
def test_missing_profile(store):
    user_id = store.add_user("dave@example.com")

    with pytest.raises(ServiceError) as exc_info:
        profile_service(store, user_id).get_profile(user_id)

    assert exc_info.value.code is ErrorCode.PROFILE_NOT_FOUND
    assert exc_info.value.status_code == 404


@pytest.mark.unit
@pytest.mark.service
def test_first_save_creates_profile(store):
    user_id = store.add_user("dave@example.com")
    service = profile_service(store, user_id)

    saved = service.upsert_profile(user_id, ProfileUpdate(username="dave_1", display_name=" Dave ", bio=""))

    assert saved.username == "dave_1"
    assert saved.display_name == "Dave"
    assert saved.bio is None
    assert service.get_profile(user_id).username == "dave_1"
    assert len(store.rows("user_profiles")) == 1


@pytest.mark.unit
def test_second_save_updates_in_place(store, alice):
    service = profile_service(store, alice)

    saved = service.upsert_profile(alice, ProfileUpdate(username="alice", display_name="Alice L."))

    assert saved.display_name == "Alice L."
    assert saved.updated_at is not None
    assert len([p for p in store.rows("user_profiles") if p["user_id"] == alice]) == 1


@pytest.mark.unit
def test_username_taken_by_someone_else(store, alice, bob):
    with pytest.raises(ServiceError) as exc_info:
        profile_service(store, alice).upsert_profile(alice, ProfileUpdate(username="bob"))

    assert exc_info.value.code is ErrorCode.USERNAME_TAKEN
    assert exc_info.value.status_code == 409


@pytest.mark.unit
@pytest.mark.parametrize("username", ["has space", "dash-ed", "émile"])
def test_username_charset(store, alice, username):
    with pytest.raises(ServiceError) as exc_info:
        profile_service(store, alice).upsert_profile(alice, ProfileUpdate(username=username))
    assert exc_info.value.code is ErrorCode.INVALID_INPUT


@pytest.mark.unit
def test_blank_username_clears_it(store, alice):
    saved = profile_service(store, alice).upsert_profile(alice, ProfileUpdate(username="  "))
    assert saved.username is None
