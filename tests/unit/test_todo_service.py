"""
Unit tests for TodoService: private and team scoping, and isolation between
teams when a todo id is guessed.
"""

import pytest

from teamtodo.core.errors import ErrorCode, ServiceError
from teamtodo.modules.todos.schemas import TodoCreate
from tests.factories import add_member, create_team, create_todo, todo_service


def _todo(store, todo_id):
    return next((t for t in store.rows("todos") if t["id"] == todo_id), None)


@pytest.mark.unit
@pytest.mark.service
def test_private_todos_are_scoped_to_owner(store, alice, bob):
    mine = create_todo(store, alice, "buy milk")
    create_todo(store, bob, "bob's errand")

    todos = todo_service(store, alice).list_todos(alice)

    assert [t.id for t in todos] == [mine["id"]]
    assert todos[0].team_id is None


@pytest.mark.unit
def test_private_list_excludes_own_team_todos(store, alice):
    team = create_team(store, alice)
    private = create_todo(store, alice, "private")
    create_todo(store, alice, "team work", team["id"])

    assert [t.id for t in todo_service(store, alice).list_todos(alice)] == [private["id"]]


@pytest.mark.unit
def test_lists_are_newest_first(store, alice):
    first = create_todo(store, alice, "first")
    second = create_todo(store, alice, "second")

    assert [t.id for t in todo_service(store, alice).list_todos(alice)] == [second["id"], first["id"]]


@pytest.mark.unit
def test_task_is_trimmed(store, alice):
    todo = todo_service(store, alice).add_todo(TodoCreate(task="  water plants  "), alice)
    assert todo.task == "water plants"
    assert todo.is_completed is False


@pytest.mark.unit
@pytest.mark.parametrize("task", ["", "   ", "x" * 501])
def test_invalid_task_rejected(store, alice, task):
    with pytest.raises(ServiceError) as exc_info:
        todo_service(store, alice).add_todo(TodoCreate(task=task), alice)
    assert exc_info.value.code is ErrorCode.INVALID_INPUT
    assert store.rows("todos") == []


@pytest.mark.unit
def test_toggle_flips_completion(store, alice):
    todo = create_todo(store, alice)
    service = todo_service(store, alice)

    assert service.toggle_todo(todo["id"], alice).is_completed is True
    assert service.toggle_todo(todo["id"], alice).is_completed is False


@pytest.mark.unit
def test_stats(store, alice):
    service = todo_service(store, alice)
    done = create_todo(store, alice, "done")
    create_todo(store, alice, "open")
    service.toggle_todo(done["id"], alice)

    stats = service.get_stats(alice)

    assert (stats.total, stats.completed, stats.pending) == (2, 1, 1)


@pytest.mark.unit
def test_other_users_private_todo_is_not_found(store, alice, bob):
    todo = create_todo(store, alice)
    service = todo_service(store, bob)

    for action in (service.toggle_todo, service.delete_todo):
        with pytest.raises(ServiceError) as exc_info:
            action(todo["id"], bob)
        assert exc_info.value.code is ErrorCode.TODO_NOT_FOUND
    assert _todo(store, todo["id"])["is_completed"] is False


@pytest.mark.unit
def test_private_scope_cannot_reach_team_todo(store, alice):
    team = create_team(store, alice)
    todo = create_todo(store, alice, "team work", team["id"])

    with pytest.raises(ServiceError) as exc_info:
        todo_service(store, alice).delete_todo(todo["id"], alice)

    assert exc_info.value.code is ErrorCode.TODO_NOT_FOUND
    assert _todo(store, todo["id"]) is not None


@pytest.mark.unit
@pytest.mark.service
def test_team_members_share_team_todos(store, alice, bob):
    team = create_team(store, alice)
    add_member(store, team["id"], bob)
    todo = create_todo(store, alice, "shared", team["id"])
    service = todo_service(store, bob)

    assert [t.id for t in service.list_todos(bob, team["id"])] == [todo["id"]]
    assert service.toggle_todo(todo["id"], bob, team["id"]).is_completed is True
    service.delete_todo(todo["id"], bob, team["id"])
    assert _todo(store, todo["id"]) is None


@pytest.mark.unit
@pytest.mark.service
def test_guessed_id_from_another_team_is_untouched(store, alice, bob, carol):
    team_a = create_team(store, alice, "Alpha")
    team_b = create_team(store, carol, "Beta")
    add_member(store, team_a["id"], bob)
    target = create_todo(store, carol, "beta secret", team_b["id"])
    service = todo_service(store, bob)

    for team_id in (team_a["id"], team_b["id"]):
        with pytest.raises(ServiceError) as exc_info:
            service.delete_todo(target["id"], bob, team_id)
        assert exc_info.value.code is ErrorCode.TODO_NOT_FOUND
        with pytest.raises(ServiceError) as exc_info:
            service.toggle_todo(target["id"], bob, team_id)
        assert exc_info.value.code is ErrorCode.TODO_NOT_FOUND

    assert _todo(store, target["id"]) is not None
    assert _todo(store, target["id"])["is_completed"] is False


@pytest.mark.unit
def test_non_member_cannot_add_team_todo(store, alice, bob):
    team = create_team(store, alice)

    with pytest.raises(ServiceError) as exc_info:
        todo_service(store, bob).add_todo(TodoCreate(task="sneaky"), bob, team["id"])

    assert exc_info.value.code is ErrorCode.FORBIDDEN
    assert store.rows("todos") == []
