"""
Builders for services and rows used across the test suite.
"""

from typing import Any, Dict

from teamtodo.modules.profiles.service import ProfileService
from teamtodo.modules.teams.schemas import TeamCreate
from teamtodo.modules.teams.service import TeamService
from teamtodo.modules.todos.schemas import TodoCreate
from teamtodo.modules.todos.service import TodoService
from tests.fake_supabase import FakeStore


def team_service(store: FakeStore, user_id: str, with_admin: bool = True) -> TeamService:
    """TeamService acting as user_id, optionally with a service-role client for name checks"""
    admin = store.client(service_role=True) if with_admin else None
    return TeamService(store.client(user_id), admin)


def todo_service(store: FakeStore, user_id: str) -> TodoService:
    return TodoService(store.client(user_id))


def profile_service(store: FakeStore, user_id: str) -> ProfileService:
    return ProfileService(store.client(user_id))


def create_team(store: FakeStore, owner_id: str, name: str = "Alpha") -> Dict[str, Any]:
    """Create a team through the service so the creator membership exists"""
    return team_service(store, owner_id).create_team(TeamCreate(name=name), owner_id).model_dump()


def add_member(store: FakeStore, team_id: str, user_id: str) -> None:
    store.tables["team_members"].append({
        "team_id": team_id,
        "user_id": user_id,
        "joined_at": store.now(),
    })


def create_todo(store: FakeStore, user_id: str, task: str = "Write tests", team_id: str = None) -> Dict[str, Any]:
    return todo_service(store, user_id).add_todo(TodoCreate(task=task), user_id, team_id).model_dump()


def auth_headers(store: FakeStore, user_id: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {store.token_for(user_id)}"}
