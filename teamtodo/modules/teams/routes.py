from fastapi import APIRouter, Depends
from teamtodo.database.supabase_client import get_service_supabase
from teamtodo.modules.teams.schemas import (
    TeamCreate, TeamResponse, TeamSummaryResponse, TeamDetailResponse,
    MemberInvite, InviteResponse, MemberResponse,
    InviteCodeResponse, JoinTeamRequest, JoinTeamResponse
)
from teamtodo.modules.teams.service import TeamService
from teamtodo.modules.todos.schemas import TodoCreate, TodoResponse
from teamtodo.modules.todos.service import TodoService
from teamtodo.core.dependencies import (
    get_current_user, get_user_supabase, get_access_cache,
    get_caller_team_ids, check_team_member
)
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/teams", tags=["teams"])


def get_team_service(
    supabase: Client = Depends(get_user_supabase),
    admin: Optional[Client] = Depends(get_service_supabase)
) -> TeamService:
    return TeamService(supabase, admin)


def get_todo_service(supabase: Client = Depends(get_user_supabase)) -> TodoService:
    return TodoService(supabase)


@router.post("", response_model=TeamResponse, status_code=201)
async def create_team(
    team_data: TeamCreate,
    user_data: Dict = Depends(get_current_user),
    service: TeamService = Depends(get_team_service)
):
    """Create a team; the caller becomes its creator and first member"""
    return service.create_team(team_data, user_data["id"])


@router.get("", response_model=List[TeamSummaryResponse])
async def list_teams(
    user_data: Dict = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
    supabase: Client = Depends(get_user_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """List the teams the caller belongs to, with todo counts"""
    team_ids = get_caller_team_ids(user_data["id"], supabase, cache)
    return service.list_teams(user_data["id"], team_ids)


@router.post("/join", response_model=JoinTeamResponse)
async def join_team(
    join_data: JoinTeamRequest,
    user_data: Dict = Depends(get_current_user),
    service: TeamService = Depends(get_team_service)
):
    """Join a team by invite code (re-joining reports already_member instead of failing)"""
    return service.join_by_invite_code(join_data.invite_code, user_data["id"])


@router.get("/{team_id}", response_model=TeamDetailResponse)
async def get_team(
    team_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
    supabase: Client = Depends(get_user_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """Get team details (members only)"""
    check_team_member(team_id, user_data, supabase, cache)
    return service.get_team_detail(team_id, user_data["id"])


@router.get("/{team_id}/members", response_model=List[MemberResponse])
async def list_members(
    team_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
    supabase: Client = Depends(get_user_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """List team members with profile summaries (members only)"""
    check_team_member(team_id, user_data, supabase, cache)
    return service.list_members(team_id)


@router.post("/{team_id}/members", response_model=InviteResponse, status_code=201)
async def invite_member(
    team_id: str,
    invite: MemberInvite,
    user_data: Dict = Depends(get_current_user),
    service: TeamService = Depends(get_team_service)
):
    """Invite a user by email, username or display name (team creator only)"""
    return service.invite_member(team_id, invite.identifier, user_data["id"])


@router.delete("/{team_id}/members/{member_id}", status_code=204)
async def remove_member(
    team_id: str,
    member_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TeamService = Depends(get_team_service)
):
    """Remove a member (team creator only; the creator cannot be removed)"""
    service.remove_member(team_id, member_id, user_data["id"])
    return None


@router.post("/{team_id}/leave", status_code=204)
async def leave_team(
    team_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TeamService = Depends(get_team_service)
):
    """Leave a team (not available to the creator)"""
    service.leave_team(team_id, user_data["id"])
    return None


@router.get("/{team_id}/invite-code", response_model=InviteCodeResponse)
async def get_invite_code(
    team_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TeamService = Depends(get_team_service)
):
    """Get the current invite code (team creator only)"""
    return service.get_invite_code(team_id, user_data["id"])


@router.post("/{team_id}/invite-code", response_model=InviteCodeResponse)
async def regenerate_invite_code(
    team_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TeamService = Depends(get_team_service)
):
    """Regenerate the invite code (team creator only); the previous code stops working"""
    return service.regenerate_invite_code(team_id, user_data["id"])


@router.get("/{team_id}/todos", response_model=List[TodoResponse])
async def list_team_todos(
    team_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
    supabase: Client = Depends(get_user_supabase),
    cache: Dict = Depends(get_access_cache)
):
    check_team_member(team_id, user_data, supabase, cache)
    return service.list_todos(user_data["id"], team_id)


@router.post("/{team_id}/todos", response_model=TodoResponse, status_code=201)
async def add_team_todo(
    team_id: str,
    todo_data: TodoCreate,
    user_data: Dict = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
    supabase: Client = Depends(get_user_supabase),
    cache: Dict = Depends(get_access_cache)
):
    check_team_member(team_id, user_data, supabase, cache)
    return service.add_todo(todo_data, user_data["id"], team_id)


@router.post("/{team_id}/todos/{todo_id}/toggle", response_model=TodoResponse)
async def toggle_team_todo(
    team_id: str,
    todo_id: int,
    user_data: Dict = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
    supabase: Client = Depends(get_user_supabase),
    cache: Dict = Depends(get_access_cache)
):
    check_team_member(team_id, user_data, supabase, cache)
    return service.toggle_todo(todo_id, user_data["id"], team_id)


@router.delete("/{team_id}/todos/{todo_id}", status_code=204)
async def delete_team_todo(
    team_id: str,
    todo_id: int,
    user_data: Dict = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
    supabase: Client = Depends(get_user_supabase),
    cache: Dict = Depends(get_access_cache)
):
    check_team_member(team_id, user_data, supabase, cache)
    service.delete_todo(todo_id, user_data["id"], team_id)
    return None
