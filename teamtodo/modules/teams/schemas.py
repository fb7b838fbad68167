from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from teamtodo.modules.todos.schemas import TodoStats


class TeamCreate(BaseModel):
    name: str


class TeamResponse(BaseModel):
    id: str
    name: str
    created_by: str
    invite_code: Optional[str] = None  # only returned to the creator
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TeamSummaryResponse(BaseModel):
    id: str
    name: str
    created_by: str
    is_creator: bool
    todo_stats: TodoStats


class TeamDetailResponse(BaseModel):
    id: str
    name: str
    created_by: str
    is_creator: bool
    invite_code: Optional[str] = None
    created_at: Optional[datetime] = None


class MemberInvite(BaseModel):
    identifier: str  # email, username or display name


class InviteResponse(BaseModel):
    success: bool = True
    message: str
    user_id: str
    matched_by: str  # email | username | display_name


class MemberResponse(BaseModel):
    team_id: str
    user_id: str
    role: str  # derived: owner | member
    joined_at: Optional[datetime] = None
    username: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None


class InviteCodeResponse(BaseModel):
    team_id: str
    invite_code: str


class JoinTeamRequest(BaseModel):
    invite_code: str


class JoinTeamResponse(BaseModel):
    success: bool
    message: str
    team_id: str
    team_name: str
    already_member: bool = False
