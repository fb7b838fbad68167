from supabase import Client
from teamtodo.core import policies
from teamtodo.core.errors import ErrorCode, ServiceError, names_constraint, translate_store_error
from teamtodo.modules.teams.schemas import (
    TeamCreate, TeamResponse, TeamSummaryResponse, TeamDetailResponse,
    InviteResponse, MemberResponse, InviteCodeResponse, JoinTeamResponse
)
from teamtodo.modules.teams.validators import TeamInputValidator, INVITE_CODE_PATTERN
from teamtodo.modules.todos.schemas import TodoStats
from typing import Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

MEMBER_PROFILE_COLUMNS = "user_id, username, display_name, avatar_url"
TEAM_NAME_CONSTRAINT = "teams_name_key"


class TeamService:
    """Team lifecycle and membership operations.

    `supabase` acts as the caller, so the store applies row-level policies to
    every query. `admin` (service role) is used only for the proactive
    team-name uniqueness check, which must see teams of every tenant.
    """

    def __init__(self, supabase: Client, admin: Optional[Client] = None):
        self.supabase = supabase
        self.admin = admin or supabase

    def create_team(self, team_data: TeamCreate, user_id: str) -> TeamResponse:
        """Create a team and add its creator as the first member"""
        name = TeamInputValidator.team_name(team_data.name)
        self._ensure_name_available(name)

        try:
            result = self.supabase.table("teams").insert({
                "name": name,
                "created_by": user_id
            }).execute()
        except Exception as e:
            # Only the name constraint means the name is taken; an invite code collision is a store fault
            conflict = ErrorCode.DATABASE_ERROR
            if names_constraint(e, TEAM_NAME_CONSTRAINT):
                conflict = ErrorCode.TEAM_NAME_TAKEN
            raise translate_store_error(e, "creating team", conflict_code=conflict)

        if not result.data:
            logger.error("Team insert returned no row; check the SELECT policy on teams")
            raise ServiceError(ErrorCode.DATABASE_ERROR, "The team could not be read back after creation")
        team = result.data[0]

        # PostgREST has no client-side transaction, so undo the team if the membership insert fails
        try:
            self.supabase.table("team_members").insert({
                "team_id": team["id"],
                "user_id": user_id
            }).execute()
        except Exception as e:
            error = translate_store_error(e, "adding team creator as member")
            self._discard_team(team["id"])
            raise error

        logger.info(f"User {user_id} created team {team['id']}")
        return TeamResponse(**team)

    def _ensure_name_available(self, name: str) -> None:
        try:
            existing = self.admin.table("teams")\
                .select("id")\
                .eq("name", name)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "checking team name")
        if existing.data:
            raise ServiceError(ErrorCode.TEAM_NAME_TAKEN)

    def _discard_team(self, team_id: str) -> None:
        """Compensating delete; its own failure is logged and never replaces the original error"""
        try:
            result = self.supabase.table("teams").delete().eq("id", team_id).execute()
        except Exception as cleanup_error:
            logger.error(f"Failed to roll back orphan team {team_id}: {cleanup_error}")
            return
        if not result.data:
            logger.error(f"Failed to roll back orphan team {team_id}: delete matched no row")
            return
        logger.warning(f"Rolled back team {team_id} after failed creator membership insert")

    def get_team(self, team_id: str) -> dict:
        """Fetch a team row visible to the caller"""
        try:
            result = self.supabase.table("teams")\
                .select("*")\
                .eq("id", team_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "loading team")
        if not result.data:
            raise ServiceError(ErrorCode.TEAM_NOT_FOUND)
        return result.data[0]

    def get_team_detail(self, team_id: str, user_id: str) -> TeamDetailResponse:
        team = self.get_team(team_id)
        is_creator = policies.is_team_creator(user_id, team)
        return TeamDetailResponse(
            id=team["id"],
            name=team["name"],
            created_by=team["created_by"],
            is_creator=is_creator,
            invite_code=team.get("invite_code") if is_creator else None,
            created_at=team.get("created_at"),
        )

    def list_teams(self, user_id: str, team_ids: List[str]) -> List[TeamSummaryResponse]:
        """Teams the caller belongs to, newest first, each with its todo counts"""
        if not team_ids:
            return []
        try:
            teams_result = self.supabase.table("teams")\
                .select("id, name, created_by, created_at")\
                .in_("id", team_ids)\
                .order("created_at", desc=True)\
                .execute()
            todos_result = self.supabase.table("todos")\
                .select("team_id, is_completed")\
                .in_("team_id", team_ids)\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "listing teams")

        stats: Dict[str, TodoStats] = {}
        for todo in todos_result.data or []:
            stats.setdefault(todo["team_id"], TodoStats()).add(todo["is_completed"])

        return [
            TeamSummaryResponse(
                id=team["id"],
                name=team["name"],
                created_by=team["created_by"],
                is_creator=policies.is_team_creator(user_id, team),
                todo_stats=stats.get(team["id"], TodoStats()),
            )
            for team in teams_result.data or []
        ]

    def list_members(self, team_id: str) -> List[MemberResponse]:
        """Members visible to the caller: all of them for the creator, only their own row otherwise"""
        team = self.get_team(team_id)
        try:
            members_result = self.supabase.table("team_members")\
                .select("team_id, user_id, joined_at")\
                .eq("team_id", team_id)\
                .order("joined_at")\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "listing team members")
        members = members_result.data or []
        if not members:
            return []

        # Profiles are optional; a missing profile only degrades the display
        user_ids = [m["user_id"] for m in members]
        try:
            profiles_result = self.supabase.table("user_profiles")\
                .select(MEMBER_PROFILE_COLUMNS)\
                .in_("user_id", user_ids)\
                .execute()
            profiles = {p["user_id"]: p for p in profiles_result.data or []}
        except Exception as e:
            logger.warning(f"Could not load member profiles for team {team_id}: {e}")
            profiles = {}

        return [
            MemberResponse(
                team_id=member["team_id"],
                user_id=member["user_id"],
                role="owner" if member["user_id"] == team["created_by"] else "member",
                joined_at=member.get("joined_at"),
                username=profiles.get(member["user_id"], {}).get("username"),
                display_name=profiles.get(member["user_id"], {}).get("display_name"),
                avatar_url=profiles.get(member["user_id"], {}).get("avatar_url"),
            )
            for member in members
        ]

    def invite_member(self, team_id: str, identifier: str, user_id: str) -> InviteResponse:
        """Add the user named by email, username or display name to the team"""
        cleaned, is_email = TeamInputValidator.identifier(identifier)

        # Team access is decided before any user lookup answers
        try:
            team = self.get_team(team_id)
            if not policies.can_manage_members(user_id, team):
                raise ServiceError(ErrorCode.FORBIDDEN, "Only the team creator can invite members")
        except ServiceError as access_error:
            if self._names_caller(cleaned, is_email, user_id):
                raise ServiceError(ErrorCode.SELF_INVITE)
            raise access_error

        target_id, matched_by = self._resolve_identifier(cleaned, is_email)
        if target_id == user_id:
            raise ServiceError(ErrorCode.SELF_INVITE)

        if self._is_member(team_id, target_id):
            raise ServiceError(ErrorCode.ALREADY_MEMBER)

        try:
            self.supabase.table("team_members").insert({
                "team_id": team_id,
                "user_id": target_id
            }).execute()
        except Exception as e:
            raise translate_store_error(e, "adding team member", conflict_code=ErrorCode.ALREADY_MEMBER)

        logger.info(f"User {user_id} invited {target_id} to team {team_id} by {matched_by}")
        label = matched_by.replace("_", " ")
        return InviteResponse(
            message=f"Invited the user with {label} {cleaned} to the team",
            user_id=target_id,
            matched_by=matched_by,
        )

    def _resolve_identifier(self, identifier: str, is_email: bool) -> Tuple[str, str]:
        """Sequential point lookups: email, else username then display name"""
        if is_email:
            try:
                result = self.supabase.rpc("get_user_id_by_email", {"email": identifier}).execute()
            except Exception as e:
                raise translate_store_error(e, "looking up user by email")
            if not result.data:
                raise ServiceError(ErrorCode.USER_NOT_FOUND, "No registered user uses this email address")
            return result.data, "email"

        try:
            result = self.supabase.rpc("get_user_id_by_username", {"username": identifier}).execute()
            if result.data:
                return result.data, "username"
        except Exception as e:
            # Fall through to the display name lookup
            logger.error(f"Username lookup failed: {e}")

        try:
            result = self.supabase.table("user_profiles")\
                .select("user_id")\
                .eq("display_name", identifier)\
                .limit(2)\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "looking up user by display name")
        matches = result.data or []
        if len(matches) == 1:
            return matches[0]["user_id"], "display_name"
        if len(matches) > 1:
            raise ServiceError(
                ErrorCode.USER_NOT_FOUND,
                "Several users share this display name; invite them by username or email"
            )
        raise ServiceError(ErrorCode.USER_NOT_FOUND, "No user has this username or display name")

    def _names_caller(self, identifier: str, is_email: bool, user_id: str) -> bool:
        try:
            target_id, _ = self._resolve_identifier(identifier, is_email)
        except ServiceError:
            return False
        return target_id == user_id

    def _is_member(self, team_id: str, user_id: str) -> bool:
        try:
            result = self.supabase.table("team_members")\
                .select("team_id")\
                .eq("team_id", team_id)\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "checking membership")
        return bool(result.data)

    def remove_member(self, team_id: str, member_id: str, user_id: str) -> None:
        """Creator-only removal of another member"""
        team = self.get_team(team_id)
        if not policies.can_manage_members(user_id, team):
            raise ServiceError(ErrorCode.FORBIDDEN, "Only the team creator can remove members")
        if not policies.can_remove_member(user_id, member_id, team):
            raise ServiceError(ErrorCode.CREATOR_CANNOT_BE_REMOVED)
        if not self._is_member(team_id, member_id):
            raise ServiceError(ErrorCode.NOT_A_MEMBER)

        self._delete_membership(team_id, member_id)
        logger.info(f"User {user_id} removed {member_id} from team {team_id}")

    def leave_team(self, team_id: str, user_id: str) -> None:
        team = self.get_team(team_id)
        if not policies.can_leave_team(user_id, team):
            raise ServiceError(ErrorCode.CREATOR_CANNOT_LEAVE)
        if not self._is_member(team_id, user_id):
            raise ServiceError(ErrorCode.NOT_A_MEMBER, "You are not a member of this team")

        self._delete_membership(team_id, user_id)
        logger.info(f"User {user_id} left team {team_id}")

    def _delete_membership(self, team_id: str, user_id: str) -> None:
        try:
            result = self.supabase.table("team_members")\
                .delete()\
                .eq("team_id", team_id)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "deleting team member")
        if not result.data:
            # The row existed a moment ago, so an empty delete means a policy filtered it out
            raise ServiceError(ErrorCode.FORBIDDEN)

    def get_invite_code(self, team_id: str, user_id: str) -> InviteCodeResponse:
        team = self.get_team(team_id)
        if not policies.is_team_creator(user_id, team):
            raise ServiceError(ErrorCode.FORBIDDEN, "Only team creators can view invite codes")
        return InviteCodeResponse(team_id=team_id, invite_code=team["invite_code"])

    def regenerate_invite_code(self, team_id: str, user_id: str) -> InviteCodeResponse:
        """Replace the team's invite code; the old code stops working immediately"""
        team = self.get_team(team_id)
        if not policies.can_update_team(user_id, team):
            raise ServiceError(ErrorCode.FORBIDDEN, "Only team creators can regenerate invite codes")

        try:
            generated = self.supabase.rpc("generate_invite_code", {}).execute()
        except Exception as e:
            raise translate_store_error(e, "generating invite code")
        new_code = generated.data
        if not isinstance(new_code, str) or not INVITE_CODE_PATTERN.match(new_code):
            logger.error(f"generate_invite_code returned malformed value: {new_code!r}")
            raise ServiceError(ErrorCode.DATABASE_ERROR, "Failed to generate a new invite code")

        # Last write wins if two regenerations race; only the creator can get here
        try:
            result = self.supabase.table("teams")\
                .update({"invite_code": new_code})\
                .eq("id", team_id)\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "updating invite code")
        if not result.data:
            raise ServiceError(ErrorCode.TEAM_NOT_FOUND)

        logger.info(f"User {user_id} regenerated the invite code of team {team_id}")
        return InviteCodeResponse(team_id=team_id, invite_code=new_code)

    def join_by_invite_code(self, invite_code: str, user_id: str) -> JoinTeamResponse:
        """Redeem an invite code. Redeeming again as an existing member succeeds with a message."""
        code = TeamInputValidator.invite_code(invite_code)
        try:
            result = self.supabase.rpc("join_team_by_invite_code", {"invite_code_param": code}).execute()
        except Exception as e:
            raise translate_store_error(e, "joining team by invite code")

        rows = result.data
        if isinstance(rows, dict):
            rows = [rows]
        if not rows:
            logger.error("join_team_by_invite_code returned no rows")
            raise ServiceError(ErrorCode.DATABASE_ERROR, "Invalid response from the server")

        outcome = rows[0]
        if not outcome.get("success"):
            raise ServiceError(ErrorCode.INVALID_INVITE_CODE, outcome.get("message") or None)

        logger.info(f"User {user_id} redeemed an invite code for team {outcome['team_id']}")
        return JoinTeamResponse(
            success=True,
            message=outcome.get("message") or "Joined the team",
            team_id=outcome["team_id"],
            team_name=outcome.get("team_name") or "",
            already_member=bool(outcome.get("already_member")),
        )
