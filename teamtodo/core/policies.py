"""
Row-level authorization rules for teams, team_members, todos and user_profiles.

Each rule decides one (table, operation) pair from the caller id, the row,
and at most the *parent* context: the owning team row, or the set of team
ids the caller belongs to. A rule never receives rows of the table it
protects, so a membership rule cannot recurse into team_members. The SQL
policies in supabase/migrations express exactly these rules; the services
reuse them for application-level checks.
"""

from typing import AbstractSet, Any, Mapping, Optional

Row = Mapping[str, Any]


def _same(caller_id: Optional[str], user_id: Optional[str]) -> bool:
    return caller_id is not None and caller_id == user_id


def is_team_creator(caller_id: Optional[str], team: Optional[Row]) -> bool:
    return team is not None and _same(caller_id, team.get("created_by"))


# teams

def can_insert_team(caller_id: Optional[str], team: Row) -> bool:
    return _same(caller_id, team.get("created_by"))


def can_select_team(caller_id: Optional[str], team: Row, caller_team_ids: AbstractSet[str]) -> bool:
    # Membership is read from team_members, which is the *other* table here.
    return is_team_creator(caller_id, team) or team.get("id") in caller_team_ids


def can_update_team(caller_id: Optional[str], team: Row) -> bool:
    return is_team_creator(caller_id, team)


def can_delete_team(caller_id: Optional[str], team: Row) -> bool:
    return is_team_creator(caller_id, team)


# team_members

def can_insert_membership(caller_id: Optional[str], membership: Row, team: Optional[Row]) -> bool:
    return _same(caller_id, membership.get("user_id")) or is_team_creator(caller_id, team)


def can_select_membership(caller_id: Optional[str], membership: Row, team: Optional[Row]) -> bool:
    return _same(caller_id, membership.get("user_id")) or is_team_creator(caller_id, team)


def can_delete_membership(caller_id: Optional[str], membership: Row, team: Optional[Row]) -> bool:
    """Self-leave or creator removal; nobody deletes the creator's own row through this path."""
    if team is not None and _same(membership.get("user_id"), team.get("created_by")):
        return False
    return _same(caller_id, membership.get("user_id")) or is_team_creator(caller_id, team)


# todos

def can_select_todo(caller_id: Optional[str], todo: Row, caller_team_ids: AbstractSet[str]) -> bool:
    team_id = todo.get("team_id")
    if team_id is None:
        return _same(caller_id, todo.get("user_id"))
    return team_id in caller_team_ids


def can_write_todo(caller_id: Optional[str], todo: Row, caller_team_ids: AbstractSet[str]) -> bool:
    if caller_id is None:
        return False
    return can_select_todo(caller_id, todo, caller_team_ids)


# user_profiles

def can_select_profile(caller_id: Optional[str], profile: Row) -> bool:
    # Any signed-in user may look up profiles; invitations resolve display names this way.
    return caller_id is not None


def can_write_profile(caller_id: Optional[str], profile: Row) -> bool:
    return _same(caller_id, profile.get("user_id"))


# Service-level rules composed from the row rules above

def can_manage_members(caller_id: Optional[str], team: Optional[Row]) -> bool:
    return is_team_creator(caller_id, team)


def can_remove_member(caller_id: Optional[str], member_id: str, team: Optional[Row]) -> bool:
    return can_delete_membership(caller_id, {"user_id": member_id}, team) and can_manage_members(caller_id, team)


def can_leave_team(caller_id: Optional[str], team: Optional[Row]) -> bool:
    return caller_id is not None and not is_team_creator(caller_id, team)
