"""
Core dependencies for route protection and membership checks
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from teamtodo.core.errors import ErrorCode, ServiceError, translate_store_error
from teamtodo.database.supabase_client import SupabaseClient, get_supabase
from teamtodo.modules.auth.service import AuthService
from supabase import Client
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (team_ids)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_access_cache(request: Request) -> Dict[str, Any]:
    return _get_request_cache(request)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Resolve the bearer token to the caller's identity"""
    return auth_service.get_current_user(token)


def get_user_supabase(token: str = Depends(get_current_token)) -> Client:
    """Per-request client acting as the caller, so every query is policy-checked by the store"""
    return SupabaseClient.get_user_client(token)


def get_caller_team_ids(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> List[str]:
    """Return team ids from team_members for the caller. Uses request-scoped cache when provided."""
    if cache is not None and "team_ids" in cache:
        return cache["team_ids"]
    try:
        result = supabase.table("team_members")\
            .select("team_id")\
            .eq("user_id", user_id)\
            .execute()
    except Exception as e:
        raise translate_store_error(e, "loading team memberships")
    ids = [m["team_id"] for m in result.data] if result.data else []
    if cache is not None:
        cache["team_ids"] = ids
    return ids


def check_team_member(
    team_id: str,
    user_data: dict,
    supabase: Client,
    cache: Optional[Dict[str, Any]] = None
) -> dict:
    """Allow only members of the team; non-members see the team as missing"""
    if team_id in get_caller_team_ids(user_data["id"], supabase, cache):
        return user_data
    logger.info(f"User {user_data['id']} denied access to team {team_id}")
    raise ServiceError(ErrorCode.TEAM_NOT_FOUND, "You do not have access to this team")
