"""
Error taxonomy shared by every service.

Services raise ServiceError (an HTTPException) carrying a semantic code.
Store failures reported by PostgREST are translated here so raw Postgres
diagnostics travel alongside a user-facing message, never instead of it.
"""

from enum import Enum
from typing import Any, Dict, Optional
import logging

from fastapi import HTTPException, status
from postgrest.exceptions import APIError

logger = logging.getLogger(__name__)

# Postgres / PostgREST error codes we react to
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
INVALID_TEXT_REPRESENTATION = "22P02"
INSUFFICIENT_PRIVILEGE = "42501"
NO_ROWS = "PGRST116"
JWT_INVALID = "PGRST301"


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    BACKEND_FAILURE = "backend_failure"
    UNEXPECTED = "unexpected"


KIND_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.BACKEND_FAILURE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.UNEXPECTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ErrorCode(str, Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_EMAIL = "INVALID_EMAIL"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    SELF_INVITE = "SELF_INVITE"
    ALREADY_MEMBER = "ALREADY_MEMBER"
    NOT_A_MEMBER = "NOT_A_MEMBER"
    TEAM_NOT_FOUND = "TEAM_NOT_FOUND"
    TEAM_NAME_TAKEN = "TEAM_NAME_TAKEN"
    CREATOR_CANNOT_LEAVE = "CREATOR_CANNOT_LEAVE"
    CREATOR_CANNOT_BE_REMOVED = "CREATOR_CANNOT_BE_REMOVED"
    INVALID_INVITE_CODE = "INVALID_INVITE_CODE"
    TODO_NOT_FOUND = "TODO_NOT_FOUND"
    USERNAME_TAKEN = "USERNAME_TAKEN"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    DATABASE_ERROR = "DATABASE_ERROR"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


# code -> (kind, default message, remedy)
ERROR_CATALOG: Dict[ErrorCode, tuple] = {
    ErrorCode.UNAUTHORIZED: (
        ErrorKind.AUTHORIZATION,
        "You need to sign in to do this",
        "Sign in again and retry",
    ),
    ErrorCode.FORBIDDEN: (
        ErrorKind.AUTHORIZATION,
        "You do not have permission to perform this action",
        "Ask the team creator to do it for you",
    ),
    ErrorCode.INVALID_INPUT: (
        ErrorKind.VALIDATION,
        "The submitted data is not valid",
        "Check the input format and try again",
    ),
    ErrorCode.INVALID_EMAIL: (
        ErrorKind.VALIDATION,
        "Please enter a valid email address",
        None,
    ),
    ErrorCode.USER_NOT_FOUND: (
        ErrorKind.NOT_FOUND,
        "No user matches that email, username or display name",
        "Check the spelling, or ask the user for their exact username",
    ),
    ErrorCode.SELF_INVITE: (
        ErrorKind.VALIDATION,
        "You cannot invite yourself to a team",
        None,
    ),
    ErrorCode.ALREADY_MEMBER: (
        ErrorKind.CONFLICT,
        "This user is already a member of the team",
        None,
    ),
    ErrorCode.NOT_A_MEMBER: (
        ErrorKind.NOT_FOUND,
        "This user is not a member of the team",
        None,
    ),
    ErrorCode.TEAM_NOT_FOUND: (
        ErrorKind.NOT_FOUND,
        "Team not found",
        "The team may have been deleted or you may no longer be a member",
    ),
    ErrorCode.TEAM_NAME_TAKEN: (
        ErrorKind.CONFLICT,
        "A team with this name already exists",
        "Choose a different team name",
    ),
    ErrorCode.CREATOR_CANNOT_LEAVE: (
        ErrorKind.AUTHORIZATION,
        "The team creator cannot leave the team",
        "To dissolve the team, contact an administrator",
    ),
    ErrorCode.CREATOR_CANNOT_BE_REMOVED: (
        ErrorKind.AUTHORIZATION,
        "The team creator cannot be removed from the team",
        "To dissolve the team, contact an administrator",
    ),
    ErrorCode.INVALID_INVITE_CODE: (
        ErrorKind.NOT_FOUND,
        "The invite code is invalid or has expired",
        "Ask the team creator for the current invite code",
    ),
    ErrorCode.TODO_NOT_FOUND: (
        ErrorKind.NOT_FOUND,
        "Todo not found",
        None,
    ),
    ErrorCode.USERNAME_TAKEN: (
        ErrorKind.CONFLICT,
        "This username is already used by another user",
        "Choose a different username",
    ),
    ErrorCode.PROFILE_NOT_FOUND: (
        ErrorKind.NOT_FOUND,
        "Profile not found",
        "Save your profile settings to create one",
    ),
    ErrorCode.DATABASE_ERROR: (
        ErrorKind.BACKEND_FAILURE,
        "A database error occurred",
        "Please try again later",
    ),
    ErrorCode.UNEXPECTED_ERROR: (
        ErrorKind.UNEXPECTED,
        "An unexpected error occurred",
        "Please try again later",
    ),
}


class ServiceError(HTTPException):
    """HTTPException with a semantic code, a user-facing message and an optional store diagnostic."""

    def __init__(
        self,
        code: ErrorCode,
        message: Optional[str] = None,
        diagnostic: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        kind, default_message, remedy = ERROR_CATALOG[code]
        self.code = code
        self.kind = kind
        self.message = message or default_message
        self.remedy = remedy
        self.diagnostic = diagnostic
        detail: Dict[str, Any] = {"code": code.value, "message": self.message}
        if remedy:
            detail["remedy"] = remedy
        if diagnostic:
            detail["diagnostic"] = diagnostic
        super().__init__(status_code=status_code or KIND_STATUS[kind], detail=detail)


def store_diagnostic(exc: APIError) -> Dict[str, Any]:
    return {
        "code": getattr(exc, "code", None),
        "message": getattr(exc, "message", None) or str(exc),
        "hint": getattr(exc, "hint", None),
    }


def is_no_rows(exc: Exception) -> bool:
    return isinstance(exc, APIError) and getattr(exc, "code", None) == NO_ROWS


def names_constraint(exc: Exception, constraint: str) -> bool:
    """True when a store error reports a violation of the named constraint"""
    if not isinstance(exc, APIError):
        return False
    text = " ".join(str(part) for part in (exc.message, exc.details) if part)
    return constraint in text


def translate_store_error(
    exc: Exception,
    context: str,
    conflict_code: ErrorCode = ErrorCode.DATABASE_ERROR,
) -> ServiceError:
    """Map a store exception onto the taxonomy. The caller raises the result."""
    if isinstance(exc, ServiceError):
        return exc
    if isinstance(exc, APIError):
        diagnostic = store_diagnostic(exc)
        code = diagnostic["code"]
        if code == UNIQUE_VIOLATION and conflict_code is not ErrorCode.DATABASE_ERROR:
            logger.info(f"{context}: unique violation ({diagnostic['message']})")
            return ServiceError(conflict_code, diagnostic=diagnostic)
        if code in (INSUFFICIENT_PRIVILEGE, JWT_INVALID):
            logger.warning(f"{context}: rejected by row-level policy ({diagnostic['message']})")
            return ServiceError(ErrorCode.FORBIDDEN, diagnostic=diagnostic)
        if code == INVALID_TEXT_REPRESENTATION:
            logger.info(f"{context}: malformed identifier ({diagnostic['message']})")
            return ServiceError(ErrorCode.INVALID_INPUT, "Malformed identifier", diagnostic=diagnostic)
        if code == FOREIGN_KEY_VIOLATION:
            logger.warning(f"{context}: referenced row missing ({diagnostic['message']})")
            return ServiceError(ErrorCode.TEAM_NOT_FOUND, diagnostic=diagnostic)
        logger.error(f"{context} failed: code={code} message={diagnostic['message']} hint={diagnostic['hint']}")
        return ServiceError(ErrorCode.DATABASE_ERROR, diagnostic=diagnostic)
    logger.exception(f"Unexpected error during {context}: {exc}")
    return ServiceError(ErrorCode.UNEXPECTED_ERROR)
