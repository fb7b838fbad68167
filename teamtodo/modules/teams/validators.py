import re
from typing import Tuple

from email_validator import EmailNotValidError, validate_email

from teamtodo.core.errors import ErrorCode, ServiceError

TEAM_NAME_MIN_LENGTH = 2
TEAM_NAME_MAX_LENGTH = 50
# Letters, digits, CJK ideographs, whitespace, hyphen and underscore
TEAM_NAME_PATTERN = re.compile(r"^[\u4e00-\u9fa5A-Za-z0-9\s\-_]+$")

INVITE_CODE_LENGTH = 8
INVITE_CODE_PATTERN = re.compile(r"^[A-Z0-9]{%d}$" % INVITE_CODE_LENGTH)


class TeamInputValidator:
    """Input checks that run before any store call"""

    @staticmethod
    def team_name(name: str) -> str:
        """Return the trimmed name or raise INVALID_INPUT."""
        trimmed = (name or "").strip()
        if not trimmed:
            raise ServiceError(ErrorCode.INVALID_INPUT, "Team name cannot be empty")
        if len(trimmed) < TEAM_NAME_MIN_LENGTH:
            raise ServiceError(
                ErrorCode.INVALID_INPUT,
                f"Team name must be at least {TEAM_NAME_MIN_LENGTH} characters"
            )
        if len(trimmed) > TEAM_NAME_MAX_LENGTH:
            raise ServiceError(
                ErrorCode.INVALID_INPUT,
                f"Team name must be at most {TEAM_NAME_MAX_LENGTH} characters"
            )
        if not TEAM_NAME_PATTERN.match(trimmed):
            raise ServiceError(
                ErrorCode.INVALID_INPUT,
                "Team name may only contain letters, digits, Chinese characters, spaces, hyphens and underscores"
            )
        return trimmed

    @staticmethod
    def invite_code(code: str) -> str:
        normalized = (code or "").strip().upper()
        if not INVITE_CODE_PATTERN.match(normalized):
            raise ServiceError(
                ErrorCode.INVALID_INPUT,
                f"Invite codes are {INVITE_CODE_LENGTH} letters or digits"
            )
        return normalized

    @staticmethod
    def identifier(identifier: str) -> Tuple[str, bool]:
        """Return (trimmed identifier, is_email); emails come back in normalized form."""
        cleaned = (identifier or "").strip()
        if not cleaned:
            raise ServiceError(ErrorCode.INVALID_INPUT, "Please enter an email address or username")
        if "@" not in cleaned:
            return cleaned, False
        try:
            validated = validate_email(cleaned, check_deliverability=False)
        except EmailNotValidError as e:
            raise ServiceError(ErrorCode.INVALID_EMAIL, diagnostic={"message": str(e)})
        return validated.normalized, True
