"""Domain errors. Each carries the HTTP status and response code the API maps it to."""
from __future__ import annotations

from typing import Optional


class ArenaError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    code = 500

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationError(ArenaError):
    """Malformed or out-of-range input. Caller-correctable."""

    status_code = 400
    code = 1

    def __init__(self, field: str, reason: str):
        super().__init__(reason, field=field)
        self.reason = reason


class Conflict(ArenaError):
    """Duplicate nickname, email or headset."""

    status_code = 409
    code = 2


class DuplicateNickname(Conflict):
    def __init__(self, nickname: str):
        super().__init__("Nickname already exists", field="nickname")
        self.nickname = nickname


class DuplicateEmail(Conflict):
    def __init__(self, email: str):
        super().__init__("Email already exists", field="email")
        self.email = email


class NotFound(ArenaError):
    """Unknown nickname, headset or session."""

    status_code = 404
    code = 1


class UnknownNickname(NotFound):
    """Headset assignment named a nickname nobody registered."""

    code = 2

    def __init__(self, nickname: str):
        super().__init__("Nickname not found", field="nickname")
        self.nickname = nickname


class AccountNotFound(NotFound):
    code = 2

    def __init__(self, username: str):
        super().__init__("Account not found", field="rUsername")
        self.username = username


class Unauthorized(ArenaError):
    """Missing, invalid or expired credentials."""

    status_code = 401
    code = 1


class Forbidden(ArenaError):
    """Authenticated, but the account's role does not allow the operation."""

    status_code = 403
    code = 3


class UnknownPlayer(ArenaError):
    """A nickname in a session submission did not resolve to a player."""

    status_code = 400
    code = 2

    def __init__(self, nickname: str):
        super().__init__(f"Player not found: {nickname}", field="players")
        self.nickname = nickname


class InternalError(ArenaError):
    """Storage or unexpected failure. Nothing was written."""

    status_code = 500
    code = 500
