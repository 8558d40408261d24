from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .model import Principal

if TYPE_CHECKING:
    from .service import SessionService


class AuthorizationGate:
    """Single check used by every privileged operation.

    ``require_role`` verifies the token (AuthenticationError when absent,
    expired or tampered) and then compares role rank
    STUDENT < TRAINER < ADMIN (AuthorizationError when too low). The role
    comes from the token claims; see SessionService for the staleness window.
    """

    def __init__(self, sessions: "SessionService"):
        self._sessions = sessions

    def require_role(self, token: Optional[str], minimum_role: Role = Role.STUDENT) -> Principal:
        principal = self._sessions.verify(token)
        ensure_role(principal, minimum_role)
        return principal


def ensure_role(principal: Principal, minimum_role: Role) -> None:
    if not principal.role.satisfies(minimum_role):
        raise AuthorizationError("You do not have permission to perform this action")
