from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Credential store interface.

    Services depend on this protocol, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        """Exact match: case and trailing spaces are significant (binary collation)."""

        raise NotImplementedError

    def list_users(self) -> Sequence[User]:
        """All accounts, newest first."""

        raise NotImplementedError

    def create_user(
        self,
        *,
        name: str,
        username: str,
        password_hash: str,
        role: Role,
        email: Optional[str] = None,
    ) -> int:
        """Insert a user; raises ConstraintViolation when the username is taken."""

        raise NotImplementedError

    def update_password_hash(self, user_id: int, *, password_hash: str) -> bool:
        raise NotImplementedError

    def update_role(self, user_id: int, *, role: Role) -> bool:
        raise NotImplementedError
