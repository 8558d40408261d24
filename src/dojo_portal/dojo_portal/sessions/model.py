from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Principal:
    """Authenticated identity resolved from a session token. Never persisted."""

    user_id: int
    username: str
    display_name: str
    role: Role

    def to_claims(self) -> Dict[str, Any]:
        return {
            "id": self.user_id,
            "username": self.username,
            "name": self.display_name,
            "role": self.role.value,
        }

    @classmethod
    def from_claims(cls, claims: Any) -> Optional["Principal"]:
        """Rebuild a principal from token claims; None when the shape is wrong."""
        if not isinstance(claims, dict):
            return None

        user_id = claims.get("id")
        username = claims.get("username")
        name = claims.get("name")
        role = claims.get("role")
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            return None
        if not isinstance(username, str) or not isinstance(name, str) or not isinstance(role, str):
            return None
        try:
            parsed_role = Role(role)
        except ValueError:
            return None
        return cls(user_id=user_id, username=username, display_name=name, role=parsed_role)

    def public_fields(self) -> Dict[str, Any]:
        return self.to_claims()


@dataclass(frozen=True)
class IssuedSession:
    token: str
    principal: Principal
    max_age_seconds: int
