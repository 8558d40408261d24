from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Credential record.

    Pure data object; the password is only ever held as a salted hash.
    """

    user_id: int
    name: str
    username: str
    password_hash: str
    role: Role
    email: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
