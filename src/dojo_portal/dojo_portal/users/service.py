from __future__ import annotations

import hmac
import logging
from functools import lru_cache
from typing import Any, Mapping, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import to_iso
from ..common.validators import FieldErrors, clean_text, require_min_length, require_non_empty
from ..core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH, MAX_USERNAME_LENGTH, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from ..database.mysql_base import ConstraintViolation
from ..sessions.gate import ensure_role
from ..sessions.model import Principal
from .repository import UserRepository

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Compared against when the username is unknown, so both failure paths cost a hash check.
    return generate_password_hash("dojo-portal-placeholder")


def _password_matches(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except (ValueError, TypeError):
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


def _username_taken() -> ValidationError:
    return ValidationError(
        "User with this username already exists",
        {"username": "User with this username already exists"},
    )


def _check_account_lengths(errors: FieldErrors, *, name: str, username: str, email: Optional[str] = None) -> None:
    errors.check_max_length("name", name, MAX_NAME_LENGTH, "Name")
    errors.check_max_length("username", username, MAX_USERNAME_LENGTH, "Username")
    errors.check_max_length("email", email or "", MAX_EMAIL_LENGTH, "Email")


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> Principal:
        username = username if isinstance(username, str) else ""
        password = password if isinstance(password, str) else ""

        user = self._users.get_by_username(username) if username else None
        if user is None:
            _password_matches(_dummy_hash(), password)
            logger.info("Login rejected")
            raise InvalidCredentialsError()

        if not _password_matches(user.password_hash, password):
            logger.info("Login rejected")
            raise InvalidCredentialsError()

        logger.info("Login succeeded for user_id=%s", user.user_id)
        return Principal(
            user_id=user.user_id,
            username=user.username,
            display_name=user.name,
            role=user.role,
        )


class UserService:
    """Use cases: first-run provisioning, admin account management, credential maintenance."""

    def __init__(self, users: UserRepository, *, setup_token: Optional[str] = None):
        self._users = users
        self._setup_token = setup_token or ""

    def provision_admin(self, *, supplied_token: Optional[str], name: str, username: str, password: str) -> dict:
        """Create an ADMIN account, guarded by the static bootstrap secret."""

        if not self._setup_token or not supplied_token:
            raise AuthenticationError("Invalid or missing setup token")
        if not hmac.compare_digest(str(supplied_token).encode("utf-8"), self._setup_token.encode("utf-8")):
            raise AuthenticationError("Invalid or missing setup token")

        errors = FieldErrors()
        data = {"name": name, "username": username, "password": password}
        name = errors.require(data, "name", "Name is required")
        username = errors.require(data, "username", "Username is required")
        if not isinstance(password, str) or not password:
            errors.add("password", "Password is required")
        errors.raise_if_any("Missing required fields")

        _check_account_lengths(errors, name=name, username=username)
        errors.raise_if_any()

        user_id = self._insert_account(name=name, username=username, password=password, role=Role.ADMIN)
        logger.info("Provisioned admin user_id=%s username=%s", user_id, username)
        return {"id": user_id, "name": name, "username": username, "role": Role.ADMIN.value}

    def create_account(self, *, principal: Principal, data: Mapping[str, Any]) -> dict:
        """Admin creates a STUDENT or TRAINER account.

        Admins come from setup or a later role change, not from this form.
        """

        ensure_role(principal, Role.ADMIN)

        errors = FieldErrors()
        name = errors.require(data, "name", "Name is required")
        username = errors.require(data, "username", "Username is required")
        email = clean_text(data.get("email")) or None
        _check_account_lengths(errors, name=name, username=username, email=email)

        password = data.get("password")
        if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
            errors.add("password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        role = None
        role_s = errors.require(data, "role", "Role is required")
        if role_s:
            try:
                role = Role(role_s.upper())
            except ValueError:
                errors.add("role", "Invalid role")
            else:
                if role == Role.ADMIN:
                    errors.add("role", "Admin accounts cannot be created here")

        errors.raise_if_any()

        user_id = self._insert_account(name=name, username=username, password=password, role=role, email=email)
        logger.info(
            "Account user_id=%s (%s) created by admin user_id=%s", user_id, role.value, principal.user_id
        )
        return {"id": user_id, "name": name, "username": username, "email": email, "role": role.value}

    def list_users(self, *, principal: Principal) -> list[dict]:
        ensure_role(principal, Role.ADMIN)
        return [
            {
                "id": u.user_id,
                "name": u.name,
                "username": u.username,
                "email": u.email,
                "role": u.role.value,
                "profile_image_url": u.image_url,
                "created_at": to_iso(u.created_at),
            }
            for u in self._users.list_users()
        ]

    def _insert_account(
        self, *, name: str, username: str, password: str, role: Role, email: Optional[str] = None
    ) -> int:
        if self._users.get_by_username(username):
            raise _username_taken()

        try:
            return self._users.create_user(
                name=name,
                username=username,
                password_hash=generate_password_hash(password),
                role=role,
                email=email,
            )
        except ConstraintViolation as e:
            if e.field != "username":
                raise
            raise _username_taken()

    def change_password(self, *, principal: Principal, current_password: str, new_password: str) -> None:
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH, field="newPassword")

        user = self._users.get_by_id(principal.user_id)
        if not user:
            raise NotFoundError("User not found")
        if not _password_matches(user.password_hash, current_password if isinstance(current_password, str) else ""):
            raise ValidationError(
                "Current password is incorrect",
                {"currentPassword": "Current password is incorrect"},
            )

        self._users.update_password_hash(user.user_id, password_hash=generate_password_hash(new_password))
        logger.info("Password changed for user_id=%s", user.user_id)

    def change_role(self, *, principal: Principal, user_id: int, role: str) -> None:
        """Admin-only role change; effective at the user's next login."""

        ensure_role(principal, Role.ADMIN)

        role_s = require_non_empty(role, "Role", field="role")
        try:
            new_role = Role(role_s.upper())
        except ValueError:
            raise ValidationError("Invalid role", {"role": "Invalid role"})

        if int(user_id) == principal.user_id and new_role != Role.ADMIN:
            raise ValidationError("You cannot remove your own admin role", {"role": "You cannot remove your own admin role"})

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")

        self._users.update_role(user.user_id, role=new_role)
        logger.info("Role of user_id=%s changed to %s by admin user_id=%s", user.user_id, new_role.value, principal.user_id)
