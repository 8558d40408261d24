"""Session issuance and verification.

Tokens are itsdangerous ``URLSafeTimedSerializer`` payloads: HMAC-signed,
timestamped, and rejected once older than the session window. The principal
is read from the token claims alone; a role change reaches the user on their
next login (accepted staleness window of at most ``session_days``).
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from itsdangerous import BadData, SignatureExpired, URLSafeTimedSerializer

from ..core.constants import DEFAULT_SESSION_DAYS, SESSION_TOKEN_SALT
from ..core.exceptions import AuthenticationError
from ..users.service import AuthService
from .model import IssuedSession, Principal

logger = logging.getLogger(__name__)


class SessionService:
    """Use case: log in (issue a session token) and verify it on later requests."""

    def __init__(self, auth: AuthService, *, secret_key: str, session_days: int = DEFAULT_SESSION_DAYS):
        if not secret_key:
            raise ValueError("secret_key is required to sign session tokens")
        self._auth = auth
        self._serializer = URLSafeTimedSerializer(secret_key, salt=SESSION_TOKEN_SALT)
        self._max_age = int(timedelta(days=int(session_days)).total_seconds())

    @property
    def max_age_seconds(self) -> int:
        return self._max_age

    def issue(self, username: str, password: str) -> IssuedSession:
        """Check credentials and sign the resulting principal.

        Raises InvalidCredentialsError for an unknown user and for a wrong
        password alike.
        """

        principal = self._auth.authenticate(username, password)
        return IssuedSession(token=self.sign(principal), principal=principal, max_age_seconds=self._max_age)

    def sign(self, principal: Principal) -> str:
        return self._serializer.dumps(principal.to_claims())

    def verify(self, token: Optional[str]) -> Principal:
        if not token:
            raise AuthenticationError("Not authenticated")

        try:
            claims = self._serializer.loads(token, max_age=self._max_age)
        except SignatureExpired:
            logger.info("Rejected expired session token")
            raise AuthenticationError("Session expired")
        except BadData:
            logger.info("Rejected malformed or tampered session token")
            raise AuthenticationError("Not authenticated")

        principal = Principal.from_claims(claims)
        if principal is None:
            logger.warning("Session token carried an unexpected payload shape")
            raise AuthenticationError("Not authenticated")
        return principal
