from __future__ import annotations

from typing import Mapping, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    ``field_errors`` maps request field names to messages so a caller can fix
    every problem in one round trip.
    """

    def __init__(self, message: str = "Invalid input", field_errors: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.field_errors = dict(field_errors or {})


class DuplicateTransactionError(ValidationError):
    """Raised when a well-formed transaction id is already in the ledger."""

    def __init__(self, field: str = "transactionId"):
        super().__init__(
            "Duplicate transaction ID",
            {field: "This transaction ID is already used"},
        )


class AuthenticationError(DomainError):
    """Raised when there is no valid session."""


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid.

    The message is fixed: an unknown username and a wrong password must be
    indistinguishable.
    """

    def __init__(self):
        super().__init__("Invalid credentials")


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""
