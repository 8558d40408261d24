from __future__ import annotations

from enum import Enum
from typing import Optional


class Role(str, Enum):
    """Account role, ordered by privilege (see ``rank``)."""

    STUDENT = "STUDENT"
    TRAINER = "TRAINER"
    ADMIN = "ADMIN"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def satisfies(self, minimum: "Role") -> bool:
        return self.rank >= minimum.rank


_ROLE_RANK = {Role.STUDENT: 0, Role.TRAINER: 1, Role.ADMIN: 2}


class PaymentType(str, Enum):
    """Fee category of a payment."""

    MONTHLY = "MONTHLY"
    EXAM = "EXAM"
    REGISTRATION = "REGISTRATION"
    EVENT = "EVENT"

    @property
    def ui_value(self) -> str:
        return self.value.lower()

    @classmethod
    def from_ui(cls, value: object) -> Optional["PaymentType"]:
        """Map a form value (``monthly``, ``EXAM``...) to a type, or None."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self is not PaymentStatus.PENDING


class AdmissionStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class BloodGroup(str, Enum):
    A_POS = "A_POS"
    A_NEG = "A_NEG"
    B_POS = "B_POS"
    B_NEG = "B_NEG"
    O_POS = "O_POS"
    O_NEG = "O_NEG"
    AB_POS = "AB_POS"
    AB_NEG = "AB_NEG"
