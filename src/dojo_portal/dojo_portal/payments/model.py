from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PaymentStatus, PaymentType


@dataclass(frozen=True)
class Payment:
    payment_id: int
    created_at: datetime
    type: PaymentType
    amount: Decimal
    transaction_id: str
    status: PaymentStatus
    user_id: int


@dataclass(frozen=True)
class PaymentOwner:
    """Owner identity captured at read time (not stored with the payment)."""

    user_id: int
    name: str
    username: Optional[str] = None
    email: Optional[str] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class LedgerEntry:
    payment: Payment
    owner: Optional[PaymentOwner]


@dataclass(frozen=True)
class NewPayment:
    """Validated creation input."""

    type: PaymentType
    amount: Decimal
    transaction_id: str
