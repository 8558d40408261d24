from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import PaymentStatus
from .model import LedgerEntry, NewPayment, Payment


class PaymentRepository(Protocol):
    def create_payment(self, *, user_id: int, payment: NewPayment) -> int:
        """Insert a PENDING payment in a single statement.

        Raises ConstraintViolation(field="transaction_id") when the
        transaction id already exists; uniqueness is the store's job. The
        column compares exactly (binary collation), so "tx1" and "TX1" differ.
        """

        raise NotImplementedError

    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        raise NotImplementedError

    def list_ledger(self) -> Sequence[LedgerEntry]:
        """All payments newest-first, joined with the owner when it still exists."""

        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[Payment]:
        raise NotImplementedError

    def set_status(self, payment_id: int, *, status: PaymentStatus) -> bool:
        raise NotImplementedError

    def delete_by_id(self, payment_id: int) -> bool:
        raise NotImplementedError
