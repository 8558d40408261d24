"""Payment ledger use cases.

Self-service submission by any logged-in member, review by admins. Amounts
are normalized to two decimal places (half-up) before they reach the store,
and duplicate transaction ids are caught by the store's unique index rather
than by a lookup, so two concurrent submissions cannot both succeed.

Confirm and reject set the status on any existing payment without checking
that it is still PENDING; re-deciding a payment is allowed.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..common.datetime_utils import to_iso
from ..common.validators import FieldErrors, clean_text, format_amount, parse_amount
from ..core.constants import MAX_TRANSACTION_ID_LENGTH, UNKNOWN_OWNER_NAME
from ..core.enums import PaymentStatus, PaymentType, Role
from ..core.exceptions import DuplicateTransactionError, NotFoundError
from ..database.mysql_base import ConstraintViolation
from ..sessions.gate import ensure_role
from ..sessions.model import Principal
from .model import LedgerEntry, NewPayment, Payment
from .repository import PaymentRepository

logger = logging.getLogger(__name__)


def validate_payment_input(data: Mapping[str, Any]) -> NewPayment:
    """Validate every field and report all problems together."""

    errors = FieldErrors()

    payment_type = PaymentType.from_ui(data.get("type"))
    if payment_type is None:
        errors.add("type", "Invalid payment type")

    amount = parse_amount(data.get("amount"))
    if amount is None:
        errors.add("amount", "Amount must be a positive number")

    transaction_id = clean_text(data.get("transactionId"))
    if not transaction_id:
        errors.add("transactionId", "Transaction ID is required")
    errors.check_max_length("transactionId", transaction_id, MAX_TRANSACTION_ID_LENGTH, "Transaction ID")

    errors.raise_if_any()
    return NewPayment(type=payment_type, amount=amount, transaction_id=transaction_id)


class PaymentService:
    def __init__(self, payments: PaymentRepository):
        self._payments = payments

    def create_payment(self, *, principal: Principal, data: Mapping[str, Any]) -> int:
        new_payment = validate_payment_input(data)

        try:
            payment_id = self._payments.create_payment(user_id=principal.user_id, payment=new_payment)
        except ConstraintViolation as e:
            if e.field != "transaction_id":
                raise
            logger.info("Duplicate transaction id rejected for user_id=%s", principal.user_id)
            raise DuplicateTransactionError()

        logger.info(
            "Payment %s created by user_id=%s (%s %s)",
            payment_id,
            principal.user_id,
            new_payment.type.value,
            format_amount(new_payment.amount),
        )
        return payment_id

    def list_my_payments(self, *, principal: Principal) -> list[dict]:
        return [self._to_row(p) for p in self._payments.list_for_user(principal.user_id)]

    def list_payments(self, *, principal: Principal) -> list[dict]:
        ensure_role(principal, Role.ADMIN)
        return [self._to_admin_row(entry) for entry in self._payments.list_ledger()]

    def confirm_payment(self, *, principal: Principal, payment_id: int) -> None:
        self._decide(principal=principal, payment_id=payment_id, status=PaymentStatus.CONFIRMED)

    def reject_payment(self, *, principal: Principal, payment_id: int) -> None:
        self._decide(principal=principal, payment_id=payment_id, status=PaymentStatus.REJECTED)

    def delete_payment(self, *, principal: Principal, payment_id: int) -> None:
        ensure_role(principal, Role.ADMIN)

        if not self._payments.delete_by_id(int(payment_id)):
            raise NotFoundError("Payment not found")
        logger.info("Payment %s deleted by admin user_id=%s", payment_id, principal.user_id)

    def _decide(self, *, principal: Principal, payment_id: int, status: PaymentStatus) -> None:
        ensure_role(principal, Role.ADMIN)

        if not self._payments.set_status(int(payment_id), status=status):
            raise NotFoundError("Payment not found")
        logger.info("Payment %s marked %s by admin user_id=%s", payment_id, status.value, principal.user_id)

    @staticmethod
    def _to_row(p: Payment) -> dict:
        return {
            "id": p.payment_id,
            "created_at": to_iso(p.created_at),
            "type": p.type.ui_value,
            "amount": format_amount(p.amount),
            "bkash_transaction_id": p.transaction_id,
            "status": p.status.value.lower(),
            "user_id": p.user_id,
        }

    def _to_admin_row(self, entry: LedgerEntry) -> dict:
        p = entry.payment
        owner = entry.owner
        row = self._to_row(p)
        row["student_id"] = (owner.username if owner and owner.username else str(p.user_id))
        row["profiles"] = {
            "id": owner.user_id if owner else p.user_id,
            "name": owner.name if owner and owner.name else UNKNOWN_OWNER_NAME,
            "email": owner.email if owner else None,
            "profile_image_url": owner.image_url if owner else None,
        }
        return row
