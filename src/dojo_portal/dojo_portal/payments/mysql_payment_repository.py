from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import PaymentStatus, PaymentType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LedgerEntry, NewPayment, Payment, PaymentOwner
from .repository import PaymentRepository

_PAYMENT_COLUMNS = "p.id, p.created_at, p.type, p.amount, p.transaction_id, p.status, p.user_id"


def _row_to_payment(row: dict) -> Payment:
    return Payment(
        payment_id=int(row["id"]),
        created_at=row["created_at"],
        type=PaymentType(row["type"]),
        amount=Decimal(row["amount"]),
        transaction_id=row["transaction_id"],
        status=PaymentStatus(row["status"]),
        user_id=int(row["user_id"]),
    )


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_payment(self, *, user_id: int, payment: NewPayment) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payments(type, amount, transaction_id, status, user_id)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    payment.type.value,
                    payment.amount,
                    payment.transaction_id,
                    PaymentStatus.PENDING.value,
                    int(user_id),
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PAYMENT_COLUMNS} FROM payments p WHERE p.id=%s", (int(payment_id),))
            row = fetchone(cur)
            return _row_to_payment(row) if row else None

    def list_ledger(self) -> Sequence[LedgerEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_PAYMENT_COLUMNS},
                       u.id AS owner_id, u.name AS owner_name, u.username AS owner_username,
                       u.email AS owner_email, u.image_url AS owner_image_url
                FROM payments p
                LEFT JOIN users u ON u.id = p.user_id
                ORDER BY p.created_at DESC, p.id DESC
                """
            )
            out: list[LedgerEntry] = []
            for r in fetchall(cur):
                owner = None
                if r.get("owner_id") is not None:
                    owner = PaymentOwner(
                        user_id=int(r["owner_id"]),
                        name=r["owner_name"],
                        username=r.get("owner_username"),
                        email=r.get("owner_email"),
                        image_url=r.get("owner_image_url"),
                    )
                out.append(LedgerEntry(payment=_row_to_payment(r), owner=owner))
            return out

    def list_for_user(self, user_id: int) -> Sequence[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_PAYMENT_COLUMNS}
                FROM payments p
                WHERE p.user_id=%s
                ORDER BY p.created_at DESC, p.id DESC
                """,
                (int(user_id),),
            )
            return [_row_to_payment(r) for r in fetchall(cur)]

    def set_status(self, payment_id: int, *, status: PaymentStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE payments SET status=%s WHERE id=%s", (status.value, int(payment_id)))
            return cur.rowcount > 0

    def delete_by_id(self, payment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payments WHERE id=%s", (int(payment_id),))
            return cur.rowcount > 0
