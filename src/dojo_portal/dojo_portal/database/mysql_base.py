from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

# Unique indexes declared in database/schema.sql, mapped to the domain field they guard.
UNIQUE_CONSTRAINT_FIELDS = {
    "uq_payments_transaction_id": "transaction_id",
    "uq_users_username": "username",
}

_DUP_KEY_RE = re.compile(r"for key '(?:[^'.]+\.)?([^']+)'")


class StorageError(Exception):
    """Storage or infrastructure failure not attributable to caller input."""


class ConstraintViolation(StorageError):
    """A unique constraint rejected the write."""

    def __init__(self, constraint: str, field: Optional[str]):
        super().__init__(f"Unique constraint violated: {constraint}")
        self.constraint = constraint
        self.field = field


def decode_integrity_error(err: mysql.connector.Error) -> StorageError:
    if getattr(err, "errno", None) != errorcode.ER_DUP_ENTRY:
        return StorageError(str(err))

    match = _DUP_KEY_RE.search(getattr(err, "msg", None) or str(err))
    constraint = match.group(1) if match else "unknown"
    return ConstraintViolation(constraint, UNIQUE_CONSTRAINT_FIELDS.get(constraint))


def _rollback(conn) -> None:
    # A failed rollback (dropped connection) must not mask the error being raised.
    try:
        conn.rollback()
    except mysql.connector.Error:
        logger.warning("Rollback failed", exc_info=True)


def _close(conn) -> None:
    try:
        conn.close()
    except mysql.connector.Error:
        logger.warning("Closing the connection failed", exc_info=True)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on error.

    mysql-connector errors leave this block as StorageError (or
    ConstraintViolation for duplicate keys); other exceptions pass through.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as err:
        raise StorageError(str(err)) from err

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as err:
        _rollback(conn)
        raise decode_integrity_error(err) from err
    except mysql.connector.Error as err:
        _rollback(conn)
        raise StorageError(str(err)) from err
    except Exception:
        _rollback(conn)
        raise
    finally:
        _close(conn)


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
