from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import AdmissionStatus, BloodGroup, Gender
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Admission, NewAdmission
from .repository import AdmissionRepository

_ADMISSION_COLUMNS = """
    id, name, father_name, mother_name, date_of_birth, blood_group,
    email, phone, gender, image_url, status, bkash_transaction_id, created_at
"""


def _row_to_admission(r: dict) -> Admission:
    return Admission(
        admission_id=int(r["id"]),
        name=r["name"],
        father_name=r["father_name"],
        mother_name=r["mother_name"],
        date_of_birth=r["date_of_birth"],
        email=r["email"],
        phone=r["phone"],
        gender=Gender(r["gender"]),
        status=AdmissionStatus(r["status"]),
        created_at=r["created_at"],
        blood_group=BloodGroup(r["blood_group"]) if r.get("blood_group") else None,
        image_url=r.get("image_url"),
        bkash_transaction_id=r.get("bkash_transaction_id"),
    )


class MySQLAdmissionRepository(AdmissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_admission(self, admission: NewAdmission) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO admissions(
                    name, father_name, mother_name, date_of_birth, blood_group,
                    email, phone, gender, image_url, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    admission.name,
                    admission.father_name,
                    admission.mother_name,
                    admission.date_of_birth,
                    admission.blood_group.value if admission.blood_group else None,
                    admission.email,
                    admission.phone,
                    admission.gender.value,
                    admission.image_url,
                    AdmissionStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, admission_id: int) -> Optional[Admission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ADMISSION_COLUMNS} FROM admissions WHERE id=%s", (int(admission_id),))
            row = fetchone(cur)
            return _row_to_admission(row) if row else None

    def attach_transaction_id(self, admission_id: int, *, transaction_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE admissions
                SET bkash_transaction_id=%s
                WHERE id=%s AND bkash_transaction_id IS NULL
                """,
                (transaction_id, int(admission_id)),
            )
            return cur.rowcount > 0

    def list_all(self) -> Sequence[Admission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ADMISSION_COLUMNS} FROM admissions ORDER BY created_at DESC, id DESC")
            return [_row_to_admission(r) for r in fetchall(cur)]

    def set_status(self, admission_id: int, *, status: AdmissionStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE admissions SET status=%s WHERE id=%s", (status.value, int(admission_id)))
            return cur.rowcount > 0
