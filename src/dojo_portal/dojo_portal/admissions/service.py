from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..common.datetime_utils import to_iso
from ..common.validators import FieldErrors, clean_text
from ..core.constants import (
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    MAX_PHONE_LENGTH,
    MAX_TRANSACTION_ID_LENGTH,
    MAX_URL_LENGTH,
)
from ..core.enums import AdmissionStatus, BloodGroup, Gender, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..sessions.gate import ensure_role
from ..sessions.model import Principal
from .model import Admission, NewAdmission
from .repository import AdmissionRepository

logger = logging.getLogger(__name__)


def _parse_id(value: Any) -> Optional[int]:
    text = clean_text(value)
    # ASCII only: str.isdigit() also accepts superscripts that int() rejects.
    return int(text) if text.isascii() and text.isdigit() else None


def validate_admission_input(data: Mapping[str, Any]) -> NewAdmission:
    """Validate an application form; every field error is reported at once."""

    errors = FieldErrors()
    name = errors.require(data, "name", "Name is required")
    father_name = errors.require(data, "fatherName", "Father's name is required")
    mother_name = errors.require(data, "motherName", "Mother's name is required")
    email = errors.require(data, "email", "Email is required")
    phone = errors.require(data, "phone", "Phone is required")
    errors.check_max_length("name", name, MAX_NAME_LENGTH, "Name")
    errors.check_max_length("fatherName", father_name, MAX_NAME_LENGTH, "Father's name")
    errors.check_max_length("motherName", mother_name, MAX_NAME_LENGTH, "Mother's name")
    errors.check_max_length("email", email, MAX_EMAIL_LENGTH, "Email")
    errors.check_max_length("phone", phone, MAX_PHONE_LENGTH, "Phone")

    gender = None
    gender_s = errors.require(data, "gender", "Gender is required")
    if gender_s:
        try:
            gender = Gender(gender_s.upper())
        except ValueError:
            errors.add("gender", "Invalid gender")

    dob = errors.require_date(data, "dateOfBirth", missing="DOB is required", invalid="Invalid date of birth")

    blood_group = None
    blood_s = clean_text(data.get("bloodGroup"))
    if blood_s:
        try:
            blood_group = BloodGroup(blood_s.upper())
        except ValueError:
            errors.add("bloodGroup", "Invalid blood group")

    image_url = clean_text(data.get("imageUrl"))
    errors.check_max_length("imageUrl", image_url, MAX_URL_LENGTH, "Image URL")

    errors.raise_if_any()
    return NewAdmission(
        name=name,
        father_name=father_name,
        mother_name=mother_name,
        date_of_birth=dob,
        email=email,
        phone=phone,
        gender=gender,
        blood_group=blood_group,
        image_url=image_url or None,
    )


class AdmissionService:
    """Use cases: public application intake and admin review."""

    def __init__(self, admissions: AdmissionRepository):
        self._admissions = admissions

    def create_admission(self, data: Mapping[str, Any]) -> int:
        admission = validate_admission_input(data)
        admission_id = self._admissions.create_admission(admission)
        logger.info("Admission %s submitted", admission_id)
        return admission_id

    def attach_payment_reference(self, *, admission_id: Any, transaction_id: Any) -> int:
        """Link a mobile-payment reference to an application.

        No ledger-wide uniqueness: the reference is only stored for manual
        reconciliation. It can be set once per admission.
        """

        errors = FieldErrors()
        if isinstance(admission_id, int) and not isinstance(admission_id, bool):
            admission_id = str(admission_id)
        errors.require({"admissionId": admission_id}, "admissionId", "Admission ID is required")
        tx_id = errors.require({"transactionId": transaction_id}, "transactionId", "Transaction ID is required")
        errors.check_max_length("transactionId", tx_id, MAX_TRANSACTION_ID_LENGTH, "Transaction ID")
        errors.raise_if_any()

        parsed_id = _parse_id(admission_id)
        existing = self._admissions.get_by_id(parsed_id) if parsed_id is not None else None
        if not existing:
            raise NotFoundError("Admission not found")

        if existing.bkash_transaction_id or not self._admissions.attach_transaction_id(
            existing.admission_id, transaction_id=tx_id
        ):
            raise ValidationError(
                "A transaction ID is already recorded for this admission",
                {"transactionId": "A transaction ID is already recorded for this admission"},
            )

        logger.info("Admission %s linked to a payment reference", existing.admission_id)
        return existing.admission_id

    def list_admissions(self, *, principal: Principal) -> list[dict]:
        ensure_role(principal, Role.ADMIN)
        return [self._to_row(a) for a in self._admissions.list_all()]

    def approve_admission(self, *, principal: Principal, admission_id: int) -> None:
        self._decide(principal=principal, admission_id=admission_id, status=AdmissionStatus.APPROVED)

    def reject_admission(self, *, principal: Principal, admission_id: int) -> None:
        self._decide(principal=principal, admission_id=admission_id, status=AdmissionStatus.REJECTED)

    def _decide(self, *, principal: Principal, admission_id: int, status: AdmissionStatus) -> None:
        ensure_role(principal, Role.ADMIN)

        if not self._admissions.set_status(int(admission_id), status=status):
            raise NotFoundError("Admission not found")
        logger.info("Admission %s marked %s by admin user_id=%s", admission_id, status.value, principal.user_id)

    @staticmethod
    def _to_row(a: Admission) -> dict:
        return {
            "id": a.admission_id,
            "name": a.name,
            "fatherName": a.father_name,
            "motherName": a.mother_name,
            "dateOfBirth": to_iso(a.date_of_birth),
            "bloodGroup": a.blood_group.value if a.blood_group else None,
            "email": a.email,
            "phone": a.phone,
            "gender": a.gender.value,
            "imageUrl": a.image_url,
            "status": a.status.value,
            "bkashTransactionId": a.bkash_transaction_id,
            "createdAt": to_iso(a.created_at),
        }
