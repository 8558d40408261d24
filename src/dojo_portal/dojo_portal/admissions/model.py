from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AdmissionStatus, BloodGroup, Gender


@dataclass(frozen=True)
class NewAdmission:
    name: str
    father_name: str
    mother_name: str
    date_of_birth: date
    email: str
    phone: str
    gender: Gender
    blood_group: Optional[BloodGroup] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class Admission:
    admission_id: int
    name: str
    father_name: str
    mother_name: str
    date_of_birth: date
    email: str
    phone: str
    gender: Gender
    status: AdmissionStatus
    created_at: datetime
    blood_group: Optional[BloodGroup] = None
    image_url: Optional[str] = None
    bkash_transaction_id: Optional[str] = None
