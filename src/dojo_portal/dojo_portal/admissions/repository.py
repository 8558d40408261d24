from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import AdmissionStatus
from .model import Admission, NewAdmission


class AdmissionRepository(Protocol):
    def create_admission(self, admission: NewAdmission) -> int:
        raise NotImplementedError

    def get_by_id(self, admission_id: int) -> Optional[Admission]:
        raise NotImplementedError

    def attach_transaction_id(self, admission_id: int, *, transaction_id: str) -> bool:
        """Store the reference only if none is set yet; False otherwise."""

        raise NotImplementedError

    def list_all(self) -> Sequence[Admission]:
        raise NotImplementedError

    def set_status(self, admission_id: int, *, status: AdmissionStatus) -> bool:
        raise NotImplementedError
