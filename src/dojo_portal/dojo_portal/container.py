from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .admissions.mysql_admission_repository import MySQLAdmissionRepository
from .admissions.repository import AdmissionRepository
from .admissions.service import AdmissionService
from .core.constants import DEFAULT_SESSION_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .payments.mysql_payment_repository import MySQLPaymentRepository
from .payments.repository import PaymentRepository
from .payments.service import PaymentService
from .sessions.gate import AuthorizationGate
from .sessions.service import SessionService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    payments_repo: PaymentRepository
    admissions_repo: AdmissionRepository

    auth_service: AuthService
    user_service: UserService
    session_service: SessionService
    gate: AuthorizationGate
    payment_service: PaymentService
    admission_service: AdmissionService


def assemble(
    *,
    users_repo: UserRepository,
    payments_repo: PaymentRepository,
    admissions_repo: AdmissionRepository,
    secret_key: str,
    session_days: int = DEFAULT_SESSION_DAYS,
    setup_token: Optional[str] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of any repository implementations."""

    auth_service = AuthService(users_repo)
    session_service = SessionService(auth_service, secret_key=secret_key, session_days=session_days)

    return Container(
        conn=conn,
        users_repo=users_repo,
        payments_repo=payments_repo,
        admissions_repo=admissions_repo,
        auth_service=auth_service,
        user_service=UserService(users_repo, setup_token=setup_token),
        session_service=session_service,
        gate=AuthorizationGate(session_service),
        payment_service=PaymentService(payments_repo),
        admission_service=AdmissionService(admissions_repo),
    )


def build_container(
    *,
    db_config: dict,
    secret_key: str,
    session_days: int = DEFAULT_SESSION_DAYS,
    setup_token: Optional[str] = None,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    return assemble(
        users_repo=MySQLUserRepository(conn),
        payments_repo=MySQLPaymentRepository(conn),
        admissions_repo=MySQLAdmissionRepository(conn),
        secret_key=secret_key,
        session_days=session_days,
        setup_token=setup_token,
        conn=conn,
    )
