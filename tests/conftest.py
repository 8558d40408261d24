from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta

import pytest
from werkzeug.security import generate_password_hash

from src.dojo_portal.dojo_portal.admissions.model import Admission
from src.dojo_portal.dojo_portal.container import assemble
from src.dojo_portal.dojo_portal.core.enums import AdmissionStatus, PaymentStatus, Role
from src.dojo_portal.dojo_portal.database.mysql_base import ConstraintViolation
from src.dojo_portal.dojo_portal.payments.model import LedgerEntry, Payment, PaymentOwner
from src.dojo_portal.dojo_portal.sessions.model import Principal
from src.dojo_portal.dojo_portal.users.model import User

SECRET_KEY = "test-secret"
SETUP_TOKEN = "test-setup-token"
BASE_TIME = datetime(2026, 2, 1, 10, 0, 0)

# Hashing is slow on purpose; compute the demo hashes once per run.
PASSWORDS = {
    "admin": "admin123",
    "trainer": "trainer123",
    "alice": "secret123",
    "bob": "hunter22",
}
_HASHES = {username: generate_password_hash(pw) for username, pw in PASSWORDS.items()}


class FakeUsersRepo:
    """Usernames compare exactly, like the binary-collated column."""

    def __init__(self):
        self._next_id = 1
        self._users: dict[int, User] = {}

    def add(self, *, name, username, role, password_hash=None, email=None):
        uid = self._next_id
        self._next_id += 1
        self._users[uid] = User(
            user_id=uid,
            name=name,
            username=username,
            password_hash=password_hash or _HASHES.get(username, "CHANGE_ME"),
            role=role,
            email=email,
            created_at=BASE_TIME,
        )
        return uid

    def remove(self, user_id):
        self._users.pop(int(user_id), None)

    def get_by_id(self, user_id):
        return self._users.get(int(user_id))

    def get_by_username(self, username):
        for u in self._users.values():
            if u.username == username:
                return u
        return None

    def list_users(self):
        return sorted(self._users.values(), key=lambda u: (u.created_at, u.user_id), reverse=True)

    def create_user(self, *, name, username, password_hash, role, email=None):
        if self.get_by_username(username):
            raise ConstraintViolation("uq_users_username", "username")
        return self.add(name=name, username=username, role=role, password_hash=password_hash, email=email)

    def update_password_hash(self, user_id, *, password_hash):
        u = self._users.get(int(user_id))
        if not u:
            return False
        self._users[u.user_id] = replace(u, password_hash=password_hash)
        return True

    def update_role(self, user_id, *, role):
        u = self._users.get(int(user_id))
        if not u:
            return False
        self._users[u.user_id] = replace(u, role=role)
        return True


class FakePaymentsRepo:
    """Mirrors the table: transaction ids are unique at insert time, under a lock."""

    def __init__(self, users: FakeUsersRepo):
        self._users = users
        self._lock = threading.Lock()
        self._next_id = 1
        self.payments: dict[int, Payment] = {}

    def create_payment(self, *, user_id, payment):
        with self._lock:
            if any(p.transaction_id == payment.transaction_id for p in self.payments.values()):
                raise ConstraintViolation("uq_payments_transaction_id", "transaction_id")
            pid = self._next_id
            self._next_id += 1
            self.payments[pid] = Payment(
                payment_id=pid,
                created_at=BASE_TIME + timedelta(minutes=pid),
                type=payment.type,
                amount=payment.amount,
                transaction_id=payment.transaction_id,
                status=PaymentStatus.PENDING,
                user_id=int(user_id),
            )
            return pid

    def get_by_id(self, payment_id):
        return self.payments.get(int(payment_id))

    def _newest_first(self, payments):
        return sorted(payments, key=lambda p: (p.created_at, p.payment_id), reverse=True)

    def list_ledger(self):
        entries = []
        for p in self._newest_first(self.payments.values()):
            u = self._users.get_by_id(p.user_id)
            owner = (
                PaymentOwner(user_id=u.user_id, name=u.name, username=u.username, email=u.email, image_url=u.image_url)
                if u
                else None
            )
            entries.append(LedgerEntry(payment=p, owner=owner))
        return entries

    def list_for_user(self, user_id):
        return self._newest_first(p for p in self.payments.values() if p.user_id == int(user_id))

    def set_status(self, payment_id, *, status):
        p = self.payments.get(int(payment_id))
        if not p:
            return False
        self.payments[p.payment_id] = replace(p, status=status)
        return True

    def delete_by_id(self, payment_id):
        return self.payments.pop(int(payment_id), None) is not None


class FakeAdmissionsRepo:
    def __init__(self):
        self._next_id = 1
        self.admissions: dict[int, Admission] = {}

    def create_admission(self, admission):
        aid = self._next_id
        self._next_id += 1
        self.admissions[aid] = Admission(
            admission_id=aid,
            name=admission.name,
            father_name=admission.father_name,
            mother_name=admission.mother_name,
            date_of_birth=admission.date_of_birth,
            email=admission.email,
            phone=admission.phone,
            gender=admission.gender,
            status=AdmissionStatus.PENDING,
            created_at=BASE_TIME + timedelta(minutes=aid),
            blood_group=admission.blood_group,
            image_url=admission.image_url,
        )
        return aid

    def get_by_id(self, admission_id):
        return self.admissions.get(int(admission_id))

    def attach_transaction_id(self, admission_id, *, transaction_id):
        a = self.admissions.get(int(admission_id))
        if not a or a.bkash_transaction_id:
            return False
        self.admissions[a.admission_id] = replace(a, bkash_transaction_id=transaction_id)
        return True

    def list_all(self):
        return sorted(self.admissions.values(), key=lambda a: a.created_at, reverse=True)

    def set_status(self, admission_id, *, status):
        a = self.admissions.get(int(admission_id))
        if not a:
            return False
        self.admissions[a.admission_id] = replace(a, status=status)
        return True


def principal_for(user: User) -> Principal:
    return Principal(user_id=user.user_id, username=user.username, display_name=user.name, role=user.role)


@pytest.fixture(autouse=True)
def testing_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")


@pytest.fixture()
def users_repo():
    repo = FakeUsersRepo()
    repo.add(name="Sensei Admin", username="admin", role=Role.ADMIN, email="admin@example.com")
    repo.add(name="Coach Trainer", username="trainer", role=Role.TRAINER)
    repo.add(name="Alice", username="alice", role=Role.STUDENT, email="alice@example.com")
    repo.add(name="Bob", username="bob", role=Role.STUDENT)
    return repo


@pytest.fixture()
def payments_repo(users_repo):
    return FakePaymentsRepo(users_repo)


@pytest.fixture()
def admissions_repo():
    return FakeAdmissionsRepo()


@pytest.fixture()
def container(users_repo, payments_repo, admissions_repo):
    return assemble(
        users_repo=users_repo,
        payments_repo=payments_repo,
        admissions_repo=admissions_repo,
        secret_key=SECRET_KEY,
        setup_token=SETUP_TOKEN,
    )


@pytest.fixture()
def admin(users_repo):
    return principal_for(users_repo.get_by_username("admin"))


@pytest.fixture()
def trainer(users_repo):
    return principal_for(users_repo.get_by_username("trainer"))


@pytest.fixture()
def alice(users_repo):
    return principal_for(users_repo.get_by_username("alice"))


@pytest.fixture()
def app(container):
    from src.dojo_portal.dojo_portal.main import create_app

    return create_app(container)


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def login(client):
    def _login(username, password=None):
        return client.post(
            "/api/login",
            json={"username": username, "password": password if password is not None else PASSWORDS[username]},
        )

    return _login
