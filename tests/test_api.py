from __future__ import annotations

import pytest

from src.dojo_portal.dojo_portal.database.mysql_base import StorageError


def _set_cookie_header(response):
    [header] = [h for h in response.headers.getlist("Set-Cookie") if h.startswith("token=")]
    return header


class TestLogin:
    def test_sets_http_only_session_cookie(self, login):
        resp = login("alice")

        assert resp.status_code == 200
        assert resp.get_json() == {
            "ok": True,
            "user": {"id": 3, "username": "alice", "name": "Alice", "role": "STUDENT"},
        }
        header = _set_cookie_header(resp)
        assert "HttpOnly" in header
        assert "SameSite=Lax" in header
        assert "Path=/" in header
        assert "Max-Age=1296000" in header

    def test_wrong_password_and_unknown_user_look_the_same(self, client):
        wrong = client.post("/api/login", json={"username": "alice", "password": "wrong"})
        ghost = client.post("/api/login", json={"username": "ghost", "password": "x"})

        assert wrong.status_code == ghost.status_code == 401
        assert wrong.get_json() == ghost.get_json() == {"ok": False, "error": "Invalid credentials"}
        assert not wrong.headers.getlist("Set-Cookie")

    def test_logout_ends_the_session(self, client, login):
        login("alice")
        assert client.get("/api/me").status_code == 200

        resp = client.post("/api/logout")
        assert resp.status_code == 200
        assert "Max-Age=0" in _set_cookie_header(resp)

        assert client.get("/api/me").status_code == 401

    def test_me_requires_session(self, client):
        resp = client.get("/api/me")
        assert resp.status_code == 401
        assert resp.get_json()["ok"] is False

    def test_tampered_cookie_is_rejected(self, client):
        client.set_cookie("token", "forged.value.sig")
        assert client.get("/api/me").status_code == 401


class TestPayments:
    def test_create_list_and_duplicate(self, client, login):
        login("alice")

        created = client.post("/api/payments", json={"type": "monthly", "amount": "100", "transactionId": "TX1"})
        assert created.status_code == 201
        assert created.get_json()["ok"] is True

        mine = client.get("/api/payments/mine").get_json()["payments"]
        assert [(p["amount"], p["status"]) for p in mine] == [("100.00", "pending")]

        dup = client.post("/api/payments", json={"type": "exam", "amount": "5", "transactionId": "TX1"})
        assert dup.status_code == 409
        assert dup.get_json() == {
            "ok": False,
            "error": "Duplicate transaction ID",
            "fieldErrors": {"transactionId": "This transaction ID is already used"},
        }

    def test_validation_errors(self, client, login):
        login("alice")

        resp = client.post("/api/payments", json={"type": "", "amount": "abc"})
        body = resp.get_json()
        assert resp.status_code == 400
        assert set(body["fieldErrors"]) == {"type", "amount", "transactionId"}

    @pytest.mark.parametrize(
        "payload, field",
        [
            ({"type": "monthly", "amount": "100", "transactionId": "T" * 101}, "transactionId"),
            ({"type": "monthly", "amount": "1_000", "transactionId": "TX1"}, "amount"),
        ],
    )
    def test_out_of_range_input_is_a_field_error(self, client, login, payments_repo, payload, field):
        login("alice")

        resp = client.post("/api/payments", json=payload)
        assert resp.status_code == 400
        assert set(resp.get_json()["fieldErrors"]) == {field}
        assert payments_repo.payments == {}

    def test_anonymous_cannot_submit(self, client, payments_repo):
        resp = client.post("/api/payments", json={"type": "monthly", "amount": "1", "transactionId": "X"})
        assert resp.status_code == 401
        assert payments_repo.payments == {}

    def test_student_cannot_use_admin_endpoints(self, client, login, payments_repo):
        login("alice")
        client.post("/api/payments", json={"type": "monthly", "amount": "100", "transactionId": "TX1"})
        [pid] = payments_repo.payments

        assert client.get("/api/admin/payments").status_code == 403
        assert client.post(f"/api/admin/payments/{pid}/confirm").status_code == 403
        assert client.delete(f"/api/admin/payments/{pid}").status_code == 403
        assert payments_repo.get_by_id(pid).status.value == "PENDING"

    def test_admin_review_flow(self, client, login, payments_repo):
        login("alice")
        client.post("/api/payments", json={"type": "monthly", "amount": "100", "transactionId": "TX1"})
        [pid] = payments_repo.payments

        login("admin")
        ledger = client.get("/api/admin/payments").get_json()["payments"]
        assert ledger[0]["profiles"]["name"] == "Alice"

        assert client.post(f"/api/admin/payments/{pid}/confirm").get_json() == {"success": True}
        assert payments_repo.get_by_id(pid).status.value == "CONFIRMED"
        assert client.post(f"/api/admin/payments/{pid}/reject").status_code == 200
        assert client.delete(f"/api/admin/payments/{pid}").get_json() == {"success": True}
        assert client.delete(f"/api/admin/payments/{pid}").status_code == 404
        assert client.post("/api/admin/payments/999/confirm").status_code == 404

    def test_storage_failure_returns_generic_error(self, client, login, payments_repo, monkeypatch):
        def broken(**kwargs):
            raise StorageError("Can't connect to MySQL server on 'db-internal:3306'")

        monkeypatch.setattr(payments_repo, "create_payment", broken)
        login("alice")

        resp = client.post("/api/payments", json={"type": "monthly", "amount": "1", "transactionId": "X"})
        assert resp.status_code == 500
        assert resp.get_json() == {"ok": False, "error": "Internal server error"}


class TestSetup:
    def test_requires_token_header(self, client):
        resp = client.post("/api/setup", json={"name": "Head", "username": "head", "password": "kiai!!"})
        assert resp.status_code == 401

    def test_provisions_admin(self, client):
        resp = client.post(
            "/api/setup",
            json={"name": "Head", "username": "head", "password": "kiai!!"},
            headers={"X-TOKEN": "test-setup-token"},
        )
        assert resp.status_code == 200
        assert resp.get_json()["data"]["role"] == "ADMIN"

        assert client.post("/api/login", json={"username": "head", "password": "kiai!!"}).status_code == 200
        assert client.get("/api/admin/payments").status_code == 200

    def test_missing_fields(self, client):
        resp = client.post("/api/setup", json={}, headers={"X-TOKEN": "test-setup-token"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Missing required fields"


class TestAccount:
    def test_change_password(self, client, login):
        login("bob")
        resp = client.post("/api/me/password", json={"currentPassword": "hunter22", "newPassword": "hunter33"})
        assert resp.status_code == 200

        client.post("/api/logout")
        assert login("bob", "hunter22").status_code == 401
        assert login("bob", "hunter33").status_code == 200

    def test_admin_changes_role(self, client, login, users_repo):
        login("admin")
        bob_id = users_repo.get_by_username("bob").user_id

        assert client.post(f"/api/admin/users/{bob_id}/role", json={"role": "TRAINER"}).status_code == 200
        assert users_repo.get_by_id(bob_id).role.value == "TRAINER"
        assert client.post(f"/api/admin/users/{bob_id}/role", json={"role": "NINJA"}).status_code == 400
        assert client.post("/api/admin/users/999/role", json={"role": "TRAINER"}).status_code == 404

    def test_admin_creates_and_lists_accounts(self, client, login):
        login("admin")

        created = client.post(
            "/api/admin/users", json={"name": "Kai", "username": "kai", "password": "dojo123", "role": "TRAINER"}
        )
        assert created.status_code == 201
        assert created.get_json()["user"]["role"] == "TRAINER"

        users = client.get("/api/admin/users").get_json()["users"]
        assert "kai" in {u["username"] for u in users}
        assert all("password_hash" not in u for u in users)

        dup = client.post(
            "/api/admin/users", json={"name": "Kai", "username": "kai", "password": "dojo123", "role": "STUDENT"}
        )
        assert dup.status_code == 400
        assert "username" in dup.get_json()["fieldErrors"]

        client.post("/api/logout")
        assert login("kai", "dojo123").status_code == 200
        assert client.get("/api/me").get_json()["user"]["role"] == "TRAINER"

    def test_account_admin_requires_admin(self, client, login, users_repo):
        assert client.get("/api/admin/users").status_code == 401

        login("alice")
        assert client.get("/api/admin/users").status_code == 403
        resp = client.post(
            "/api/admin/users", json={"name": "X", "username": "x", "password": "dojo123", "role": "STUDENT"}
        )
        assert resp.status_code == 403
        assert users_repo.get_by_username("x") is None


class TestAdmissions:
    FORM = {
        "name": "Rafi Ahmed",
        "fatherName": "Karim Ahmed",
        "motherName": "Nasrin Ahmed",
        "dateOfBirth": "2012-05-14",
        "email": "rafi@example.com",
        "phone": "01700000000",
        "gender": "MALE",
    }

    def test_public_intake_and_payment_link(self, client, admissions_repo):
        created = client.post("/api/admissions", json=self.FORM)
        assert created.status_code == 201
        aid = created.get_json()["id"]

        linked = client.post("/api/admissions/payment", json={"admissionId": str(aid), "transactionId": "BK1"})
        assert linked.status_code == 200
        assert admissions_repo.get_by_id(aid).bkash_transaction_id == "BK1"

    @pytest.mark.parametrize("admission_id", ["999", "abc", "²"])
    def test_payment_link_unknown_admission(self, client, admissions_repo, admission_id):
        resp = client.post("/api/admissions/payment", json={"admissionId": admission_id, "transactionId": "BK1"})
        assert resp.status_code == 404
        assert admissions_repo.admissions == {}

    def test_invalid_form(self, client):
        resp = client.post("/api/admissions", json={"name": "Only Name"})
        assert resp.status_code == 400
        assert "dateOfBirth" in resp.get_json()["fieldErrors"]

    def test_admin_review(self, client, login):
        aid = client.post("/api/admissions", json=self.FORM).get_json()["id"]

        assert client.get("/api/admin/admissions").status_code == 401
        login("trainer")
        assert client.post(f"/api/admin/admissions/{aid}/approve").status_code == 403

        login("admin")
        assert client.post(f"/api/admin/admissions/{aid}/approve").get_json() == {"success": True}
        [row] = client.get("/api/admin/admissions").get_json()["admissions"]
        assert row["status"] == "APPROVED"
