from __future__ import annotations

from flask import Flask, g, jsonify

from ..common.http import error_response, json_body, role_required, unexpected_response
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    admin_required = role_required(container, Role.ADMIN)

    @app.route("/api/admissions", methods=["POST"], endpoint="create_admission")
    def create_admission():
        try:
            admission_id = container.admission_service.create_admission(json_body())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_response("creating an admission")
        return jsonify({"ok": True, "id": admission_id}), 201

    @app.route("/api/admissions/payment", methods=["POST"], endpoint="attach_admission_payment")
    def attach_admission_payment():
        data = json_body()
        try:
            admission_id = container.admission_service.attach_payment_reference(
                admission_id=data.get("admissionId"),
                transaction_id=data.get("transactionId"),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_response("linking an admission payment")
        return jsonify({"ok": True, "id": admission_id})

    @app.route("/api/admin/admissions", methods=["GET"], endpoint="admin_admissions")
    @admin_required
    def admin_admissions():
        try:
            rows = container.admission_service.list_admissions(principal=g.principal)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_response("listing admissions")
        return jsonify({"ok": True, "admissions": rows})

    @app.route("/api/admin/admissions/<int:admission_id>/approve", methods=["POST"], endpoint="admin_approve_admission")
    @admin_required
    def admin_approve_admission(admission_id: int):
        try:
            container.admission_service.approve_admission(principal=g.principal, admission_id=admission_id)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_response("approving an admission")
        return jsonify({"success": True})

    @app.route("/api/admin/admissions/<int:admission_id>/reject", methods=["POST"], endpoint="admin_reject_admission")
    @admin_required
    def admin_reject_admission(admission_id: int):
        try:
            container.admission_service.reject_admission(principal=g.principal, admission_id=admission_id)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_response("rejecting an admission")
        return jsonify({"success": True})
