from __future__ import annotations

from flask import Flask, g, jsonify

from ..common.http import error_response, json_body, role_required, unexpected_response
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = role_required(container, Role.STUDENT)
    admin_required = role_required(container, Role.ADMIN)

    @app.route("/api/payments", methods=["POST"], endpoint="create_payment")
    @login_required
    def create_payment():
        try:
            payment_id = container.payment_service.create_payment(principal=g.principal, data=json_body())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_response("creating a payment")

        return jsonify({"ok": True, "id": payment_id}), 201

    @app.route("/api/payments/mine", methods=["GET"], endpoint="my_payments")
    @login_required
    def my_payments():
        try:
            rows = container.payment_service.list_my_payments(principal=g.principal)
        except Exception:
            return unexpected_response("listing own payments")
        return jsonify({"ok": True, "payments": rows})

    @app.route("/api/admin/payments", methods=["GET"], endpoint="admin_payments")
    @admin_required
    def admin_payments():
        try:
            rows = container.payment_service.list_payments(principal=g.principal)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_response("listing payments")
        return jsonify({"ok": True, "payments": rows})

    @app.route("/api/admin/payments/<int:payment_id>/confirm", methods=["POST"], endpoint="admin_confirm_payment")
    @admin_required
    def admin_confirm_payment(payment_id: int):
        try:
            container.payment_service.confirm_payment(principal=g.principal, payment_id=payment_id)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_response("confirming a payment")
        return jsonify({"success": True})

    @app.route("/api/admin/payments/<int:payment_id>/reject", methods=["POST"], endpoint="admin_reject_payment")
    @admin_required
    def admin_reject_payment(payment_id: int):
        try:
            container.payment_service.reject_payment(principal=g.principal, payment_id=payment_id)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_response("rejecting a payment")
        return jsonify({"success": True})

    @app.route("/api/admin/payments/<int:payment_id>", methods=["DELETE"], endpoint="admin_delete_payment")
    @admin_required
    def admin_delete_payment(payment_id: int):
        try:
            container.payment_service.delete_payment(principal=g.principal, payment_id=payment_id)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_response("deleting a payment")
        return jsonify({"success": True})
