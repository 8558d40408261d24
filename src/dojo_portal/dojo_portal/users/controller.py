from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.http import (
    clear_session_cookie,
    error_response,
    json_body,
    role_required,
    set_session_cookie,
    unexpected_response,
)
from ..core.enums import Role
from ..core.exceptions import DomainError, InvalidCredentialsError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = role_required(container, Role.STUDENT)
    admin_required = role_required(container, Role.ADMIN)

    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        try:
            issued = container.session_service.issue(data.get("username", ""), data.get("password", ""))
        except InvalidCredentialsError:
            # Same body and status whether the username or the password was wrong.
            return jsonify({"ok": False, "error": "Invalid credentials"}), 401
        except Exception:
            return unexpected_response("logging in")

        response = jsonify({"ok": True, "user": issued.principal.public_fields()})
        set_session_cookie(response, issued.token, max_age=issued.max_age_seconds)
        return response

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        response = jsonify({"ok": True, "message": "Logged out successfully"})
        clear_session_cookie(response)
        return response

    @app.route("/api/setup", methods=["POST"], endpoint="setup")
    def setup():
        data = json_body()
        try:
            user = container.user_service.provision_admin(
                supplied_token=request.headers.get("X-TOKEN"),
                name=data.get("name", ""),
                username=data.get("username", ""),
                password=data.get("password", ""),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_response("provisioning the first admin")

        return jsonify({"ok": True, "message": "Setup completed successfully", "data": user})

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return jsonify({"ok": True, "user": g.principal.public_fields()})

    @app.route("/api/me/password", methods=["POST"], endpoint="change_password")
    @login_required
    def change_password():
        data = json_body()
        try:
            container.user_service.change_password(
                principal=g.principal,
                current_password=data.get("currentPassword", ""),
                new_password=data.get("newPassword", ""),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_response("changing a password")

        return jsonify({"ok": True})

    @app.route("/api/admin/users", methods=["GET"], endpoint="admin_users")
    @admin_required
    def admin_users():
        try:
            rows = container.user_service.list_users(principal=g.principal)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_response("listing users")
        return jsonify({"ok": True, "users": rows})

    @app.route("/api/admin/users", methods=["POST"], endpoint="admin_create_user")
    @admin_required
    def admin_create_user():
        try:
            user = container.user_service.create_account(principal=g.principal, data=json_body())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_response("creating an account")
        return jsonify({"ok": True, "user": user}), 201

    @app.route("/api/admin/users/<int:user_id>/role", methods=["POST"], endpoint="admin_change_role")
    @admin_required
    def admin_change_role(user_id: int):
        try:
            container.user_service.change_role(principal=g.principal, user_id=user_id, role=json_body().get("role", ""))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_response("changing a role")

        return jsonify({"success": True})
