from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.web import admin_required, current_role, current_user_id, json_body, json_errors, login_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from .model import DeviceInfo, User


def user_to_dict(u: User) -> dict:
    return {
        "id": u.user_id,
        "name": u.full_name,
        "email": u.email,
        "department": u.department,
        "role": u.role.value,
        "isActive": u.is_active,
        "isApproved": u.is_approved,
    }


def _start_session(user: User) -> None:
    session.clear()
    session["user_id"] = user.user_id
    session["name"] = user.full_name
    session["role"] = user.role.value


def register(app: Flask, container: Container) -> None:
    @app.route("/api/login", methods=["POST"], endpoint="login")
    @json_errors
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        _start_session(s_user)
        return jsonify({"success": True, "user": {"id": s_user.user_id, "name": s_user.full_name, "role": s_user.role.value}})

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/register", methods=["POST"], endpoint="self_register")
    @json_errors
    def self_register():
        data = json_body()
        user_id = container.user_service.create_account(
            full_name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=Role.STAFF,
            department=data.get("department"),
        )
        return jsonify({"success": True, "user": user_to_dict(container.user_service.get(user_id))}), 201

    @app.route("/api/devices/register", methods=["POST"], endpoint="device_register")
    @login_required
    @json_errors
    def device_register():
        data = json_body()
        raw = data.get("deviceInfo") or {}
        info = DeviceInfo(
            user_agent=str(raw.get("userAgent", "")),
            screen_resolution=str(raw.get("screenResolution", "")),
            timezone=str(raw.get("timezone", "")),
            platform=str(raw.get("platform", "")),
            language=str(raw.get("language", "")),
        )
        device = container.device_service.register_device(
            user_id=current_user_id(),
            info=info,
            fingerprint=data.get("fingerprint"),
        )
        return jsonify({"success": True, "deviceId": device.device_id, "fingerprint": device.fingerprint})

    @app.route("/api/device-check", methods=["GET"], endpoint="device_check")
    @json_errors
    def device_check():
        fingerprint = (request.args.get("fingerprint") or "").strip()
        if not fingerprint:
            raise ValidationError("fingerprint is required")

        user = container.device_service.find_user_by_device(fingerprint)
        if user is None:
            return jsonify({"success": True, "isRegistered": False})
        return jsonify({
            "success": True,
            "isRegistered": True,
            "user": {"id": user.user_id, "name": user.full_name, "department": user.department},
        })

    @app.route("/api/devices/login", methods=["POST"], endpoint="device_login")
    @json_errors
    def device_login():
        fingerprint = str(json_body().get("fingerprint") or "").strip()
        if not fingerprint:
            raise ValidationError("fingerprint is required")

        user = container.device_service.find_user_by_device(fingerprint)
        if user is None:
            raise AuthenticationError("Device is not registered")
        _start_session(user)
        return jsonify({"success": True, "user": {"id": user.user_id, "name": user.full_name, "role": user.role.value}})

    @app.route("/api/admin/users", methods=["GET"], endpoint="admin_users")
    @admin_required
    @json_errors
    def admin_users():
        users = container.user_service.list_users(current_role=current_role())
        return jsonify({"success": True, "data": [user_to_dict(u) for u in users]})

    @app.route("/api/admin/users", methods=["POST"], endpoint="admin_create_user")
    @admin_required
    @json_errors
    def admin_create_user():
        data = json_body()
        try:
            role = Role(data.get("role") or Role.STAFF.value)
        except ValueError:
            raise ValidationError("Invalid role")

        user_id = container.user_service.create_account(
            full_name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=role,
            department=data.get("department"),
        )
        return jsonify({"success": True, "data": user_to_dict(container.user_service.get(user_id))}), 201

    @app.route("/api/admin/users/<int:user_id>", methods=["PUT"], endpoint="admin_update_user")
    @admin_required
    @json_errors
    def admin_update_user(user_id: int):
        data = json_body()
        user = container.user_service.update_profile(
            current_role=current_role(),
            user_id=user_id,
            full_name=data.get("name", ""),
            department=data.get("department"),
        )
        return jsonify({"success": True, "data": user_to_dict(user)})

    @app.route("/api/admin/users/<int:user_id>/approval", methods=["POST"], endpoint="admin_approve_user")
    @admin_required
    @json_errors
    def admin_approve_user(user_id: int):
        is_approved = json_body().get("isApproved")
        if not isinstance(is_approved, bool):
            raise ValidationError("isApproved must be true or false")
        user = container.user_service.set_approval(current_role=current_role(), user_id=user_id, is_approved=is_approved)
        return jsonify({"success": True, "data": user_to_dict(user)})

    @app.route("/api/admin/users/<int:user_id>/active", methods=["POST"], endpoint="admin_set_active")
    @admin_required
    @json_errors
    def admin_set_active(user_id: int):
        is_active = json_body().get("isActive")
        if not isinstance(is_active, bool):
            raise ValidationError("isActive must be true or false")
        user = container.user_service.set_active(current_role=current_role(), user_id=user_id, is_active=is_active)
        return jsonify({"success": True, "data": user_to_dict(user)})
