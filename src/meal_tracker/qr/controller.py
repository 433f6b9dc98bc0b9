from __future__ import annotations

from flask import Flask, Response, jsonify

from ..common.web import (
    client_ip,
    current_role,
    current_user_id,
    json_body,
    json_errors,
    login_required,
    optional_int,
    parse_meal_type,
    status_for,
)
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/qr/issue", methods=["POST"], endpoint="qr_issue")
    @login_required
    @json_errors
    def qr_issue():
        data = json_body()
        meal_type = parse_meal_type(data.get("mealType"))

        # Staff get tokens for themselves; admins may print one for anybody.
        user_id = current_user_id()
        requested = optional_int(data.get("userId"), "userId")
        if requested is not None and requested != user_id:
            if current_role() != Role.ADMIN:
                raise AuthorizationError("Admin permission required")
            user_id = requested

        issued = container.qr_service.issue_for_user(user_id, meal_type)
        return jsonify({
            "success": True,
            "token": issued.token,
            "userId": issued.user_id,
            "mealType": issued.meal_type.value,
            "validUntil": issued.valid_until.isoformat(timespec="seconds"),
        })

    @app.route("/api/qr/<token>.png", methods=["GET"], endpoint="qr_image")
    @login_required
    @json_errors
    def qr_image(token: str):
        # Only genuine, unexpired tokens are rendered; the signed uid decides ownership.
        verification = container.qr_service.verify(token)
        if not verification.valid:
            raise ValidationError("Invalid QR token")
        if verification.payload.user_id != current_user_id() and current_role() != Role.ADMIN:
            raise AuthorizationError("Admin permission required")
        return Response(container.qr_service.render(token), mimetype="image/png")

    @app.route("/api/qr/validate", methods=["POST"], endpoint="qr_validate")
    @json_errors
    def qr_validate():
        data = json_body()
        token = (data.get("token") or "").strip()
        fingerprint = (data.get("deviceFingerprint") or "").strip()
        if not token:
            raise ValidationError("token is required")
        if not fingerprint:
            raise ValidationError("deviceFingerprint is required")

        result = container.scan_service.validate_scan(token, fingerprint, ip_address=client_ip())
        return jsonify(result.to_dict()), status_for(result.reason)
