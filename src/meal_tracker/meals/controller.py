from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import (
    client_ip,
    current_user_id,
    json_body,
    json_errors,
    login_required,
    optional_int,
    parse_meal_type,
    status_for,
)
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import ValidationError
from .model import record_to_dict


def register(app: Flask, container: Container) -> None:
    @app.route("/api/meals/current", methods=["GET"], endpoint="current_meal")
    @json_errors
    def current_meal():
        meal_type = container.schedule_service.current_meal()
        return jsonify({"success": True, "mealType": meal_type.value if meal_type else None})

    @app.route("/api/meals/credits", methods=["GET"], endpoint="meal_credits")
    @login_required
    @json_errors
    def meal_credits():
        summary = container.credit_ledger.get_monthly_credits(
            current_user_id(),
            optional_int(request.args.get("year"), "year"),
            optional_int(request.args.get("month"), "month"),
        )
        return jsonify({"success": True, "credits": summary.to_dict()})

    @app.route("/api/meals/counts", methods=["GET"], endpoint="meal_counts")
    @login_required
    @json_errors
    def meal_counts():
        counts = container.credit_ledger.meal_counts(
            current_user_id(),
            optional_int(request.args.get("year"), "year"),
            optional_int(request.args.get("month"), "month"),
        )
        return jsonify({"success": True, "counts": counts.to_dict()})

    @app.route("/api/meals/take", methods=["POST"], endpoint="take_meal")
    @login_required
    @json_errors
    def take_meal():
        data = json_body()
        fingerprint = (data.get("deviceFingerprint") or "").strip()
        if not fingerprint:
            raise ValidationError("deviceFingerprint is required")

        result = container.scan_service.take_meal_with_device(
            current_user_id(),
            parse_meal_type(data.get("mealType")),
            fingerprint,
            ip_address=client_ip(),
        )
        return jsonify(result.to_dict()), status_for(result.reason)

    @app.route("/api/meals/today", methods=["GET"], endpoint="meals_today")
    @login_required
    @json_errors
    def meals_today():
        taken = container.meal_service.today_meals(current_user_id())
        return jsonify({"success": True, "taken": [m.value for m in taken]})

    @app.route("/api/meals/history", methods=["GET"], endpoint="meal_history")
    @login_required
    @json_errors
    def meal_history():
        records = container.meal_service.history(
            current_user_id(),
            year=optional_int(request.args.get("year"), "year"),
            month=optional_int(request.args.get("month"), "month"),
            limit=optional_int(request.args.get("limit"), "limit") or DEFAULT_HISTORY_LIMIT,
        )
        return jsonify({"success": True, "records": [record_to_dict(r) for r in records]})
