from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import admin_required, current_role, json_body, json_errors, optional_int, parse_meal_type, status_for
from ..container import Container
from ..core.exceptions import ValidationError
from ..meals.model import record_to_dict
from ..schedule.model import WorkSchedule


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/refresh-credits", methods=["POST"], endpoint="admin_refresh_credits")
    @admin_required
    @json_errors
    def admin_refresh_credits():
        data = json_body()
        report = container.admin_service.refresh_credits(
            current_role=current_role(),
            year=optional_int(data.get("year"), "year"),
            month=optional_int(data.get("month"), "month"),
        )
        return jsonify({
            "success": True,
            "year": report.year,
            "month": report.month,
            "refreshed": report.refreshed,
            "failed": report.failed,
        })

    @app.route("/api/admin/schedule", methods=["GET"], endpoint="admin_schedule")
    @admin_required
    @json_errors
    def admin_schedule():
        return jsonify({"success": True, "schedule": container.schedule_service.get_schedule().to_dict()})

    @app.route("/api/admin/schedule", methods=["PUT"], endpoint="admin_update_schedule")
    @admin_required
    @json_errors
    def admin_update_schedule():
        data = json_body()
        if not data:
            raise ValidationError("Schedule data is required")

        schedule = container.schedule_service.update_schedule(
            current_role=current_role(),
            schedule=WorkSchedule.from_dict(data),
        )
        return jsonify({"success": True, "schedule": schedule.to_dict()})

    @app.route("/api/admin/force-meal", methods=["POST"], endpoint="admin_force_meal")
    @admin_required
    @json_errors
    def admin_force_meal():
        data = json_body()
        user_id = optional_int(data.get("userId"), "userId")
        if user_id is None:
            raise ValidationError("userId is required")

        decision = container.admin_service.force_meal(
            current_role=current_role(),
            user_id=user_id,
            meal_type=parse_meal_type(data.get("mealType")),
        )
        return jsonify(decision.to_dict()), status_for(decision.reason)

    @app.route("/api/admin/stats", methods=["GET"], endpoint="admin_stats")
    @admin_required
    @json_errors
    def admin_stats():
        stats = container.admin_service.dashboard_stats(current_role=current_role())
        return jsonify({
            "success": True,
            "stats": {
                "todayBreakfast": stats.today_breakfast,
                "todayLunch": stats.today_lunch,
                "monthlyBreakfast": stats.monthly_breakfast,
                "monthlyLunch": stats.monthly_lunch,
                "totalUsers": stats.total_users,
                "activeUsers": stats.active_users,
                "pendingApproval": stats.pending_approval,
                "recentActivities": [record_to_dict(r) for r in stats.recent_activities],
            },
        })

    @app.route("/api/admin/scan-stats", methods=["GET"], endpoint="admin_scan_stats")
    @admin_required
    @json_errors
    def admin_scan_stats():
        stats = container.admin_service.scan_stats(current_role=current_role())
        return jsonify({
            "success": True,
            "stats": {"total": stats.total, "successful": stats.successful, "failed": stats.failed},
        })
