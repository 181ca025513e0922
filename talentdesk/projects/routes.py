"""
JSON routes for project scheduling, escort options and assignments.

Errors from talentdesk.errors propagate to the app-level handler, which
turns them into {error, code, message} responses.
"""
from flask import current_app, jsonify, request

from talentdesk.backend.client import get_backend_client
from talentdesk.errors import ValidationError
from talentdesk.logging_config import get_logger
from talentdesk.projects import projects_bp
from talentdesk.projects.helpers import lists_from_payload, parse_bool_arg, parse_date_list
from talentdesk.projects.service import ProjectService

logger = get_logger(__name__)


def get_service() -> ProjectService:
    return ProjectService(
        get_backend_client(),
        auto_add_show_dates=current_app.config.get("AUTO_ADD_SHOW_DATES", True),
    )


def _json_body():
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


@projects_bp.route("/<project_id>/schedule", methods=["GET"])
def get_schedule(project_id):
    """Project schedule with its timeline and date checks."""
    return jsonify(get_service().get_project_schedule(project_id)), 200


@projects_bp.route("/<project_id>/dashboard", methods=["GET"])
def get_dashboard(project_id):
    return jsonify(get_service().get_dashboard(project_id)), 200


@projects_bp.route("/<project_id>/escort-options", methods=["GET"])
def get_escort_options(project_id):
    """
    Escort picker sections for one day.

    Query params:
        date: YYYY-MM-DD (required)
        talentId: talent whose slot is being edited
        search: name filter
        availableOnly: only escorts who declared the day available
    """
    day = request.args.get("date")
    if not day:
        raise ValidationError("date query parameter is required", field="date")

    options = get_service().get_escort_options(
        project_id,
        day,
        talent_id=request.args.get("talentId"),
        search=request.args.get("search"),
        available_only=parse_bool_arg(request.args.get("availableOnly")),
    )
    return jsonify(options), 200


@projects_bp.route("/<project_id>/assignments/<day>", methods=["GET"])
def get_assignments(project_id, day):
    lists = get_service().get_day_assignments(project_id, day)
    return jsonify({"date": day, "assignments": [a.to_dict() for a in lists]}), 200


@projects_bp.route("/<project_id>/assignments/<day>", methods=["PUT"])
def save_assignments(project_id, day):
    lists = lists_from_payload(request.get_json(silent=True))
    result = get_service().save_day_assignments(project_id, day, lists)
    return jsonify({"success": True, "data": result}), 200


@projects_bp.route("/<project_id>/schedule/toggle", methods=["POST"])
def toggle_schedule_date(project_id):
    """Preview a day toggle: {scheduledDates, date, talentId?, isGroup?} -> {scheduledDates}. Nothing is saved."""
    body = _json_body()
    day = body.get("date")
    if not day or not isinstance(day, str):
        raise ValidationError("date is required", field="date")
    dates = get_service().toggle_schedule_date(
        project_id,
        parse_date_list(body.get("scheduledDates"), "scheduledDates"),
        day,
        talent_id=body.get("talentId"),
        is_group=bool(body.get("isGroup")),
    )
    return jsonify({"scheduledDates": dates}), 200


@projects_bp.route("/<project_id>/talent/<talent_id>/schedule", methods=["PUT"])
def update_talent_schedule(project_id, talent_id):
    body = _json_body()
    result = get_service().update_talent_schedule(
        project_id,
        talent_id,
        parse_date_list(body.get("scheduledDates"), "scheduledDates"),
        is_group=bool(body.get("isGroup")),
    )
    return jsonify({"success": True, "data": result}), 200


@projects_bp.route("/<project_id>/talent-groups/<group_id>", methods=["PUT"])
def update_talent_group(project_id, group_id):
    body = _json_body()
    result = get_service().save_talent_group(
        project_id,
        group_id,
        body.get("groupName"),
        body.get("members"),
        point_of_contact_name=body.get("pointOfContactName"),
        point_of_contact_phone=body.get("pointOfContactPhone"),
    )
    return jsonify({"success": True, "data": result}), 200


@projects_bp.route("/<project_id>/roles/complete", methods=["POST", "DELETE"])
def toggle_roles_complete(project_id):
    complete = request.method == "POST"
    logger.info("Setting roles complete", project_id=project_id, complete=complete)
    result = get_service().set_roles_complete(project_id, complete)
    return jsonify({"success": True, "complete": complete, "data": result}), 200


@projects_bp.route("/<project_id>/activate", methods=["POST"])
def activate_project(project_id):
    return jsonify({"success": True, "data": get_service().activate(project_id)}), 200


@projects_bp.route("/<project_id>/archive", methods=["POST"])
def archive_project(project_id):
    return jsonify({"success": True, "data": get_service().archive(project_id)}), 200
