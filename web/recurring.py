from flask import Blueprint, abort, jsonify
from flask_login import current_user, login_required

from web.db import get_services
from web.errors import json_object

recurring_bp = Blueprint("recurring", __name__, url_prefix="/api/recurring-expenses")

CREATE_FIELDS = (
    "amount", "category", "payment_method", "frequency", "start_date",
    "description", "day_of_month", "day_of_week", "end_date",
)


def _owned_definition(recurring_id: int):
    rec = get_services().recurring.get_by_id(recurring_id)
    if rec is None or rec.user_id != current_user.id:
        abort(404, "Recurring expense not found")
    return rec


@recurring_bp.route("", methods=["GET"])
@login_required
def list_recurring():
    # Due occurrences are turned into expenses before the list is read.
    return jsonify(get_services().recurring.list_for_user(current_user.id))


@recurring_bp.route("", methods=["POST"])
@login_required
def create_recurring():
    data = json_object()
    try:
        rec = get_services().recurring.create(
            current_user.id, **{k: data.get(k) for k in CREATE_FIELDS}
        )
    except ValueError as e:
        return jsonify(error=str(e)), 400
    return jsonify(rec), 201


@recurring_bp.route("/<int:recurring_id>", methods=["PUT"])
@login_required
def update_recurring(recurring_id: int):
    rec = _owned_definition(recurring_id)
    data = json_object()
    try:
        rec = get_services().recurring.update(rec, data)
    except ValueError as e:
        return jsonify(error=str(e)), 400
    return jsonify(rec)


@recurring_bp.route("/<int:recurring_id>/toggle", methods=["POST"])
@login_required
def toggle_recurring(recurring_id: int):
    rec = _owned_definition(recurring_id)
    return jsonify(get_services().recurring.toggle_active(rec))


@recurring_bp.route("/<int:recurring_id>", methods=["DELETE"])
@login_required
def delete_recurring(recurring_id: int):
    _owned_definition(recurring_id)
    get_services().recurring.delete(recurring_id)
    return jsonify(success=True)
