from flask import Blueprint, abort, jsonify
from flask_login import current_user, login_required

from web.db import get_services
from web.errors import json_object

budgets_bp = Blueprint("budgets", __name__, url_prefix="/api/budgets")


def _owned_budget(budget_id: int):
    budget = get_services().budgets.get_by_id(budget_id)
    if budget is None or budget.user_id != current_user.id:
        abort(404, "Budget not found")
    return budget


@budgets_bp.route("", methods=["GET"])
@login_required
def list_budgets():
    budgets = get_services().budgets.get_budget_status(current_user.id)
    return jsonify([b.to_dict() for b in budgets])


@budgets_bp.route("", methods=["POST"])
@login_required
def create_budget():
    data = json_object()
    try:
        budget = get_services().budgets.create(current_user.id, data)
    except ValueError as e:
        return jsonify(error=str(e)), 400
    return jsonify(budget.to_dict()), 201


@budgets_bp.route("/<int:budget_id>", methods=["PUT"])
@login_required
def update_budget(budget_id: int):
    budget = _owned_budget(budget_id)
    data = json_object()
    try:
        budget = get_services().budgets.update(budget, data)
    except ValueError as e:
        return jsonify(error=str(e)), 400
    return jsonify(budget.to_dict())


@budgets_bp.route("/<int:budget_id>", methods=["DELETE"])
@login_required
def delete_budget(budget_id: int):
    _owned_budget(budget_id)
    get_services().budgets.delete(budget_id)
    return jsonify(success=True)
