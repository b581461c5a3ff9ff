from flask import Blueprint, abort, jsonify, request
from flask_login import current_user, login_required

from services.expense_service import ExpenseValidationError
from utils.constants import DEFAULT_PAGE_SIZE
from web.db import get_services
from web.errors import json_object

expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


def _owned_expense(expense_id: int):
    expense = get_services().expenses.get_by_id(expense_id)
    if expense is None:
        abort(404, "Expense not found")
    if expense.user_id != current_user.id:
        abort(403, "Forbidden")
    return expense


def _validation_error(e: ExpenseValidationError):
    return jsonify(error="Validation error", details=e.details), 400


@expenses_bp.route("", methods=["GET"])
@login_required
def list_expenses():
    args = request.args
    try:
        result = get_services().expenses.list_for_user(
            current_user.id,
            page=args.get("page", 1, type=int),
            limit=args.get("limit", DEFAULT_PAGE_SIZE, type=int),
            category=args.get("category"),
            start_date=args.get("start_date"),
            end_date=args.get("end_date"),
            min_amount=args.get("min_amount", type=float),
            max_amount=args.get("max_amount", type=float),
            search=args.get("search"),
            sort_by=args.get("sort_by", "date"),
            sort_order=args.get("sort_order", "desc"),
        )
    except ValueError as e:
        return jsonify(error=str(e)), 400
    return jsonify(result)


@expenses_bp.route("", methods=["POST"])
@login_required
def create_expense():
    data = json_object()
    try:
        expense = get_services().expenses.create(current_user.id, data)
    except ExpenseValidationError as e:
        return _validation_error(e)
    return jsonify(expense), 201


@expenses_bp.route("/<int:expense_id>", methods=["GET"])
@login_required
def get_expense(expense_id: int):
    return jsonify(_owned_expense(expense_id))


@expenses_bp.route("/<int:expense_id>", methods=["PUT"])
@login_required
def update_expense(expense_id: int):
    _owned_expense(expense_id)
    data = json_object()
    try:
        expense = get_services().expenses.update(expense_id, data)
    except ExpenseValidationError as e:
        return _validation_error(e)
    return jsonify(expense)


@expenses_bp.route("/<int:expense_id>", methods=["DELETE"])
@login_required
def delete_expense(expense_id: int):
    _owned_expense(expense_id)
    get_services().expenses.delete(expense_id)
    return jsonify(success=True)
