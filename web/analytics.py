from flask import Blueprint, Response, jsonify, request
from flask_login import current_user, login_required

from utils.constants import STATS_MONTHS, STATS_PERIODS
from web.db import get_services

analytics_bp = Blueprint("analytics", __name__, url_prefix="/api")


def _period_arg() -> str | None:
    period = request.args.get("period", "month")
    return period if period in STATS_PERIODS else None


@analytics_bp.route("/expenses/stats")
@login_required
def expense_stats():
    period = _period_arg()
    if period is None:
        return jsonify(error="Invalid period"), 400
    return jsonify(get_services().reports.get_stats(current_user.id, period))


@analytics_bp.route("/charts/categories.png")
@login_required
def category_chart():
    period = _period_arg()
    if period is None:
        return jsonify(error="Invalid period"), 400
    png = get_services().charts.category_pie_png(current_user.id, period)
    return Response(png, mimetype="image/png")


@analytics_bp.route("/charts/monthly.png")
@login_required
def monthly_chart():
    months = request.args.get("months", STATS_MONTHS, type=int)
    if not 1 <= months <= 24:
        return jsonify(error="months must be between 1 and 24"), 400
    png = get_services().charts.monthly_bar_png(current_user.id, months)
    return Response(png, mimetype="image/png")
