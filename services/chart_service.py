import io
from datetime import date
from matplotlib.figure import Figure
from services.report_service import ReportService
from utils.constants import CATEGORY_COLORS, STATS_MONTHS

FALLBACK_COLOR = "#888888"


class ChartService:
    """Renders analytics charts to PNG bytes for the web layer."""

    def __init__(self, report_service: ReportService):
        self._report_svc = report_service

    def category_pie_png(self, user_id: int, period: str = "month",
                         ref: date | None = None) -> bytes:
        breakdown = self._report_svc.get_category_breakdown(user_id, period, ref)
        fig = Figure(figsize=(4, 4), dpi=80, tight_layout=True)
        ax = fig.add_subplot(111)

        total = sum(d["total"] for d in breakdown) if breakdown else 0
        if not breakdown or total == 0:
            self._no_data(ax, "No expense data")
            return self._to_png(fig)

        ax.pie(
            [d["total"] for d in breakdown],
            labels=[d["category"] for d in breakdown],
            colors=[CATEGORY_COLORS.get(d["category"], FALLBACK_COLOR) for d in breakdown],
            autopct="%1.0f%%",
            startangle=90,
            textprops={"fontsize": 8},
        )
        ax.set_aspect("equal")
        ax.set_title("Spending by Category", fontsize=11)
        return self._to_png(fig)

    def monthly_bar_png(self, user_id: int, months: int = STATS_MONTHS,
                        ref: date | None = None) -> bytes:
        data = self._report_svc.get_monthly_totals(user_id, months, ref)
        fig = Figure(figsize=(6, 3), dpi=80, tight_layout=True)
        ax = fig.add_subplot(111)

        if not any(d["total"] for d in data):
            self._no_data(ax, "No data")
            return self._to_png(fig)

        labels = [d["month"] for d in data]
        x = list(range(len(labels)))
        ax.bar(x, [d["total"] for d in data], 0.6, color="#3B82F6")
        ax.set_xticks(x)
        ax.set_xticklabels(labels, fontsize=8)
        ax.yaxis.set_major_formatter(
            lambda v, _: f"{v/1000:.0f}k" if abs(v) >= 1000 else f"{v:.0f}"
        )
        ax.set_title("Monthly Spending", fontsize=11)
        return self._to_png(fig)

    def _no_data(self, ax, message: str):
        ax.text(0.5, 0.5, message, ha="center", va="center",
                transform=ax.transAxes, color="gray")
        ax.set_axis_off()

    def _to_png(self, fig: Figure) -> bytes:
        buf = io.BytesIO()
        fig.savefig(buf, format="png")
        return buf.getvalue()
