"""Per-request database connection and service wiring.

Each request gets its own DatabaseManager on flask.g, closed when the app
context tears down; DAOs and services are built on top of it lazily.
"""
from dataclasses import dataclass
from flask import Flask, current_app, g

from database.db_manager import DatabaseManager
from database.user_dao import UserDAO
from database.expense_dao import ExpenseDAO
from database.recurring_dao import RecurringDAO
from database.budget_dao import BudgetDAO

from services.auth_service import AuthService
from services.expense_service import ExpenseService
from services.recurring_service import RecurringService
from services.budget_service import BudgetService
from services.report_service import ReportService
from services.chart_service import ChartService


@dataclass
class Services:
    auth: AuthService
    expenses: ExpenseService
    recurring: RecurringService
    budgets: BudgetService
    reports: ReportService
    charts: ChartService


def get_db() -> DatabaseManager:
    if "db" not in g:
        g.db = DatabaseManager(current_app.config["DB_PATH"])
    return g.db


def close_db(exc=None):
    g.pop("services", None)
    db = g.pop("db", None)
    if db is not None:
        db.close()


def get_services() -> Services:
    if "services" not in g:
        db = get_db()
        expense_dao = ExpenseDAO(db)
        report_svc = ReportService(expense_dao)
        g.services = Services(
            auth=AuthService(UserDAO(db)),
            expenses=ExpenseService(expense_dao),
            recurring=RecurringService(
                RecurringDAO(db), expense_dao,
                catch_up=current_app.config["RECURRING_CATCH_UP"],
            ),
            budgets=BudgetService(BudgetDAO(db), expense_dao),
            reports=report_svc,
            charts=ChartService(report_svc),
        )
    return g.services


def init_db(app: Flask):
    """Create the schema once at startup."""
    db = DatabaseManager(app.config["DB_PATH"])
    try:
        db.initialize()
    finally:
        db.close()
