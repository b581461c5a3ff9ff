import logging
from flask import Flask

from utils.app_config import get_secret_key, get_settings
from utils.constants import APP_NAME
from web.analytics import analytics_bp
from web.auth import auth_bp, login_manager
from web.budgets import budgets_bp
from web.db import close_db, init_db
from web.errors import register_error_handlers
from web.expenses import expenses_bp
from web.recurring import recurring_bp

logger = logging.getLogger(__name__)


def create_app(overrides: dict | None = None) -> Flask:
    """Build the Flask app from the config file plus explicit overrides."""
    settings = get_settings()
    settings.update(overrides or {})

    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=settings.get("secret_key") or get_secret_key(),
        DB_PATH=settings["db_path"],
        DEMO_USER=bool(settings["demo_user"]),
        RECURRING_CATCH_UP=bool(settings["recurring_catch_up"]),
        TESTING=bool(settings.get("testing", False)),
    )

    init_db(app)
    app.teardown_appcontext(close_db)
    login_manager.init_app(app)

    for bp in (auth_bp, expenses_bp, analytics_bp, budgets_bp, recurring_bp):
        app.register_blueprint(bp)
    register_error_handlers(app)

    logger.info("%s ready (db=%s, demo_user=%s)",
                APP_NAME, app.config["DB_PATH"], app.config["DEMO_USER"])
    return app
