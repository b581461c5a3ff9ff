import os
import sys
import logging

# Ensure project root is on sys.path when run directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from utils.app_config import get_settings
from web.app import create_app


def main():
    # ── Bootstrap: settings from the pre-app config file ─────────────────────
    settings = get_settings()

    # ── Logging ──────────────────────────────────────────────────────────────
    logging.basicConfig(
        level=getattr(logging, str(settings["log_level"]).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # ── Web app ──────────────────────────────────────────────────────────────
    app = create_app()
    app.run(host=settings["host"], port=int(settings["port"]))


if __name__ == "__main__":
    main()
