from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .activities.controller import register as register_activities
from .container import Container, build_container
from .core.constants import DEFAULT_TIMEZONE, HISTORY_PAGE_SIZE, REFRESH_SECONDS
from .database.bootstrap import apply_schema, list_tables, seed_demo_data
from .locations.controller import register as register_locations
from .timecard.controller import register as register_timecard

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    """Flask application factory.

    Pass ``container`` to run against already built repositories (tests);
    otherwise MySQL repositories are built from the active settings module.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            seed_demo_data(db_config)
            logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            tz_name=getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE),
            page_size=int(getattr(settings, "HISTORY_PAGE_SIZE", HISTORY_PAGE_SIZE)),
            refresh_seconds=int(getattr(settings, "REFRESH_SECONDS", REFRESH_SECONDS)),
        )

    app.extensions["attendees"] = container

    register_activities(app, container)
    register_locations(app, container)
    register_timecard(app, container)

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=app.config["DEBUG"])
