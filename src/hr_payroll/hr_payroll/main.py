from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.constants import DEFAULT_CURRENCY, MAX_BREAKS_PER_DAY, OFFICE_END_HOUR, OFFICE_START_HOUR, ORPHAN_BREAK_MINUTES
from .database.bootstrap import apply_schema, list_tables
from .payroll.controller import register as register_payroll

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _configure_logging(level_name: str, debug: bool) -> None:
    level = logging.DEBUG if debug else getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level)


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Passing a ``container`` skips database setup entirely (used by tests).
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["OFFICE_START_HOUR"] = int(getattr(settings, "OFFICE_START_HOUR", OFFICE_START_HOUR))
    app.config["OFFICE_END_HOUR"] = int(getattr(settings, "OFFICE_END_HOUR", OFFICE_END_HOUR))
    app.config["ORPHAN_BREAK_MINUTES"] = int(getattr(settings, "ORPHAN_BREAK_MINUTES", ORPHAN_BREAK_MINUTES))
    app.config["MAX_BREAKS_PER_DAY"] = int(getattr(settings, "MAX_BREAKS_PER_DAY", MAX_BREAKS_PER_DAY))
    app.config["PAYMENT_CURRENCY"] = str(getattr(settings, "PAYMENT_CURRENCY", DEFAULT_CURRENCY))

    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), app.config["DEBUG"])

    if container is None:
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
        container = build_container(db_config=db_config, settings=app.config)

    register_attendance(app, container)
    register_payroll(app, container)

    return app
