from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .admissions.controller import register as register_admissions
from .common.logging_config import configure_logging
from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_COOKIE_NAME, DEFAULT_SESSION_DAYS
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .payments.controller import register as register_payments
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app.

    A prepared container (e.g. one assembled on in-memory repositories) skips
    every database step.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["AUTH_COOKIE_NAME"] = getattr(settings, "AUTH_COOKIE_NAME", DEFAULT_SESSION_COOKIE_NAME)
    app.config["AUTH_COOKIE_SECURE"] = bool(getattr(settings, "AUTH_COOKIE_SECURE", False))
    app.config["LOG_LEVEL"] = getattr(settings, "LOG_LEVEL", "INFO")
    app.config["LOG_DIR"] = getattr(settings, "LOG_DIR", None)

    configure_logging(app, package_logger=__package__)
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)

        container = build_container(
            db_config=db_config,
            secret_key=app.secret_key,
            session_days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)),
            setup_token=getattr(settings, "SETUP_TOKEN", None),
        )

    app.extensions["dojo_portal.container"] = container

    register_users(app, container)
    register_payments(app, container)
    register_admissions(app, container)

    return app
