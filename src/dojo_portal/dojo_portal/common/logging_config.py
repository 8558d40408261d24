from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from flask.logging import default_handler

CONSOLE_FORMAT = "[%(asctime)s] %(levelname)s in %(module)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(funcName)s: %(message)s"


def configure_logging(app, *, package_logger: str) -> None:
    """Console (and optional rotating file) handlers on the package logger.

    ``app.logger`` is named after the app's import name, a child of the
    package logger, so it gets no handler of its own and its records are
    emitted once through the package handlers. Idempotent, so building
    several apps in one process (tests) does not stack handlers.
    """

    level = app.config.get("LOG_LEVEL", "INFO")
    log_dir: Optional[str] = app.config.get("LOG_DIR")

    logger = logging.getLogger(package_logger)
    logger.setLevel(level)
    if not getattr(logger, "_dojo_logging_configured", False):
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console)

        if log_dir:
            path = Path(log_dir)
            path.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(path / "app.log", maxBytes=2_000_000, backupCount=5)
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            logger.addHandler(file_handler)

        logger._dojo_logging_configured = True

    app.logger.removeHandler(default_handler)
    app.logger.setLevel(level)
