from __future__ import annotations

import logging

from flask.logging import default_handler

from src.dojo_portal.dojo_portal.main import create_app

PACKAGE_LOGGER = "src.dojo_portal.dojo_portal"


def _console_handlers(logger):
    return [h for h in logger.handlers if type(h) is logging.StreamHandler]


def test_app_logger_has_no_handler_of_its_own(app):
    assert app.logger.name.startswith(PACKAGE_LOGGER + ".")
    assert default_handler not in app.logger.handlers
    assert _console_handlers(app.logger) == []
    assert app.logger.propagate


def test_one_console_handler_between_app_and_package(container):
    create_app(container)
    app = create_app(container)

    package = logging.getLogger(PACKAGE_LOGGER)
    assert len(_console_handlers(package)) == 1
    assert _console_handlers(app.logger) == []
