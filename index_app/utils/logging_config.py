# index_app/utils/logging_config.py

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_HANDLER_MARKER = "_index_app_handler"


def setup_logging(app):
    """
    Configure the application and pipeline loggers from ``LOG_LEVEL``.

    Safe to call repeatedly; the console handler is only attached once.
    """
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    for logger in (app.logger, logging.getLogger("index_app")):
        logger.setLevel(level)
        if not app.config.get("ENABLE_CONSOLE_LOGGING", True):
            continue
        if any(getattr(handler, _HANDLER_MARKER, False) for handler in logger.handlers):
            continue
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        setattr(handler, _HANDLER_MARKER, True)
        logger.addHandler(handler)

    if not app.config.get("SQLALCHEMY_ECHO", False):
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
