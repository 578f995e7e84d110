import logging
import os
import sys

LOGGER_NAME = "xactimate_pricing"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def get_logger():
    logger = logging.getLogger(LOGGER_NAME)

    # Already configured by an earlier import
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)

    LOG_FILE = os.environ.get("LOG_FILE")

    if LOG_FILE:
        LOG_FILE = os.path.normpath(LOG_FILE)
        log_dir = os.path.dirname(LOG_FILE)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handler = logging.FileHandler(LOG_FILE, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stdout)

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def configure_quiet_logging():
    """
    Suppress verbose logging from third-party libraries.
    Call this early in app startup to reduce log noise.
    """
    # werkzeug HTTP request logs (only show errors)
    logging.getLogger('werkzeug').setLevel(logging.ERROR)

    # SQLAlchemy engine logs (only show warnings+)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)


logger = get_logger()
