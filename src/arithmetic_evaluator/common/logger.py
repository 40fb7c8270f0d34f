"""Project-wide logger."""
import logging
import os

LOGGER_NAME = "arithmetic_evaluator"
LOG_LEVEL_ENV = "ARITHMETIC_EVALUATOR_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(processName)s | %(message)s"


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Return the configured project logger.

    The handler is attached only once, so repeated calls (and worker processes
    importing this module) never duplicate log lines.

    :param str name: Logger name

    :return: Configured logger
    :rtype: logging.Logger
    """
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
        log.setLevel(os.environ.get(LOG_LEVEL_ENV, "INFO").upper())
    return log


logger: logging.Logger = get_logger()
