import logging

import coloredlogs

PACKAGE_LOGGER_NAME = "opensearch_testcontainers"
CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def configure_logging(level: int = logging.INFO, fmt: str = CONSOLE_FORMAT) -> logging.Logger:
    """
    Sends this package's logs to stderr with colorized levels.  Only the package logger is touched, so the logging
    setup of the test suite using it stays as it is.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.handlers = []  # Make sure we're starting with a clean slate
    package_logger.setLevel(level)
    package_logger.propagate = False

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(coloredlogs.ColoredFormatter(fmt))
    package_logger.addHandler(console_handler)

    return package_logger
