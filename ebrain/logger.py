"""Logging setup. Everything goes to stderr; stdout belongs to the MCP transport."""

import logging
import sys

LOGGER_NAME = "ebrain"
CONSOLE_FORMAT = "%(asctime)s [%(levelname)8s] %(name)s - %(message)s"


def setup_logging(debug: bool = False) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    # Remove any existing handlers so repeated setup doesn't duplicate output
    logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
