"""Logging configuration for smartexport.

Usage in other modules:
    import logging
    log = logging.getLogger(__name__)

The log level can be configured via the SMARTEXPORT_LOG_LEVEL environment variable:
    - DEBUG: Traversal steps (dequeue, resolve, skip)
    - INFO: General operational messages (default)
    - WARNING: Unexpected but handled situations
    - ERROR: Errors that prevented an export
"""

import logging
import os
import sys

PACKAGE_LOGGER = "smartexport"


def configure_logging() -> None:
    """Configure logging for the smartexport package.

    Call this once at application startup (cli.py or server.py).
    Subsequent calls are no-ops.
    """
    root_logger = logging.getLogger(PACKAGE_LOGGER)

    if root_logger.handlers:
        return

    level_name = os.environ.get("SMARTEXPORT_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    # stderr keeps stdout clean for the exported document
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    formatter = logging.Formatter(
        fmt="[%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    root_logger.propagate = False


def set_quiet_mode(quiet: bool) -> None:
    """Raise the package log level to ERROR (or restore the configured level)."""
    root_logger = logging.getLogger(PACKAGE_LOGGER)
    if quiet:
        level = logging.ERROR
    else:
        level_name = os.environ.get("SMARTEXPORT_LOG_LEVEL", "INFO").upper()
        level = getattr(logging, level_name, logging.INFO)

    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)
