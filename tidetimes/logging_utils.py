"""Logging utilities for the TideTimes application.

Local runs log to stderr with the emitting file's path relative to the project
root. On Google Cloud Run (detected via K_SERVICE) records go to Cloud Logging.
"""

import logging
import os

import google.cloud.logging  # type: ignore[import]

# Directory containing the tidetimes package
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

LOCAL_LOG_FORMAT = "%(levelname)s:%(relativepath)s:%(lineno)d: %(message)s"


class RelativePathFilter(logging.Filter):
    """Logging filter to add relative path attribute to LogRecords."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            record.relativepath = os.path.relpath(
                os.path.normpath(record.pathname), PROJECT_ROOT
            )
        except ValueError:
            # Different drive on Windows
            record.relativepath = record.pathname
        return True


def _configure_local_handler(root_logger: logging.Logger) -> None:
    """Replace root handlers with a stream handler using the relative-path format."""
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOCAL_LOG_FORMAT))
    # Filter on the handler so records from child loggers get the attribute too
    handler.addFilter(RelativePathFilter())
    root_logger.addHandler(handler)


def setup_logging(level: int = logging.INFO) -> None:
    """Configures logging based on the environment (Cloud Run or local)."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if "K_SERVICE" in os.environ:
        # By default this captures all logs at INFO level and higher
        log_client = google.cloud.logging.Client()  # type: ignore[no-untyped-call]
        log_client.setup_logging(log_level=level)  # type: ignore[no-untyped-call]
        logging.info("Using google cloud logging")
    else:
        _configure_local_handler(root_logger)
        logging.info("Using standard stream handler with relative path format")
