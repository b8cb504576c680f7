"""Logging configuration for the node labeler."""

import logging
import os
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Client libraries that log every request at INFO/DEBUG
NOISY_LOGGERS = ("urllib3", "kubernetes", "botocore", "boto3")


def setup_logging(
    level: str | None = None, log_file: Path | None = None, verbose: bool = False
) -> None:
    """Configure logging for the controller.

    The console handler writes to stderr at the configured level, since the
    controller's logs are what `kubectl logs` shows for the pod.

    Args:
        level: Logging level name; defaults to $LOG_LEVEL, then INFO
        log_file: Optional path to log file
        verbose: If True, set level to DEBUG
    """
    if verbose:
        level = "DEBUG"
    level = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    numeric_level = logging.getLevelName(level)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            logging.warning(f"Failed to create log file handler: {e}")

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class NodeLoggerAdapter(logging.LoggerAdapter):
    """Prefixes messages with the node a reconciliation pass is working on."""

    def process(self, msg, kwargs):
        return f"[{self.extra['node_name']}] {msg}", kwargs


def node_logger(logger: logging.Logger, node_name: str) -> NodeLoggerAdapter:
    """Wrap a logger so every message names the node."""
    return NodeLoggerAdapter(logger, {"node_name": node_name})
