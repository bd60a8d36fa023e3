"""Shared utility functions for the kakeibo-sync project."""

import logging
from datetime import UTC, datetime

import colorlog


def get_logger(name: str) -> logging.Logger:
    """Get a logger with a colorized format for the project.

    Dotted names (``kakeibo.worker``) propagate to their top-level logger, which
    owns the handlers, so a file handler added there sees every module's records.
    """
    root_name, _, _ = name.partition(".")
    if root_name != name:
        get_logger(root_name)
        return logging.getLogger(name)
    logger = logging.getLogger(name)
    if logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def utcnow() -> datetime:
    """Get the current UTC time as an aware datetime."""
    return datetime.now(UTC)


def truncate(text: str, limit: int) -> str:
    """Shorten text for log output, marking the cut with an ellipsis."""
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text
