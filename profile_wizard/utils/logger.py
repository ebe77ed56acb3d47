"""Logging configuration for the Profile Wizard."""

import logging
import sys
from typing import Optional

from config import LOG_LEVEL


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Get a configured logger instance (stdout, level from LOG_LEVEL unless given)."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(handler)
        logger.setLevel(level if level is not None else getattr(logging, LOG_LEVEL, logging.INFO))
    elif level is not None:
        logger.setLevel(level)
    return logger


def mask_token(token: Optional[str]) -> str:
    """Show only the first 10 characters of a bearer token in logs."""
    if not token:
        return "<none>"
    return f"{token[:10]}..."
