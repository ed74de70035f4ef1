# vehicle_permits/utils/logger.py
"""
Centralised logging configuration for the entire application.
Logs to console and to a rotating file in LOG_DIR (default: <repo>/logs/).
Notification delivery outcomes also go to a dedicated delivery.log so HR
can audit failed messages without digging through request noise.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from vehicle_permits.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = settings.LOG_DIR or os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")
DELIVERY_LOGGER = "vehicle_permits.delivery"

_configured = False


def _rotating_handler(filename: str, fmt: logging.Formatter) -> RotatingFileHandler:
    # Keeps last 10 × 5MB log files
    handler = RotatingFileHandler(
        filename=os.path.join(LOG_DIR, filename),
        maxBytes=5 * 1024 * 1024,
        backupCount=10,
        encoding="utf-8",
    )
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(fmt)
    return handler


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True
    os.makedirs(LOG_DIR, exist_ok=True)

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setLevel(LOG_LEVEL)
    console.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    root.addHandler(console)
    root.addHandler(_rotating_handler("permits.log", fmt))

    # Delivery audit trail; still propagates to the root handlers
    logging.getLogger(DELIVERY_LOGGER).addHandler(_rotating_handler("delivery.log", fmt))


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    _configure_root_logger()
    return logging.getLogger(name)
