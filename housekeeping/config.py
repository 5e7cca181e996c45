# config.py
import logging
import os
import sys
from pathlib import Path

import structlog

BASE_DIR = Path(__file__).parent

# Environment
ENV = os.environ.get("HMS_ENV", "development")
DEBUG = ENV == "development"

# SQLite by default (hms.db in the same folder)
DATABASE_URL = os.environ.get("HMS_DATABASE_URL") or f"sqlite:///{BASE_DIR / 'hms.db'}"
SQL_ECHO = os.environ.get("HMS_SQL_ECHO", "false").lower() in ("1", "true", "yes")

HOST = os.environ.get("HMS_HOST", "0.0.0.0")
PORT = int(os.environ.get("HMS_PORT", 8000))
CORS_ORIGINS = [o.strip() for o in os.environ.get("HMS_CORS_ORIGINS", "*").split(",") if o.strip()]

LOG_LEVEL = os.environ.get("HMS_LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

# Dashboard sampler period in seconds; 0 turns the background loop off
METRICS_INTERVAL = float(os.environ.get("HMS_METRICS_INTERVAL", 30))

# Base minutes for a standard room clean before room/staff weighting
DEFAULT_ESTIMATED_MINUTES = int(os.environ.get("HMS_DEFAULT_ESTIMATED_MINUTES", 45))

SEED_DATA = os.environ.get("HMS_SEED_DATA", "true").lower() in ("1", "true", "yes")

LOG_JSON = os.environ.get("HMS_LOG_JSON", "false").lower() in ("1", "true", "yes")

_logging_configured = False


def configure_logging(level: str = LOG_LEVEL, json_logs: bool = LOG_JSON) -> None:
    """Configure structured logging once per process."""
    global _logging_configured
    if _logging_configured:
        return

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    _logging_configured = True
