"""
Logging

structlog setup shared by the API process and its background workers.

Every event is a message plus key-value fields. Development renders a
colored line per event; every other environment emits one JSON object
per line, stamped with the service name and environment so that API and
worker output can be told apart once aggregated.

    development   10:30:00 [info ] Following feed composed  viewer_id=550e... count=20 has_more=True
    production    {"event": "Following feed composed", "viewer_id": "550e...", "count": 20,
                   "service": "Anchor", "env": "production", "level": "info", ...}

Usage:
======
    from src.shared.core.logging import get_logger, bind_log_context

    logger = get_logger(__name__)
    logger.info("Anchor followed", user_id=str(user_id), anchor_id=str(anchor_id))

    with bind_log_context(worker_id=1, job_type="mark_seen"):
        logger.info("Job started")    # carries worker_id and job_type

The API binds request_id the same way for every request (see api.main).
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from src.config.settings import settings

# Chatty third-party loggers, capped at WARNING unless DEBUG is on
NOISY_LOGGERS = ("sqlalchemy.engine", "botocore", "boto3", "urllib3", "uvicorn.access")


def _add_service_info(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", settings.APP_NAME)
    event_dict.setdefault("env", settings.APP_ENV)
    return event_dict


def setup_logging() -> None:
    """
    Configure structlog and the stdlib root logger.

    Safe to call more than once; the lifespan calls it again after import.
    """
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if settings.DEBUG else max(level, logging.WARNING))

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.is_development:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        processors += [
            _add_service_info,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a bound logger; module code passes ``__name__``."""
    return structlog.get_logger(name)


@contextmanager
def bind_log_context(**fields: Any) -> Iterator[None]:
    """
    Bind fields to every event logged inside the block.

    Bindings live in contextvars, so each asyncio task sees only its own.
    They are removed on exit even when the block raises.
    """
    with structlog.contextvars.bound_contextvars(**fields):
        yield


setup_logging()

logger = get_logger("anchor")
