"""Structlog setup shared by the API server and the terminal front end.

Everything is routed through the standard ``logging`` root logger so that
uvicorn and httpx records get the same rendering as our own events. Output
goes to stderr: the CLI prints its results on stdout.

Request-scoped values (the ``X-Request-ID`` of an API call, the movie a
detail fetch is about) travel in structlog's contextvars and are merged
into every event logged while they are bound.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from moviefinder.config import Settings

SERVICE_NAME = "moviefinder"


def bind_request_id(request_id: str) -> None:
    """Tag every event logged in this context with ``request_id``."""
    structlog.contextvars.bind_contextvars(request_id=request_id)


def clear_request_id() -> None:
    structlog.contextvars.unbind_contextvars("request_id")


def service_context(environment: str) -> Processor:
    """Build a processor stamping events with the service and environment."""

    def add_service_context(
        logger: logging.Logger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("service", SERVICE_NAME)
        event_dict.setdefault("env", environment)
        return event_dict

    return add_service_context


def _renderer(settings: Settings) -> Processor:
    if settings.use_json_logs:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the root logger from ``settings``."""
    if settings is None:
        from moviefinder.config import get_settings

        settings = get_settings()

    log_level = getattr(logging, settings.log_level.value, logging.INFO)

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        service_context(settings.app_env.value),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if settings.use_json_logs:
        pre_chain.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(settings),
            foreign_pre_chain=pre_chain,
        )
    )
    handler.setLevel(log_level)

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # Per-request noise; our middleware already logs each call
    for name in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> structlog.contextvars.bound_contextvars:
    """Bind ``kwargs`` to every event logged inside the ``with`` block."""
    return structlog.contextvars.bound_contextvars(**kwargs)
