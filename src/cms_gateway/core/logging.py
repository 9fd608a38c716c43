"""Structured logging for the gateway.

Everything goes through structlog, including records emitted by stdlib
loggers (uvicorn, httpx, redis), so a single renderer decides the output:
JSON lines when ``settings.use_json_logs`` is set, colored console output
otherwise.

Request-scoped values (request id, method, path) live in structlog's
context variables and are attached to every entry logged while the
request is being served.

Usage:
    from cms_gateway.core.logging import configure_logging, get_logger

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info("cms_cache_hit", cache_key="cms_brands:page:1")
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from cms_gateway.config import Settings

_NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "redis")


class _ServiceInfo:
    """Processor stamping the service name and environment on each entry."""

    def __init__(self, service: str, environment: str) -> None:
        self.service = service
        self.environment = environment

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("service", self.service)
        event_dict.setdefault("env", self.environment)
        return event_dict


def _pre_chain(settings: Settings) -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        _ServiceInfo(settings.app_name, settings.app_env.value),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(settings: Settings) -> None:
    """Route structlog and stdlib logging through one stdout handler."""
    pre_chain = _pre_chain(settings)

    renderer: Processor
    if settings.use_json_logs:
        renderer = structlog.processors.JSONRenderer()
        pre_chain.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
            foreign_pre_chain=pre_chain,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(settings.log_level.value)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, typically with ``__name__``."""
    return structlog.get_logger(name)


def bind_request_context(request_id: str, method: str, path: str) -> None:
    """Attach request identifiers to every entry logged for this request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id, method=method, path=path
    )


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
