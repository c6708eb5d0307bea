"""structlog setup for the quotations service.

Every line, whether it comes from structlog or from stdlib loggers (uvicorn,
SQLAlchemy, Alembic), goes through one ProcessorFormatter on stdout:
- ``LOG_FORMAT=json`` renders one JSON object per line
- anything else renders colored console output
- ``LOG_LEVEL`` sets the root level (INFO when unset or unknown)

Request-scoped fields are bound with bind_request_context() by the request
middleware and show up on every line logged while the request runs.

Usage:
    from core.logger import get_logger
    logger = get_logger(__name__)
    logger.info("quotation.created", quotation_id="0190f3c2...")
"""

import logging
import os
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# stdlib loggers that only add noise at INFO
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite")


def _drop_color_message(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """uvicorn duplicates every message in ``color_message``; keep one copy."""
    event_dict.pop("color_message", None)
    return event_dict


def _pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.stdlib.ExtraAdder(),
        _drop_color_message,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def _renderer(json_output: bool) -> Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(), exception_formatter=structlog.dev.plain_traceback
    )


def configure_logging() -> None:
    """Install the shared formatter on the root logger. Safe to call again."""
    level = logging.getLevelNamesMapping().get(
        os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO
    )
    json_output = os.environ.get("LOG_FORMAT", "").lower() == "json"
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                _renderer(json_output),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_request_context(*, request_id: str, method: str, path: str) -> None:
    """Replace any leftover context with this request's fields."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id, method=method, path=path
    )


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)
