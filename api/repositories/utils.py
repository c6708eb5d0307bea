"""Repository utility functions for common database operations."""

import time
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.logger import get_logger
from repositories.errors import DuplicateQuotationError, RepositoryError

logger = get_logger(__name__)

# Threshold for logging slow queries (milliseconds)
SLOW_QUERY_THRESHOLD_MS = 500

P = ParamSpec("P")
R = TypeVar("R")


def log_slow_query(
    operation_name: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator to log slow repository operations and translate errors.

    Logs at WARNING level for queries exceeding SLOW_QUERY_THRESHOLD_MS.
    SQLAlchemy errors, and OverflowError from drivers refusing an integer
    parameter, are logged and re-raised as RepositoryError (IntegrityError as
    DuplicateQuotationError) with the original chained.

    Usage:
        @log_slow_query("quotation.get_by_id")
        async def get_by_id(self, quotation_id: str) -> Quotation | None:
            ...
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except (SQLAlchemyError, OverflowError) as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.error(
                    "db.query.error",
                    db_operation=operation_name,
                    db_duration_ms=round(duration_ms, 2),
                    db_error=str(e),
                    db_error_type=type(e).__name__,
                )
                if isinstance(e, IntegrityError):
                    raise DuplicateQuotationError(operation_name) from e
                raise RepositoryError(operation_name) from e

            duration_ms = (time.perf_counter() - start_time) * 1000
            if duration_ms > SLOW_QUERY_THRESHOLD_MS:
                logger.warning(
                    "db.query.slow",
                    db_operation=operation_name,
                    db_duration_ms=round(duration_ms, 2),
                )
            return result

        return wrapper

    return decorator
