"""Result types returned by service operations.

Expected domain outcomes (missing record, duplicate) come back as a
``ServiceError`` value instead of an exception, so callers handle every
kind explicitly:

    match await service.delete_quotation(quotation_id):
        case Ok():
            ...
        case ServiceError(kind=ErrorKind.NOT_FOUND, message=message):
            ...
"""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    SERVICE_FAILURE = "service_failure"


@dataclass(frozen=True)
class Ok[T]:
    value: T


@dataclass(frozen=True)
class ServiceError:
    """A failed operation: its kind plus a message safe to show callers."""

    kind: ErrorKind
    message: str


type ServiceResult[T] = Ok[T] | ServiceError
