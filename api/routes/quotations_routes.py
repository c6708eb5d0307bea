"""Quotation CRUD endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from starlette import status

from core.config import get_settings
from core.database import DbSession
from core.logger import get_logger
from core.ratelimit import READ_LIMIT, WRITE_LIMIT, limiter
from repositories.quotation_repository import QuotationRepository
from schemas import (
    ErrorResponse,
    MessageResponse,
    QuotationInput,
    QuotationPageResponse,
    QuotationResource,
)
from services.quotations_service import QuotationService
from services.results import ErrorKind, Ok, ServiceError, ServiceResult

logger = get_logger(__name__)

router = APIRouter(prefix="/api/quotations", tags=["quotations"])

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_EXISTS: status.HTTP_400_BAD_REQUEST,
    ErrorKind.SERVICE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_ERROR_RESPONSES: dict[int | str, dict] = {
    500: {"model": ErrorResponse, "description": "Persistence failure"},
}


def get_quotation_service(db: DbSession) -> QuotationService:
    return QuotationService(
        QuotationRepository(db), logger=get_logger("services.quotations_service")
    )


QuotationServiceDep = Annotated[QuotationService, Depends(get_quotation_service)]


def _unwrap[T](result: ServiceResult[T]) -> T:
    """Return the Ok value or raise the HTTPException matching the error kind."""
    match result:
        case Ok(value=value):
            return value
        case ServiceError(kind=kind, message=message):
            raise HTTPException(status_code=_STATUS_BY_KIND[kind], detail=message)
        case _:
            raise TypeError(f"Unexpected service result: {result!r}")


@router.get(
    "",
    response_model=QuotationPageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Page size above the limit"},
        **_ERROR_RESPONSES,
    },
)
@limiter.limit(READ_LIMIT)
async def list_quotations(
    request: Request,
    service: QuotationServiceDep,
    page: Annotated[int, Query(description="Zero-based page number")] = 0,
    size: Annotated[int | None, Query(description="Page size")] = None,
) -> QuotationPageResponse:
    """List quotations page by page.

    Negative pages clamp to 0; a missing or non-positive size falls back to
    the configured default. Sizes above the configured maximum are rejected.
    """
    settings = get_settings()
    page_number = max(page, 0)
    page_size = settings.quotations_default_size
    if size is not None and size > 0:
        page_size = size

    if page_size > settings.quotations_max_size:
        logger.info("quotation.list.size_rejected", page_size=page_size)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Cannot retrieve more than {settings.quotations_max_size} quotations. "
                "Please pass the correct size"
            ),
        )

    quotations = _unwrap(await service.list_quotations(page_number, page_size))
    return QuotationPageResponse(
        content=list(quotations.content),
        page_number=quotations.page_number,
        page_size=quotations.page_size,
        total_elements=quotations.total_elements,
        total_pages=quotations.total_pages,
    )


@router.post(
    "",
    response_model=QuotationResource,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Duplicate or invalid quotation"},
        **_ERROR_RESPONSES,
    },
)
@limiter.limit(WRITE_LIMIT)
async def create_quotation(
    request: Request,
    payload: QuotationInput,
    service: QuotationServiceDep,
) -> QuotationResource:
    """Create a quotation."""
    return _unwrap(await service.create_quotation(payload))


@router.put(
    "/{quotation_id}",
    response_model=QuotationResource,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid quotation"},
        404: {"model": ErrorResponse, "description": "Quotation not found"},
        **_ERROR_RESPONSES,
    },
)
@limiter.limit(WRITE_LIMIT)
async def update_quotation(
    request: Request,
    quotation_id: str,
    payload: QuotationInput,
    service: QuotationServiceDep,
) -> QuotationResource:
    """Replace the content and author of a quotation. The id never changes."""
    return _unwrap(await service.update_quotation(payload, quotation_id))


@router.delete(
    "/{quotation_id}",
    response_model=MessageResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Quotation not found"},
        **_ERROR_RESPONSES,
    },
)
@limiter.limit(WRITE_LIMIT)
async def delete_quotation(
    request: Request,
    quotation_id: str,
    service: QuotationServiceDep,
) -> MessageResponse:
    """Delete a quotation."""
    _unwrap(await service.delete_quotation(quotation_id))
    return MessageResponse(
        message=f"Quotation with id: {quotation_id} was successfully deleted"
    )
