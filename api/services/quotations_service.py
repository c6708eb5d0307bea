"""Quotation business logic.

This module owns the rules for listing, creating, updating and deleting
quotations:
- Duplicate detection on create (exact content, author names ignoring case)
- Existence checks before update and delete
- Projection of stored rows into QuotationResource
- Translation of RepositoryError into ServiceError results

Repository failure details are logged here and never returned to callers.
"""

import structlog

from core.logger import get_logger
from models import Quotation
from pagination import Page
from repositories.errors import DuplicateQuotationError, RepositoryError
from repositories.quotation_repository import QuotationStore
from schemas import AuthorData, QuotationInput, QuotationResource
from services.results import ErrorKind, Ok, ServiceError, ServiceResult

LIST_FAILED_MESSAGE = "Problem occurred by attempt to list quotations"
SAVE_FAILED_MESSAGE = "Problem occurred by attempt to save new quotation"
NULL_ID_MESSAGE = "Attempt to update quotation with passed null id"
ALREADY_EXISTS_MESSAGE = "Attempt to add quotation that already exists"
UPDATE_NOT_FOUND_MESSAGE = "Cannot find quotation with id {} to update quotation"
UPDATE_FAILED_MESSAGE = "Problem occurred by attempt to update quotation with id: {}"
DELETE_NOT_FOUND_MESSAGE = "Cannot find quotation with id: {} to delete quotation"
DELETE_FAILED_MESSAGE = "Problem occurred by attempt to delete quotation with id: {}"


def to_quotation_resource(quotation: Quotation) -> QuotationResource:
    """Project a stored quotation into its public shape."""
    return QuotationResource(
        id=quotation.id,
        content=quotation.content,
        author=AuthorData(
            first_name=quotation.author_first_name,
            last_name=quotation.author_last_name,
        ),
    )


def build_quotation(data: QuotationInput, quotation_id: str | None = None) -> Quotation:
    """Build an unsaved quotation from a validated payload."""
    return Quotation(
        id=quotation_id,
        content=data.content,
        author_first_name=data.author.first_name,
        author_last_name=data.author.last_name,
    )


class QuotationService:
    """Stateless orchestrator over a QuotationStore.

    One instance per request is fine; nothing is cached between calls.
    """

    def __init__(
        self,
        repository: QuotationStore,
        logger: structlog.stdlib.BoundLogger | None = None,
    ):
        self._repository = repository
        self._logger = logger if logger is not None else get_logger(__name__)

    def _failure(
        self, event: str, message: str, exc: RepositoryError, **fields
    ) -> ServiceError:
        self._logger.error(
            event,
            operation=exc.operation,
            error=str(exc.__cause__ or exc),
            error_type=type(exc.__cause__ or exc).__name__,
            exc_info=exc,
            **fields,
        )
        return ServiceError(ErrorKind.SERVICE_FAILURE, message)

    async def list_quotations(
        self, page_number: int, page_size: int
    ) -> ServiceResult[Page[QuotationResource]]:
        """Get one page of quotations.

        page_number/page_size are expected to be clamped by the caller.
        """
        try:
            page = await self._repository.find_page(page_number, page_size)
        except RepositoryError as exc:
            return self._failure(
                "quotation.list.failed",
                LIST_FAILED_MESSAGE,
                exc,
                page_number=page_number,
                page_size=page_size,
            )
        return Ok(page.map(to_quotation_resource))

    async def create_quotation(
        self, data: QuotationInput
    ) -> ServiceResult[QuotationResource]:
        """Create a quotation unless the same content and author already exist.

        The lookup and the insert are separate statements; a concurrent
        duplicate that slips between them is rejected by the unique index and
        reported as ALREADY_EXISTS as well.
        """
        first_name = data.author.first_name
        last_name = data.author.last_name
        try:
            existing = await self._repository.find_by_content_and_author(
                data.content, first_name, last_name
            )
            if existing is not None:
                self._logger.info(
                    "quotation.create.duplicate",
                    existing_id=existing.id,
                    author_first_name=first_name,
                    author_last_name=last_name,
                )
                return ServiceError(ErrorKind.ALREADY_EXISTS, ALREADY_EXISTS_MESSAGE)

            self._logger.info(
                "quotation.create.attempt",
                author_first_name=first_name,
                author_last_name=last_name,
            )
            saved = await self._repository.save(build_quotation(data))
        except DuplicateQuotationError:
            self._logger.info(
                "quotation.create.duplicate",
                detected_by="unique_index",
                author_first_name=first_name,
                author_last_name=last_name,
            )
            return ServiceError(ErrorKind.ALREADY_EXISTS, ALREADY_EXISTS_MESSAGE)
        except RepositoryError as exc:
            return self._failure("quotation.create.failed", SAVE_FAILED_MESSAGE, exc)

        self._logger.info("quotation.created", quotation_id=saved.id)
        return Ok(to_quotation_resource(saved))

    async def update_quotation(
        self, data: QuotationInput, quotation_id: str | None
    ) -> ServiceResult[QuotationResource]:
        """Replace content and author of an existing quotation, keeping its id.

        No duplicate lookup happens here. If the storage backstop still rejects
        the write it is a plain SERVICE_FAILURE, like any other failed save.
        A None id is a caller error and is reported as SERVICE_FAILURE too.
        """
        if quotation_id is None:
            self._logger.warning("quotation.update.null_id")
            return ServiceError(ErrorKind.SERVICE_FAILURE, NULL_ID_MESSAGE)

        try:
            if not await self._repository.exists_by_id(quotation_id):
                self._logger.info(
                    "quotation.update.not_found", quotation_id=quotation_id
                )
                return ServiceError(
                    ErrorKind.NOT_FOUND, UPDATE_NOT_FOUND_MESSAGE.format(quotation_id)
                )

            self._logger.info("quotation.update.attempt", quotation_id=quotation_id)
            updated = await self._repository.save(build_quotation(data, quotation_id))
        except RepositoryError as exc:
            return self._failure(
                "quotation.update.failed",
                UPDATE_FAILED_MESSAGE.format(quotation_id),
                exc,
                quotation_id=quotation_id,
            )

        self._logger.info("quotation.updated", quotation_id=updated.id)
        return Ok(to_quotation_resource(updated))

    async def delete_quotation(self, quotation_id: str) -> ServiceResult[None]:
        """Delete a quotation. Deleting a missing id is NOT_FOUND every time."""
        try:
            if not await self._repository.exists_by_id(quotation_id):
                self._logger.info(
                    "quotation.delete.not_found", quotation_id=quotation_id
                )
                return ServiceError(
                    ErrorKind.NOT_FOUND, DELETE_NOT_FOUND_MESSAGE.format(quotation_id)
                )

            self._logger.info("quotation.delete.attempt", quotation_id=quotation_id)
            await self._repository.delete_by_id(quotation_id)
        except RepositoryError as exc:
            return self._failure(
                "quotation.delete.failed",
                DELETE_FAILED_MESSAGE.format(quotation_id),
                exc,
                quotation_id=quotation_id,
            )

        self._logger.info("quotation.deleted", quotation_id=quotation_id)
        return Ok(None)
