"""Pydantic schemas for API request/response validation.

The wire format is camelCase (``firstName``, ``totalElements``); Python code
uses the snake_case attribute names.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from models import AUTHOR_NAME_MAX_LENGTH, CONTENT_MAX_LENGTH


class CamelModel(BaseModel):
    """Base schema that reads and writes camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuthorData(CamelModel):
    """Author of a quotation."""

    first_name: str = Field(max_length=AUTHOR_NAME_MAX_LENGTH)
    last_name: str = Field(max_length=AUTHOR_NAME_MAX_LENGTH)

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Author name cannot be empty or contain only whitespaces")
        return v


class QuotationInput(CamelModel):
    """Validated create/update payload handed to the service layer."""

    content: str
    author: AuthorData

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError(
                "Content cannot be null and cannot contain only whitespaces"
            )
        if len(v) > CONTENT_MAX_LENGTH:
            raise ValueError(
                f"Content cannot be longer than {CONTENT_MAX_LENGTH} characters"
            )
        return v


class QuotationResource(CamelModel):
    """Public projection of a stored quotation."""

    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    author: AuthorData


class QuotationPageResponse(CamelModel):
    """One page of quotations plus totals for the full set."""

    content: list[QuotationResource]
    page_number: int
    page_size: int
    total_elements: int
    total_pages: int


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


class ErrorResponse(BaseModel):
    """Error body produced for 4xx/5xx responses."""

    detail: str


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str


class StoreHealthResponse(HealthResponse):
    """Health of the quotation store as seen by this process.

    ``database`` is plain connectivity; ``quotations_table`` means the
    migrated table answered a count, which is then reported.
    """

    startup_complete: bool
    database: bool
    quotations_table: bool
    quotation_count: int | None = None
