"""SQLAlchemy models for the quotations store."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, String, Text, func
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from core.database import Base

CONTENT_MAX_LENGTH = 1000
AUTHOR_NAME_MAX_LENGTH = 255


def utcnow() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamp columns."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utcnow, index=True)

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class Quotation(TimestampMixin, Base):
    """A quoted text attributed to an author.

    ``id`` stays ``None`` until the repository saves the row; see
    ``repositories.quotation_repository.new_quotation_id``.
    """

    __tablename__ = "quotations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_first_name: Mapped[str] = mapped_column(
        String(AUTHOR_NAME_MAX_LENGTH), nullable=False
    )
    author_last_name: Mapped[str] = mapped_column(
        String(AUTHOR_NAME_MAX_LENGTH), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"Quotation(id={self.id!r}, author="
            f"{self.author_first_name!r} {self.author_last_name!r})"
        )


# Backstop for concurrent creates: the service's duplicate lookup is not atomic
# with the insert. Author names compare case-insensitively, content exactly.
Index(
    "uq_quotations_content_author",
    Quotation.content,
    func.lower(Quotation.author_first_name),
    func.lower(Quotation.author_last_name),
    unique=True,
)
