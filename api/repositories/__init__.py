"""Repository layer for database operations.

Repositories encapsulate all database queries, keeping services free of SQL.
This separation provides:
- Single source of truth for database operations
- Easier testing (repositories can be mocked or faked)
- Translation of SQLAlchemy errors into RepositoryError
"""

from repositories.errors import DuplicateQuotationError, RepositoryError
from repositories.quotation_repository import (
    QuotationRepository,
    QuotationStore,
    new_quotation_id,
)
from repositories.utils import log_slow_query

__all__ = [
    "DuplicateQuotationError",
    "QuotationRepository",
    "QuotationStore",
    "RepositoryError",
    "log_slow_query",
    "new_quotation_id",
]
