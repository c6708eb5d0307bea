"""Repository-level exceptions.

Low-level SQLAlchemy errors are translated into these so the service layer
never depends on driver or ORM exception types.
"""


class RepositoryError(Exception):
    """A non-transient persistence failure.

    ``operation`` names the repository call that failed; the original
    exception is chained as ``__cause__``.
    """

    def __init__(self, operation: str, message: str | None = None):
        self.operation = operation
        super().__init__(message or f"Repository operation '{operation}' failed")


class DuplicateQuotationError(RepositoryError):
    """A save hit the unique (content, author) constraint."""
