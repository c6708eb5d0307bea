"""Page container shared by the repository, service and route layers.

Pages are zero-based: ``page_number=0`` is the first page.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field


def compute_total_pages(*, total_elements: int, page_size: int) -> int:
    """ceil(total_elements / page_size); an empty backing set has no pages."""
    if page_size <= 0:
        raise ValueError("page_size must be >= 1")
    if total_elements <= 0:
        return 0
    return ((total_elements - 1) // page_size) + 1


@dataclass(frozen=True)
class Page[T]:
    """An ordered, bounded slice of a larger result set."""

    content: Sequence[T] = field(default_factory=tuple)
    page_number: int = 0
    page_size: int = 1
    total_elements: int = 0

    def __post_init__(self) -> None:
        if self.page_number < 0:
            raise ValueError("page_number must be >= 0")
        if self.page_size <= 0:
            raise ValueError("page_size must be >= 1")
        if len(self.content) > self.page_size:
            raise ValueError(
                f"Page holds {len(self.content)} items "
                f"but page_size is {self.page_size}"
            )
        if self.total_elements < len(self.content):
            raise ValueError("total_elements cannot be smaller than the page content")

    @property
    def total_pages(self) -> int:
        return compute_total_pages(
            total_elements=self.total_elements, page_size=self.page_size
        )

    @property
    def offset(self) -> int:
        return self.page_number * self.page_size

    def map[U](self, transform: Callable[[T], U]) -> "Page[U]":
        """Apply ``transform`` to every item, keeping numbering and totals."""
        return Page(
            content=tuple(transform(item) for item in self.content),
            page_number=self.page_number,
            page_size=self.page_size,
            total_elements=self.total_elements,
        )
