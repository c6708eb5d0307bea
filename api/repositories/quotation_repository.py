"""Quotation repository for database operations."""

import secrets
import threading
import time
from typing import Protocol

from sqlalchemy import delete, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Quotation
from pagination import Page
from repositories.utils import log_slow_query

# Largest OFFSET a signed 64-bit bind parameter can carry
MAX_OFFSET = 2**63 - 1


class _TimeOrderedIds:
    """Millisecond timestamp (48 bits) + random tail (80 bits), as 32 hex chars.

    Ids handed out by one process are strictly increasing, also within the
    same millisecond, so they sort in creation order.
    """

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> str:
        candidate = (time.time_ns() // 1_000_000) << 80 | secrets.randbits(80)
        with self._lock:
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
        return f"{candidate:032x}"


_ids = _TimeOrderedIds()


def new_quotation_id() -> str:
    """Generate an id for a quotation that has none yet."""
    return _ids.next()


class QuotationStore(Protocol):
    """Persistence contract the quotation service relies on.

    Implementations raise ``repositories.errors.RepositoryError`` for any
    persistence failure and ``DuplicateQuotationError`` when a save violates
    the (content, author) uniqueness rule.
    """

    async def find_page(self, page_number: int, page_size: int) -> Page[Quotation]: ...

    async def find_by_content_and_author(
        self, content: str, first_name: str, last_name: str
    ) -> Quotation | None: ...

    async def exists_by_id(self, quotation_id: str) -> bool: ...

    async def get_by_id(self, quotation_id: str) -> Quotation | None: ...

    async def save(self, quotation: Quotation) -> Quotation: ...

    async def delete_by_id(self, quotation_id: str) -> None: ...


class QuotationRepository:
    """Repository for Quotation database operations.

    Does NOT commit. The request's session dependency owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("quotation.count")
    async def count(self) -> int:
        return await self.db.scalar(select(func.count()).select_from(Quotation)) or 0

    @log_slow_query("quotation.find_page")
    async def find_page(self, page_number: int, page_size: int) -> Page[Quotation]:
        """Get one page of quotations in insertion order (id breaks ties).

        A page whose offset lies beyond MAX_OFFSET cannot hold any row and is
        returned empty without querying for rows.
        """
        total = await self.db.scalar(select(func.count()).select_from(Quotation))
        offset = page_number * page_size
        rows: tuple[Quotation, ...] = ()
        if offset <= MAX_OFFSET:
            result = await self.db.execute(
                select(Quotation)
                .order_by(Quotation.created_at, Quotation.id)
                .offset(offset)
                .limit(page_size)
            )
            rows = tuple(result.scalars().all())
        return Page(
            content=rows,
            page_number=page_number,
            page_size=page_size,
            total_elements=total or 0,
        )

    @log_slow_query("quotation.find_by_content_and_author")
    async def find_by_content_and_author(
        self, content: str, first_name: str, last_name: str
    ) -> Quotation | None:
        """Get a quotation by exact content and case-insensitive author names.

        Lowercasing happens in SQL on both sides so the comparison matches
        the unique index exactly.
        """
        result = await self.db.execute(
            select(Quotation)
            .where(
                Quotation.content == content,
                func.lower(Quotation.author_first_name) == func.lower(first_name),
                func.lower(Quotation.author_last_name) == func.lower(last_name),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    @log_slow_query("quotation.exists_by_id")
    async def exists_by_id(self, quotation_id: str) -> bool:
        result = await self.db.scalar(
            select(exists().where(Quotation.id == quotation_id))
        )
        return bool(result)

    @log_slow_query("quotation.get_by_id")
    async def get_by_id(self, quotation_id: str) -> Quotation | None:
        result = await self.db.execute(
            select(Quotation).where(Quotation.id == quotation_id)
        )
        return result.scalar_one_or_none()

    @log_slow_query("quotation.save")
    async def save(self, quotation: Quotation) -> Quotation:
        """Insert or overwrite a quotation.

        A quotation without an id gets one from new_quotation_id() and is
        inserted. A quotation with an id replaces the content and author of
        the stored row with that id (or is inserted under it if absent).
        Returns the persistent instance.
        """
        if quotation.id is None:
            quotation.id = new_quotation_id()
            self.db.add(quotation)
            await self.db.flush()
            return quotation

        stored = await self.db.get(Quotation, quotation.id)
        if stored is None:
            self.db.add(quotation)
            stored = quotation
        else:
            stored.content = quotation.content
            stored.author_first_name = quotation.author_first_name
            stored.author_last_name = quotation.author_last_name
        await self.db.flush()
        return stored

    @log_slow_query("quotation.delete_by_id")
    async def delete_by_id(self, quotation_id: str) -> None:
        await self.db.execute(delete(Quotation).where(Quotation.id == quotation_id))
