"""Property-based tests for QuotationService using Hypothesis.

The service runs against InMemoryQuotationStore so state carries across
calls within one example.
"""

import asyncio

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from pagination import compute_total_pages
from schemas import AuthorData, QuotationInput
from services.quotations_service import QuotationService
from services.results import ErrorKind, Ok, ServiceError
from tests.fakes import InMemoryQuotationStore

# Mark all tests in this module as unit tests (no database required)
pytestmark = pytest.mark.unit

# =============================================================================
# Custom Strategies
# =============================================================================

_ascii_letters = st.characters(min_codepoint=ord("A"), max_codepoint=ord("z")).filter(
    str.isalpha
)

names = st.text(alphabet=_ascii_letters, min_size=1, max_size=20)

contents = st.text(min_size=1, max_size=200).filter(lambda s: s.strip() != "")


@st.composite
def quotation_inputs(draw) -> QuotationInput:
    return QuotationInput(
        content=draw(contents),
        author=AuthorData(first_name=draw(names), last_name=draw(names)),
    )


def _swap_case(data: QuotationInput) -> QuotationInput:
    return QuotationInput(
        content=data.content,
        author=AuthorData(
            first_name=data.author.first_name.swapcase(),
            last_name=data.author.last_name.swapcase(),
        ),
    )


hypothesis_settings = settings(
    max_examples=75,
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
)


def _new_service() -> tuple[QuotationService, InMemoryQuotationStore]:
    store = InMemoryQuotationStore()
    return QuotationService(store), store


# =============================================================================
# Property Tests
# =============================================================================


class TestCreateProperties:
    @given(data=quotation_inputs())
    @hypothesis_settings
    def test_created_quotation_is_stored_under_returned_id(self, data: QuotationInput):
        """Property: a fresh create returns an id that the store can look up."""
        service, store = _new_service()

        result = asyncio.run(service.create_quotation(data))

        assert isinstance(result, Ok)
        assert result.value.id
        assert asyncio.run(store.exists_by_id(result.value.id))
        assert result.value.content == data.content
        assert result.value.author == data.author

    @given(data=quotation_inputs())
    @hypothesis_settings
    def test_author_case_never_makes_a_new_quotation(self, data: QuotationInput):
        """Property: same content with case-swapped author is ALREADY_EXISTS."""
        service, store = _new_service()

        async def scenario():
            first = await service.create_quotation(data)
            second = await service.create_quotation(_swap_case(data))
            return first, second

        first, second = asyncio.run(scenario())

        assert isinstance(first, Ok)
        assert isinstance(second, ServiceError)
        assert second.kind is ErrorKind.ALREADY_EXISTS
        assert len(store.rows) == 1


class TestUpdateDeleteProperties:
    @given(original=quotation_inputs(), replacement=quotation_inputs())
    @hypothesis_settings
    def test_update_keeps_id(
        self, original: QuotationInput, replacement: QuotationInput
    ):
        """Property: an update never changes the quotation id."""
        service, store = _new_service()

        async def scenario():
            created = await service.create_quotation(original)
            updated = await service.update_quotation(replacement, created.value.id)
            return created, updated

        created, updated = asyncio.run(scenario())

        assert isinstance(updated, Ok)
        assert updated.value.id == created.value.id
        assert updated.value.content == replacement.content
        assert len(store.rows) == 1

    @given(data=quotation_inputs())
    @hypothesis_settings
    def test_second_delete_is_not_found(self, data: QuotationInput):
        """Property: deleting twice yields Ok then NOT_FOUND."""
        service, _ = _new_service()

        async def scenario():
            created = await service.create_quotation(data)
            first = await service.delete_quotation(created.value.id)
            second = await service.delete_quotation(created.value.id)
            return first, second

        first, second = asyncio.run(scenario())

        assert first == Ok(None)
        assert isinstance(second, ServiceError)
        assert second.kind is ErrorKind.NOT_FOUND


class TestListProperties:
    @given(
        count=st.integers(min_value=0, max_value=30),
        page_size=st.integers(min_value=1, max_value=12),
        page_number=st.integers(min_value=0, max_value=5),
    )
    @hypothesis_settings
    def test_page_totals_match_store(
        self, count: int, page_size: int, page_number: int
    ):
        """Property: totals describe the whole set, content only the slice."""
        service, _ = _new_service()

        async def scenario():
            for i in range(count):
                await service.create_quotation(
                    QuotationInput(
                        content=f"Quotation number {i}",
                        author=AuthorData(first_name="Ada", last_name="Lovelace"),
                    )
                )
            return await service.list_quotations(page_number, page_size)

        result = asyncio.run(scenario())

        assert isinstance(result, Ok)
        page = result.value
        assert page.total_elements == count
        assert page.total_pages == compute_total_pages(
            total_elements=count, page_size=page_size
        )
        expected_len = max(0, min(page_size, count - page_number * page_size))
        assert len(page.content) == expected_len
