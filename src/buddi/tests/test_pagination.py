"""Tests for the locations pagination state machine."""

from __future__ import annotations

import pytest

from src.buddi.schemas import LocationsResponse
from src.buddi.sync.pagination import PAGE_SIZE, PageState, Paginator


def _page(data: list | None = None, pages: int | None = None, with_meta: bool = True) -> LocationsResponse:
    body: dict = {"result": 200}
    if data is not None:
        body["data"] = data
    if with_meta and pages is not None:
        body["meta"] = {"total": 0, "page": 1, "per_page": PAGE_SIZE, "pages": pages}
    return LocationsResponse.model_validate(body)


class TestPaginator:
    def test_starts_on_first_page(self) -> None:
        paginator = Paginator()
        assert paginator.page == 1
        assert paginator.per_page == 100
        assert paginator.state is PageState.FETCHING

    def test_missing_data_exhausts_immediately(self) -> None:
        paginator = Paginator()
        state = paginator.advance(_page(data=None, pages=5))
        assert state is PageState.EXHAUSTED
        assert paginator.fetched == 1

    def test_empty_data_array_is_not_missing(self) -> None:
        paginator = Paginator()
        assert paginator.advance(_page(data=[], pages=2)) is PageState.FETCHING
        assert paginator.page == 2

    def test_no_page_count_stops_after_one_page(self) -> None:
        paginator = Paginator()
        state = paginator.advance(_page(data=[], with_meta=False))
        assert state is PageState.EXHAUSTED
        assert paginator.total_pages is None

    def test_walks_until_page_count(self) -> None:
        paginator = Paginator()
        assert paginator.advance(_page(data=[], pages=3)) is PageState.FETCHING
        assert paginator.advance(_page(data=[], pages=3)) is PageState.FETCHING
        assert paginator.advance(_page(data=[], pages=3)) is PageState.EXHAUSTED
        assert paginator.fetched == 3

    def test_page_count_captured_once(self) -> None:
        paginator = Paginator()
        paginator.advance(_page(data=[], pages=2))
        state = paginator.advance(_page(data=[], pages=10))
        assert paginator.total_pages == 2
        assert state is PageState.EXHAUSTED

    def test_later_pages_without_meta_keep_captured_count(self) -> None:
        paginator = Paginator()
        paginator.advance(_page(data=[], pages=3))
        assert paginator.advance(_page(data=[], with_meta=False)) is PageState.FETCHING
        assert paginator.advance(_page(data=[], with_meta=False)) is PageState.EXHAUSTED

    def test_meta_without_pages_is_not_a_count(self) -> None:
        paginator = Paginator()
        response = LocationsResponse.model_validate(
            {"result": 200, "data": [], "meta": {"total": 3}}
        )
        assert paginator.advance(response) is PageState.EXHAUSTED
        assert paginator.total_pages is None

    def test_abort(self) -> None:
        paginator = Paginator()
        paginator.abort()
        assert paginator.state is PageState.ABORTED
        assert not paginator.is_fetching

    def test_cannot_advance_after_exhaustion(self) -> None:
        paginator = Paginator()
        paginator.advance(_page(data=None))
        with pytest.raises(RuntimeError):
            paginator.advance(_page(data=[], pages=1))
