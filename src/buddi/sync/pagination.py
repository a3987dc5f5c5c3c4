"""Pagination state machine for the Buddi wearer locations endpoint.

Transitions depend only on whether a page carried a ``data`` array, whether
a total page count is known, and the current page index:

    FETCHING --(no data array)----------------------> EXHAUSTED
    FETCHING --(page count never reported)-----------> EXHAUSTED
    FETCHING --(next page > captured page count)-----> EXHAUSTED
    FETCHING --(next page <= captured page count)----> FETCHING
    FETCHING --(invalid response / transport error)--> ABORTED

The page count is captured from the first response that reports one and is
never refreshed afterwards, so the number of requests is bounded even when
later pages drop their ``meta`` block.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from src.buddi.schemas import LocationsResponse

logger = logging.getLogger("buddi.sync.pagination")

FIRST_PAGE = 1
PAGE_SIZE = 100


class PageState(str, Enum):
    FETCHING = "fetching"
    EXHAUSTED = "exhausted"
    ABORTED = "aborted"


@dataclass
class Paginator:
    """Tracks the page to request next and when to stop.

    Attributes:
        page:        Page index to request next (1-based).
        per_page:    Records requested per page.
        total_pages: Page count captured from the first ``meta.pages`` seen.
        state:       Current state.
        fetched:     Number of pages received so far.
    """

    page: int = FIRST_PAGE
    per_page: int = PAGE_SIZE
    total_pages: int | None = None
    state: PageState = PageState.FETCHING
    fetched: int = 0

    @property
    def is_fetching(self) -> bool:
        return self.state is PageState.FETCHING

    def advance(self, response: LocationsResponse) -> PageState:
        """Apply a received page and return the resulting state."""
        if not self.is_fetching:
            raise RuntimeError(f"Paginator is {self.state.value}; cannot advance")

        self.fetched += 1

        if response.data is None:
            logger.debug("Page %d carried no data array; stopping", self.page)
            self.state = PageState.EXHAUSTED
            return self.state

        if self.total_pages is None and response.meta is not None and response.meta.pages is not None:
            self.total_pages = response.meta.pages
            logger.debug("Captured page count %d from page %d", self.total_pages, self.page)

        if self.total_pages is None:
            logger.warning(
                "No page count reported after page %d; stopping to avoid unbounded paging",
                self.page,
            )
            self.state = PageState.EXHAUSTED
            return self.state

        self.page += 1
        if self.page > self.total_pages:
            self.state = PageState.EXHAUSTED
        return self.state

    def abort(self) -> None:
        self.state = PageState.ABORTED
