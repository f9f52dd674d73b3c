"""
Offset pagination over Jira list endpoints.

Jira's v2 search and comment endpoints both take ``startAt`` and
``maxResults``. A page shorter than the requested size is the last one.
"""

import logging
from typing import Callable, Iterator, List, Optional, Sequence, TypeVar

from .models import Issue

T = TypeVar('T')

ISSUE_MAX_RESULTS = 50

ISSUE_FIELDS = ('summary', 'description', 'updated')
ISSUE_FIELDS_WITH_COMMENTS = ('summary', 'description', 'comment', 'updated')


def paginate(fetch_page: Callable[[int, int], List[T]], page_size: int) -> Iterator[T]:
    """
    Yield items page by page until a short page is returned.

    Args:
        fetch_page: Called as fetch_page(start_at, max_results)
        page_size: Number of items requested per page

    Yields:
        Items in server order
    """
    if page_size <= 0:
        raise ValueError(f"page_size must be positive: {page_size}")

    start_at = 0
    while True:
        page = fetch_page(start_at, page_size)
        yield from page
        if len(page) < page_size:
            break
        start_at += page_size


class IssuePaginator:
    """
    Lazily walks every issue matching a JQL query.

    The iterator returned by issues() is single use; call it again to
    run the search from the beginning.
    """

    def __init__(
        self,
        client,
        jql: str = '',
        page_size: int = ISSUE_MAX_RESULTS,
        fields: Sequence[str] = ISSUE_FIELDS,
        logger: Optional[logging.Logger] = None
    ):
        self.client = client
        self.jql = jql
        self.page_size = page_size
        self.fields = tuple(fields)
        self.logger = logger or logging.getLogger('jira_datastore.pagination')
        self.pages_fetched = 0

    def _fetch_page(self, start_at: int, max_results: int) -> List[dict]:
        issues = self.client.search_issues(self.jql, start_at, max_results, self.fields)
        self.pages_fetched += 1
        self.logger.info(
            f"Fetched issue page {self.pages_fetched}: startAt={start_at}, size={len(issues)}"
        )
        return issues

    def issues(self) -> Iterator[Issue]:
        for raw in paginate(self._fetch_page, self.page_size):
            yield Issue.from_api(raw)

    def __iter__(self) -> Iterator[Issue]:
        return self.issues()
