"""
Comment aggregation.

Two retrieval strategies exist and a deployment uses exactly one:
comments embedded in the search payload, or a separate paginated
comment endpoint per issue.
"""

import logging
from typing import Iterable, Optional

from .config import COMMENTS_EMBEDDED, COMMENTS_ENDPOINT
from .exceptions import ConfigurationError
from .models import Comment, Issue
from .pagination import ISSUE_FIELDS, ISSUE_FIELDS_WITH_COMMENTS, paginate

COMMENT_MAX_RESULTS = 50

SEPARATOR = '\n\n'


def concat_comments(comments: Iterable[Comment]) -> str:
    """Join comment bodies, each preceded by a blank line."""
    return ''.join(SEPARATOR + comment.body for comment in comments)


class EndpointCommentAggregator:
    """Pages through /rest/api/2/issue/{id}/comment for every issue."""

    search_fields = ISSUE_FIELDS

    def __init__(
        self,
        client,
        page_size: int = COMMENT_MAX_RESULTS,
        logger: Optional[logging.Logger] = None
    ):
        self.client = client
        self.page_size = page_size
        self.logger = logger or logging.getLogger('jira_datastore.comments')

    def comments(self, issue: Issue) -> str:
        def fetch_page(start_at, max_results):
            return self.client.get_comments(issue.id, start_at, max_results)

        raw_comments = paginate(fetch_page, self.page_size)
        return concat_comments(Comment.from_api(raw) for raw in raw_comments)


class EmbeddedCommentAggregator:
    """Reads the comments already present in the search payload."""

    search_fields = ISSUE_FIELDS_WITH_COMMENTS

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('jira_datastore.comments')

    def comments(self, issue: Issue) -> str:
        return concat_comments(issue.comments)


def create_comment_aggregator(
    strategy: str,
    client,
    logger: Optional[logging.Logger] = None
):
    """
    Build the aggregator for a strategy name.

    Raises:
        ConfigurationError: If the strategy is unknown
    """
    if strategy == COMMENTS_ENDPOINT:
        return EndpointCommentAggregator(client, logger=logger)
    if strategy == COMMENTS_EMBEDDED:
        return EmbeddedCommentAggregator(logger=logger)
    raise ConfigurationError(
        f"Unknown comment strategy {strategy!r}, "
        f"expected {COMMENTS_ENDPOINT!r} or {COMMENTS_EMBEDDED!r}"
    )
