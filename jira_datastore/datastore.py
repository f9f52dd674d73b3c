"""
Jira data store.

Drives one crawl: resolves credentials, pages through the issues that
match the configured JQL, turns each issue into an index record and
hands it to the sink. A record the sink rejects is skipped; any other
failure ends the run.
"""

import logging
from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .auth import build_client, resolve_credentials
from .comments import create_comment_aggregator
from .config import DataStoreParams
from .exceptions import ConfigurationError, CrawlingAccessError
from .executor import SHUTDOWN_TIMEOUT, CallerRunsExecutor
from .extractor import FieldExtractor
from .models import ExtractedFields, Issue, ProcessResult, StoreSummary
from .pagination import ISSUE_MAX_RESULTS, IssuePaginator
from .sink import IndexUpdateCallback

# record fields
URL_FIELD = 'url'
TITLE_FIELD = 'title'
CONTENT_FIELD = 'content'
LAST_MODIFIED_FIELD = 'last_modified'

SHUTDOWN_TIMEOUT_REASON = 'cancelled after shutdown timeout'


class RecordBuilder:
    """Merges extracted issue fields over the caller's default fields."""

    def build(
        self,
        defaults: Mapping[str, Any],
        fields: ExtractedFields,
        content: str
    ) -> Dict[str, Any]:
        record = dict(defaults)
        record[URL_FIELD] = fields.url
        record[TITLE_FIELD] = fields.title
        record[CONTENT_FIELD] = content
        if fields.last_modified is not None:
            record[LAST_MODIFIED_FIELD] = fields.last_modified
        return record


class JiraDataStore:
    """
    Crawls Jira issues into an index sink.

    Example:
        >>> store = JiraDataStore()
        >>> summary = store.store_data(JsonlIndexWriter('issues.jsonl'), {
        ...     'home': 'https://jira.example.com',
        ...     'basicauth.username': 'bot',
        ...     'basicauth.password': 'secret',
        ... })
        >>> print(summary.stored, summary.skipped)
    """

    def __init__(
        self,
        client_factory: Callable = build_client,
        page_size: int = ISSUE_MAX_RESULTS,
        shutdown_timeout: float = SHUTDOWN_TIMEOUT,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize data store.

        Args:
            client_factory: Builds the client from AuthSettings, called
                as client_factory(settings, read_interval=..., pool_size=...)
            page_size: Issues requested per search page
            shutdown_timeout: Seconds the worker pool gets to drain
            logger: Logger for run progress and skipped records
        """
        self.client_factory = client_factory
        self.page_size = page_size
        self.shutdown_timeout = shutdown_timeout
        self.logger = logger or logging.getLogger('jira_datastore.datastore')
        self.record_builder = RecordBuilder()

    def store_data(
        self,
        callback: IndexUpdateCallback,
        params: Union[DataStoreParams, Mapping[str, Any]],
        defaults: Optional[Mapping[str, Any]] = None
    ) -> StoreSummary:
        """
        Crawl every issue matching the configured query.

        Args:
            callback: Sink receiving one record per issue
            params: Data store parameters
            defaults: Fields merged under every record

        Returns:
            StoreSummary with stored and skipped counts

        Raises:
            ConfigurationError: Before any request if parameters are invalid
            JiraApiError: If a Jira request fails
        """
        if not isinstance(params, DataStoreParams):
            params = DataStoreParams(params)
        defaults = dict(defaults or {})

        settings = resolve_credentials(params, self.logger)
        try:
            number_of_threads = params.number_of_threads
            strategy = params.comments_strategy
        except ConfigurationError as e:
            self.logger.warning(str(e))
            raise

        client = self.client_factory(
            settings,
            read_interval=params.read_interval,
            pool_size=max(10, number_of_threads)
        )
        try:
            aggregator = create_comment_aggregator(strategy, client, self.logger)
            extractor = FieldExtractor(settings.home.rstrip('/'), self.logger)
            paginator = IssuePaginator(
                client,
                jql=params.jql,
                page_size=self.page_size,
                fields=aggregator.search_fields,
                logger=self.logger
            )

            self.logger.info(
                f"Crawling {settings.home} (jql={params.jql!r}, comments={strategy}, "
                f"threads={number_of_threads})"
            )

            def process(issue: Issue) -> ProcessResult:
                return self.process_issue(callback, params, defaults, extractor, aggregator, issue)

            if number_of_threads > 1:
                summary = self._run_parallel(paginator, process, number_of_threads)
            else:
                summary = StoreSummary()
                for issue in paginator:
                    summary.add(process(issue))
        finally:
            client.close()

        self.logger.info(
            f"Crawl finished: {summary.stored} stored, {summary.skipped} skipped "
            f"over {paginator.pages_fetched} page(s)"
        )
        return summary

    def _run_parallel(
        self,
        paginator: IssuePaginator,
        process: Callable[[Issue], ProcessResult],
        number_of_threads: int
    ) -> StoreSummary:
        failures: List[Exception] = []

        def run(issue: Issue) -> ProcessResult:
            try:
                return process(issue)
            except Exception as e:
                failures.append(e)
                raise

        executor = CallerRunsExecutor(number_of_threads, logger=self.logger)
        issue_keys: Dict[Future, str] = {}
        try:
            for issue in paginator:
                if failures:
                    break
                issue_keys[executor.submit(run, issue)] = issue.key
            if failures:
                raise failures[0]
        except BaseException:
            executor.cancel()
            raise
        finally:
            pending = executor.shutdown(self.shutdown_timeout)

        summary = StoreSummary()
        for future in executor.futures:
            if future in pending or future.cancelled():
                summary.add(ProcessResult.skipped(issue_keys[future], SHUTDOWN_TIMEOUT_REASON, {}))
            else:
                summary.add(future.result())
        return summary

    def process_issue(
        self,
        callback: IndexUpdateCallback,
        params: DataStoreParams,
        defaults: Mapping[str, Any],
        extractor: FieldExtractor,
        aggregator,
        issue: Issue
    ) -> ProcessResult:
        """
        Build and store the record for one issue.

        Returns:
            A success result, or a skipped result if a CrawlingAccessError
            was raised while building or storing the record
        """
        record: Dict[str, Any] = dict(defaults)
        try:
            fields = extractor.extract(issue)
            content = fields.description + aggregator.comments(issue)
            record = self.record_builder.build(defaults, fields, content)
            callback.store(params.as_dict(), record)
        except CrawlingAccessError as e:
            self.logger.warning(f"Crawling Access Exception at : {record}", exc_info=e)
            return ProcessResult.skipped(issue.key, str(e), record)
        return ProcessResult.success(issue.key, record)
