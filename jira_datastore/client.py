"""
Jira REST API transport.

This module handles:
- Authenticated session setup with connection pooling
- Issue search and comment listing against REST API v2
- Translating transport failures into JiraApiError
"""

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import JiraApiError

USER_AGENT = 'Jira-DataStore/1.0'

SEARCH_ENDPOINT = '/rest/api/2/search'
COMMENT_ENDPOINT = '/rest/api/2/issue/{issue_id}/comment'


class JiraClient:
    """
    Read-only client for the Jira REST API.

    The underlying session is configured once in the constructor and is
    safe to share across worker threads for GET requests.
    """

    def __init__(
        self,
        home: str,
        auth=None,
        read_interval: int = 0,
        timeout: float = 30.0,
        max_retries: int = 0,
        pool_size: int = 10,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize Jira client.

        Args:
            home: Jira base URL, e.g. https://jira.example.com
            auth: requests auth object (HTTPBasicAuth or OAuth1)
            read_interval: Delay before each request in milliseconds
            timeout: Per-request timeout in seconds
            max_retries: urllib3 retries for failed requests (0 disables)
            pool_size: Connection pool size
            session: Pre-built session, mostly for tests
            logger: Logger to report on, defaults to the module logger
        """
        self.home = home.rstrip('/')
        self.read_interval = read_interval
        self.timeout = timeout
        self.max_retries = max_retries
        self.pool_size = pool_size
        self.logger = logger or logging.getLogger('jira_datastore.client')

        self.session = session or self._create_session()
        if auth is not None:
            self.session.auth = auth

    def _create_session(self) -> requests.Session:
        """
        Create requests session with retry policy and connection pooling.

        Returns:
            Configured requests.Session
        """
        session = requests.Session()

        retry_strategy = Retry(
            total=self.max_retries,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            backoff_factor=1.0,
            raise_on_status=False
        )

        adapter = HTTPAdapter(
            max_retries=retry_strategy,
            pool_connections=self.pool_size,
            pool_maxsize=self.pool_size
        )

        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({
            'User-Agent': USER_AGENT,
            'Accept': 'application/json'
        })

        return session

    def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict:
        """
        Issue a GET request and decode the JSON body.

        Raises:
            JiraApiError: On any transport, HTTP status or decoding failure
        """
        url = self.home + endpoint

        if self.read_interval > 0:
            time.sleep(self.read_interval / 1000.0)

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            self.logger.error(f"Request timeout for {url}")
            raise JiraApiError(f"Request timeout for {url}") from e
        except requests.exceptions.ConnectionError as e:
            self.logger.error(f"Connection error for {url}: {e}")
            raise JiraApiError(f"Connection error for {url}: {e}") from e
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Request failed for {url}: {e}")
            raise JiraApiError(f"Request failed for {url}: {e}") from e

        if response.status_code >= 400:
            self.logger.error(
                f"HTTP {response.status_code} for {url}: {response.text[:200]}"
            )
            raise JiraApiError(
                f"HTTP {response.status_code} for {url}",
                status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            self.logger.error(f"Invalid JSON from {url}: {e}")
            raise JiraApiError(f"Invalid JSON from {url}") from e

    def search_issues(
        self,
        jql: str,
        start_at: int,
        max_results: int,
        fields: Sequence[str]
    ) -> List[Dict]:
        """
        Fetch one page of issues matching a JQL query.

        Args:
            jql: JQL filter, empty for all issues
            start_at: Offset of the first issue
            max_results: Page size
            fields: Field projection

        Returns:
            List of raw issue dictionaries
        """
        params = {
            'jql': jql,
            'startAt': start_at,
            'maxResults': max_results,
            'fields': ','.join(fields)
        }

        self.logger.debug(
            f"Searching issues: jql={jql!r}, startAt={start_at}, maxResults={max_results}"
        )
        data = self._get(SEARCH_ENDPOINT, params)
        return data.get('issues') or []

    def get_comments(self, issue_id: str, start_at: int, max_results: int) -> List[Dict]:
        """
        Fetch one page of comments for an issue.

        Args:
            issue_id: Issue id or key
            start_at: Offset of the first comment
            max_results: Page size

        Returns:
            List of raw comment dictionaries
        """
        endpoint = COMMENT_ENDPOINT.format(issue_id=issue_id)
        params = {
            'startAt': start_at,
            'maxResults': max_results
        }

        self.logger.debug(f"Fetching comments for {issue_id}: startAt={start_at}")
        data = self._get(endpoint, params)
        return data.get('comments') or []

    def close(self) -> None:
        """Close the underlying session."""
        if self.session:
            self.session.close()
            self.logger.debug(f"Session closed for {self.home}")

    def __enter__(self) -> 'JiraClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
