"""
Exception hierarchy for the Jira data store.

Configuration and transport failures abort a run; crawling access
failures only skip the issue being processed.
"""

from typing import Optional


class JiraDataStoreError(Exception):
    """Base class for all data store errors."""


class ConfigurationError(JiraDataStoreError):
    """Raised when required parameters are missing or invalid."""


class JiraApiError(JiraDataStoreError):
    """
    Raised when a Jira REST request fails.

    Wraps requests exceptions and HTTP status errors so callers only
    need to handle one type.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CrawlingAccessError(JiraDataStoreError):
    """
    Recoverable failure while building or storing a single record.

    The data store logs it and moves on to the next issue.
    """
