"""
Jira data store package.

Crawls issues from a Jira instance over its REST API and turns each one
into a normalized document for a search index.
"""

__version__ = '1.0.0'
__description__ = 'Jira issue crawler for search index ingestion'

from .auth import AuthSettings, BasicAuthCredentials, OAuth1Credentials, build_client, resolve_credentials
from .client import JiraClient
from .config import Config, DataStoreParams, load_config
from .datastore import JiraDataStore, RecordBuilder
from .exceptions import ConfigurationError, CrawlingAccessError, JiraApiError, JiraDataStoreError
from .sink import IndexUpdateCallback, JsonlIndexWriter

__all__ = [
    'AuthSettings',
    'BasicAuthCredentials',
    'OAuth1Credentials',
    'build_client',
    'resolve_credentials',
    'JiraClient',
    'Config',
    'DataStoreParams',
    'load_config',
    'JiraDataStore',
    'RecordBuilder',
    'ConfigurationError',
    'CrawlingAccessError',
    'JiraApiError',
    'JiraDataStoreError',
    'IndexUpdateCallback',
    'JsonlIndexWriter',
]
