"""
Shared fixtures: an in-memory Jira backend and a recording sink.
"""

import threading

import pytest

from jira_datastore.exceptions import CrawlingAccessError
from jira_datastore.sink import IndexUpdateCallback

HOME = 'https://jira.example.com'


def make_issue(number, summary=None, description=None, updated='2020-01-02T03:04:05.678+0000', comments=None):
    """Build a raw search result the way Jira returns it."""
    fields = {
        'summary': f'Issue {number}' if summary is None else summary,
        'description': f'Description {number}' if description is None else description,
        'updated': updated,
    }
    if comments is not None:
        fields['comment'] = {
            'comments': [{'body': body} for body in comments],
            'total': len(comments),
        }
    return {'id': str(10000 + number), 'key': f'ABC-{number}', 'fields': fields}


class FakeJiraClient:
    """Serves issues and comments from memory, recording every request."""

    def __init__(self, issues=None, comments=None, home=HOME):
        self.home = home
        self.issues = issues or []
        self.comments = comments or {}
        self.search_calls = []
        self.comment_calls = []
        self.closed = False

    def search_issues(self, jql, start_at, max_results, fields):
        self.search_calls.append((jql, start_at, max_results, tuple(fields)))
        return self.issues[start_at:start_at + max_results]

    def get_comments(self, issue_id, start_at, max_results):
        self.comment_calls.append((issue_id, start_at, max_results))
        bodies = self.comments.get(issue_id, [])
        return [{'body': body} for body in bodies[start_at:start_at + max_results]]

    def close(self):
        self.closed = True


class RecordingSink(IndexUpdateCallback):
    """Keeps stored records; rejects the URLs listed in reject_urls."""

    def __init__(self, reject_urls=()):
        self.records = []
        self.reject_urls = set(reject_urls)
        self._lock = threading.Lock()

    def store(self, params, record):
        if record['url'] in self.reject_urls:
            raise CrawlingAccessError(f"rejected {record['url']}")
        with self._lock:
            self.records.append(record)

    @property
    def urls(self):
        return [r['url'] for r in self.records]


@pytest.fixture
def basic_params():
    """Parameters for a basic auth run."""
    return {
        'home': HOME,
        'basicauth.username': 'bot',
        'basicauth.password': 'secret',
    }


@pytest.fixture
def sink():
    return RecordingSink()
