"""
Typed views of the Jira payload subset the data store consumes.

Raw JSON is decoded into these dataclasses at the API boundary. Unknown
fields are ignored and missing fields fall back to defaults, so a sparse
payload never fails decoding.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .utils import safe_get


@dataclass(frozen=True)
class Comment:
    """A single issue comment."""

    body: str = ''

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> 'Comment':
        body = raw.get('body') if isinstance(raw, dict) else None
        return cls(body=body if isinstance(body, str) else '')


@dataclass(frozen=True)
class Issue:
    """
    An issue as returned by ``/rest/api/2/search``.

    ``comments`` is only populated when the search projection includes
    the ``comment`` field.
    """

    id: str
    key: str
    summary: str = ''
    description: str = ''
    updated: Optional[str] = None
    comments: List[Comment] = field(default_factory=list)

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> 'Issue':
        fields = raw.get('fields') or {}
        embedded = safe_get(fields, 'comment', 'comments', default=[])
        return cls(
            id=str(raw.get('id') or ''),
            key=str(raw.get('key') or ''),
            summary=_text(fields.get('summary')),
            description=_text(fields.get('description')),
            updated=fields.get('updated'),
            comments=[Comment.from_api(c) for c in embedded if isinstance(c, dict)],
        )


@dataclass(frozen=True)
class ExtractedFields:
    """Direct fields pulled out of one issue."""

    url: str
    title: str
    description: str
    last_modified: Optional[datetime] = None


@dataclass
class ProcessResult:
    """
    Outcome of processing one issue.

    A skipped result carries the reason and whatever part of the record
    had been built when the failure happened.
    """

    issue_key: str
    stored: bool
    reason: Optional[str] = None
    record: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, issue_key: str, record: Dict[str, Any]) -> 'ProcessResult':
        return cls(issue_key=issue_key, stored=True, record=record)

    @classmethod
    def skipped(cls, issue_key: str, reason: str, record: Dict[str, Any]) -> 'ProcessResult':
        return cls(issue_key=issue_key, stored=False, reason=reason, record=record)


@dataclass
class StoreSummary:
    """Counters for one data store run."""

    stored: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.stored + self.skipped

    def add(self, result: ProcessResult) -> None:
        if result.stored:
            self.stored += 1
        else:
            self.skipped += 1
            self.errors.append(f"{result.issue_key}: {result.reason}")


def _text(value: Any) -> str:
    if value is None:
        return ''
    return value if isinstance(value, str) else str(value)
