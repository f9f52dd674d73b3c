"""
Field extraction.

Turns a decoded Issue into the direct fields of an index record: title,
description, last modified time and browse URL.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Optional

from .models import ExtractedFields, Issue

# yyyy-MM-dd'T'HH:mm:ss.SSS followed by Z, +HH, +HHMM or +HH:MM
UPDATED_FORMAT = '%Y-%m-%dT%H:%M:%S.%f%z'
_HOUR_ONLY_OFFSET = re.compile(r'([+-]\d{2})$')


def build_view_url(home: str, issue_key: str) -> str:
    """Return the browse URL for an issue key."""
    return home + '/browse/' + issue_key


def parse_last_modified(
    updated: Optional[str],
    logger: Optional[logging.Logger] = None
) -> Optional[datetime]:
    """
    Parse Jira's ``updated`` timestamp into an aware UTC datetime.

    Args:
        updated: Raw value such as 2020-01-02T03:04:05.678+0000
        logger: Logger for the parse warning

    Returns:
        UTC datetime, or None if the value is missing or malformed
    """
    logger = logger or logging.getLogger('jira_datastore.extractor')
    try:
        value = _HOUR_ONLY_OFFSET.sub(r'\g<1>00', updated)
        return datetime.strptime(value, UPDATED_FORMAT).astimezone(timezone.utc)
    except (TypeError, ValueError) as e:
        logger.warning(f"Fail to parse: {updated}", exc_info=e)
        return None


class FieldExtractor:
    """
    Pulls the direct record fields out of an issue.

    extract() has no side effects beyond the parse warning, so the same
    issue always yields the same fields.
    """

    def __init__(self, home: str, logger: Optional[logging.Logger] = None):
        self.home = home
        self.logger = logger or logging.getLogger('jira_datastore.extractor')

    def extract(self, issue: Issue) -> ExtractedFields:
        return ExtractedFields(
            url=build_view_url(self.home, issue.key),
            title=issue.summary,
            description=issue.description,
            last_modified=parse_last_modified(issue.updated, self.logger),
        )
