"""
Index sinks.

The data store hands every finished record to an IndexUpdateCallback.
JsonlIndexWriter is the file-backed implementation used by the CLI.
"""

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .exceptions import CrawlingAccessError
from .utils import write_jsonl


class IndexUpdateCallback(ABC):
    """Receives normalized records for indexing."""

    @abstractmethod
    def store(self, params: Mapping[str, str], record: Dict[str, Any]) -> None:
        """
        Persist one record.

        Raises:
            CrawlingAccessError: If this record cannot be stored but the
                run should continue
        """


class JsonlIndexWriter(IndexUpdateCallback):
    """
    Appends records to a JSONL file, one document per line.

    Writes are serialized with a lock so the writer can be shared by
    worker threads.
    """

    def __init__(
        self,
        file_path: str,
        ignore_error: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize writer.

        Args:
            file_path: Output file, truncated by the first store() or
                finish() call
            ignore_error: Turn I/O failures into CrawlingAccessError so
                the record is skipped instead of aborting the run
            logger: Logger for write failures
        """
        self.file_path = Path(file_path)
        self.ignore_error = ignore_error
        self.logger = logger or logging.getLogger('jira_datastore.sink')
        self.document_count = 0
        self._opened = False
        self._lock = threading.Lock()

    def _open(self) -> None:
        if self._opened:
            return
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        self.file_path.write_text('', encoding='utf-8')
        self._opened = True

    def store(self, params: Mapping[str, str], record: Dict[str, Any]) -> None:
        with self._lock:
            try:
                self._open()
                write_jsonl(record, str(self.file_path))
            except (OSError, TypeError, ValueError) as e:
                if not self.ignore_error:
                    raise
                self.logger.error(f"Failed to write {record.get('url')}: {e}")
                raise CrawlingAccessError(f"Failed to write {record.get('url')}: {e}") from e
            self.document_count += 1

    def finish(self) -> None:
        """Make sure the output file exists, even when nothing was stored."""
        with self._lock:
            self._open()
