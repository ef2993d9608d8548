"""Record-set persistence seam.

The pipeline talks to storage only through ``RecordStore``.  A store must
make ``commit`` atomic: readers see either the previous record set or the
new one, never a mix.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Protocol, runtime_checkable

from .model.project import ProjectRecords

logger = logging.getLogger(__name__)


class ParseStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@runtime_checkable
class RecordStore(Protocol):
    """Keeps one record set and one parse status per file version."""

    def mark_processing(self, version_key: str) -> None: ...

    def commit(self, version_key: str, records: ProjectRecords) -> None:
        """Replace the version's record set and mark it completed."""
        ...

    def mark_failed(self, version_key: str, message: str) -> None:
        """Mark the version failed, leaving any committed records in place."""
        ...

    def status(self, version_key: str) -> ParseStatus: ...

    def records(self, version_key: str) -> ProjectRecords | None: ...


class InMemoryRecordStore:
    """Dictionary-backed ``RecordStore``, safe to share between threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, ProjectRecords] = {}
        self._status: dict[str, ParseStatus] = {}
        self._errors: dict[str, str] = {}

    def mark_processing(self, version_key: str) -> None:
        with self._lock:
            self._status[version_key] = ParseStatus.PROCESSING
            self._errors.pop(version_key, None)

    def commit(self, version_key: str, records: ProjectRecords) -> None:
        with self._lock:
            self._records[version_key] = records
            self._status[version_key] = ParseStatus.COMPLETED
            self._errors.pop(version_key, None)
        logger.debug("committed %s: %s", version_key, records.counts())

    def mark_failed(self, version_key: str, message: str) -> None:
        with self._lock:
            self._status[version_key] = ParseStatus.FAILED
            self._errors[version_key] = message

    def status(self, version_key: str) -> ParseStatus:
        with self._lock:
            return self._status.get(version_key, ParseStatus.PENDING)

    def records(self, version_key: str) -> ProjectRecords | None:
        with self._lock:
            return self._records.get(version_key)

    def error(self, version_key: str) -> str | None:
        with self._lock:
            return self._errors.get(version_key)

    def versions(self) -> list[str]:
        with self._lock:
            return sorted(self._status)
