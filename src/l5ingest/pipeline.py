"""End-to-end ingestion: bytes to a complete record set.

``ingest`` is pure: sniff, read, extract, then derive tag references once
every rung exists.  ``parse_version`` wraps it with the parse-status
lifecycle of a ``RecordStore``.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel

from .analysis import build_cross_references
from .config import IngestSettings
from .errors import IngestError
from .extract import extract_project
from .model.project import FileFormat, ProjectRecords
from .reader import read_structure, sniff_format
from .store import ParseStatus, RecordStore

logger = logging.getLogger(__name__)


def ingest(
    data: bytes,
    *,
    filename: str | None = None,
    file_format: FileFormat | None = None,
    parallel: bool = False,
) -> ProjectRecords:
    """Parse one project file into its full record set.

    When *file_format* is not given it is sniffed from *filename* and
    the content.

    Raises:
        UnsupportedFormat: the sniff rejected the input.
        MalformedInput: the input could not be read.
    """
    if file_format is None:
        file_format = sniff_format(data, filename)
    tree = read_structure(data, file_format)
    records = extract_project(tree, parallel=parallel)
    references = build_cross_references(records.rungs, records.tags)
    logger.info(
        "ingested %s: %d tags, %d rungs, %d references",
        filename or f"<{file_format.value} bytes>",
        len(records.tags),
        len(records.rungs),
        len(references),
    )
    return records.model_copy(update={"tag_references": references})


class ParseOutcome(BaseModel):
    version_key: str
    status: ParseStatus
    records: ProjectRecords | None = None
    error: str | None = None


def parse_version(
    store: RecordStore,
    version_key: str,
    data: bytes,
    *,
    filename: str | None = None,
    file_format: FileFormat | None = None,
    settings: IngestSettings | None = None,
) -> ParseOutcome:
    """Parse *data* as *version_key* and commit the result to *store*.

    On success the version's record set is replaced and marked completed.
    On failure it is marked failed and any earlier record set is kept.
    """
    settings = settings or IngestSettings()
    store.mark_processing(version_key)
    try:
        records = ingest(
            data,
            filename=filename,
            file_format=file_format,
            parallel=settings.parallel_extraction,
        )
    except IngestError as exc:
        logger.error("parse of %s failed: %s", version_key, exc)
        store.mark_failed(version_key, str(exc))
        return ParseOutcome(version_key=version_key, status=ParseStatus.FAILED, error=str(exc))
    except Exception as exc:
        store.mark_failed(version_key, f"internal error: {type(exc).__name__}")
        raise
    store.commit(version_key, records)
    return ParseOutcome(version_key=version_key, status=ParseStatus.COMPLETED, records=records)
