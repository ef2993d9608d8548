"""Ingestion settings, upload limits and naming-rule configuration."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, field_validator

from .errors import RejectedUpload
from .extract import parse_bool
from .model.naming import NamingRule

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 50 * 1024 * 1024
ENV_PREFIX = "L5INGEST_"


class IngestSettings(BaseModel):
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    allowed_extensions: tuple[str, ...] = (".l5x", ".l5k")
    parallel_extraction: bool = False

    @field_validator("max_upload_bytes")
    @classmethod
    def _limit_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"max_upload_bytes must be positive, got {v}")
        return v

    @field_validator("allowed_extensions")
    @classmethod
    def _normalize_extensions(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(e.lower() if e.startswith(".") else f".{e.lower()}" for e in v)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> IngestSettings:
        """Settings overridden by ``L5INGEST_*`` environment variables."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        if f"{ENV_PREFIX}MAX_UPLOAD_BYTES" in env:
            values["max_upload_bytes"] = int(env[f"{ENV_PREFIX}MAX_UPLOAD_BYTES"])
        if f"{ENV_PREFIX}ALLOWED_EXTENSIONS" in env:
            raw = env[f"{ENV_PREFIX}ALLOWED_EXTENSIONS"]
            values["allowed_extensions"] = tuple(e.strip() for e in raw.split(",") if e.strip())
        if f"{ENV_PREFIX}PARALLEL_EXTRACTION" in env:
            values["parallel_extraction"] = parse_bool(env[f"{ENV_PREFIX}PARALLEL_EXTRACTION"])
        return cls(**values)


def check_upload(filename: str, size: int, settings: IngestSettings | None = None) -> None:
    """Upload-layer gate; the parser itself enforces no size limit.

    Raises:
        RejectedUpload: the file is too large or has a disallowed extension.
    """
    settings = settings or IngestSettings()
    ext = os.path.splitext(filename)[1].lower()
    if ext not in settings.allowed_extensions:
        raise RejectedUpload(
            f"{filename!r}: extension {ext or '(none)'!r} is not one of "
            f"{', '.join(settings.allowed_extensions)}"
        )
    if size > settings.max_upload_bytes:
        raise RejectedUpload(
            f"{filename!r}: {size} bytes exceeds the {settings.max_upload_bytes} byte limit"
        )


# ---------------------------------------------------------------------------
# Naming rules
# ---------------------------------------------------------------------------

def rules_from_data(data: Any) -> list[NamingRule]:
    """Validate the parsed YAML document into rules.

    The document is a mapping with a ``rules`` list.  Entries marked
    ``active: false`` are dropped.

    Raises:
        ValueError: the document or one of its rules is malformed.
    """
    if data is None:
        return []
    if not isinstance(data, dict) or not isinstance(data.get("rules", []), list):
        raise ValueError("naming rule file must be a mapping with a 'rules' list")
    rules: list[NamingRule] = []
    for index, entry in enumerate(data.get("rules", [])):
        if not isinstance(entry, dict):
            raise ValueError(f"rule #{index + 1} must be a mapping")
        entry = dict(entry)
        if not entry.pop("active", True):
            logger.debug("skipping inactive rule %r", entry.get("name"))
            continue
        rules.append(NamingRule.model_validate(entry))
    return rules


def load_naming_rules(path: str | Path) -> list[NamingRule]:
    """Read an ordered rule list from a YAML file."""
    with Path(path).open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    rules = rules_from_data(data)
    logger.debug("loaded %d naming rules from %s", len(rules), path)
    return rules


def resolve_rule_set(
    project_rules: Sequence[NamingRule] | None,
    default_rules: Sequence[NamingRule],
) -> list[NamingRule]:
    """The project's own rule set when it has one, else the default."""
    if project_rules:
        return list(project_rules)
    return list(default_rules)
