"""Corpus file ingestion.

Reads vulnerability records from local YAML or JSON files written in
DepHealth's own record schema.  Either a top-level list of records or a
mapping with a ``records`` list is accepted::

    records:
      - id: CVE-2020-12345
        affected_group: org.example
        affected_name: libfoo
        affected_version_range: "[1.0.0,1.5.0)"
        severity_score: 7.5

Advisory feed formats (NVD, OSV, ...) are converted by an importer before
they reach this module.
"""

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from .errors import ValidationError
from .models import VulnerabilityRecord, validate_records

logger = logging.getLogger(__name__)


def _read_raw(path: Path) -> Any:
    suffix = path.suffix.lower()
    content = path.read_text(encoding="utf-8")

    if suffix in (".yaml", ".yml"):
        return yaml.safe_load(content)
    if suffix == ".json":
        return json.loads(content)
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError:
        return json.loads(content)


def load_corpus_file(path: Path) -> tuple[VulnerabilityRecord, ...]:
    """Load and validate every record in one corpus file.

    Args:
        path: YAML or JSON corpus file.

    Returns:
        Validated records in file order.  An empty file yields no records.

    Raises:
        FileNotFoundError: if the file doesn't exist.
        ValidationError: if the file is unreadable as a corpus or any record
            is invalid.
    """
    try:
        raw = _read_raw(path)
    except UnicodeDecodeError as e:
        raise ValidationError(f"{path}: not UTF-8 text ({e})") from e
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ValidationError(f"{path}: not valid YAML or JSON ({e})") from e

    if raw is None:
        raw = []
    if isinstance(raw, dict):
        if "records" not in raw:
            raise ValidationError(f"{path}: mapping has no 'records' list")
        raw = raw["records"] or []
    if not isinstance(raw, list):
        raise ValidationError(f"{path}: expected a list of records or a mapping with 'records'")

    try:
        records = validate_records(raw)
    except ValidationError as e:
        raise ValidationError(f"{path}: {e}", index=e.index, record_id=e.record_id) from e

    logger.info("Read %d records from %s", len(records), path)
    return records


def load_corpus_files(paths: Iterable[Path]) -> tuple[VulnerabilityRecord, ...]:
    """Load several corpus files, concatenated in the given order."""
    records: list[VulnerabilityRecord] = []
    for path in paths:
        records.extend(load_corpus_file(Path(path)))
    return tuple(records)
