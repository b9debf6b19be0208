"""In-memory vulnerability corpus with copy-on-write snapshots.

Readers never lock: every lookup runs against one immutable
:class:`CorpusSnapshot`.  Loads validate the whole batch first, then build a
new snapshot and publish it with a single reference swap, so a lookup in
progress keeps seeing the corpus it started with.
"""

import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .models import VulnerabilityRecord, validate_records

logger = logging.getLogger(__name__)

_EMPTY: tuple[VulnerabilityRecord, ...] = ()


def _record_key(record: VulnerabilityRecord) -> tuple[str, str, str, str]:
    return (record.id, record.affected_group, record.affected_name, record.affected_version_range.text)


@dataclass(frozen=True)
class CorpusSnapshot:
    """Immutable point-in-time view of the corpus.

    Attributes:
        records: All records in insertion order.
        generation: Publish counter; 0 is the initial empty corpus.
        index: Read-only ``(group, name) -> records`` mapping.
    """

    records: tuple[VulnerabilityRecord, ...] = ()
    generation: int = 0
    index: Mapping[tuple[str, str], tuple[VulnerabilityRecord, ...]] = field(
        default_factory=lambda: MappingProxyType({}), repr=False, compare=False
    )

    @classmethod
    def build(cls, records: Iterable[VulnerabilityRecord], generation: int) -> "CorpusSnapshot":
        """Build a snapshot, collapsing records that share a key (last one wins, first position kept)."""
        by_key: dict[tuple[str, str, str, str], VulnerabilityRecord] = {}
        for record in records:
            by_key[_record_key(record)] = record

        ordered = tuple(by_key.values())
        index: dict[tuple[str, str], list[VulnerabilityRecord]] = {}
        for record in ordered:
            index.setdefault(record.package_key, []).append(record)

        frozen_index = MappingProxyType({k: tuple(v) for k, v in index.items()})
        return cls(records=ordered, generation=generation, index=frozen_index)

    def lookup(self, group: str, name: str) -> tuple[VulnerabilityRecord, ...]:
        return self.index.get((group, name), _EMPTY)

    def __len__(self) -> int:
        return len(self.records)


class VulnerabilityStore:
    """Queryable corpus of known vulnerabilities.

    Example::

        store = VulnerabilityStore()
        store.load([{"id": "CVE-2020-12345", "affected_group": "org.example",
                     "affected_name": "libfoo", "affected_version_range": "[1.0.0,1.5.0)",
                     "severity_score": 7.5}])
        store.lookup("org.example", "libfoo")
    """

    def __init__(self, records: Iterable[Any] | None = None):
        self._write_lock = threading.Lock()
        self._snapshot = CorpusSnapshot()
        if records is not None:
            self.load(records)

    def snapshot(self) -> CorpusSnapshot:
        """Return the currently published snapshot."""
        return self._snapshot

    @property
    def generation(self) -> int:
        return self._snapshot.generation

    def __len__(self) -> int:
        return len(self._snapshot)

    def lookup(self, group: str, name: str) -> tuple[VulnerabilityRecord, ...]:
        """Return every record for exactly this group and name.

        Matching is case-sensitive.  Unknown packages give an empty tuple.
        """
        return self._snapshot.lookup(group, name)

    def load(self, records: Iterable[Any], merge: bool = False) -> CorpusSnapshot:
        """Validate ``records`` and publish them as the new corpus.

        Args:
            records: ``VulnerabilityRecord`` instances or mappings.
            merge: Layer the batch over the current corpus instead of
                replacing it.  A record with the same advisory id, package and
                range text replaces the existing one in place.

        Returns:
            The newly published snapshot.

        Raises:
            ValidationError: if any record is invalid.  Nothing is applied and
                the previous snapshot keeps serving.
        """
        validated = validate_records(records)

        with self._write_lock:
            current = self._snapshot
            base = current.records if merge else _EMPTY
            published = CorpusSnapshot.build(base + validated, generation=current.generation + 1)
            self._snapshot = published

        logger.info(
            "Published corpus generation %d: %d records for %d packages (%s)",
            published.generation,
            len(published),
            len(published.index),
            "merged" if merge else "replaced",
        )
        return published

    def clear(self) -> None:
        """Publish an empty corpus."""
        with self._write_lock:
            published = CorpusSnapshot(generation=self._snapshot.generation + 1)
            self._snapshot = published
        logger.info("Cleared corpus (generation %d)", published.generation)
