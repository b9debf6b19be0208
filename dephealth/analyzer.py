"""Dependency health analysis.

Matches a dependency coordinate against the vulnerability corpus and builds
a :class:`HealthReport`.  Analysis only reads the store; each call (or each
batch) works against a single corpus snapshot.
"""

import logging
from collections.abc import Iterable

from .models import CveFinding, DependencyCoordinate, HealthReport
from .store import CorpusSnapshot, VulnerabilityStore
from .versions import parse_version

logger = logging.getLogger(__name__)


class HealthAnalyzer:
    """Public entry point for vulnerability analysis.

    Safe to call from many threads at once, including while the store is
    being reloaded.

    Attributes:
        store: The corpus to match against.
    """

    def __init__(self, store: VulnerabilityStore | None = None):
        self.store = store if store is not None else VulnerabilityStore()

    def analyze(self, group: str, name: str, version: str) -> HealthReport:
        """Report which known advisories apply to ``group:name:version``.

        Never raises for string inputs.  A blank group or name gives an empty
        report, and so does a version that cannot be parsed (flagged with
        ``version_parseable=False``).

        Findings keep corpus insertion order and are not sorted by severity;
        use :meth:`HealthReport.worst_first` for worst-first ordering.
        """
        coordinate = DependencyCoordinate(group=group or "", name=name or "", version=version or "")
        return self._analyze(self.store.snapshot(), coordinate)

    def analyze_coordinate(self, coordinate: DependencyCoordinate) -> HealthReport:
        return self._analyze(self.store.snapshot(), coordinate)

    def analyze_many(self, coordinates: Iterable[DependencyCoordinate]) -> list[HealthReport]:
        """Analyze a batch of coordinates against one snapshot.

        A malformed version only empties its own report; the batch carries on.
        """
        snapshot = self.store.snapshot()
        return [self._analyze(snapshot, c) for c in coordinates]

    @staticmethod
    def _analyze(snapshot: CorpusSnapshot, coordinate: DependencyCoordinate) -> HealthReport:
        if not coordinate.group.strip() or not coordinate.name.strip():
            return HealthReport(coordinate=coordinate)

        candidates = snapshot.lookup(coordinate.group, coordinate.name)

        parsed = parse_version(coordinate.version)
        if parsed is None:
            logger.warning("Skipping %s: unparseable version %r", coordinate, coordinate.version)
            return HealthReport(coordinate=coordinate, version_parseable=False)

        findings = [
            CveFinding(id=record.id, score=record.severity_score)
            for record in candidates
            if record.affected_version_range.contains(parsed)
        ]
        logger.debug(
            "%s: %d of %d candidate advisories match (corpus generation %d)",
            coordinate,
            len(findings),
            len(candidates),
            snapshot.generation,
        )
        return HealthReport(findings=findings, coordinate=coordinate)
