"""DepHealth — dependency vulnerability health analysis.

This package matches dependency coordinates (group, name, version) against
an in-memory corpus of known advisories and reports which ones apply.
"""

from .analyzer import HealthAnalyzer
from .errors import DepHealthError, ValidationError
from .models import CveFinding, DependencyCoordinate, HealthReport, VulnerabilityRecord
from .store import CorpusSnapshot, VulnerabilityStore
from .versions import InvalidRangeError, VersionRange, contains, parse_version

__version__ = "0.1.0"

__all__ = [
    "CorpusSnapshot",
    "CveFinding",
    "DepHealthError",
    "DependencyCoordinate",
    "HealthAnalyzer",
    "HealthReport",
    "InvalidRangeError",
    "ValidationError",
    "VersionRange",
    "VulnerabilityRecord",
    "VulnerabilityStore",
    "contains",
    "parse_version",
]
