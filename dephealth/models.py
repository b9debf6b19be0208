"""Data model: coordinates, vulnerability records, findings and reports.

All models are frozen Pydantic models.  Vulnerability records are validated
once at ingestion time (:func:`validate_records`) and never mutated after.
"""

import json
from collections.abc import Iterable, Mapping
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, InstanceOf, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from .errors import ValidationError
from .versions import VersionRange


def severity_label(score: float) -> str:
    """Map a CVSS base score onto its qualitative severity band.

    Args:
        score: Score in the 0.0–10.0 range.

    Returns:
        One of ``CRITICAL``, ``HIGH``, ``MEDIUM``, ``LOW`` or ``NONE``.
    """
    if score >= 9.0:
        return "CRITICAL"
    elif score >= 7.0:
        return "HIGH"
    elif score >= 4.0:
        return "MEDIUM"
    elif score > 0.0:
        return "LOW"
    return "NONE"


class DependencyCoordinate(BaseModel):
    """Identity of one dependency artifact (``group:name:version``)."""

    model_config = ConfigDict(frozen=True)

    group: str
    name: str
    version: str

    @classmethod
    def parse(cls, notation: str) -> "DependencyCoordinate":
        """Parse Gradle/Maven string notation such as ``org.example:libfoo:1.2.0``.

        Raises:
            ValueError: unless the notation has exactly three non-empty parts.
        """
        parts = [p.strip() for p in (notation or "").strip().split(":")]
        if len(parts) != 3 or not all(parts):
            raise ValueError(f"Expected 'group:name:version', got {notation!r}")
        return cls(group=parts[0], name=parts[1], version=parts[2])

    def __str__(self) -> str:
        return f"{self.group}:{self.name}:{self.version}"


class VulnerabilityRecord(BaseModel):
    """A known advisory affecting a range of versions of one package.

    Accepts snake_case or camelCase keys (``affected_group`` or
    ``affectedGroup``).  ``affected_version_range`` may be given as range text
    and is parsed on validation.

    Example YAML::

        - id: CVE-2020-12345
          affected_group: org.example
          affected_name: libfoo
          affected_version_range: "[1.0.0,1.5.0)"
          severity_score: 7.5
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
        revalidate_instances="always",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(min_length=1)
    affected_group: str = Field(min_length=1)
    affected_name: str = Field(min_length=1)
    affected_version_range: InstanceOf[VersionRange]
    severity_score: float = Field(ge=0.0, le=10.0, allow_inf_nan=False)

    @field_validator("id", mode="before")
    @classmethod
    def _strip_id(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("affected_version_range", mode="before")
    @classmethod
    def _parse_range(cls, v: Any) -> VersionRange:
        if isinstance(v, VersionRange):
            return v
        # InvalidRangeError is a ValueError, which Pydantic reports per field
        return VersionRange.parse(v)

    @field_serializer("affected_version_range")
    def _range_text(self, v: VersionRange) -> str:
        return v.text

    @property
    def package_key(self) -> tuple[str, str]:
        """Return the ``(group, name)`` lookup key."""
        return (self.affected_group, self.affected_name)


class CveFinding(BaseModel):
    """One advisory that applies to an analysed dependency."""

    model_config = ConfigDict(frozen=True)

    id: str
    score: float = Field(ge=0.0, le=10.0, allow_inf_nan=False)

    @property
    def severity(self) -> str:
        return severity_label(self.score)


class HealthReport(BaseModel):
    """Immutable result of analysing one dependency.

    Findings keep the order of the underlying corpus; they are not sorted by
    severity.  Use :meth:`worst_first` when the highest scores should lead.

    Attributes:
        findings: Advisories matching the dependency.
        coordinate: The analysed coordinate, when one was supplied.
        version_parseable: ``False`` when the version could not be parsed and
            therefore matched nothing.
    """

    model_config = ConfigDict(frozen=True)

    findings: tuple[CveFinding, ...] = ()
    coordinate: DependencyCoordinate | None = None
    version_parseable: bool = True

    def cves(self) -> tuple[CveFinding, ...]:
        return self.findings

    @property
    def is_healthy(self) -> bool:
        return not self.findings

    @property
    def max_score(self) -> float:
        return max((f.score for f in self.findings), default=0.0)

    def worst_first(self) -> tuple[CveFinding, ...]:
        """Return findings ordered by descending score (stable for ties)."""
        return tuple(sorted(self.findings, key=lambda f: f.score, reverse=True))

    def to_list(self) -> list[dict[str, Any]]:
        """Serialize findings as a list of ``{"id", "score"}`` dicts."""
        return [{"id": f.id, "score": f.score} for f in self.findings]

    def to_dict(self) -> dict[str, Any]:
        return {
            "coordinate": str(self.coordinate) if self.coordinate is not None else None,
            "version_parseable": self.version_parseable,
            "cves": self.to_list(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_list())


def _record_id(raw: Any) -> str | None:
    if isinstance(raw, VulnerabilityRecord):
        return raw.id
    if isinstance(raw, Mapping):
        value = raw.get("id")
        return str(value) if value is not None else None
    return None


def validate_records(records: Iterable[Any]) -> tuple[VulnerabilityRecord, ...]:
    """Validate a batch of records, all-or-nothing.

    Args:
        records: ``VulnerabilityRecord`` instances or plain mappings.

    Returns:
        Tuple of validated records in input order.

    Raises:
        ValidationError: for the first record with an out-of-range severity,
            an unparseable version range or a missing field.
    """
    validated: list[VulnerabilityRecord] = []
    for index, raw in enumerate(records):
        try:
            validated.append(VulnerabilityRecord.model_validate(raw))
        except pydantic.ValidationError as e:
            record_id = _record_id(raw)
            label = f"record {index}" + (f" ({record_id})" if record_id else "")
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}" for err in e.errors()
            )
            raise ValidationError(f"Rejected {label}: {problems}", index=index, record_id=record_id) from e
    return tuple(validated)
