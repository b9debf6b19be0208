"""Version parsing and range matching.

Pure functions for turning dependency version strings into comparable
values and deciding whether a version falls inside an advisory's affected
range.  No I/O; a malformed version is classified as unparseable and never
raises past :func:`contains`.

Range grammar (Maven notation)::

    *                   every version
    1.2.3               exactly 1.2.3
    [1.0.0,2.0.0)       1.0.0 <= v < 2.0.0
    (1.0,2.0]           1.0 < v <= 2.0
    [1.5.0,)            v >= 1.5.0
    (,1.0]              v <= 1.0
    [1.2]               exactly 1.2
    [1.0,1.2),[1.5,)    union of intervals
"""

import logging
import re
from dataclasses import dataclass

from packaging.version import InvalidVersion, Version

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(
    r"^(?P<release>\d+(?:\.\d+)*)"
    r"(?:[.\-]?(?P<qualifier>[a-z]+)[.\-]?(?P<number>\d+)?)?$"
)

_INTERVAL_RE = re.compile(r"\s*([\[(])([^\[\]()]*)([\])])\s*(,|$)")

# Maven/Gradle qualifiers mapped onto PEP 440 pre-release segments.
_PRE_RELEASE = {
    "alpha": "a",
    "a": "a",
    "beta": "b",
    "b": "b",
    "milestone": "b",
    "m": "b",
    "rc": "rc",
    "cr": "rc",
}
_DEV_RELEASE = {"snapshot", "dev"}
_PLAIN_RELEASE = {"final", "ga", "release"}


class InvalidRangeError(ValueError):
    """Raised when a version range string cannot be parsed."""


def _canonical(text: str) -> str:
    """Rewrite a dependency version into PEP 440 form where possible.

    Examples:
        - "v2.12.0"        -> "2.12.0"
        - "1.0.0-rc1"      -> "1.0.0rc1"
        - "2.0-beta9"      -> "2.0b9"
        - "3.1-SNAPSHOT"   -> "3.1.dev0"
        - "5.3.18.RELEASE" -> "5.3.18"
        - "31.1-jre"       -> "31.1+jre"
    """
    v = text.strip().lower().replace("_", ".")
    if v.startswith("v") and len(v) > 1 and v[1].isdigit():
        v = v[1:]

    m = _VERSION_RE.match(v)
    if m is None:
        return v

    release = m.group("release")
    qualifier = m.group("qualifier")
    number = m.group("number")
    if qualifier is None:
        return release
    if qualifier in _PLAIN_RELEASE and number is None:
        return release
    if qualifier in _PRE_RELEASE:
        return f"{release}{_PRE_RELEASE[qualifier]}{number or 0}"
    if qualifier in _DEV_RELEASE:
        return f"{release}.dev{number or 0}"
    if qualifier == "post":
        return f"{release}.post{number or 0}"
    # Unknown qualifiers become a local label, ranking just above the release
    return f"{release}+{qualifier}{number or ''}"


def parse_version(text: str) -> Version | None:
    """Parse a dependency version into a comparable value.

    Numeric release components compare numerically, and a release outranks
    any of its own pre-releases (``1.0.0 > 1.0.0-rc1``).

    Args:
        text: Raw version string (may be anything).

    Returns:
        A :class:`packaging.version.Version`, or ``None`` when the input is
        not a recognisable version.
    """
    if not isinstance(text, str) or not text.strip():
        return None
    try:
        return Version(_canonical(text))
    except (InvalidVersion, ValueError):
        # int() refuses release components past the interpreter digit limit
        return None


@dataclass(frozen=True)
class Interval:
    """One contiguous span of versions.  ``None`` bounds are unbounded."""

    lower: Version | None = None
    upper: Version | None = None
    lower_inclusive: bool = True
    upper_inclusive: bool = True

    def contains(self, version: Version) -> bool:
        if self.lower is not None:
            if version < self.lower or (version == self.lower and not self.lower_inclusive):
                return False
        if self.upper is not None:
            if version > self.upper or (version == self.upper and not self.upper_inclusive):
                return False
        return True


def _parse_bound(raw: str, expr: str) -> Version:
    version = parse_version(raw)
    if version is None:
        raise InvalidRangeError(f"Unparseable version {raw!r} in range {expr!r}")
    return version


def _parse_interval(opening: str, body: str, closing: str, expr: str) -> Interval:
    parts = [p.strip() for p in body.split(",")]

    if len(parts) == 1:
        if opening != "[" or closing != "]" or not parts[0]:
            raise InvalidRangeError(f"Single-version interval must look like [1.0] in {expr!r}")
        pinned = _parse_bound(parts[0], expr)
        return Interval(pinned, pinned)

    if len(parts) != 2:
        raise InvalidRangeError(f"Interval has more than two bounds in {expr!r}")

    lower = _parse_bound(parts[0], expr) if parts[0] else None
    upper = _parse_bound(parts[1], expr) if parts[1] else None
    if lower is None and upper is None:
        raise InvalidRangeError(f"Interval without bounds in {expr!r}; use '*' to match every version")

    interval = Interval(
        lower=lower,
        upper=upper,
        lower_inclusive=opening == "[",
        upper_inclusive=closing == "]",
    )
    if lower is not None and upper is not None:
        if lower > upper:
            raise InvalidRangeError(f"Lower bound above upper bound in {expr!r}")
        if lower == upper and not (interval.lower_inclusive and interval.upper_inclusive):
            raise InvalidRangeError(f"Empty interval in {expr!r}")
    return interval


@dataclass(frozen=True)
class VersionRange:
    """Parsed affected-version predicate.

    Attributes:
        text: The range exactly as it was written in the advisory.
        intervals: Union of spans; a version matches if any span holds it.
    """

    text: str
    intervals: tuple[Interval, ...]

    @classmethod
    def parse(cls, text: str) -> "VersionRange":
        """Parse range text.

        Raises:
            InvalidRangeError: if the text does not follow the range grammar
                or a bound is not a parseable version.
        """
        if not isinstance(text, str):
            raise InvalidRangeError(f"Version range must be a string, got {type(text).__name__}")
        expr = text.strip()
        if not expr:
            raise InvalidRangeError("Empty version range")

        if expr == "*":
            return cls(expr, (Interval(),))

        if expr[0] not in "[(":
            pinned = _parse_bound(expr, expr)
            return cls(expr, (Interval(pinned, pinned),))

        intervals: list[Interval] = []
        pos = 0
        while pos < len(expr):
            m = _INTERVAL_RE.match(expr, pos)
            if m is None:
                raise InvalidRangeError(f"Malformed version range {expr!r}")
            intervals.append(_parse_interval(m.group(1), m.group(2), m.group(3), expr))
            pos = m.end()
            if m.group(4) == "," and pos >= len(expr):
                raise InvalidRangeError(f"Trailing comma in version range {expr!r}")
        return cls(expr, tuple(intervals))

    @property
    def is_wildcard(self) -> bool:
        return any(i.lower is None and i.upper is None for i in self.intervals)

    def contains(self, version: str | Version) -> bool:
        """Return ``True`` if ``version`` lies inside this range.

        An unparseable version is logged and never matches.
        """
        parsed = version if isinstance(version, Version) else parse_version(version)
        if parsed is None:
            logger.warning("Unparseable version %r never matches range %s", version, self.text)
            return False
        return any(i.contains(parsed) for i in self.intervals)

    def __str__(self) -> str:
        return self.text


def contains(version_range: VersionRange | str, version: str | Version) -> bool:
    """Decide whether ``version`` satisfies ``version_range``.

    Args:
        version_range: A parsed :class:`VersionRange` or range text.
        version: Version string or an already parsed ``Version``.

    Returns:
        ``True`` on a match.  ``False`` when the version does not match or
        cannot be parsed.

    Raises:
        InvalidRangeError: if ``version_range`` is text that does not parse.
    """
    if not isinstance(version_range, VersionRange):
        version_range = VersionRange.parse(version_range)
    return version_range.contains(version)
