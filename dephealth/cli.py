"""Command-line entry point.

Usage::

    dephealth --corpus advisories.yaml org.example:libfoo:1.2.0
    dephealth --config dephealth.yaml --fail-score 7 com.acme:core:2.0.0 com.acme:web:2.0.0

Prints a JSON document to stdout; logging goes to stderr.

Exit codes:
    0  analysis completed, nothing at or above the fail score
    1  at least one finding at or above the fail score
    2  bad coordinate, corpus or config
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

import pydantic
import yaml

from .analyzer import HealthAnalyzer
from .config import DepHealthConfig, find_config, load_config
from .corpus import load_corpus_files
from .errors import ValidationError
from .models import DependencyCoordinate, HealthReport
from .store import VulnerabilityStore

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_INVALID = 2


def setup_logging(level: str | int = "WARNING") -> None:
    """Send log records to stderr so stdout stays machine-readable."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dephealth",
        description="Check dependency coordinates against a vulnerability corpus.",
    )
    p.add_argument("coordinates", nargs="+", metavar="GROUP:NAME:VERSION", help="Dependencies to analyze")
    p.add_argument("--config", type=Path, default=None, help="Config file (default: dephealth.yaml if present)")
    p.add_argument(
        "--corpus",
        type=Path,
        action="append",
        default=[],
        help="Corpus file (YAML/JSON); repeatable, added after config corpus files",
    )
    p.add_argument("--fail-score", type=float, default=None, help="Exit 1 if any finding scores at or above this")
    p.add_argument("--worst-first", action="store_true", help="Order findings by descending score")
    p.add_argument("-v", "--verbose", action="store_true", help="Log at INFO level")
    return p


def _resolve_config(path: Path | None) -> DepHealthConfig:
    if path is not None:
        return load_config(path)
    default = Path(find_config())
    if default.exists():
        return load_config(default)
    return DepHealthConfig()


def _render(report: HealthReport, worst_first: bool) -> dict:
    out = report.to_dict()
    if worst_first:
        out["cves"] = [{"id": f.id, "score": f.score} for f in report.worst_first()]
    return out


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        config = _resolve_config(args.config)
    except (OSError, pydantic.ValidationError, yaml.YAMLError, ValueError) as e:
        print(f"Invalid config: {e}", file=sys.stderr)
        return EXIT_INVALID

    setup_logging("INFO" if args.verbose else config.options.log_level)

    try:
        coordinates = [DependencyCoordinate.parse(c) for c in args.coordinates]
    except ValueError as e:
        print(f"Invalid coordinate: {e}", file=sys.stderr)
        return EXIT_INVALID

    corpus_paths = list(config.corpus) + list(args.corpus)
    if not corpus_paths:
        logger.warning("No corpus files configured; every dependency will report as healthy")

    store = VulnerabilityStore()
    try:
        store.load(load_corpus_files(corpus_paths))
    except FileNotFoundError as e:
        print(f"Corpus file not found: {e.filename}", file=sys.stderr)
        return EXIT_INVALID
    except OSError as e:
        print(f"Cannot read corpus file: {e}", file=sys.stderr)
        return EXIT_INVALID
    except ValidationError as e:
        print(f"Invalid corpus: {e}", file=sys.stderr)
        return EXIT_INVALID

    reports = HealthAnalyzer(store).analyze_many(coordinates)

    worst_first = args.worst_first or config.options.worst_first
    print(json.dumps({"reports": [_render(r, worst_first) for r in reports]}, indent=2))

    fail_score = args.fail_score if args.fail_score is not None else config.thresholds.fail_score
    if fail_score is not None and any(r.max_score >= fail_score for r in reports if r.findings):
        logger.info("Findings at or above %.1f; failing", fail_score)
        return EXIT_FINDINGS
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
