"""Configuration models using Pydantic.

A config file names the corpus files to load and the thresholds the CLI
enforces.  Example YAML::

    corpus:
      - advisories/maven.yaml
      - advisories/internal.json
    thresholds:
      fail_score: 7.0
    options:
      worst_first: true
      log_level: info
"""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ThresholdsConfig(BaseModel):
    """Optional severity thresholds.

    Attributes:
        fail_score: CVSS score at or above which a finding fails the run
            (e.g. 7.0).  ``None`` never fails on findings.
    """

    fail_score: float | None = Field(
        default=None,
        ge=0.0,
        le=10.0,
        description="CVSS score at or above which a finding fails the run",
    )


class OptionsConfig(BaseModel):
    """Optional behaviour flags.

    Attributes:
        worst_first: Order findings in CLI output by descending score.
        log_level: Logging level name for the CLI.
    """

    worst_first: bool = False
    log_level: str = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, v: Any) -> str:
        level = str(v or "WARNING").strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level


class DepHealthConfig(BaseModel):
    """Validated DepHealth configuration.

    Attributes:
        corpus: Corpus files to load, in order.
        thresholds: CLI failure thresholds.
        options: Output and logging flags.
    """

    corpus: list[Path] = Field(default_factory=list)
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    options: OptionsConfig = Field(default_factory=OptionsConfig)

    @field_validator("corpus", mode="before")
    @classmethod
    def _coerce_corpus(cls, v: Any) -> list[Any]:
        if v is None:
            return []
        if isinstance(v, (str, Path)):
            return [v]
        return v


def load_config(path: Path) -> DepHealthConfig:
    """Load configuration from a YAML or JSON file.

    Relative corpus paths are resolved against the config file's directory.

    Args:
        path: Path to the config file.

    Returns:
        Validated ``DepHealthConfig`` instance.

    Raises:
        FileNotFoundError: if the file doesn't exist.
        pydantic.ValidationError: if content fails validation.
    """
    suffix = path.suffix.lower()
    content = path.read_text(encoding="utf-8")

    if suffix in (".yaml", ".yml"):
        raw = yaml.safe_load(content) or {}
    elif suffix == ".json":
        raw = json.loads(content)
    else:
        try:
            raw = yaml.safe_load(content) or {}
        except yaml.YAMLError:
            raw = json.loads(content)

    config = DepHealthConfig.model_validate(raw)
    base = path.parent
    resolved = [p if p.is_absolute() else base / p for p in config.corpus]
    return config.model_copy(update={"corpus": resolved})


def find_config() -> str:
    """Find the config file, preferring YAML over JSON.

    Returns:
        Filename of the first existing config file, or
        ``"dephealth.yaml"`` as a default.
    """
    for name in ("dephealth.yaml", "dephealth.yml", "dephealth.json"):
        if Path(name).exists():
            return name
    return "dephealth.yaml"
