"""Shared fixtures for DepHealth tests."""

from pathlib import Path
from typing import Any

import pytest
import yaml

from dephealth.analyzer import HealthAnalyzer
from dephealth.store import VulnerabilityStore


@pytest.fixture
def sample_records() -> list[dict[str, Any]]:
    return [
        {
            "id": "CVE-2020-12345",
            "affected_group": "org.example",
            "affected_name": "libfoo",
            "affected_version_range": "[1.0.0,1.5.0)",
            "severity_score": 7.5,
        },
        {
            "id": "CVE-2021-44228",
            "affected_group": "org.apache.logging.log4j",
            "affected_name": "log4j-core",
            "affected_version_range": "[2.0-beta9,2.15.0)",
            "severity_score": 10.0,
        },
        {
            "id": "CVE-2021-45046",
            "affected_group": "org.apache.logging.log4j",
            "affected_name": "log4j-core",
            "affected_version_range": "[2.0-beta9,2.16.0)",
            "severity_score": 9.0,
        },
        {
            "id": "CVE-2021-44832",
            "affected_group": "org.apache.logging.log4j",
            "affected_name": "log4j-core",
            "affected_version_range": "[2.0-alpha7,2.17.1)",
            "severity_score": 6.6,
        },
        {
            "id": "GHSA-demo-0001",
            "affected_group": "org.example",
            "affected_name": "libbar",
            "affected_version_range": "*",
            "severity_score": 3.1,
        },
    ]


@pytest.fixture
def store(sample_records) -> VulnerabilityStore:
    return VulnerabilityStore(sample_records)


@pytest.fixture
def analyzer(store) -> HealthAnalyzer:
    return HealthAnalyzer(store)


@pytest.fixture
def corpus_yaml(tmp_path: Path, sample_records) -> Path:
    path = tmp_path / "corpus.yaml"
    path.write_text(yaml.safe_dump({"records": sample_records}))
    return path
