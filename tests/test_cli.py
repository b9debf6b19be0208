"""Unit tests for dephealth.cli — the command-line entry point."""

import json
from pathlib import Path

import pytest
import yaml

from dephealth.cli import EXIT_FINDINGS, EXIT_INVALID, EXIT_OK, main


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch):
    """Keep a stray dephealth.yaml in the working directory out of the tests."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)


def _output(capsys) -> dict:
    return json.loads(capsys.readouterr().out)


class TestMain:
    """Tests for main()."""

    def test_reports_findings(self, corpus_yaml, capsys):
        rc = main(["--corpus", str(corpus_yaml), "org.example:libfoo:1.2.0"])
        assert rc == EXIT_OK
        out = _output(capsys)
        assert out == {
            "reports": [
                {
                    "coordinate": "org.example:libfoo:1.2.0",
                    "version_parseable": True,
                    "cves": [{"id": "CVE-2020-12345", "score": 7.5}],
                }
            ]
        }

    def test_multiple_coordinates(self, corpus_yaml, capsys):
        rc = main(["--corpus", str(corpus_yaml), "org.example:libfoo:1.5.0", "org.example:libfoo:bogus"])
        assert rc == EXIT_OK
        reports = _output(capsys)["reports"]
        assert [r["cves"] for r in reports] == [[], []]
        assert [r["version_parseable"] for r in reports] == [True, False]

    def test_fail_score(self, corpus_yaml, capsys):
        rc = main(["--corpus", str(corpus_yaml), "--fail-score", "7.0", "org.example:libfoo:1.2.0"])
        assert rc == EXIT_FINDINGS

    def test_fail_score_not_reached(self, corpus_yaml, capsys):
        rc = main(["--corpus", str(corpus_yaml), "--fail-score", "8.0", "org.example:libfoo:1.2.0"])
        assert rc == EXIT_OK

    def test_fail_score_zero_without_findings(self, corpus_yaml, capsys):
        rc = main(["--corpus", str(corpus_yaml), "--fail-score", "0", "com.acme:widget:1.0"])
        assert rc == EXIT_OK

    def test_worst_first(self, tmp_path: Path, capsys):
        corpus = tmp_path / "c.yaml"
        corpus.write_text(
            yaml.dump(
                [
                    {"id": "LOW-1", "affected_group": "g", "affected_name": "n", "affected_version_range": "*", "severity_score": 2.0},
                    {"id": "HIGH-1", "affected_group": "g", "affected_name": "n", "affected_version_range": "*", "severity_score": 8.0},
                ]
            )
        )
        main(["--corpus", str(corpus), "g:n:1.0"])
        assert [c["id"] for c in _output(capsys)["reports"][0]["cves"]] == ["LOW-1", "HIGH-1"]
        main(["--corpus", str(corpus), "--worst-first", "g:n:1.0"])
        assert [c["id"] for c in _output(capsys)["reports"][0]["cves"]] == ["HIGH-1", "LOW-1"]

    def test_config_file(self, tmp_path: Path, corpus_yaml, capsys):
        config = tmp_path / "dephealth.yaml"
        config.write_text(yaml.dump({"corpus": [corpus_yaml.name], "thresholds": {"fail_score": 9.0}}))
        rc = main(["--config", str(config), "org.apache.logging.log4j:log4j-core:2.14.1"])
        assert rc == EXIT_FINDINGS
        assert len(_output(capsys)["reports"][0]["cves"]) == 3

    def test_default_config_discovered(self, corpus_yaml, capsys):
        Path("dephealth.yaml").write_text(yaml.dump({"corpus": [str(corpus_yaml)]}))
        main(["org.example:libfoo:1.2.0"])
        assert len(_output(capsys)["reports"][0]["cves"]) == 1

    def test_no_corpus_is_healthy(self, capsys):
        assert main(["org.example:libfoo:1.2.0"]) == EXIT_OK
        assert _output(capsys)["reports"][0]["cves"] == []

    def test_bad_coordinate(self, corpus_yaml, capsys):
        rc = main(["--corpus", str(corpus_yaml), "org.example:libfoo"])
        assert rc == EXIT_INVALID
        assert "Invalid coordinate" in capsys.readouterr().err

    def test_missing_corpus(self, tmp_path: Path, capsys):
        rc = main(["--corpus", str(tmp_path / "nope.yaml"), "g:n:1.0"])
        assert rc == EXIT_INVALID
        assert "not found" in capsys.readouterr().err

    def test_invalid_corpus(self, tmp_path: Path, capsys):
        corpus = tmp_path / "bad.yaml"
        corpus.write_text(
            yaml.dump([{"id": "X", "affected_group": "g", "affected_name": "n", "affected_version_range": "[", "severity_score": 1}])
        )
        rc = main(["--corpus", str(corpus), "g:n:1.0"])
        assert rc == EXIT_INVALID
        assert "Invalid corpus" in capsys.readouterr().err

    def test_non_utf8_corpus(self, tmp_path: Path, capsys):
        corpus = tmp_path / "binary.yaml"
        corpus.write_bytes(b"\xff\xfe")
        rc = main(["--corpus", str(corpus), "org.example:libfoo:1.2.0"])
        assert rc == EXIT_INVALID
        assert "Invalid corpus" in capsys.readouterr().err

    def test_corpus_is_directory(self, tmp_path: Path, capsys):
        rc = main(["--corpus", str(tmp_path), "org.example:libfoo:1.2.0"])
        assert rc == EXIT_INVALID
        assert "Cannot read corpus file" in capsys.readouterr().err

    def test_invalid_config(self, tmp_path: Path, capsys):
        config = tmp_path / "dephealth.yaml"
        config.write_text(yaml.dump({"thresholds": {"fail_score": 99}}))
        rc = main(["--config", str(config), "g:n:1.0"])
        assert rc == EXIT_INVALID
        assert "Invalid config" in capsys.readouterr().err

    def test_requires_coordinates(self):
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == EXIT_INVALID
