from __future__ import annotations

from pathlib import Path

from reqmine import config
from reqmine.config import ConsistencyPolicy, ScanPolicy, ScoringPolicy


def _write(tmp_path: Path, content: str, name: str = "reqmine.toml") -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_missing_config_yields_empty_sections(tmp_path: Path) -> None:
    assert config.load_config(root=tmp_path) == {}
    assert config.scan_defaults(root=tmp_path) == {}
    assert config.scan_policy(config.scan_defaults(root=tmp_path)) == ScanPolicy()


def test_malformed_config_yields_empty_table(tmp_path: Path) -> None:
    _write(tmp_path, "[scan\nextensions = ")
    assert config.load_config(root=tmp_path) == {}


def test_scan_section_is_normalized(tmp_path: Path) -> None:
    _write(
        tmp_path,
        "[scan]\n"
        "extensions = ['py', '.ts']\n"
        "ignore = 'generated, fixtures'\n"
        "test_patterns = ['_spec\\.']\n",
    )
    policy = config.scan_policy(config.scan_defaults(root=tmp_path))
    assert policy.extensions == (".py", ".ts")
    assert policy.ignore == ("generated", "fixtures")
    assert policy.test_patterns == ("_spec\\.",)


def test_explicit_config_path_wins(tmp_path: Path) -> None:
    _write(tmp_path, "[report]\nformat = 'json'\n")
    other = _write(tmp_path, "[report]\nformat = 'draft'\n", name="other.toml")
    assert config.report_format(config.report_defaults(root=tmp_path)) == "json"
    assert (
        config.report_format(config.report_defaults(root=tmp_path, config_path=other))
        == "draft"
    )


def test_unknown_report_format_falls_back(tmp_path: Path) -> None:
    _write(tmp_path, "[report]\nformat = 'html'\n")
    assert config.report_format(config.report_defaults(root=tmp_path)) == "text"


def test_scoring_policy_reads_overrides_and_keeps_defaults(tmp_path: Path) -> None:
    _write(
        tmp_path,
        "[scoring]\n"
        "confident_threshold = 8\n"
        "recurring_threshold = '4'\n"
        "base_low = 'not a number'\n",
    )
    policy = config.scoring_policy(config.scoring_defaults(root=tmp_path))
    assert policy.confident_threshold == 8.0
    assert policy.recurring_threshold == 4
    assert policy.base_low == ScoringPolicy().base_low
    assert policy.probable_threshold == ScoringPolicy().probable_threshold


def test_consistency_policy_reads_thresholds(tmp_path: Path) -> None:
    _write(tmp_path, "[consistency]\npromote_once = 2\npromote_twice = 4\n")
    policy = config.consistency_policy(config.consistency_defaults(root=tmp_path))
    assert policy == ConsistencyPolicy(promote_once=2, promote_twice=4)


def test_boolean_values_do_not_pass_as_numbers() -> None:
    policy = config.consistency_policy({"promote_once": True})
    assert policy.promote_once == ConsistencyPolicy().promote_once


def test_merge_payload_skips_none_values() -> None:
    merged = config.merge_payload({"format": None, "jobs": 2}, {"format": "yaml", "jobs": 1})
    assert merged == {"format": "yaml", "jobs": 2}
