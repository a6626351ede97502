from __future__ import annotations

import pytest

from reqmine.analysis.comment_miner import CommentMiner
from reqmine.analysis.confidence_scorer import (
    FACTOR_CORROBORATION,
    ConfidenceScorer,
    FindingBundle,
    group_findings,
)
from reqmine.analysis.pattern_detector import PatternDetector
from reqmine.analysis.test_inference import TestInferrer
from reqmine.config import ScoringPolicy
from reqmine.models import (
    Category,
    Confidence,
    ExtractorKind,
    Severity,
    SignalKey,
    Tier,
    TriageResult,
)


def _all_groups(result: TriageResult) -> list[SignalKey]:
    return [entry.group.key for _, entry in result.iter_entries()]


def test_empty_input_yields_four_empty_tiers() -> None:
    result = ConfidenceScorer().categorize()
    assert result == TriageResult()
    assert result.is_empty()
    assert result.counts() == {"confident": 0, "probable": 0, "suspicious": 0, "smells": 0}


def test_single_high_confidence_pattern_is_confident() -> None:
    findings = PatternDetector().detect('password = "Zx9kQ2vLp8wR4mN7"\n', "app/settings.py")
    result = ConfidenceScorer().categorize(patterns=findings)
    assert len(result.confident) == 1
    entry = result.confident[0]
    assert entry.score.final == 8.0
    assert entry.score.factors == ("base confidence high",)
    assert entry.question is None
    assert result.total() == 1


def test_single_optional_test_title_is_suspicious() -> None:
    findings = TestInferrer().infer(
        'it("should optionally retry on timeout", () => {})\n', "tests/retry.test.js"
    )
    result = ConfidenceScorer().categorize(test_inferences=findings)
    assert len(result.suspicious) == 1
    entry = result.suspicious[0]
    assert entry.score.final < 4
    assert entry.question is not None
    assert entry.question.startswith("[GENERAL] System should optionally retry on timeout:")


def test_comment_and_pattern_corroborate_the_same_requirement() -> None:
    content = (
        "// SECURITY: passwords must be hashed\n"
        "const digest = await bcrypt.hash(password, 12)\n"
    )
    patterns = [
        finding
        for finding in PatternDetector().detect(content, "src/users.js")
        if finding.name == "password_hash"
    ]
    comments = CommentMiner().mine(content, "src/users.js")
    assert patterns and comments
    assert patterns[0].signal_key() == comments[0].signal_key()

    scorer = ConfidenceScorer()
    alone = scorer.categorize(patterns=patterns).confident[0].score.final
    result = scorer.categorize(patterns=patterns, comments=comments)
    entry = next(
        item for item in result.confident if item.group.key == patterns[0].signal_key()
    )
    assert entry.group.distinct_extractors == 2
    assert entry.score.final > alone
    assert FACTOR_CORROBORATION in entry.score.factors


def test_debt_groups_never_leave_smells(make_finding) -> None:
    todo = make_finding(
        name="todo_fixme",
        category=Category.DEBT,
        confidence=Confidence.HIGH,
        severity=Severity.DEBT,
        implication="Tech debt marker",
        suspicious=True,
    )
    findings = [todo] * 8
    result = ConfidenceScorer().categorize(patterns=findings)
    assert len(result.smells) == 1
    assert not result.confident and not result.probable
    assert "tech debt" in (result.smells[0].question or "")


def test_suspicious_group_with_must_corroboration_is_scored_normally(make_finding) -> None:
    debt = make_finding(
        name="eval_usage",
        category=Category.SEC,
        confidence=Confidence.HIGH,
        severity=Severity.DEBT,
        implication="Dynamic code must be reviewed",
        suspicious=True,
    )
    comment = make_finding(
        kind=ExtractorKind.COMMENT,
        name="must",
        category=Category.SEC,
        confidence=Confidence.HIGH,
        severity=Severity.MUST,
        implication="Dynamic code must be reviewed",
    )
    result = ConfidenceScorer().categorize(patterns=[debt], comments=[comment])
    # The comment is the most recent high-confidence member, so it represents the group.
    assert len(result.confident) == 1
    assert result.confident[0].group.severity is Severity.MUST


def test_suspicious_group_without_must_is_a_smell(make_finding) -> None:
    debt = make_finding(
        name="console_log",
        category=Category.DEBT,
        confidence=Confidence.LOW,
        severity=Severity.DEBT,
        implication="Console logging",
        suspicious=True,
    )
    hint = make_finding(
        kind=ExtractorKind.COMMENT,
        name="should",
        category=Category.DEBT,
        confidence=Confidence.HIGH,
        severity=Severity.SHOULD,
        implication="Console logging",
    )
    result = ConfidenceScorer().categorize(patterns=[debt], comments=[hint])
    assert len(result.smells) == 1


def test_partition_covers_every_group(make_finding) -> None:
    findings = [
        make_finding(name=f"signal_{index}", implication=f"claim {index}", confidence=level)
        for index, level in enumerate(
            [Confidence.LOW, Confidence.MEDIUM, Confidence.HIGH, Confidence.LOW]
        )
    ]
    findings.append(
        make_finding(
            name="todo_fixme",
            implication="Tech debt marker",
            severity=Severity.DEBT,
            suspicious=True,
        )
    )
    result = ConfidenceScorer().categorize(patterns=findings)
    keys = _all_groups(result)
    assert len(keys) == len(set(keys)) == 5
    assert set(keys) == {group.key for group in group_findings(findings)}


def test_adding_a_new_extractor_kind_never_lowers_the_score(make_finding) -> None:
    base = make_finding(confidence=Confidence.MEDIUM)
    scorer = ConfidenceScorer()
    before = scorer.score(group_findings([base])[0]).final
    for kind in (ExtractorKind.TEST_INFERENCE, ExtractorKind.COMMENT):
        for confidence in Confidence:
            extra = make_finding(kind=kind, confidence=confidence, path="tests/a.test.js")
            after = scorer.score(group_findings([base, extra])[0]).final
            assert after >= before


def test_occurrence_factors_and_clamp(make_finding) -> None:
    findings = [
        make_finding(kind=kind, line=index)
        for index, kind in enumerate(
            [
                ExtractorKind.PATTERN,
                ExtractorKind.TEST_INFERENCE,
                ExtractorKind.COMMENT,
                ExtractorKind.PATTERN,
                ExtractorKind.PATTERN,
            ]
        )
    ]
    score = ConfidenceScorer().score(group_findings(findings)[0])
    assert score.final == 10.0
    assert score.factors == (
        "base confidence high",
        "multi-signal corroboration",
        "recurring occurrence",
        "high occurrence count",
        "clamped",
    )


def test_group_members_are_ordered_by_file_then_line(make_finding) -> None:
    findings = [
        make_finding(path="b.js", line=3),
        make_finding(path="a.js", line=9),
        make_finding(path="a.js", line=2),
    ]
    group = group_findings(findings)[0]
    assert [finding.location() for finding in group.findings] == ["a.js:2", "a.js:9", "b.js:3"]


def test_representative_tie_goes_to_latest(make_finding) -> None:
    first = make_finding(path="a.js", severity=Severity.SHOULD)
    second = make_finding(path="b.js", severity=Severity.MUST)
    weaker = make_finding(path="c.js", confidence=Confidence.LOW, severity=Severity.MAYBE)
    group = group_findings([first, second, weaker])[0]
    assert group.representative is second


def test_grouping_normalizes_implication_text(make_finding) -> None:
    findings = [
        make_finding(implication="Route requires authentication."),
        make_finding(kind=ExtractorKind.COMMENT, implication="  route   REQUIRES authentication"),
    ]
    groups = group_findings(findings)
    assert len(groups) == 1
    assert groups[0].key == SignalKey(category="AUTH", concept="route requires authentication")


def test_tiers_are_sorted_by_score_then_key(make_finding) -> None:
    findings = [
        make_finding(implication="zeta", confidence=Confidence.HIGH),
        make_finding(implication="alpha", confidence=Confidence.HIGH),
        make_finding(implication="beta", confidence=Confidence.HIGH),
        make_finding(kind=ExtractorKind.COMMENT, implication="beta", confidence=Confidence.HIGH),
    ]
    result = ConfidenceScorer().categorize(patterns=findings)
    assert [entry.group.key.concept for entry in result.confident] == ["beta", "alpha", "zeta"]


def test_thresholds_are_tunable(make_finding) -> None:
    finding = make_finding(confidence=Confidence.MEDIUM)
    strict = ConfidenceScorer(ScoringPolicy(probable_threshold=6.0))
    assert strict.categorize(patterns=[finding]).suspicious
    assert ConfidenceScorer().categorize(patterns=[finding]).probable


@pytest.mark.parametrize(
    ("category", "expected"),
    [
        (Category.CONFIG, "configuration value intentional or arbitrary"),
        (Category.AUTH, "only found once"),
    ],
)
def test_questions_name_category_and_implication(make_finding, category, expected) -> None:
    finding = make_finding(category=category, confidence=Confidence.MEDIUM)
    entry = ConfidenceScorer().categorize(patterns=[finding]).probable[0]
    assert entry.question is not None
    assert entry.question.startswith(f"[{category.value}] Route requires authentication:")
    assert expected in entry.question


def test_categorize_is_deterministic(make_finding) -> None:
    findings = [
        make_finding(implication=f"claim {index % 4}", line=index, confidence=level)
        for index, level in enumerate([Confidence.LOW, Confidence.HIGH] * 6)
    ]
    scorer = ConfidenceScorer()
    assert scorer.categorize(patterns=findings) == scorer.categorize(patterns=findings)
    assert scorer.categorize_bundle(FindingBundle(patterns=tuple(findings))) == (
        scorer.categorize(patterns=findings)
    )
