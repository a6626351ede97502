from __future__ import annotations

from reqmine.catalog import catalogs_from_config
from reqmine.config import ConsistencyPolicy
from reqmine.corpus import SourceCorpus, collect_corpus
from reqmine.models import Confidence, ExtractorKind
from reqmine.pipeline import Interrogator, interrogate
from reqmine.reporting import ReportGenerator

_SOURCE = {
    "src/auth.js": (
        "// SECURITY: passwords must be hashed\n"
        "const digest = await bcrypt.hash(password, 12)\n"
        "router.post('/login', requireAuth, login)\n"
        "const MAX_ATTEMPTS = 5\n"
        "const secret = process.env.JWT_SECRET\n"
    ),
    "src/debug.js": "console.log(user) // TODO: remove\n",
    "src/types.py": "if isinstance(value, int):\n    pass\n",
    "src/more_types.py": "if isinstance(value, str):\n    pass\n",
    "src/extra_types.py": "if isinstance(value, bytes):\n    pass\n",
}
_TESTS = {
    "tests/auth.test.js": (
        "jest.mock('../src/mailer')\n"
        "it('rejects invalid tokens', () => {})\n"
        "it('should optionally retry on timeout', () => {})\n"
    ),
}


def _corpus() -> SourceCorpus:
    return SourceCorpus.from_pairs(source=sorted(_SOURCE.items()), tests=sorted(_TESTS.items()))


def test_extract_partitions_findings_by_extractor() -> None:
    bundle = Interrogator().extract(_corpus())
    assert {finding.kind for finding in bundle.patterns} == {ExtractorKind.PATTERN}
    assert {finding.kind for finding in bundle.comments} == {ExtractorKind.COMMENT}
    assert {finding.kind for finding in bundle.test_inferences} == {ExtractorKind.TEST_INFERENCE}
    assert all(path.startswith("tests/") for path in {f.path for f in bundle.test_inferences})


def test_consistency_boost_runs_across_files() -> None:
    bundle = Interrogator().extract(_corpus())
    type_checks = [finding for finding in bundle.patterns if finding.name == "type_check"]
    assert len(type_checks) == 3
    assert all(finding.confidence is Confidence.MEDIUM for finding in type_checks)
    assert all(finding.occurrences == 3 for finding in type_checks)


def test_consistency_policy_is_injected() -> None:
    bundle = Interrogator(consistency=ConsistencyPolicy(promote_once=10, promote_twice=20)).extract(
        _corpus()
    )
    type_checks = [finding for finding in bundle.patterns if finding.name == "type_check"]
    assert all(finding.confidence is Confidence.LOW for finding in type_checks)


def test_interrogate_places_every_kind_of_evidence() -> None:
    result = interrogate(_corpus())
    confident = {entry.group.key.concept for entry in result.confident}
    assert "passwords must be hashed" in confident
    assert "route requires authentication" in confident
    smells = {entry.group.key.concept for entry in result.smells}
    assert "console logging (leftover debugging?)" in smells
    suspicious = {entry.group.key.concept for entry in result.suspicious}
    assert "system should optionally retry on timeout" in suspicious


def test_parallel_extraction_matches_serial() -> None:
    corpus = _corpus()
    serial = interrogate(corpus, jobs=1)
    parallel = interrogate(corpus, jobs=4)
    assert serial == parallel
    generator = ReportGenerator()
    assert generator.render(serial, source="x", fmt="json") == generator.render(
        parallel, source="x", fmt="json"
    )


def test_progress_messages_are_emitted() -> None:
    messages: list[str] = []
    interrogate(_corpus(), progress=messages.append)
    assert messages[0] == "scanning 5 source files and 1 test files"
    assert messages[-1].startswith("triage: ")


def test_custom_catalogue_reaches_the_detector(write_tree) -> None:
    root = write_tree({"src/audit.py": "audit.record('login')\n"})
    catalogs = catalogs_from_config(
        {
            "signals": [
                {
                    "name": "audit_log",
                    "pattern": r"\baudit\.record\(",
                    "category": "SEC",
                    "confidence": "high",
                    "implication": "Actions must be audited",
                }
            ]
        }
    )
    result = interrogate(collect_corpus(root), catalogs=catalogs)
    assert [entry.group.key.concept for entry in result.confident] == ["actions must be audited"]


def test_empty_corpus_is_reportable() -> None:
    result = interrogate(SourceCorpus())
    assert result.is_empty()
