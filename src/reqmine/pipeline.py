"""Run the extractors over a corpus and fuse their findings into a triage result.

Per-file extraction is a pure function of one file's content and the rule
catalogues, so it may fan out over a thread pool. The consistency boost and
the scorer both need the complete finding set and run after the barrier.
"""

from __future__ import annotations

import concurrent.futures
from typing import Callable, Sequence, TypeVar

from reqmine.analysis.comment_miner import CommentMiner
from reqmine.analysis.confidence_scorer import ConfidenceScorer, FindingBundle
from reqmine.analysis.pattern_detector import PatternDetector, apply_consistency_boost
from reqmine.analysis.test_inference import TestInferrer
from reqmine.catalog import RuleCatalogs, default_catalogs
from reqmine.config import ConsistencyPolicy, ScoringPolicy
from reqmine.corpus import SourceCorpus, SourceFile
from reqmine.models import Finding, TriageResult

T = TypeVar("T")


def _noop_progress(message: str) -> None:
    return None


class Interrogator:
    def __init__(
        self,
        catalogs: RuleCatalogs | None = None,
        *,
        scoring: ScoringPolicy | None = None,
        consistency: ConsistencyPolicy | None = None,
        jobs: int = 1,
        progress: Callable[[str], None] | None = None,
    ) -> None:
        resolved = catalogs if catalogs is not None else default_catalogs()
        self.pattern_detector = PatternDetector(resolved.patterns)
        self.test_inferrer = TestInferrer(resolved.tests)
        self.comment_miner = CommentMiner(resolved.comments)
        self.scorer = ConfidenceScorer(scoring)
        self.consistency = consistency if consistency is not None else ConsistencyPolicy()
        self.jobs = max(int(jobs), 1)
        self.progress = progress if progress is not None else _noop_progress

    def extract(self, corpus: SourceCorpus) -> FindingBundle:
        self.progress(
            f"scanning {len(corpus.source)} source files and {len(corpus.tests)} test files"
        )
        patterns = self._map_files(corpus.source, self._detect)
        comments = self._map_files(corpus.source, self._mine)
        test_inferences = self._map_files(corpus.tests, self._infer)
        boosted = apply_consistency_boost(patterns, policy=self.consistency)
        self.progress(
            f"found {len(boosted)} pattern, {len(test_inferences)} test and "
            f"{len(comments)} comment findings"
        )
        return FindingBundle(
            patterns=tuple(boosted),
            test_inferences=tuple(test_inferences),
            comments=tuple(comments),
        )

    def interrogate(self, corpus: SourceCorpus) -> TriageResult:
        result = self.scorer.categorize_bundle(self.extract(corpus))
        counts = result.counts()
        self.progress(
            "triage: "
            + ", ".join(f"{counts[name]} {name}" for name in counts)
        )
        return result

    def _detect(self, item: SourceFile) -> list[Finding]:
        path, content = item
        return self.pattern_detector.detect(content, path)

    def _mine(self, item: SourceFile) -> list[Finding]:
        path, content = item
        return self.comment_miner.mine(content, path)

    def _infer(self, item: SourceFile) -> list[Finding]:
        path, content = item
        return self.test_inferrer.infer(content, path)

    def _map_files(
        self,
        files: Sequence[SourceFile],
        extract: Callable[[SourceFile], list[T]],
    ) -> list[T]:
        if self.jobs == 1 or len(files) < 2:
            per_file = [extract(item) for item in files]
        else:
            # map() yields in submission order, so output matches the serial path.
            with concurrent.futures.ThreadPoolExecutor(max_workers=self.jobs) as executor:
                per_file = list(executor.map(extract, files))
        return [finding for findings in per_file for finding in findings]


def interrogate(
    corpus: SourceCorpus,
    *,
    catalogs: RuleCatalogs | None = None,
    scoring: ScoringPolicy | None = None,
    consistency: ConsistencyPolicy | None = None,
    jobs: int = 1,
    progress: Callable[[str], None] | None = None,
) -> TriageResult:
    return Interrogator(
        catalogs,
        scoring=scoring,
        consistency=consistency,
        jobs=jobs,
        progress=progress,
    ).interrogate(corpus)
