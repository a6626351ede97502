"""Structural code-shape signals.

Two catalogues are applied to every file: signals that suggest a real
requirement, and debt markers. Debt-marker findings carry ``suspicious=True``
so the same line may count both as "looks required" and "looks like debt".
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import replace
from typing import Iterable, Sequence

from reqmine.analysis.lexical import LineIndex, shannon_entropy
from reqmine.catalog import PatternCatalog, SignalDefinition
from reqmine.config import ConsistencyPolicy
from reqmine.models import ExtractorKind, Finding


class PatternDetector:
    def __init__(self, catalog: PatternCatalog | None = None) -> None:
        self.catalog = catalog if catalog is not None else PatternCatalog()

    def detect(self, content: str, path: str) -> list[Finding]:
        index = LineIndex(content)
        findings: list[Finding] = []
        for definition in self.catalog.definitions():
            for match in definition.pattern.finditer(content):
                if not _accepts(definition, match):
                    continue
                line = index.line_of(match.start())
                findings.append(
                    Finding(
                        kind=ExtractorKind.PATTERN,
                        name=definition.name,
                        category=definition.category,
                        confidence=definition.confidence,
                        severity=definition.severity,
                        implication=definition.implication,
                        path=path,
                        line=line,
                        excerpt=index.text_of(line),
                        suspicious=definition.suspicious,
                    )
                )
        return findings

    def detect_corpus(
        self,
        files: Iterable[tuple[str, str]],
        *,
        policy: ConsistencyPolicy | None = None,
    ) -> list[Finding]:
        findings: list[Finding] = []
        for path, content in files:
            findings.extend(self.detect(content, path))
        return apply_consistency_boost(findings, policy=policy)


def _accepts(definition: SignalDefinition, match: re.Match[str]) -> bool:
    if definition.min_entropy is None:
        return True
    value = match.groupdict().get("value") or match.group(0)
    return shannon_entropy(value) >= definition.min_entropy


def apply_consistency_boost(
    findings: Sequence[Finding],
    *,
    policy: ConsistencyPolicy | None = None,
) -> list[Finding]:
    """Promote signals that recur across the whole corpus.

    A ``(category, name)`` pair seen ``promote_once`` times climbs one
    confidence tier, and ``promote_twice`` times a second one. The count is
    corpus-wide, so this must run once every file has been scanned.
    """
    resolved = policy if policy is not None else ConsistencyPolicy()
    counts = Counter((finding.category, finding.name) for finding in findings)
    boosted: list[Finding] = []
    for finding in findings:
        count = counts[(finding.category, finding.name)]
        steps = int(count >= resolved.promote_once) + int(count >= resolved.promote_twice)
        promoted = finding.confidence.promoted(steps)
        if promoted != finding.confidence:
            boosted.append(
                replace(
                    finding,
                    confidence=promoted,
                    occurrences=count,
                    consistency_boost=True,
                )
            )
        else:
            boosted.append(replace(finding, occurrences=count))
    return boosted
