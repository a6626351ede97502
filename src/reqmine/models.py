"""Evidence and triage carriers shared by the extractors, scorer and reports."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Iterator


class ExtractorKind(StrEnum):
    PATTERN = "pattern"
    TEST_INFERENCE = "test_inference"
    COMMENT = "comment"


class Category(StrEnum):
    AUTH = "AUTH"
    SEC = "SEC"
    DATA = "DATA"
    ERROR = "ERROR"
    API = "API"
    STORAGE = "STORAGE"
    CONFIG = "CONFIG"
    COMPAT = "COMPAT"
    DEBT = "DEBT"
    ARCH = "ARCH"
    UI = "UI"
    PERF = "PERF"
    GENERAL = "GENERAL"


class Confidence(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_ORDER.index(self)

    def promoted(self, steps: int = 1) -> Confidence:
        """Move ``steps`` tiers up the ladder, saturating at ``HIGH``."""
        index = min(self.rank + max(steps, 0), len(_CONFIDENCE_ORDER) - 1)
        return _CONFIDENCE_ORDER[index]


_CONFIDENCE_ORDER: tuple[Confidence, ...] = (
    Confidence.LOW,
    Confidence.MEDIUM,
    Confidence.HIGH,
)


class Severity(StrEnum):
    MUST = "MUST"
    SHOULD = "SHOULD"
    MAYBE = "MAYBE"
    DEBT = "DEBT"
    INFO = "INFO"


class Tier(StrEnum):
    CONFIDENT = "confident"
    PROBABLE = "probable"
    SUSPICIOUS = "suspicious"
    SMELLS = "smells"


TIER_ORDER: tuple[Tier, ...] = (
    Tier.CONFIDENT,
    Tier.PROBABLE,
    Tier.SUSPICIOUS,
    Tier.SMELLS,
)

_WHITESPACE_RE = re.compile(r"\s+")
_TRAILING_PUNCT_RE = re.compile(r"[.!;:]+$")


def normalize_concept(text: str) -> str:
    collapsed = _WHITESPACE_RE.sub(" ", text.strip().lower())
    return _TRAILING_PUNCT_RE.sub("", collapsed).strip()


@dataclass(frozen=True)
class Finding:
    """One piece of raw evidence from one extractor at one source location."""

    kind: ExtractorKind
    name: str
    category: Category
    confidence: Confidence
    severity: Severity
    implication: str
    path: str
    line: int
    excerpt: str = ""
    suspicious: bool = False
    occurrences: int = 1
    consistency_boost: bool = False
    keywords: tuple[str, ...] = ()

    def signal_key(self) -> SignalKey:
        return SignalKey.for_finding(self)

    def location(self) -> str:
        return f"{self.path}:{self.line}"


@dataclass(frozen=True, order=True)
class SignalKey:
    category: str
    concept: str

    @classmethod
    def for_finding(cls, finding: Finding) -> SignalKey:
        concept = normalize_concept(finding.implication)
        if not concept:
            concept = normalize_concept(finding.name)
        return cls(category=str(finding.category), concept=concept)

    def render(self) -> str:
        return f"{self.category}:{self.concept}"


@dataclass(frozen=True)
class EvidenceGroup:
    key: SignalKey
    findings: tuple[Finding, ...]
    representative: Finding

    @property
    def category(self) -> Category:
        return self.representative.category

    @property
    def severity(self) -> Severity:
        return self.representative.severity

    @property
    def implication(self) -> str:
        return self.representative.implication

    @property
    def extractor_kinds(self) -> tuple[ExtractorKind, ...]:
        present = {finding.kind for finding in self.findings}
        return tuple(kind for kind in ExtractorKind if kind in present)

    @property
    def distinct_extractors(self) -> int:
        return len(self.extractor_kinds)

    @property
    def occurrences(self) -> int:
        return len(self.findings)

    @property
    def files(self) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for finding in self.findings:
            seen.setdefault(finding.path, None)
        return tuple(seen)

    @property
    def suspicious(self) -> bool:
        return any(finding.suspicious for finding in self.findings)

    @property
    def has_must_corroboration(self) -> bool:
        return any(
            finding.severity is Severity.MUST and not finding.suspicious
            for finding in self.findings
        )


@dataclass(frozen=True)
class ConfidenceScore:
    final: float
    factors: tuple[str, ...] = ()


@dataclass(frozen=True)
class TriageEntry:
    group: EvidenceGroup
    score: ConfidenceScore
    question: str | None = None


@dataclass(frozen=True)
class TriageResult:
    confident: tuple[TriageEntry, ...] = ()
    probable: tuple[TriageEntry, ...] = ()
    suspicious: tuple[TriageEntry, ...] = ()
    smells: tuple[TriageEntry, ...] = ()

    def tier(self, tier: Tier) -> tuple[TriageEntry, ...]:
        return getattr(self, tier.value)

    def iter_entries(self) -> Iterator[tuple[Tier, TriageEntry]]:
        for tier in TIER_ORDER:
            for entry in self.tier(tier):
                yield tier, entry

    def counts(self) -> dict[str, int]:
        return {tier.value: len(self.tier(tier)) for tier in TIER_ORDER}

    def total(self) -> int:
        return sum(self.counts().values())

    def is_empty(self) -> bool:
        return self.total() == 0
