from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from reqmine.exceptions import InterchangeError
from reqmine.invariants import never
from reqmine.models import (
    TIER_ORDER,
    Category,
    Confidence,
    ConfidenceScore,
    EvidenceGroup,
    ExtractorKind,
    Finding,
    Severity,
    SignalKey,
    TriageEntry,
    TriageResult,
)

SCHEMA_VERSION = 1


class FindingDTO(BaseModel):
    kind: ExtractorKind
    name: str
    category: Category
    confidence: Confidence
    severity: Severity
    implication: str
    path: str
    line: int
    excerpt: str = ""
    type: str = "pattern"
    occurrences: int = 1
    consistency_boost: bool = False
    keywords: List[str] = []


class SignalKeyDTO(BaseModel):
    category: str
    concept: str


class EvidenceGroupDTO(BaseModel):
    key: SignalKeyDTO
    category: Category
    severity: Severity
    implication: str
    distinct_extractors: int
    representative: int
    findings: List[FindingDTO]


class ScoreDTO(BaseModel):
    final: float
    factors: List[str] = []


class TriageEntryDTO(BaseModel):
    group: EvidenceGroupDTO
    score: ScoreDTO
    question: Optional[str] = None


class TriageReportDTO(BaseModel):
    schema_version: int = SCHEMA_VERSION
    source: str
    summary: Dict[str, int]
    confident: List[TriageEntryDTO] = []
    probable: List[TriageEntryDTO] = []
    suspicious: List[TriageEntryDTO] = []
    smells: List[TriageEntryDTO] = []


def finding_to_dto(finding: Finding) -> FindingDTO:
    return FindingDTO(
        kind=finding.kind,
        name=finding.name,
        category=finding.category,
        confidence=finding.confidence,
        severity=finding.severity,
        implication=finding.implication,
        path=finding.path,
        line=finding.line,
        excerpt=finding.excerpt,
        type="suspicious" if finding.suspicious else str(finding.kind),
        occurrences=finding.occurrences,
        consistency_boost=finding.consistency_boost,
        keywords=list(finding.keywords),
    )


def finding_from_dto(dto: FindingDTO) -> Finding:
    return Finding(
        kind=dto.kind,
        name=dto.name,
        category=dto.category,
        confidence=dto.confidence,
        severity=dto.severity,
        implication=dto.implication,
        path=dto.path,
        line=dto.line,
        excerpt=dto.excerpt,
        suspicious=dto.type == "suspicious",
        occurrences=dto.occurrences,
        consistency_boost=dto.consistency_boost,
        keywords=tuple(dto.keywords),
    )


def _representative_index(group: EvidenceGroup) -> int:
    for index in range(len(group.findings) - 1, -1, -1):
        if group.findings[index] is group.representative:
            return index
    if group.representative in group.findings:
        return group.findings.index(group.representative)
    never("representative is not a group member", key=group.key.render())


def _group_to_dto(group: EvidenceGroup) -> EvidenceGroupDTO:
    representative = _representative_index(group)
    return EvidenceGroupDTO(
        key=SignalKeyDTO(category=group.key.category, concept=group.key.concept),
        category=group.category,
        severity=group.severity,
        implication=group.implication,
        distinct_extractors=group.distinct_extractors,
        representative=representative,
        findings=[finding_to_dto(finding) for finding in group.findings],
    )


def _group_from_dto(dto: EvidenceGroupDTO) -> EvidenceGroup:
    findings = tuple(finding_from_dto(item) for item in dto.findings)
    if not 0 <= dto.representative < len(findings):
        raise InterchangeError(
            f"representative index {dto.representative} out of range for "
            f"{dto.key.category}:{dto.key.concept}"
        )
    return EvidenceGroup(
        key=SignalKey(category=dto.key.category, concept=dto.key.concept),
        findings=findings,
        representative=findings[dto.representative],
    )


def entry_to_dto(entry: TriageEntry) -> TriageEntryDTO:
    return TriageEntryDTO(
        group=_group_to_dto(entry.group),
        score=ScoreDTO(final=entry.score.final, factors=list(entry.score.factors)),
        question=entry.question,
    )


def entry_from_dto(dto: TriageEntryDTO) -> TriageEntry:
    return TriageEntry(
        group=_group_from_dto(dto.group),
        score=ConfidenceScore(final=dto.score.final, factors=tuple(dto.score.factors)),
        question=dto.question,
    )


def triage_to_dto(result: TriageResult, *, source: str) -> TriageReportDTO:
    tiers = {
        tier.value: [entry_to_dto(entry) for entry in result.tier(tier)]
        for tier in TIER_ORDER
    }
    return TriageReportDTO(source=source, summary=result.counts(), **tiers)


def triage_from_dto(dto: TriageReportDTO) -> TriageResult:
    return TriageResult(
        confident=tuple(entry_from_dto(item) for item in dto.confident),
        probable=tuple(entry_from_dto(item) for item in dto.probable),
        suspicious=tuple(entry_from_dto(item) for item in dto.suspicious),
        smells=tuple(entry_from_dto(item) for item in dto.smells),
    )


def triage_payload(result: TriageResult, *, source: str) -> dict[str, Any]:
    return triage_to_dto(result, source=source).model_dump(mode="json")


def load_triage_payload(payload: object) -> tuple[str, TriageResult]:
    try:
        dto = TriageReportDTO.model_validate(payload)
    except ValidationError as exc:
        raise InterchangeError(f"invalid triage payload: {exc}") from exc
    return dto.source, triage_from_dto(dto)


def load_triage_json(text: str) -> tuple[str, TriageResult]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InterchangeError(f"triage payload is not valid JSON: {exc}") from exc
    return load_triage_payload(payload)