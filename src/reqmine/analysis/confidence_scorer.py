"""Evidence fusion: group findings, score each group, assign a triage tier.

Findings from the three extractors are flattened in corpus order and grouped
by :class:`~reqmine.models.SignalKey`. Each group is scored on a 0-10 scale
from its representative confidence, the number of distinct extractor kinds
that agree, and how often the claim recurs. Tier assignment is an ordered,
short-circuiting rule chain so the debt carve-out is always evaluated before
any numeric threshold.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from reqmine.config import ScoringPolicy
from reqmine.invariants import never
from reqmine.models import (
    TIER_ORDER,
    Category,
    Confidence,
    ConfidenceScore,
    EvidenceGroup,
    Finding,
    SignalKey,
    Severity,
    Tier,
    TriageEntry,
    TriageResult,
)
from reqmine.order_contract import sort_once

FACTOR_CORROBORATION = "multi-signal corroboration"
FACTOR_RECURRING = "recurring occurrence"
FACTOR_HIGH_OCCURRENCE = "high occurrence count"
FACTOR_CLAMPED = "clamped"


@dataclass(frozen=True)
class FindingBundle:
    patterns: tuple[Finding, ...] = ()
    test_inferences: tuple[Finding, ...] = ()
    comments: tuple[Finding, ...] = ()

    def flattened(self) -> tuple[Finding, ...]:
        return self.patterns + self.test_inferences + self.comments


@dataclass(frozen=True)
class TierRule:
    name: str
    tier: Tier
    applies: Callable[[EvidenceGroup, ConfidenceScore, ScoringPolicy], bool]


def _is_debt(group: EvidenceGroup, score: ConfidenceScore, policy: ScoringPolicy) -> bool:
    return group.severity is Severity.DEBT or (
        group.suspicious and not group.has_must_corroboration
    )


def _meets_confident(
    group: EvidenceGroup, score: ConfidenceScore, policy: ScoringPolicy
) -> bool:
    return score.final >= policy.confident_threshold


def _meets_probable(
    group: EvidenceGroup, score: ConfidenceScore, policy: ScoringPolicy
) -> bool:
    return score.final >= policy.probable_threshold


def _always(group: EvidenceGroup, score: ConfidenceScore, policy: ScoringPolicy) -> bool:
    return True


DEFAULT_TIER_RULES: tuple[TierRule, ...] = (
    TierRule("debt carve-out", Tier.SMELLS, _is_debt),
    TierRule("confident threshold", Tier.CONFIDENT, _meets_confident),
    TierRule("probable threshold", Tier.PROBABLE, _meets_probable),
    TierRule("fallback", Tier.SUSPICIOUS, _always),
)


def group_findings(findings: Iterable[Finding]) -> list[EvidenceGroup]:
    """Group findings by signal key, keeping first-seen key order.

    The representative is the highest-confidence member; on a tie the most
    recently encountered member wins. Members are ordered by file then line.
    """
    members: dict[SignalKey, list[Finding]] = {}
    representatives: dict[SignalKey, Finding] = {}
    for finding in findings:
        key = finding.signal_key()
        members.setdefault(key, []).append(finding)
        current = representatives.get(key)
        if current is None or finding.confidence.rank >= current.confidence.rank:
            representatives[key] = finding
    return [
        EvidenceGroup(
            key=key,
            findings=tuple(
                sort_once(
                    items,
                    source="confidence_scorer.group_findings.members",
                    key=lambda item: (item.path, item.line),
                )
            ),
            representative=representatives[key],
        )
        for key, items in members.items()
    ]


class ConfidenceScorer:
    def __init__(
        self,
        policy: ScoringPolicy | None = None,
        *,
        tier_rules: Sequence[TierRule] = DEFAULT_TIER_RULES,
    ) -> None:
        self.policy = policy if policy is not None else ScoringPolicy()
        self.tier_rules = tuple(tier_rules)

    def categorize(
        self,
        patterns: Iterable[Finding] = (),
        test_inferences: Iterable[Finding] = (),
        comments: Iterable[Finding] = (),
    ) -> TriageResult:
        return self.categorize_bundle(
            FindingBundle(
                patterns=tuple(patterns),
                test_inferences=tuple(test_inferences),
                comments=tuple(comments),
            )
        )

    def categorize_bundle(self, bundle: FindingBundle) -> TriageResult:
        groups = group_findings(bundle.flattened())
        tiers: dict[Tier, list[TriageEntry]] = {tier: [] for tier in TIER_ORDER}
        for group in groups:
            score = self.score(group)
            tier = self.assign_tier(group, score)
            tiers[tier].append(
                TriageEntry(group=group, score=score, question=self.question(tier, group))
            )

        placed = sum(len(entries) for entries in tiers.values())
        if placed != len(groups):
            never("tier partition lost groups", groups=len(groups), placed=placed)

        ordered = {
            tier: tuple(
                sort_once(
                    entries,
                    source=f"confidence_scorer.categorize.{tier.value}",
                    key=lambda entry: (-entry.score.final, entry.group.key),
                )
            )
            for tier, entries in tiers.items()
        }
        return TriageResult(
            confident=ordered[Tier.CONFIDENT],
            probable=ordered[Tier.PROBABLE],
            suspicious=ordered[Tier.SUSPICIOUS],
            smells=ordered[Tier.SMELLS],
        )

    def base_score(self, confidence: Confidence) -> float:
        match confidence:
            case Confidence.HIGH:
                return self.policy.base_high
            case Confidence.MEDIUM:
                return self.policy.base_medium
            case Confidence.LOW:
                return self.policy.base_low
        never("unknown confidence level", confidence=str(confidence))

    def score(self, group: EvidenceGroup) -> ConfidenceScore:
        policy = self.policy
        confidence = group.representative.confidence
        total = self.base_score(confidence)
        factors = [f"base confidence {confidence.value}"]

        extra_kinds = group.distinct_extractors - 1
        if extra_kinds > 0:
            total += min(policy.corroboration_step * extra_kinds, policy.corroboration_cap)
            factors.append(FACTOR_CORROBORATION)

        if group.occurrences >= policy.recurring_threshold:
            total += policy.occurrence_step
            factors.append(FACTOR_RECURRING)
        if group.occurrences >= policy.high_occurrence_threshold:
            total += policy.occurrence_step
            factors.append(FACTOR_HIGH_OCCURRENCE)

        clamped = min(max(total, 0.0), policy.ceiling)
        if clamped != total:
            factors.append(FACTOR_CLAMPED)
        return ConfidenceScore(final=clamped, factors=tuple(factors))

    def assign_tier(self, group: EvidenceGroup, score: ConfidenceScore) -> Tier:
        for rule in self.tier_rules:
            if rule.applies(group, score, self.policy):
                return rule.tier
        never("no tier rule matched", key=group.key.render(), score=score.final)

    def question(self, tier: Tier, group: EvidenceGroup) -> str | None:
        if tier is Tier.CONFIDENT:
            return None
        if tier is Tier.SMELLS or group.category is Category.DEBT:
            body = "this looks like tech debt. Should it be fixed or is it intentional?"
        elif group.category is Category.CONFIG:
            body = "is this configuration value intentional or arbitrary?"
        elif group.occurrences == 1:
            body = "only found once. Is this a one-off or a general requirement?"
        else:
            body = "is this an actual requirement or an accidental implementation detail?"
        return f"[{group.category.value}] {group.implication}: {body}"
