"""Render a :class:`~reqmine.models.TriageResult` for people and machines.

Four formats are supported:

- ``text``: tier-grouped listing with evidence excerpts, scores and review
  questions.
- ``json`` / ``yaml``: the :class:`~reqmine.schema.TriageReportDTO` payload.
  Both carry the same fields and load back into an equal result.
- ``draft``: a draft requirements document that assigns ``<PREFIX>-NNN``
  identifiers to confident and probable groups.
"""

from __future__ import annotations

import json
import re
from datetime import date
from typing import Mapping

import yaml

from reqmine.config import REPORT_FORMATS
from reqmine.exceptions import InterchangeError, ReqmineError
from reqmine.models import Severity, Tier, TriageEntry, TriageResult
from reqmine.schema import load_triage_payload, triage_payload

RULE_WIDTH = 70
ITEM_RULE_WIDTH = 50
MAX_EVIDENCE = 3
MAX_EXCERPT = 60
MAX_DRAFT_EVIDENCE = 2
MAX_DRAFT_BACKLOG = 10

REQUIREMENT_PREFIXES: Mapping[str, str] = {
    "AUTH": "AUTH",
    "SEC": "SEC",
    "API": "API",
    "DATA": "DATA",
    "CONFIG": "CFG",
    "ERROR": "ERR",
    "UI": "UI",
    "PERF": "PERF",
    "COMPAT": "COMPAT",
    "DEBT": "DEBT",
    "ARCH": "ARCH",
    "STORAGE": "STOR",
    "GENERAL": "GEN",
}

_TIER_HEADINGS: Mapping[Tier, str] = {
    Tier.CONFIDENT: "CONFIDENT - These are likely real requirements",
    Tier.PROBABLE: "PROBABLE - Needs human confirmation",
    Tier.SUSPICIOUS: "SUSPICIOUS - Might be requirements, might be accidents",
    Tier.SMELLS: "SMELLS - Probably not requirements (tech debt?)",
}

_SUMMARY_LABELS: Mapping[Tier, str] = {
    Tier.CONFIDENT: "CONFIDENT (likely real requirements):",
    Tier.PROBABLE: "PROBABLE (needs confirmation):",
    Tier.SUSPICIOUS: "SUSPICIOUS (might be accidents):",
    Tier.SMELLS: "SMELLS (probably tech debt):",
}

_TIER_MARKS: Mapping[Tier, str] = {
    Tier.CONFIDENT: "+",
    Tier.PROBABLE: "?",
    Tier.SUSPICIOUS: "~",
    Tier.SMELLS: "x",
}

_TERMINAL_PUNCT = re.compile(r"[.!?]$")


def requirement_prefix(category: str) -> str:
    return REQUIREMENT_PREFIXES.get(category, category[:4].upper())


class RequirementIds:
    """Sequential ``<PREFIX>-NNN`` identifiers, one counter per prefix."""

    def __init__(self) -> None:
        self._counters: dict[str, int] = {}

    def next(self, category: str) -> str:
        prefix = requirement_prefix(category)
        self._counters[prefix] = self._counters.get(prefix, 0) + 1
        return f"{prefix}-{self._counters[prefix]:03d}"


def format_implication(implication: str) -> str:
    text = implication.strip()
    if not text:
        return text
    text = text[0].upper() + text[1:]
    if not _TERMINAL_PUNCT.search(text):
        text += "."
    return text


class ReportGenerator:
    def render(
        self,
        result: TriageResult,
        *,
        source: str,
        fmt: str = "text",
        generated_on: date | None = None,
    ) -> str:
        match fmt:
            case "text":
                return self.render_text(result, source=source)
            case "json":
                return self.render_json(result, source=source)
            case "yaml":
                return self.render_yaml(result, source=source)
            case "draft":
                return self.render_draft(
                    result,
                    source=source,
                    generated_on=generated_on if generated_on is not None else date.today(),
                )
        raise ReqmineError(
            f"unknown report format {fmt!r} (expected one of {', '.join(REPORT_FORMATS)})"
        )

    def render_json(self, result: TriageResult, *, source: str) -> str:
        return json.dumps(triage_payload(result, source=source), indent=2, sort_keys=True) + "\n"

    def render_yaml(self, result: TriageResult, *, source: str) -> str:
        return yaml.safe_dump(
            triage_payload(result, source=source),
            sort_keys=True,
            allow_unicode=True,
        )

    def render_text(self, result: TriageResult, *, source: str) -> str:
        heavy = "=" * RULE_WIDTH
        lines = [
            heavy,
            "  REQMINE TRIAGE REPORT",
            f"  Extracted requirements triage from: {source}",
            heavy,
            "",
            "SUMMARY",
            "-" * 40,
        ]
        counts = result.counts()
        for tier, label in _SUMMARY_LABELS.items():
            lines.append(f"  {_TIER_MARKS[tier]} {label:<40} {counts[tier.value]}")
        lines.append("")

        for tier, heading in _TIER_HEADINGS.items():
            entries = result.tier(tier)
            if not entries:
                continue
            lines.extend(["", heavy, f"  {_TIER_MARKS[tier]} {heading}", heavy])
            for entry in entries:
                lines.extend(self._text_entry(entry, tier))

        lines.extend(
            [
                "",
                heavy,
                "  NEXT STEPS",
                heavy,
                "",
                "  1. Review CONFIDENT items - these should become contracts",
                "  2. Ask stakeholders about PROBABLE items",
                "  3. Investigate SUSPICIOUS items for intent",
                "  4. Create tech debt tickets for SMELLS",
                "",
                "  Generate a draft spec: reqmine scan <dir> --format draft --output draft-spec.md",
                "",
            ]
        )
        return "\n".join(lines)

    def _text_entry(self, entry: TriageEntry, tier: Tier) -> list[str]:
        group = entry.group
        lines = [
            "",
            "-" * ITEM_RULE_WIDTH,
            f"{group.severity.value} [{group.category.value}] {group.implication}",
            "",
            f"   Evidence ({group.occurrences} occurrences in {len(group.files)} files):",
        ]
        for finding in group.findings[:MAX_EVIDENCE]:
            excerpt = finding.excerpt
            if len(excerpt) > MAX_EXCERPT:
                excerpt = excerpt[:MAX_EXCERPT] + "..."
            suffix = f": {excerpt}" if excerpt else ""
            lines.append(f"     - {finding.location()}{suffix}")
        lines.append("")
        lines.append(
            f"   Confidence: {entry.score.final:.1f}/10 [{', '.join(entry.score.factors)}]"
        )
        if tier is not Tier.CONFIDENT and entry.question:
            lines.extend(["", f"   Review: {entry.question}"])
        return lines

    def render_draft(self, result: TriageResult, *, source: str, generated_on: date) -> str:
        ids = RequirementIds()
        lines = [
            f"# Feature: [EXTRACTED FROM {source}]",
            "",
            "> DRAFT SPECIFICATION - REQUIRES HUMAN REVIEW",
            ">",
            "> This spec was generated by reqmine.",
            "> Items marked [REVIEW] need stakeholder confirmation.",
            "> Items under TECH DEBT should become tickets, not requirements.",
            "",
            "---",
            "",
            "## REQS",
            "",
        ]

        by_category: dict[str, list[tuple[Tier, TriageEntry]]] = {}
        for tier in (Tier.CONFIDENT, Tier.PROBABLE):
            for entry in result.tier(tier):
                by_category.setdefault(entry.group.category.value, []).append((tier, entry))

        for category, items in by_category.items():
            for tier, entry in items:
                group = entry.group
                severity = "MUST" if group.severity is Severity.MUST else "SHOULD"
                review = " [REVIEW]" if tier is Tier.PROBABLE else ""
                lines.append(f"### {ids.next(category)} ({severity}){review}")
                lines.append(format_implication(group.implication))
                lines.append("")
                if group.findings:
                    lines.append("Evidence:")
                    for finding in group.findings[:MAX_DRAFT_EVIDENCE]:
                        lines.append(f"- Found in `{finding.location()}`")
                    lines.append("")
                if tier is Tier.PROBABLE and entry.question:
                    lines.append(f"> Review: {entry.question}")
                    lines.append("")

        if result.suspicious:
            lines.extend(
                [
                    "---",
                    "",
                    "## NEEDS INVESTIGATION",
                    "",
                    "> The following patterns were found but might be accidental:",
                    "",
                ]
            )
            for entry in result.suspicious[:MAX_DRAFT_BACKLOG]:
                group = entry.group
                lines.append(f"### {ids.next(group.category.value)} (???)")
                if entry.question:
                    lines.append(f"<!-- {entry.question} -->")
                lines.append(format_implication(group.implication))
                lines.append("")

        if result.smells:
            lines.extend(
                [
                    "---",
                    "",
                    "## TECH DEBT (Not Requirements)",
                    "",
                    "> These should become tickets, not spec requirements:",
                    "",
                ]
            )
            for entry in result.smells[:MAX_DRAFT_BACKLOG]:
                group = entry.group
                lines.append(f"- [ ] **[{group.category.value}]** {group.implication}")
                if group.findings:
                    lines.append(f"      Location: `{group.findings[0].location()}`")

        lines.extend(
            [
                "",
                "---",
                "",
                "## Changelog",
                "",
                f"### {generated_on.isoformat()} - v0 (DRAFT)",
                "- Generated by reqmine",
                "- **REQUIRES HUMAN REVIEW BEFORE USE**",
                "",
            ]
        )
        return "\n".join(lines)


def load_triage_yaml(text: str) -> tuple[str, TriageResult]:
    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise InterchangeError(f"triage payload is not valid YAML: {exc}") from exc
    return load_triage_payload(payload)
