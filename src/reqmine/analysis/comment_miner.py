"""Requirement evidence mined from comments and inline configuration hints."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from reqmine.analysis.lexical import (
    CommentSpan,
    LineIndex,
    blank_spans,
    comment_syntax_for,
    iter_comment_spans,
)
from reqmine.catalog import DEFAULT_COMMENT_RULES, CommentCatalog
from reqmine.models import Category, Confidence, ExtractorKind, Finding, Severity

_WHITESPACE = re.compile(r"\s+")
_LEADING_STARS = re.compile(r"^\*+\s*")


@dataclass(frozen=True)
class CommentVerdict:
    name: str
    severity: Severity
    confidence: Confidence
    implication: str


RuleFamily = Callable[[str], "CommentVerdict | None"]


class CommentMiner:
    def __init__(self, catalog: CommentCatalog | None = None) -> None:
        self.catalog = catalog if catalog is not None else DEFAULT_COMMENT_RULES
        # Evaluated in order; the first family with a verdict wins.
        self.rule_families: tuple[RuleFamily, ...] = (
            self._marker_verdict,
            self._doc_tag_verdict,
            self._constraint_verdict,
        )

    def mine(self, content: str, path: str) -> list[Finding]:
        index = LineIndex(content)
        syntax = comment_syntax_for(
            path,
            hash_suffixes=self.catalog.hash_suffixes,
            c_suffixes=self.catalog.c_suffixes,
        )
        spans = iter_comment_spans(content, syntax, index)
        findings: list[Finding] = []
        for span in spans:
            finding = self._comment_finding(span, path)
            if finding is not None:
                findings.append(finding)
        findings.extend(self._inline_hints(blank_spans(content, spans), path, index))
        return findings

    def analyze(self, comment: str) -> CommentVerdict | None:
        for family in self.rule_families:
            verdict = family(comment)
            if verdict is not None:
                return verdict
        return None

    def categorize(self, comment: str) -> Category:
        for pattern, category in self.catalog.category_rules:
            if pattern.search(comment):
                return category
        return Category.GENERAL

    def clean(self, comment: str) -> str:
        text = self.catalog.leading_marker.sub("", comment.strip(), count=1)
        text = _LEADING_STARS.sub("", text)
        return _WHITESPACE.sub(" ", text).strip()

    def _comment_finding(self, span: CommentSpan, path: str) -> Finding | None:
        verdict = self.analyze(span.text)
        if verdict is None:
            return None
        return Finding(
            kind=ExtractorKind.COMMENT,
            name=verdict.name,
            category=self.categorize(span.text),
            confidence=verdict.confidence,
            severity=verdict.severity,
            implication=verdict.implication,
            path=path,
            line=span.line,
            excerpt=span.text[: self.catalog.max_excerpt],
        )

    def _marker_verdict(self, comment: str) -> CommentVerdict | None:
        for rule in self.catalog.markers:
            if rule.pattern.search(comment):
                return CommentVerdict(
                    name=rule.name,
                    severity=rule.severity,
                    confidence=rule.confidence,
                    implication=self.clean(comment),
                )
        return None

    def _doc_tag_verdict(self, comment: str) -> CommentVerdict | None:
        for rule in self.catalog.doc_tags:
            match = rule.pattern.search(comment)
            if match is None:
                continue
            detail = comment[match.end():].split("\n", 1)[0].strip()
            implication = f"{rule.implication}: {detail}" if detail else rule.implication
            return CommentVerdict(
                name=rule.tag,
                severity=rule.severity,
                confidence=Confidence.MEDIUM,
                implication=implication,
            )
        return None

    def _constraint_verdict(self, comment: str) -> CommentVerdict | None:
        if not any(pattern.search(comment) for pattern in self.catalog.constraint_hints):
            return None
        return CommentVerdict(
            name="constraint_hint",
            severity=Severity.MAYBE,
            confidence=Confidence.LOW,
            implication=self.clean(comment),
        )

    def _inline_hints(self, code: str, path: str, index: LineIndex) -> list[Finding]:
        findings: list[Finding] = []
        for match in self.catalog.constant_binding.finditer(code):
            name = match.group("name")
            value = match.group("value")
            findings.append(
                Finding(
                    kind=ExtractorKind.COMMENT,
                    name="magic_constant",
                    category=Category.CONFIG,
                    confidence=Confidence.LOW,
                    severity=Severity.MAYBE,
                    implication=f"Configuration constant: {name} (value: {value})",
                    path=path,
                    line=index.line_of(match.start("name")),
                    excerpt=f"{name} = {value}",
                )
            )
        for pattern in self.catalog.external_config:
            for match in pattern.finditer(code):
                name = match.group("name")
                findings.append(
                    Finding(
                        kind=ExtractorKind.COMMENT,
                        name="env_dependency",
                        category=Category.CONFIG,
                        confidence=Confidence.MEDIUM,
                        severity=Severity.MUST,
                        implication=f"Environment variable required: {name}",
                        path=path,
                        line=index.line_of(match.start()),
                        excerpt=f"Requires env: {name}",
                    )
                )
        return findings
