"""Lexical helpers shared by the extractors.

Nothing here parses a syntax tree. Comment spans are recovered with a single
left-to-right regex scan that also consumes string literals, so comment
markers that sit inside strings (``"http://..."``, ``"#fff"``) are skipped.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from collections import Counter
from dataclasses import dataclass
from enum import StrEnum
from math import log2
from pathlib import PurePosixPath


class CommentForm(StrEnum):
    LINE = "line"
    BLOCK = "block"
    DOC = "doc"


class CommentSyntax(StrEnum):
    HASH = "hash"
    C = "c"
    MIXED = "mixed"


@dataclass(frozen=True)
class CommentSpan:
    start: int
    end: int
    line: int
    form: CommentForm
    text: str


class LineIndex:
    """Offset to 1-based line number lookups for one file."""

    def __init__(self, content: str) -> None:
        self._content = content
        self._starts = [0]
        for match in re.finditer(r"\n", content):
            self._starts.append(match.end())
        self._lines = content.split("\n")

    def line_of(self, offset: int) -> int:
        return bisect_right(self._starts, offset)

    def text_of(self, line: int) -> str:
        if 1 <= line <= len(self._lines):
            return self._lines[line - 1].strip()
        return ""


_DQ_STRING = r'"(?:\\.|[^"\\\n])*"'
_SQ_STRING = r"'(?:\\.|[^'\\\n])*'"
_BT_STRING = r"`(?:\\.|[^`\\])*`"

_C_TOKENS = (
    r"(?P<doc>/\*\*(?!/)[\s\S]*?\*/)",
    r"(?P<block>/\*[\s\S]*?\*/)",
    r"(?P<line>//[^\n]*)",
)
_HASH_TOKENS = (
    r"(?P<triple>\"\"\"[\s\S]*?\"\"\"|'''[\s\S]*?''')",
    r"(?P<hash>#[^\n]*)",
)

_LEXERS: dict[CommentSyntax, re.Pattern[str]] = {
    CommentSyntax.C: re.compile(
        "|".join((*_C_TOKENS, rf"(?P<string>{_DQ_STRING}|{_SQ_STRING}|{_BT_STRING})"))
    ),
    CommentSyntax.HASH: re.compile(
        "|".join((*_HASH_TOKENS, rf"(?P<string>{_DQ_STRING}|{_SQ_STRING})"))
    ),
    CommentSyntax.MIXED: re.compile(
        "|".join(
            (
                *_C_TOKENS,
                *_HASH_TOKENS,
                rf"(?P<string>{_DQ_STRING}|{_SQ_STRING}|{_BT_STRING})",
            )
        )
    ),
}

_BLOCK_LINE_PREFIX = re.compile(r"^\s*\*+ ?")


def comment_syntax_for(
    path: str,
    *,
    hash_suffixes: frozenset[str],
    c_suffixes: frozenset[str],
) -> CommentSyntax:
    suffix = PurePosixPath(path).suffix.lower()
    if suffix in hash_suffixes:
        return CommentSyntax.HASH
    if suffix in c_suffixes:
        return CommentSyntax.C
    return CommentSyntax.MIXED


def _clean_block(body: str) -> str:
    lines = [_BLOCK_LINE_PREFIX.sub("", line).rstrip() for line in body.split("\n")]
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(line.strip() for line in lines)


def iter_comment_spans(
    content: str,
    syntax: CommentSyntax,
    index: LineIndex | None = None,
) -> list[CommentSpan]:
    line_index = index if index is not None else LineIndex(content)
    spans: list[CommentSpan] = []
    for token in _LEXERS[syntax].finditer(content):
        kind = token.lastgroup
        raw = token.group(0)
        match kind:
            case "doc":
                form, text = CommentForm.DOC, _clean_block(raw[3:-2])
            case "block":
                form, text = CommentForm.BLOCK, _clean_block(raw[2:-2])
            case "line":
                form, text = CommentForm.LINE, raw[2:].strip()
            case "hash":
                form, text = CommentForm.LINE, raw[1:].strip()
            case "triple":
                form, text = CommentForm.DOC, _clean_block(raw[3:-3])
            case _:
                continue
        if not text:
            continue
        spans.append(
            CommentSpan(
                start=token.start(),
                end=token.end(),
                line=line_index.line_of(token.start()),
                form=form,
                text=text,
            )
        )
    return spans


def blank_spans(content: str, spans: list[CommentSpan]) -> str:
    """Replace each span with spaces, keeping newlines so offsets line up."""
    if not spans:
        return content
    pieces: list[str] = []
    cursor = 0
    for span in spans:
        pieces.append(content[cursor:span.start])
        pieces.append(re.sub(r"[^\n]", " ", content[span.start:span.end]))
        cursor = span.end
    pieces.append(content[cursor:])
    return "".join(pieces)


def shannon_entropy(text: str) -> float:
    if not text:
        return 0.0
    total = len(text)
    entropy = 0.0
    for count in Counter(text).values():
        probability = count / total
        entropy -= probability * log2(probability)
    return entropy
