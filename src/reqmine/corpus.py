"""Collect a scan root into partitioned (path, content) pairs."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path
from typing import Callable, Iterable

from reqmine.config import ScanPolicy
from reqmine.exceptions import CatalogError
from reqmine.order_contract import sort_once

SourceFile = tuple[str, str]


@dataclass(frozen=True)
class SourceCorpus:
    source: tuple[SourceFile, ...] = ()
    tests: tuple[SourceFile, ...] = ()

    @classmethod
    def from_pairs(
        cls,
        source: Iterable[SourceFile] = (),
        tests: Iterable[SourceFile] = (),
    ) -> SourceCorpus:
        return cls(source=tuple(source), tests=tuple(tests))

    def file_count(self) -> int:
        return len(self.source) + len(self.tests)


def _is_ignored(parts: Iterable[str], ignore: tuple[str, ...]) -> bool:
    return any(fnmatch(part, pattern) for part in parts for pattern in ignore)


def compile_test_patterns(patterns: Iterable[str]) -> list[re.Pattern[str]]:
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as exc:
            raise CatalogError(
                f"invalid test pattern {pattern!r}: {exc}", entry="scan.test_patterns"
            ) from exc
    return compiled


def is_test_path(relative: str, test_patterns: Iterable[re.Pattern[str]]) -> bool:
    return any(pattern.search(relative) for pattern in test_patterns)


def iter_candidate_paths(root: Path, policy: ScanPolicy) -> list[Path]:
    """Walk ``root`` pruning ignored directories early."""
    extensions = {ext.lower() for ext in policy.extensions}
    out: list[Path] = []
    for current, dirnames, filenames in os.walk(root, topdown=True):
        dirnames[:] = sort_once(
            (name for name in dirnames if not _is_ignored((name,), policy.ignore)),
            source="iter_candidate_paths.dirnames",
        )
        for filename in sort_once(filenames, source="iter_candidate_paths.filenames"):
            if Path(filename).suffix.lower() not in extensions:
                continue
            if _is_ignored((filename,), policy.ignore):
                continue
            out.append(Path(current) / filename)
    return sort_once(
        out,
        source="iter_candidate_paths.out",
        key=lambda path: path.relative_to(root).as_posix(),
    )


def collect_corpus(
    root: Path,
    policy: ScanPolicy | None = None,
    *,
    on_skip: Callable[[str, str], None] | None = None,
) -> SourceCorpus:
    """Read every candidate file under ``root`` and split source from tests.

    Unreadable or undecodable files are skipped; ``on_skip`` receives the
    relative path and the reason.
    """
    resolved = policy if policy is not None else ScanPolicy()
    test_patterns = compile_test_patterns(resolved.test_patterns)
    source: list[SourceFile] = []
    tests: list[SourceFile] = []
    for path in iter_candidate_paths(root, resolved):
        relative = path.relative_to(root).as_posix()
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            if on_skip is not None:
                on_skip(relative, str(exc))
            continue
        if is_test_path(relative, test_patterns):
            tests.append((relative, content))
        else:
            source.append((relative, content))
    return SourceCorpus(source=tuple(source), tests=tuple(tests))
