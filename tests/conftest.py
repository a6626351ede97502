from __future__ import annotations

import sys
import textwrap
from pathlib import Path
from typing import Callable

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))


import pytest

from reqmine.models import Category, Confidence, ExtractorKind, Finding, Severity


@pytest.fixture
def env_scope(monkeypatch: pytest.MonkeyPatch) -> Callable[[dict[str, str | None]], None]:
    def _apply(values: dict[str, str | None]) -> None:
        for key, value in values.items():
            if value is None:
                monkeypatch.delenv(key, raising=False)
            else:
                monkeypatch.setenv(key, value)

    return _apply


@pytest.fixture
def write_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Write ``{relative path: dedented text}`` under ``tmp_path``."""

    def _write(files: dict[str, str]) -> Path:
        for relative, content in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content), encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture
def make_finding() -> Callable[..., Finding]:
    def _make(**overrides: object) -> Finding:
        values: dict[str, object] = {
            "kind": ExtractorKind.PATTERN,
            "name": "auth_middleware",
            "category": Category.AUTH,
            "confidence": Confidence.HIGH,
            "severity": Severity.MUST,
            "implication": "Route requires authentication",
            "path": "src/app.js",
            "line": 1,
        }
        values.update(overrides)
        return Finding(**values)  # type: ignore[arg-type]

    return _make
