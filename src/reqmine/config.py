from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

DEFAULT_CONFIG_NAME = "reqmine.toml"

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]

DEFAULT_EXTENSIONS: tuple[str, ...] = (
    ".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs", ".py", ".go", ".java",
)
DEFAULT_IGNORE: tuple[str, ...] = (
    "node_modules", "dist", "build", ".git", "vendor", "__pycache__",
    ".venv", "venv", ".tox", "coverage",
)
DEFAULT_TEST_PATTERNS: tuple[str, ...] = (
    r"\.test\.",
    r"\.spec\.",
    r"_test\.",
    r"(?:^|/)test_[^/]*$",
    r"(?:^|/)__tests__/",
    r"(?:^|/)tests?/",
)
REPORT_FORMATS: tuple[str, ...] = ("text", "json", "yaml", "draft")


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def _section(data: TomlTable, name: str) -> TomlTable:
    section = data.get(name, {})
    return section if isinstance(section, dict) else {}


def scan_defaults(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    return _section(load_config(root=root, config_path=config_path), "scan")


def scoring_defaults(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    return _section(load_config(root=root, config_path=config_path), "scoring")


def consistency_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    return _section(load_config(root=root, config_path=config_path), "consistency")


def catalog_defaults(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    return _section(load_config(root=root, config_path=config_path), "catalog")


def report_defaults(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    return _section(load_config(root=root, config_path=config_path), "report")


def _normalize_name_list(value: TomlValue) -> list[str]:
    items: list[str] = []
    if value is None:
        return items
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",") if part.strip()]
    elif isinstance(value, (list, tuple, set)):
        for item in value:
            if isinstance(item, str):
                items.extend([part.strip() for part in item.split(",") if part.strip()])
    return [item for item in items if item]


def _as_int(value: TomlValue, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _as_float(value: TomlValue, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return default
    return default


@dataclass(frozen=True)
class ScanPolicy:
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    ignore: tuple[str, ...] = DEFAULT_IGNORE
    test_patterns: tuple[str, ...] = DEFAULT_TEST_PATTERNS


def scan_policy(section: TomlTable | None) -> ScanPolicy:
    if not section:
        return ScanPolicy()
    extensions = _normalize_name_list(section.get("extensions"))
    ignore = _normalize_name_list(section.get("ignore"))
    raw_patterns = section.get("test_patterns")
    test_patterns = (
        [item for item in raw_patterns if isinstance(item, str) and item]
        if isinstance(raw_patterns, list)
        else []
    )
    return ScanPolicy(
        extensions=tuple(
            ext if ext.startswith(".") else f".{ext}" for ext in extensions
        ) or DEFAULT_EXTENSIONS,
        ignore=tuple(ignore) or DEFAULT_IGNORE,
        test_patterns=tuple(test_patterns) or DEFAULT_TEST_PATTERNS,
    )


@dataclass(frozen=True)
class ConsistencyPolicy:
    promote_once: int = 3
    promote_twice: int = 5


def consistency_policy(section: TomlTable | None) -> ConsistencyPolicy:
    if not section:
        return ConsistencyPolicy()
    defaults = ConsistencyPolicy()
    return ConsistencyPolicy(
        promote_once=_as_int(section.get("promote_once"), defaults.promote_once),
        promote_twice=_as_int(section.get("promote_twice"), defaults.promote_twice),
    )


@dataclass(frozen=True)
class ScoringPolicy:
    base_low: float = 2.0
    base_medium: float = 5.0
    base_high: float = 8.0
    corroboration_step: float = 1.0
    corroboration_cap: float = 2.0
    recurring_threshold: int = 3
    high_occurrence_threshold: int = 5
    occurrence_step: float = 1.0
    confident_threshold: float = 7.0
    probable_threshold: float = 4.0
    ceiling: float = 10.0


def scoring_policy(section: TomlTable | None) -> ScoringPolicy:
    if not section:
        return ScoringPolicy()
    defaults = ScoringPolicy()
    values: dict[str, float | int] = {}
    for item in fields(ScoringPolicy):
        default_value = getattr(defaults, item.name)
        raw = section.get(item.name)
        if isinstance(default_value, int) and not isinstance(default_value, bool):
            values[item.name] = _as_int(raw, default_value)
        else:
            values[item.name] = _as_float(raw, float(default_value))
    return ScoringPolicy(**values)


def report_format(section: TomlTable | None, default: str = "text") -> str:
    if not section:
        return default
    value = str(section.get("format", default) or default).strip().lower()
    return value if value in REPORT_FORMATS else default


def merge_payload(payload: TomlTable, defaults: TomlTable) -> TomlTable:
    merged = dict(defaults)
    for key, value in payload.items():
        if value is None:
            continue
        merged[key] = value
    return merged
