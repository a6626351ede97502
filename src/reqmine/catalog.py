"""Immutable rule catalogues consumed by the extractors.

Every table the extractors match against lives here as frozen data. An
extractor receives its catalogue at construction time, so swapping or
extending a catalogue (for example from ``reqmine.toml``) never touches
extractor logic.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Mapping, Sequence

from reqmine.config import TomlTable, TomlValue
from reqmine.exceptions import CatalogError
from reqmine.models import Category, Confidence, Severity


_SEVERITY_BY_CONFIDENCE: Mapping[Confidence, Severity] = {
    Confidence.HIGH: Severity.MUST,
    Confidence.MEDIUM: Severity.SHOULD,
    Confidence.LOW: Severity.MAYBE,
}


def _compile(pattern: str, *, flags: int = 0, entry: str = "") -> re.Pattern[str]:
    try:
        return re.compile(pattern, flags)
    except re.error as exc:
        raise CatalogError(f"invalid pattern {pattern!r}: {exc}", entry=entry) from exc


def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    body = r"\s+".join(re.escape(part) for part in keyword.split())
    return re.compile(rf"\b{body}\b", re.IGNORECASE)


def _enum_value(enum_type, raw: object, *, entry: str, label: str):
    text = str(raw or "").strip()
    for candidate in enum_type:
        if candidate.value == text or candidate.value.lower() == text.lower():
            return candidate
    allowed = ", ".join(candidate.value for candidate in enum_type)
    raise CatalogError(f"unknown {label} {text!r} (expected one of {allowed})", entry=entry)


@dataclass(frozen=True)
class SignalDefinition:
    name: str
    pattern: re.Pattern[str]
    category: Category
    confidence: Confidence
    implication: str
    severity: Severity
    suspicious: bool = False
    min_entropy: float | None = None

    @classmethod
    def build(
        cls,
        *,
        name: str,
        pattern: str,
        category: Category | str,
        confidence: Confidence | str,
        implication: str,
        severity: Severity | str | None = None,
        suspicious: bool = False,
        flags: int = 0,
        min_entropy: float | None = None,
    ) -> SignalDefinition:
        if not name.strip():
            raise CatalogError("signal definition requires a name")
        resolved_category = _enum_value(Category, category, entry=name, label="category")
        resolved_confidence = _enum_value(
            Confidence, confidence, entry=name, label="confidence"
        )
        if severity is None:
            resolved_severity = (
                Severity.DEBT
                if suspicious
                else _SEVERITY_BY_CONFIDENCE[resolved_confidence]
            )
        else:
            resolved_severity = _enum_value(Severity, severity, entry=name, label="severity")
        if not implication.strip():
            raise CatalogError("signal definition requires an implication", entry=name)
        return cls(
            name=name.strip(),
            pattern=_compile(pattern, flags=flags, entry=name),
            category=resolved_category,
            confidence=resolved_confidence,
            implication=implication.strip(),
            severity=resolved_severity,
            suspicious=suspicious,
            min_entropy=min_entropy,
        )


def _signal(
    name: str,
    pattern: str,
    category: Category,
    confidence: Confidence,
    implication: str,
    *,
    flags: int = 0,
    min_entropy: float | None = None,
) -> SignalDefinition:
    return SignalDefinition.build(
        name=name,
        pattern=pattern,
        category=category,
        confidence=confidence,
        implication=implication,
        flags=flags,
        min_entropy=min_entropy,
    )


def _debt(
    name: str,
    pattern: str,
    category: Category,
    confidence: Confidence,
    implication: str,
    *,
    flags: int = 0,
) -> SignalDefinition:
    return SignalDefinition.build(
        name=name,
        pattern=pattern,
        category=category,
        confidence=confidence,
        implication=implication,
        suspicious=True,
        flags=flags,
    )


_HIGH = Confidence.HIGH
_MEDIUM = Confidence.MEDIUM
_LOW = Confidence.LOW

DEFAULT_SIGNALS: tuple[SignalDefinition, ...] = (
    # auth
    _signal(
        "auth_check",
        r"if\s*\(\s*!\s*(?:is)?(?:auth|login|session|token|user)"
        r"|if\s+not\s+(?:\w+\.)*(?:is_)?(?:auth|logged_in|login|session|token|user)",
        Category.AUTH,
        _HIGH,
        "Authentication required before this action",
        flags=re.IGNORECASE,
    ),
    _signal(
        "auth_middleware",
        r"\b(?:authMiddleware|requireAuth|ensureAuth|checkAuth|isAuthenticated"
        r"|login_required|require_auth|is_authenticated)\b",
        Category.AUTH,
        _HIGH,
        "Route requires authentication",
    ),
    _signal(
        "permission_check",
        r"\b(?:hasPermission|canAccess|isAdmin|checkRole|authorize"
        r"|has_permission|permission_required|is_admin|check_role)\b",
        Category.AUTH,
        _HIGH,
        "Permission/role check required",
    ),
    # security
    _signal(
        "input_validation",
        r"validate|sanitize|sanitise|escape|htmlEncode|xss",
        Category.SEC,
        _HIGH,
        "Input must be validated/sanitized",
        flags=re.IGNORECASE,
    ),
    _signal(
        "sql_prepared",
        r"(?:\$\d|\?|%s|:\w+).*\b(?:query|execute|prepare)\b",
        Category.SEC,
        _HIGH,
        "SQL queries must use prepared statements",
        flags=re.IGNORECASE,
    ),
    _signal(
        "password_hash",
        r"\b(?:bcrypt|argon2|scrypt|pbkdf2)\.(?:hash|compare|hashpw|checkpw)\b"
        r"|\bpbkdf2_hmac\s*\(",
        Category.SEC,
        _HIGH,
        "Passwords must be hashed",
    ),
    _signal(
        "https_only",
        r"(?:https|tls|ssl).*(?:required|only|enforce)",
        Category.SEC,
        _MEDIUM,
        "HTTPS required",
        flags=re.IGNORECASE,
    ),
    _signal(
        "rate_limit",
        r"\b(?:rateLimit|throttle|rateLimiter|rate_limit|RateLimiter)\b",
        Category.SEC,
        _HIGH,
        "Rate limiting required",
    ),
    _signal(
        "hardcoded_secret",
        r"\b\w*(?:password|passwd|pwd|secret|api_?key|private_?key|access_?key|token)\w*"
        r"['\"]?\s*[=:]\s*(?P<q>['\"])(?P<value>[^'\"\s]{4,})(?P=q)",
        Category.SEC,
        _HIGH,
        "Possible hardcoded secret",
        flags=re.IGNORECASE,
        min_entropy=2.5,
    ),
    # data integrity
    _signal(
        "null_check",
        r"if\s*\(\s*(?:![\w.]+|[\w.]+\s*(?:===?|!==?)\s*(?:null|undefined))"
        r"|if\s+[\w.]+\s+is\s+(?:not\s+)?None\b",
        Category.DATA,
        _LOW,
        "Null check (might be defensive or required)",
    ),
    _signal(
        "type_check",
        r"typeof\s+[\w.]+\s*(?:===?|!==?)|\bisinstance\s*\(",
        Category.DATA,
        _LOW,
        "Type validation",
    ),
    _signal(
        "schema_validation",
        r"\b(?:Joi|yup|zod|ajv)\.(?:validate|parse|object)\b"
        r"|\.model_validate(?:_json)?\s*\(|\bjsonschema\.validate\s*\(",
        Category.DATA,
        _HIGH,
        "Schema validation required",
    ),
    _signal(
        "transaction",
        r"(?i:\btransaction)|\b(?:BEGIN|COMMIT|ROLLBACK)\b",
        Category.DATA,
        _MEDIUM,
        "Database transaction required",
    ),
    # error handling
    _signal(
        "error_throw",
        r"\bthrow\s+new\s+\w*Error\b|\braise\s+\w*(?:Error|Exception)\b",
        Category.ERROR,
        _MEDIUM,
        "Error condition must be handled",
    ),
    _signal(
        "try_catch",
        r"\btry\s*\{[\s\S]*?\}\s*catch\b|^[ \t]*try\s*:[ \t]*$",
        Category.ERROR,
        _LOW,
        "Error handling present",
        flags=re.MULTILINE,
    ),
    # api
    _signal(
        "cors",
        r"\bcors\b|Access-Control-Allow|\bCORSMiddleware\b",
        Category.API,
        _MEDIUM,
        "CORS configuration required",
    ),
    _signal(
        "api_version",
        r"/v\d+/",
        Category.API,
        _MEDIUM,
        "API versioning in use",
    ),
    # storage
    _signal(
        "localstorage",
        r"\blocalStorage\.(?:get|set|remove)Item\b",
        Category.STORAGE,
        _MEDIUM,
        "Using localStorage (check if appropriate)",
    ),
    _signal(
        "session_storage",
        r"\bsessionStorage\.(?:get|set|remove)Item\b",
        Category.STORAGE,
        _MEDIUM,
        "Using sessionStorage",
    ),
    _signal(
        "cookie_httponly",
        r"\bhttpOnly\s*:\s*true\b|\bhttponly\s*=\s*True\b",
        Category.SEC,
        _HIGH,
        "Cookies must be httpOnly",
        flags=re.IGNORECASE,
    ),
    _signal(
        "cookie_secure",
        r"\bsecure\s*:\s*true\b|\bsecure\s*=\s*True\b",
        Category.SEC,
        _HIGH,
        "Cookies must be secure",
    ),
    # timing / ttl
    _signal(
        "ttl_explicit",
        r"\b(?:ttl|expiresIn|expires_in|maxAge|max_age|timeout)\s*[=:]\s*\d+",
        Category.CONFIG,
        _MEDIUM,
        "TTL/expiry time configured",
        flags=re.IGNORECASE,
    ),
    _signal(
        "magic_number_time",
        r"\b(?:86400|3600|604800|2592000)\b\s*(?:\*|$)",
        Category.CONFIG,
        _LOW,
        "Magic number (time constant?) - 86400=1day, 3600=1hr",
        flags=re.MULTILINE,
    ),
)

DEFAULT_DEBT_MARKERS: tuple[SignalDefinition, ...] = (
    _debt(
        "todo_fixme",
        r"\b(?:TODO|FIXME|HACK|XXX|BUG)\b[\s:(]",
        Category.DEBT,
        _LOW,
        "Tech debt marker",
        flags=re.IGNORECASE,
    ),
    _debt(
        "commented_code",
        r"//\s*(?:return|if|function|const|let|var)\s+\w+",
        Category.DEBT,
        _LOW,
        "Commented-out code (dead code?)",
    ),
    _debt(
        "eval_usage",
        r"\beval\s*\(",
        Category.SEC,
        _HIGH,
        "eval() usage - security risk",
    ),
    _debt(
        "console_log",
        r"\bconsole\.(?:log|debug|info)\b",
        Category.DEBT,
        _LOW,
        "Console logging (leftover debugging?)",
    ),
    _debt(
        "disable_lint",
        r"eslint-disable|#\s*noqa\b|#\s*type:\s*ignore\b|#\s*pylint:\s*disable",
        Category.DEBT,
        _LOW,
        "Lint rules disabled (intentional or hack?)",
    ),
    _debt(
        "any_type",
        r":\s*any\b|(?::|->)\s*(?:typing\.)?Any\b",
        Category.DEBT,
        _LOW,
        "Loose any type (loss of type safety)",
    ),
    _debt(
        "empty_catch",
        r"\bcatch\s*(?:\([^)]*\))?\s*\{\s*\}|\bexcept\b[^:\n]*:\s*\n\s*pass\b",
        Category.ERROR,
        _MEDIUM,
        "Empty catch block (swallowing errors)",
    ),
)


@dataclass(frozen=True)
class PatternCatalog:
    signals: tuple[SignalDefinition, ...] = DEFAULT_SIGNALS
    debt_markers: tuple[SignalDefinition, ...] = DEFAULT_DEBT_MARKERS

    def definitions(self) -> tuple[SignalDefinition, ...]:
        return self.signals + self.debt_markers

    def extended(
        self,
        *,
        signals: Sequence[SignalDefinition] = (),
        debt_markers: Sequence[SignalDefinition] = (),
    ) -> PatternCatalog:
        return replace(
            self,
            signals=self.signals + tuple(signals),
            debt_markers=self.debt_markers + tuple(debt_markers),
        )


@dataclass(frozen=True)
class TitleShape:
    name: str
    pattern: re.Pattern[str]
    humanize: bool = False


@dataclass(frozen=True)
class TestKeywordCatalog:
    __test__ = False

    must_keywords: tuple[str, ...]
    should_keywords: tuple[str, ...]
    error_path: re.Pattern[str]
    category_rules: tuple[tuple[re.Pattern[str], Category], ...]
    title_shapes: tuple[TitleShape, ...]
    mock_shapes: tuple[re.Pattern[str], ...]
    implication_rewrites: tuple[tuple[re.Pattern[str], str], ...]
    keyword_patterns: Mapping[str, re.Pattern[str]] = field(
        default_factory=dict, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        compiled = {
            keyword: _keyword_pattern(keyword)
            for keyword in (*self.must_keywords, *self.should_keywords)
        }
        object.__setattr__(self, "keyword_patterns", compiled)

    def matched(self, keywords: Sequence[str], text: str) -> tuple[str, ...]:
        return tuple(
            keyword for keyword in keywords if self.keyword_patterns[keyword].search(text)
        )


_QUOTED_TITLE = r"(?P<q>['\"`])(?P<title>.+?)(?P=q)"

DEFAULT_TEST_KEYWORDS = TestKeywordCatalog(
    must_keywords=(
        "must",
        "should not",
        "cannot",
        "fails",
        "throws",
        "rejects",
        "unauthorized",
        "forbidden",
        "invalid",
        "required",
        "mandatory",
    ),
    should_keywords=("should", "can", "may", "optionally", "preferably", "ideally"),
    error_path=re.compile(
        r"error|throw|reject|invalid|unauthori[sz]ed|\bfail", re.IGNORECASE
    ),
    category_rules=(
        (re.compile(r"auth|login|logout|session|token|permission|\brole", re.I), Category.AUTH),
        (re.compile(r"valid|input|saniti[sz]|escap|xss|\bsql|inject", re.I), Category.SEC),
        (re.compile(r"error|fail|throw|reject|exception", re.I), Category.ERROR),
        (re.compile(r"\bapi\b|endpoint|\broute|request|response", re.I), Category.API),
        (re.compile(r"database|\bdb\b|query|\bsave|\bstore|persist", re.I), Category.DATA),
        (re.compile(r"\bui\b|render|display|\bshow|component", re.I), Category.UI),
    ),
    title_shapes=(
        TitleShape(
            "test_case",
            re.compile(
                r"\b(?:it|test)(?:\.(?:only|skip|todo|concurrent))?\s*\(\s*" + _QUOTED_TITLE
            ),
        ),
        TitleShape(
            "test_suite",
            re.compile(r"\bdescribe(?:\.(?:only|skip))?\s*\(\s*" + _QUOTED_TITLE),
        ),
        TitleShape(
            "error_case",
            re.compile(r"\.toThrow(?:Error)?\s*\(\s*" + _QUOTED_TITLE),
        ),
        TitleShape(
            "error_case",
            re.compile(
                r"\bpytest\.raises\s*\(\s*[\w.]+\s*,\s*match\s*=\s*r?(?P<q>['\"])(?P<title>.+?)(?P=q)"
            ),
        ),
        TitleShape(
            "test_case",
            re.compile(r"^[ \t]*(?:async[ \t]+)?def[ \t]+test_(?P<title>\w+)\s*\(", re.M),
            humanize=True,
        ),
        TitleShape(
            "test_suite",
            re.compile(r"^[ \t]*class[ \t]+Test(?P<title>[A-Z]\w*)", re.M),
            humanize=True,
        ),
    ),
    mock_shapes=(
        re.compile(r"\b(?:jest|vi)\.mock\s*\(\s*(?P<q>['\"`])(?P<target>[^'\"`]+)(?P=q)"),
        re.compile(r"\b(?:mock\.)?patch\s*\(\s*(?P<q>['\"])(?P<target>[\w.]+)(?P=q)"),
        re.compile(r"\bmonkeypatch\.setattr\s*\(\s*(?P<q>['\"])(?P<target>[\w.]+)(?P=q)"),
    ),
    implication_rewrites=(
        (re.compile(r"^it\s+", re.I), ""),
        (re.compile(r"^should\s+not\s+", re.I), "System must not "),
        (re.compile(r"^should\s+", re.I), "System should "),
        (re.compile(r"^can\s+", re.I), "System can "),
        (re.compile(r"^returns?\s+", re.I), "Must return "),
        (re.compile(r"^throws?\s+", re.I), "Must throw "),
    ),
)


@dataclass(frozen=True)
class MarkerRule:
    name: str
    pattern: re.Pattern[str]
    severity: Severity
    confidence: Confidence


@dataclass(frozen=True)
class DocTagRule:
    tag: str
    pattern: re.Pattern[str]
    severity: Severity
    implication: str


@dataclass(frozen=True)
class CommentCatalog:
    markers: tuple[MarkerRule, ...]
    doc_tags: tuple[DocTagRule, ...]
    constraint_hints: tuple[re.Pattern[str], ...]
    category_rules: tuple[tuple[re.Pattern[str], Category], ...]
    leading_marker: re.Pattern[str]
    constant_binding: re.Pattern[str]
    external_config: tuple[re.Pattern[str], ...]
    hash_suffixes: frozenset[str]
    c_suffixes: frozenset[str]
    max_excerpt: int = 200


def _marker(name: str, pattern: str, severity: Severity, confidence: Confidence) -> MarkerRule:
    return MarkerRule(name, re.compile(pattern, re.IGNORECASE), severity, confidence)


def _tag(tag: str, pattern: str, severity: Severity, implication: str) -> DocTagRule:
    return DocTagRule(tag, re.compile(pattern, re.MULTILINE), severity, implication)


DEFAULT_COMMENT_RULES = CommentCatalog(
    markers=(
        _marker(
            "important",
            r"^(?:IMPORTANT|CRITICAL|WARNING|SECURITY|NOTE)\b[\s:]",
            Severity.MUST,
            _HIGH,
        ),
        _marker("debt", r"^(?:TODO|FIXME|HACK|XXX)\b(?:[\s:(]|$)", Severity.DEBT, _MEDIUM),
        _marker("defect", r"^(?:BUG|BROKEN|ISSUE)\b[\s:]", Severity.MUST, _HIGH),
        _marker("must", r"\bmust\s+(?:be|have|use|not)\b", Severity.MUST, _MEDIUM),
        _marker("should", r"\bshould\s+(?:be|have|use|not)\b", Severity.SHOULD, _LOW),
        _marker("never", r"\bnever\s+", Severity.MUST, _MEDIUM),
        _marker("always", r"\balways\s+", Severity.MUST, _MEDIUM),
        _marker("required", r"\brequired\b", Severity.MUST, _MEDIUM),
        _marker(
            "dont",
            r"\bdo(?:n'?t|\s+not)\s+(?:use|call|remove|change|modify)\b",
            Severity.MUST,
            _MEDIUM,
        ),
    ),
    doc_tags=(
        _tag("@throws", r"@throws\b|:raises?\b|^Raises:", Severity.MUST,
             "Throws error under certain conditions"),
        _tag("@deprecated", r"@deprecated\b|\.\. deprecated::", Severity.SHOULD,
             "Should not use, marked for removal"),
        _tag("@requires", r"@requires\b", Severity.MUST, "Has dependency requirement"),
        _tag("@security", r"@security\b", Severity.MUST, "Security consideration"),
        _tag("@private", r"@private\b", Severity.SHOULD, "Not intended for external use"),
        _tag("@internal", r"@internal\b", Severity.SHOULD, "Internal API, may change"),
        _tag("@readonly", r"@readonly\b", Severity.MUST, "Must not be modified"),
        _tag("@override", r"@override\b", Severity.INFO, "Overrides parent implementation"),
    ),
    constraint_hints=(
        re.compile(r"\bbecause\s+", re.I),
        re.compile(r"\bthis\s+(?:is|ensures|prevents|requires)\b", re.I),
        re.compile(r"\botherwise\b", re.I),
        re.compile(r"\bto\s+(?:prevent|ensure|avoid|maintain)\b", re.I),
        re.compile(r"\d+\s*(?:ms|seconds?|secs?|minutes?|mins?|hours?|days?|bytes?|kb|mb|gb)\b", re.I),
        re.compile(r"\b(?:max(?:imum)?|min(?:imum)?|limit)", re.I),
    ),
    category_rules=(
        (re.compile(r"security|auth|permission|access|csrf|xss|injection", re.I), Category.SEC),
        (re.compile(r"performance|optimi[sz]|cache|speed|slow|fast", re.I), Category.PERF),
        (re.compile(r"backward|compat|legacy|deprecat|migration", re.I), Category.COMPAT),
        (re.compile(r"\bbug|\bfix|workaround|hack|\bissue", re.I), Category.DEBT),
        (re.compile(r"\bapi\b|endpoint|request|response|http", re.I), Category.API),
        (re.compile(r"database|\bdb\b|query|\bsql", re.I), Category.DATA),
        (re.compile(r"config|\benv\b|environment|setting|option", re.I), Category.CONFIG),
    ),
    leading_marker=re.compile(
        r"^(?:IMPORTANT|CRITICAL|WARNING|SECURITY|NOTE|TODO|FIXME|HACK|XXX|BUG|BROKEN|ISSUE)\b[\s:]*",
        re.IGNORECASE,
    ),
    constant_binding=re.compile(
        r"^[ \t]*(?:[\w<>\[\]]+[ \t]+)*?"
        r"(?P<name>(?:MAX|MIN|TIMEOUT|LIMIT|DEFAULT)_\w+)"
        r"[ \t]*(?::[ \t]*[\w\[\], .]+?[ \t]*)?=[ \t]*"
        r"(?P<value>-?\d[\d_]*(?:\.\d+)?|\"[^\"\n]*\"|'[^'\n]*'|true|false|True|False)",
        re.MULTILINE,
    ),
    external_config=(
        re.compile(r"\bprocess\.env\.(?P<name>\w+)"),
        re.compile(r"\bprocess\.env\[\s*['\"`](?P<name>\w+)['\"`]\s*\]"),
        re.compile(r"\bimport\.meta\.env\.(?P<name>\w+)"),
        re.compile(r"\bos\.environ\[\s*['\"](?P<name>\w+)['\"]\s*\]"),
        re.compile(r"\bos\.environ\.get\(\s*['\"](?P<name>\w+)['\"]"),
        re.compile(r"\bos\.getenv\(\s*['\"](?P<name>\w+)['\"]"),
        re.compile(r"\bSystem\.getenv\(\s*\"(?P<name>\w+)\""),
        re.compile(r"\bos\.Getenv\(\s*\"(?P<name>\w+)\""),
    ),
    hash_suffixes=frozenset({".py", ".pyi", ".sh", ".bash", ".rb", ".yaml", ".yml", ".toml"}),
    c_suffixes=frozenset(
        {
            ".js", ".mjs", ".cjs", ".jsx", ".ts", ".tsx", ".go", ".java",
            ".c", ".h", ".cc", ".cpp", ".hpp", ".cs", ".rs", ".swift", ".kt",
        }
    ),
)


@dataclass(frozen=True)
class RuleCatalogs:
    patterns: PatternCatalog = PatternCatalog()
    tests: TestKeywordCatalog = DEFAULT_TEST_KEYWORDS
    comments: CommentCatalog = DEFAULT_COMMENT_RULES


def default_catalogs() -> RuleCatalogs:
    return RuleCatalogs()


def _definitions_from_table(
    raw: TomlValue,
    *,
    suspicious: bool,
    label: str,
) -> list[SignalDefinition]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise CatalogError(f"catalog.{label} must be an array of tables")
    definitions: list[SignalDefinition] = []
    for index, item in enumerate(raw):
        entry = f"catalog.{label}[{index}]"
        if not isinstance(item, dict):
            raise CatalogError("expected a table", entry=entry)
        name = str(item.get("name", "") or "")
        pattern = item.get("pattern")
        if not isinstance(pattern, str) or not pattern:
            raise CatalogError("missing pattern", entry=name or entry)
        min_entropy = item.get("min_entropy")
        definitions.append(
            SignalDefinition.build(
                name=name,
                pattern=pattern,
                category=str(item.get("category", "GENERAL")),
                confidence=str(item.get("confidence", "low")),
                implication=str(item.get("implication", "") or ""),
                severity=item.get("severity") if item.get("severity") else None,
                suspicious=suspicious,
                flags=re.IGNORECASE if item.get("ignore_case") else 0,
                min_entropy=float(min_entropy) if min_entropy is not None else None,
            )
        )
    return definitions


def catalogs_from_config(
    section: TomlTable | None,
    *,
    base: RuleCatalogs | None = None,
) -> RuleCatalogs:
    """Extend ``base`` (the built-in catalogues by default) from ``[catalog]``."""
    catalogs = base if base is not None else default_catalogs()
    if not section:
        return catalogs
    signals = _definitions_from_table(section.get("signals"), suspicious=False, label="signals")
    debt = _definitions_from_table(section.get("debt"), suspicious=True, label="debt")
    if not signals and not debt:
        return catalogs
    return replace(
        catalogs,
        patterns=catalogs.patterns.extended(signals=signals, debt_markers=debt),
    )
