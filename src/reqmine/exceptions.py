"""Exception hierarchy for reqmine."""

from __future__ import annotations


class ReqmineError(Exception):
    """Base class for errors surfaced to reqmine callers."""


class CatalogError(ReqmineError):
    """A rule catalogue entry is malformed.

    Raised while catalogues are built (from defaults or from ``reqmine.toml``),
    never while content is being scanned.
    """

    def __init__(self, message: str, *, entry: str = "") -> None:
        super().__init__(message if not entry else f"{entry}: {message}")
        self.entry = entry


class InterchangeError(ReqmineError):
    """A machine-readable triage payload could not be decoded."""


class NeverThrown(RuntimeError):
    """Sentinel exception for code paths that must be unreachable.

    Raised by :func:`reqmine.invariants.never`. Reaching it means an internal
    invariant (for example the tier partition) has been broken.
    """

    def __init__(self, message: str, *, env: dict[str, object] | None = None):
        super().__init__(message)
        self.env = dict(env or {})
