"""Invariant markers for reqmine."""

from __future__ import annotations

from typing import NoReturn

from reqmine.exceptions import NeverThrown


def never(reason: str = "", **env: object) -> NoReturn:
    """Mark a code path as intentionally unreachable.

    The keyword payload is attached to the raised exception for diagnostics;
    it is not evaluated.
    """
    normalized_reason = str(reason or "never() invariant reached").strip()
    raise NeverThrown(
        normalized_reason,
        env={str(key): value for key, value in env.items()},
    )

