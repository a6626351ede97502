"""Deterministic ordering for every list reqmine emits.

Report output must be byte-identical across runs, so orderings that are not
fixed by the caller go through :func:`sort_once`.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, TypeVar

T = TypeVar("T")


def sort_once(
    values: Iterable[T],
    *,
    source: str,
    key: Callable[[T], Any] | None = None,
    reverse: bool = False,
) -> list[T]:
    """Sort ``values`` once; ``source`` names the call site for diagnostics.

    Incomparable keys surface as ``TypeError`` annotated with ``source``.
    """
    try:
        return sorted(values, key=key, reverse=reverse)
    except TypeError as exc:
        exc.add_note(f"sort_once source: {source}")
        raise
