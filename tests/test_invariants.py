from __future__ import annotations

import pytest

from reqmine import invariants
from reqmine.exceptions import CatalogError, NeverThrown, ReqmineError


def test_never_raises_never_thrown() -> None:
    with pytest.raises(NeverThrown):
        invariants.never("boom", flag=True)


def test_never_attaches_payload() -> None:
    with pytest.raises(NeverThrown) as exc_info:
        invariants.never("tier partition lost groups", groups=3, placed=2)
    assert str(exc_info.value) == "tier partition lost groups"
    assert exc_info.value.env == {"groups": 3, "placed": 2}


def test_never_uses_default_reason() -> None:
    with pytest.raises(NeverThrown, match="never\\(\\) invariant reached"):
        invariants.never()


def test_never_thrown_is_not_a_reqmine_error() -> None:
    assert not issubclass(NeverThrown, ReqmineError)
    assert issubclass(CatalogError, ReqmineError)


def test_catalog_error_prefixes_entry() -> None:
    error = CatalogError("missing pattern", entry="catalog.signals[0]")
    assert str(error) == "catalog.signals[0]: missing pattern"
    assert error.entry == "catalog.signals[0]"
