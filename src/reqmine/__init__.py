"""reqmine package root."""

from reqmine.exceptions import CatalogError, InterchangeError, NeverThrown, ReqmineError
from reqmine.invariants import never

__all__ = [
    "__version__",
    "CatalogError",
    "InterchangeError",
    "NeverThrown",
    "ReqmineError",
    "never",
]

__version__ = "0.1.0"
