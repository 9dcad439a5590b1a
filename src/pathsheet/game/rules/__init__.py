"""Static rule tables and the catalog registry built from them."""

from .loader import CatalogLoadError, CatalogValidationError, load_catalog
from .registry import RuleCatalog

__all__ = [
    "CatalogLoadError",
    "CatalogValidationError",
    "RuleCatalog",
    "load_catalog",
]
