"""
Model catalog package.

- models: ModelInfo and its defensive projection from upstream items
- coordinator: cache-aside fetch/refresh/dedupe pipeline
"""

from .coordinator import CATALOG_CACHE_KEY, LAST_FETCH_KEY, CatalogCacheCoordinator, RefreshMode
from .models import ModelInfo

__all__ = [
    "CATALOG_CACHE_KEY",
    "LAST_FETCH_KEY",
    "CatalogCacheCoordinator",
    "ModelInfo",
    "RefreshMode",
]
