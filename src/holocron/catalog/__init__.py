"""Film catalog: normalization, remote client, store, and selectors."""

from .client import FilmsClient
from .models import CatalogStats, LifecycleStatus, MovieRecord, SortKey
from .normalizer import format_release_date, normalize, normalize_many
from .state import CatalogState
from .store import CatalogService, CatalogStore

__all__ = [
    "CatalogService",
    "CatalogState",
    "CatalogStats",
    "CatalogStore",
    "FilmsClient",
    "LifecycleStatus",
    "MovieRecord",
    "SortKey",
    "format_release_date",
    "normalize",
    "normalize_many",
]
