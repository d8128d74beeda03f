"""Result stores.

- AnalysisCache: in-memory cache of finished analyses for one process
- HistoryStore: per-user JSON history of past analyses
"""

from repograde.stores.cache import AnalysisCache, CacheEntry, generate_cache_key
from repograde.stores.history import HistoryItem, HistoryStore

__all__ = [
    "AnalysisCache",
    "CacheEntry",
    "HistoryItem",
    "HistoryStore",
    "generate_cache_key",
]
