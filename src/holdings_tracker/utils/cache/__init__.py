"""Caching system: storage backends, the holdings result cache and its manager."""

from .cache_manager import CacheFactory, CacheManager
from .file_cache import FileCache
from .interface import CacheInterface
from .memory_cache import MemoryCache
from .result_cache import ALL_CHAINS, ResultCache, all_chains_scope, make_cache_key

__all__ = [
    "ALL_CHAINS",
    "CacheFactory",
    "CacheInterface",
    "CacheManager",
    "FileCache",
    "MemoryCache",
    "ResultCache",
    "all_chains_scope",
    "make_cache_key",
]
