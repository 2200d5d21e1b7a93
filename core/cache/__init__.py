"""Translation cache package.

Provides the lookaside cache facade and its storage backends.
"""

from __future__ import annotations

from core.cache.backends import CacheBackend, CacheBackendError, MemoryCacheBackend, SQLiteCacheBackend
from core.cache.manager import TranslationCacheManager

__all__: list[str] = [
    "CacheBackend",
    "CacheBackendError",
    "MemoryCacheBackend",
    "SQLiteCacheBackend",
    "TranslationCacheManager",
]
