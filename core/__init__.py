"""Core components of the translation router.

This package contains the router, the adapter registry and adapters, and the
translation cache.
"""

from core.cache.manager import TranslationCacheManager
from core.trans.registry import AdapterRegistry
from core.trans.router import TranslationRouter

__all__: list[str] = [
    "AdapterRegistry",
    "TranslationCacheManager",
    "TranslationRouter",
]
