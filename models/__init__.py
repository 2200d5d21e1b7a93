"""Data models for the translation router.

This package contains dataclass definitions for configuration, translation requests and
results, and cache entries.
"""

from __future__ import annotations

from models.cache_models import CacheEntry, CacheStatistics
from models.config_models import AdapterSettings, Config
from models.translation_models import AdapterDescriptor, DetectionResult, SupportedLanguage, TranslationRequest

__all__: list[str] = [
    "AdapterDescriptor",
    "AdapterSettings",
    "CacheEntry",
    "CacheStatistics",
    "Config",
    "DetectionResult",
    "SupportedLanguage",
    "TranslationRequest",
]
