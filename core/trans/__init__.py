"""Translation routing and adapter interfaces.

This package provides the router, the adapter registry, and the abstract adapter
interface with its exception hierarchy. Concrete adapters live in ``core.trans.adapters``.
"""

from core.trans.interface import (
    AdapterCapabilities,
    AdapterError,
    EmptyTextError,
    MissingTargetLanguageError,
    NoAdaptersAvailableError,
    NoAdaptersTriedError,
    NotSupportedLanguagesError,
    Outcome,
    TranslateExceptionError,
    TranslationAdapter,
    TranslationQuotaExceededError,
    TranslationRateLimitError,
    UnsupportedOperationError,
)
from core.trans.registry import AdapterRegistry
from core.trans.router import MAX_ATTEMPTS, TranslationRouter

__all__: list[str] = [
    "MAX_ATTEMPTS",
    "AdapterCapabilities",
    "AdapterError",
    "AdapterRegistry",
    "EmptyTextError",
    "MissingTargetLanguageError",
    "NoAdaptersAvailableError",
    "NoAdaptersTriedError",
    "NotSupportedLanguagesError",
    "Outcome",
    "TranslateExceptionError",
    "TranslationAdapter",
    "TranslationQuotaExceededError",
    "TranslationRateLimitError",
    "TranslationRouter",
    "UnsupportedOperationError",
]
