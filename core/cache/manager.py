"""Translation cache manager.

Lookaside cache facade used by the router. Builds namespaced keys, converts the configured
TTL from days to milliseconds, and keeps backend failures from reaching callers: a failing
read is a miss and a failing write is logged and dropped.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar, Final

from core.cache.backends import CacheBackend, CacheBackendError, MemoryCacheBackend, SQLiteCacheBackend
from models.cache_models import CacheEntry, CacheStatistics
from utils.lang_utils import LangUtils
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Awaitable, Callable

    from models.config_models import Config

__all__: list[str] = ["TranslationCacheManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

MS_PER_DAY: Final[int] = 86_400_000


class TranslationCacheManager:
    """Cache facade for translations, language detections and the supported-languages view.

    Keys:
        - translation: ``translation::t::{source or 'auto'}::{target}::{hash}``
        - detection: ``translation::lang::{hash}``
        - supported languages: ``translation::supported_languages``

    Attributes:
        KEY_PREFIX (ClassVar[str]): Namespace shared by every key.
        SUPPORTED_LANGUAGES_KEY (ClassVar[str]): Key of the aggregated supported-languages view.
    """

    KEY_PREFIX: ClassVar[str] = "translation"
    SUPPORTED_LANGUAGES_KEY: ClassVar[str] = "translation::supported_languages"

    def __init__(self, config: Config, backend: CacheBackend | None = None) -> None:
        """Initialize the cache manager.

        Args:
            config (Config): Application configuration.
            backend (CacheBackend | None): Storage backend. Chosen from ``CACHE.BACKEND`` when omitted.
        """
        self.config: Config = config
        self._backend: CacheBackend = backend if backend is not None else self._create_backend(config)
        self._is_initialized: bool = False
        logger.debug("TranslationCacheManager instance created (backend: %s)", type(self._backend).__name__)

    @staticmethod
    def _create_backend(config: Config) -> CacheBackend:
        if config.CACHE.BACKEND == "sqlite":
            return SQLiteCacheBackend(config.CACHE.PATH)
        return MemoryCacheBackend()

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    @property
    def ttl_ms(self) -> int:
        """Configured time-to-live in milliseconds."""
        return self.config.TRANSLATION.CACHE_TTL_DAYS * MS_PER_DAY

    @classmethod
    def translation_key(cls, src_lang: str | None, tgt_lang: str, content_hash: str) -> str:
        return f"{cls.KEY_PREFIX}::t::{LangUtils.source_or_auto(src_lang)}::{tgt_lang}::{content_hash}"

    @classmethod
    def detection_key(cls, content_hash: str) -> str:
        return f"{cls.KEY_PREFIX}::lang::{content_hash}"

    async def component_load(self) -> None:
        """Open the backend."""
        logger.info("TranslationCacheManager initialization started")
        try:
            await self._backend.open()
            self._is_initialized = True
            logger.info("TranslationCacheManager initialized successfully")
        except CacheBackendError as err:
            logger.critical("Failed to initialize TranslationCacheManager: %s", err)
            self._is_initialized = False

    async def component_teardown(self) -> None:
        """Close the backend and release resources."""
        logger.info("TranslationCacheManager shutdown started")
        try:
            await self._backend.close()
        except CacheBackendError as err:
            logger.error("Error closing cache backend: %s", err)
        self._is_initialized = False
        logger.info("TranslationCacheManager shutdown completed")

    def _now_ms(self) -> int:
        """Get current time as epoch milliseconds."""
        return int(datetime.now().astimezone().timestamp() * 1000)

    async def get(self, key: str) -> Any | None:
        """Look up a live value.

        Args:
            key (str): Namespaced cache key.

        Returns:
            Any | None: The cached value, or None on a miss, an expired entry or a backend error.
        """
        if not self._is_initialized:
            return None
        try:
            entry: CacheEntry | None = await self._backend.get(key, self._now_ms())
        except CacheBackendError as err:
            logger.error("Error searching cache: %s", err)
            return None

        if entry is None:
            logger.debug("Cache miss for key: %s", key)
            return None
        logger.debug("Cache hit for key: %s", key)
        return entry.value

    async def put(self, key: str, value: Any, ttl_ms: int | None = None) -> None:
        """Store a value, overwriting any previous entry.

        Args:
            key (str): Namespaced cache key.
            value (Any): JSON-compatible value.
            ttl_ms (int | None): Time-to-live in milliseconds. Defaults to the configured TTL.
        """
        if not self._is_initialized:
            return
        now_ms: int = self._now_ms()
        entry = CacheEntry(
            key=key,
            value=value,
            created_at=now_ms,
            expires_at=now_ms + (self.ttl_ms if ttl_ms is None else ttl_ms),
        )
        try:
            await self._backend.put(entry)
            logger.debug("Cached value for key: %s", key)
        except CacheBackendError as err:
            logger.error("Error registering cache entry: %s", err)

    async def get_or_compute(
        self, key: str, compute: Callable[[], Awaitable[Any]], ttl_ms: int | None = None
    ) -> Any:
        """Return the cached value, computing and storing it on a miss.

        A computed value of None is returned but not stored.

        Args:
            key (str): Namespaced cache key.
            compute (Callable[[], Awaitable[Any]]): Coroutine function producing the value.
            ttl_ms (int | None): Time-to-live in milliseconds. Defaults to the configured TTL.

        Returns:
            Any: The cached or freshly computed value.
        """
        cached: Any | None = await self.get(key)
        if cached is not None:
            return cached

        value: Any = await compute()
        if value is not None:
            await self.put(key, value, ttl_ms)
        return value

    async def remove_all(self) -> None:
        """Delete every entry."""
        if not self._is_initialized:
            return
        try:
            await self._backend.delete_all()
            logger.info("All cache entries removed")
        except CacheBackendError as err:
            logger.error("Error clearing cache: %s", err)

    async def cleanup_expired_entries(self) -> int:
        """Remove expired entries.

        Returns:
            int: Number of deleted entries (0 on error).
        """
        if not self._is_initialized:
            return 0
        try:
            deleted: int = await self._backend.cleanup_expired(self._now_ms())
        except CacheBackendError as err:
            logger.error("Error during cache cleanup: %s", err)
            return 0
        logger.info("Deleted %d expired cache entries", deleted)
        return deleted

    async def get_cache_statistics(self) -> CacheStatistics:
        """Get cache statistics.

        Returns:
            CacheStatistics: Current statistics, empty if uninitialized or on error.
        """
        if not self._is_initialized:
            return CacheStatistics()
        try:
            return await self._backend.statistics(self._now_ms())
        except CacheBackendError as err:
            logger.error("Error getting cache statistics: %s", err)
            return CacheStatistics()
