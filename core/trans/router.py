# ruff: noqa: BLE001
"""Translation router.

Orchestrates every translation request: normalise the languages, look the result up in the
cache, dispatch to adapters with a bounded fallback, and store successful results. Public
operations never raise; they return an ``Outcome``.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Final, TypeVar

from core.cache.manager import TranslationCacheManager
from core.trans.interface import (
    AdapterError,
    EmptyTextError,
    MissingTargetLanguageError,
    NoAdaptersAvailableError,
    NoAdaptersTriedError,
    Outcome,
    TranslateExceptionError,
    UnsupportedOperationError,
)
from core.trans.registry import AdapterRegistry
from models.translation_models import DetectionResult, SupportedLanguage, TranslationRequest
from utils.lang_utils import LangUtils
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Awaitable, Callable, Iterable
    from contextlib import AbstractContextManager

    from core.trans.interface import TranslationAdapter
    from core.trans.registry import AdapterRef
    from models.config_models import Config

__all__: list[str] = ["MAX_ATTEMPTS", "TranslationRouter"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

T = TypeVar("T")

# Upper bound on adapter calls per request, across the whole fallback chain.
MAX_ATTEMPTS: Final[int] = 2


class TranslationRouter:
    """Routes translation requests to adapters through the lookaside cache.

    The router holds no per-call state, so concurrent calls are independent. Within one
    call, adapters are tried strictly in sequence and at most ``MAX_ATTEMPTS`` of them
    are invoked. When all attempts fail, the last adapter's error is returned.

    Args:
        config (Config): Loaded configuration.
        cache_manager (TranslationCacheManager): Cache facade.
        registry (AdapterRegistry): Adapter registry.
    """

    def __init__(self, config: Config, cache_manager: TranslationCacheManager, registry: AdapterRegistry) -> None:
        self.config: Config = config
        self.cache_manager: TranslationCacheManager = cache_manager
        self.registry: AdapterRegistry = registry

    @classmethod
    async def create(cls, config: Config) -> TranslationRouter:
        """Build a router with its cache and registry, and initialise both."""
        router = cls(config, TranslationCacheManager(config), AdapterRegistry(config))
        await router.initialize()
        return router

    async def initialize(self) -> None:
        logger.info("TranslationRouter initialization started")
        await self.cache_manager.component_load()
        await self.registry.initialize()
        logger.info("TranslationRouter initialized with adapters: %s", [a.adapter_name for a in self.registry.loaded])

    async def shutdown(self) -> None:
        logger.info("TranslationRouter shutdown started")
        await self.registry.shutdown()
        await self.cache_manager.component_teardown()
        logger.info("TranslationRouter shutdown completed")

    @property
    def timeout(self) -> float:
        return self.config.TRANSLATION.ADAPTER_TIMEOUT

    def use_adapters(self, adapters: Iterable[AdapterRef]) -> AbstractContextManager[None]:
        """Replace the adapter universe for calls made inside the ``with`` block."""
        return self.registry.use_adapters(adapters)

    async def adapters(self) -> list[TranslationAdapter]:
        """Adapters in the order they would be tried."""
        return await self.registry.list_adapters()

    def any_adapter_configured(self) -> bool:
        """Cheap probe (no network): is any adapter given an API key or base URL?"""
        return self.registry.any_adapter_configured()

    def _resolve_languages(self, src_lang: object, tgt_lang: object) -> tuple[str | None, str]:
        """Normalise both codes. A missing target falls back to the configured default.

        Raises:
            MissingTargetLanguageError: If neither a target nor a default is available.
        """
        tgt: str | None = LangUtils.normalize(tgt_lang) or LangUtils.normalize(
            self.config.TRANSLATION.DEFAULT_TARGET_LANGUAGE
        )
        if tgt is None:
            msg = "No target language given and no default target language configured"
            raise MissingTargetLanguageError(msg)
        return LangUtils.normalize(src_lang), tgt

    def _build_request(
        self, text: object, src_lang: object, tgt_lang: object, options: dict[str, Any] | None
    ) -> TranslationRequest:
        if StringUtils.is_blank(text):
            msg = "Text to translate is empty"
            raise EmptyTextError(msg)
        src, tgt = self._resolve_languages(src_lang, tgt_lang)
        adapter_options: dict[str, Any] = dict(options or {})
        forced: AdapterRef | None = adapter_options.pop("adapter", None)
        return TranslationRequest(text=str(text), src_lang=src, tgt_lang=tgt, options=adapter_options, adapter=forced)

    async def _safe_call(
        self, adapter: TranslationAdapter, call: Callable[[TranslationAdapter], Awaitable[T]]
    ) -> Outcome[T]:
        """Invoke an adapter under the configured timeout, turning any fault into an AdapterError."""
        try:
            async with asyncio.timeout(self.timeout):
                value: T = await call(adapter)
        except TimeoutError as err:
            reason = TimeoutError(f"no response within {self.timeout} seconds")
            reason.__cause__ = err
            return Outcome.failure(AdapterError(adapter.adapter_name, reason))
        except Exception as err:
            return Outcome.failure(AdapterError(adapter.adapter_name, err))
        return Outcome.success(value)

    async def _run_with_fallback(
        self,
        candidates: list[TranslationAdapter],
        operation: str,
        call: Callable[[TranslationAdapter], Awaitable[T]],
    ) -> Outcome[T]:
        """Try candidates in order until one succeeds, making at most MAX_ATTEMPTS calls.

        Args:
            candidates (list[TranslationAdapter]): Ordered adapters.
            operation (str): Operation name for log messages.
            call (Callable[[TranslationAdapter], Awaitable[T]]): The adapter call.

        Returns:
            Outcome[T]: The first success, or the last adapter's error.
        """
        if not candidates:
            logger.warning("No adapters available for %s", operation)
            return Outcome.failure(NoAdaptersAvailableError(f"No adapters available for {operation}"))

        last_error: TranslateExceptionError | None = None
        attempts: list[TranslationAdapter] = candidates[:MAX_ATTEMPTS]
        for attempt, adapter in enumerate(attempts, start=1):
            logger.debug("%s attempt %d/%d with '%s'", operation, attempt, len(attempts), adapter.adapter_name)
            outcome: Outcome[T] = await self._safe_call(adapter, call)
            if outcome.ok:
                return outcome
            logger.warning("Adapter '%s' failed during %s: %s", adapter.adapter_name, operation, outcome.error)
            last_error = outcome.error

        if last_error is None:
            return Outcome.failure(NoAdaptersTriedError(f"No adapter was tried for {operation}"))
        return Outcome.failure(last_error)

    async def translate(
        self, text: str | None, tgt_lang: object, options: dict[str, Any] | None = None
    ) -> Outcome[str]:
        """Translate with the source language auto-detected.

        Equivalent to ``translate_from(text, None, tgt_lang, options)``.
        """
        return await self.translate_from(text, None, tgt_lang, options)

    async def translate_from(
        self, text: str | None, src_lang: object, tgt_lang: object, options: dict[str, Any] | None = None
    ) -> Outcome[str]:
        """Translate a text.

        A cached translation is returned without calling any adapter. On a miss, the
        candidates for the language pair are tried (or only ``options['adapter']`` when
        given), and a successful translation is cached.

        Args:
            text (str): Text to translate.
            src_lang (object): Source language, None to auto-detect.
            tgt_lang (object): Target language, None for the configured default.
            options (dict[str, Any] | None): Adapter options; ``adapter`` forces one adapter.

        Returns:
            Outcome[str]: The translation or the error.
        """
        try:
            request: TranslationRequest = self._build_request(text, src_lang, tgt_lang, options)
        except TranslateExceptionError as err:
            return Outcome.failure(err)

        key: str = TranslationCacheManager.translation_key(
            request.src_lang, request.tgt_lang, StringUtils.hash_text(request.text)
        )
        cached: Any | None = await self.cache_manager.get(key)
        if isinstance(cached, str):
            logger.debug("Translation served from cache (%s > %s)", request.src_lang, request.tgt_lang)
            return Outcome.success(cached)

        candidates: list[TranslationAdapter] = await self.registry.find_adapters_for_pair(
            request.src_lang, request.tgt_lang, request.adapter
        )

        async def call(adapter: TranslationAdapter) -> str:
            translated: Any = await adapter.translate(request.text, request.tgt_lang, request.src_lang, request.options)
            if not isinstance(translated, str):
                msg = f"Adapter returned {type(translated).__name__} instead of str"
                raise TranslateExceptionError(msg)
            return translated

        outcome: Outcome[str] = await self._run_with_fallback(candidates, "translation", call)
        if outcome.ok:
            await self.cache_manager.put(key, outcome.value)
        return outcome

    async def translate_batch(
        self, texts: Iterable[str], src_lang: object, tgt_lang: object, options: dict[str, Any] | None = None
    ) -> Outcome[list[str]]:
        """Translate several texts, preserving their order.

        Texts are looked up in the cache one by one. Only the misses are sent to adapters,
        as one unit: if that unit fails, the whole call fails and nothing from the failed
        attempt is cached. New translations are cached individually.

        Args:
            texts (Iterable[str]): Texts to translate.
            src_lang (object): Source language, None to auto-detect.
            tgt_lang (object): Target language, None for the configured default.
            options (dict[str, Any] | None): Adapter options; ``adapter`` forces one adapter.

        Returns:
            Outcome[list[str]]: Translations positionally matching ``texts``.
        """
        batch: list[str] = list(texts)
        if not batch:
            return Outcome.success([])
        try:
            if any(StringUtils.is_blank(text) for text in batch):
                msg = "Batch contains an empty text"
                raise EmptyTextError(msg)
            request: TranslationRequest = self._build_request(batch[0], src_lang, tgt_lang, options)
        except TranslateExceptionError as err:
            return Outcome.failure(err)

        keys: list[str] = [
            TranslationCacheManager.translation_key(request.src_lang, request.tgt_lang, StringUtils.hash_text(text))
            for text in batch
        ]
        results: list[str | None] = []
        for key in keys:
            cached: Any | None = await self.cache_manager.get(key)
            results.append(cached if isinstance(cached, str) else None)

        missing: list[int] = [index for index, result in enumerate(results) if result is None]
        if not missing:
            logger.debug("Batch of %d served from cache", len(batch))
            return Outcome.success([result for result in results if result is not None])

        uncached: list[str] = [batch[index] for index in missing]
        logger.debug("Batch cache: %d hit(s), %d miss(es)", len(batch) - len(missing), len(missing))
        candidates: list[TranslationAdapter] = await self.registry.find_adapters_for_pair(
            request.src_lang, request.tgt_lang, request.adapter
        )

        async def call(adapter: TranslationAdapter) -> list[str]:
            if adapter.capabilities.batch:
                translated: list[str] = list(
                    await adapter.translate_batch(uncached, request.src_lang, request.tgt_lang, request.options)
                )
            else:
                # Sequential; the first failing item aborts this attempt.
                translated = [
                    await adapter.translate(text, request.tgt_lang, request.src_lang, request.options)
                    for text in uncached
                ]
            if len(translated) != len(uncached) or not all(isinstance(item, str) for item in translated):
                msg = f"Adapter returned {len(translated)} result(s) for {len(uncached)} text(s)"
                raise TranslateExceptionError(msg)
            return translated

        outcome: Outcome[list[str]] = await self._run_with_fallback(candidates, "batch translation", call)
        if not outcome.ok or outcome.value is None:
            return Outcome.failure(outcome.error or NoAdaptersTriedError("Batch translation produced no result"))

        for index, translated_text in zip(missing, outcome.value, strict=True):
            results[index] = translated_text
            await self.cache_manager.put(keys[index], translated_text)
        return Outcome.success([result or "" for result in results])

    async def detect_language(self, text: str | None) -> Outcome[DetectionResult]:
        """Detect the language of a text.

        Only the language code is cached, so a cached answer reports confidence 1.0.
        Adapters without detection still take up one of the attempts.

        Args:
            text (str): Text to analyse.

        Returns:
            Outcome[DetectionResult]: The detected language or the error.
        """
        if StringUtils.is_blank(text):
            return Outcome.failure(EmptyTextError("Text to analyse is empty"))

        key: str = TranslationCacheManager.detection_key(StringUtils.hash_text(text))
        cached: Any | None = await self.cache_manager.get(key)
        if isinstance(cached, str) and cached:
            logger.debug("Detected language served from cache: '%s'", cached)
            return Outcome.success(DetectionResult(language=cached, confidence=1.0))

        async def call(adapter: TranslationAdapter) -> DetectionResult:
            if not adapter.capabilities.detection:
                msg = f"'{adapter.adapter_name}' does not support language detection"
                raise UnsupportedOperationError(msg)
            result: DetectionResult = await adapter.detect_language(text)
            language: str | None = LangUtils.normalize(result.language)
            if language is None:
                msg = f"'{adapter.adapter_name}' returned no language"
                raise TranslateExceptionError(msg)
            return DetectionResult(language=language, confidence=result.confidence)

        outcome: Outcome[DetectionResult] = await self._run_with_fallback(
            await self.registry.list_adapters(), "language detection", call
        )
        if outcome.ok and outcome.value is not None:
            await self.cache_manager.put(key, outcome.value.language)
        return outcome

    async def supported_languages(self) -> Outcome[list[SupportedLanguage]]:
        """Aggregate the supported languages of every listed adapter.

        Entries are deduplicated by code, keeping the one from the adapter tried first.
        The aggregated view is cached under a single key.

        Returns:
            Outcome[list[SupportedLanguage]]: The aggregated languages.
        """

        async def compute() -> list[dict[str, Any]] | None:
            merged: dict[str, SupportedLanguage] = {}
            for adapter in await self.registry.list_adapters():
                if not adapter.capabilities.languages:
                    continue
                outcome: Outcome[list[SupportedLanguage]] = await self._safe_call(
                    adapter, lambda a: a.supported_languages()
                )
                if not outcome.ok or outcome.value is None:
                    logger.warning("Skipping languages of '%s': %s", adapter.adapter_name, outcome.error)
                    continue
                for entry in outcome.value:
                    merged.setdefault(entry.code, entry)
            # An empty view is not cached, so adapters coming online are picked up.
            return [entry.to_dict() for entry in merged.values()] or None

        raw: list[dict[str, Any]] | None = await self.cache_manager.get_or_compute(
            TranslationCacheManager.SUPPORTED_LANGUAGES_KEY, compute
        )
        try:
            languages: list[SupportedLanguage] = [SupportedLanguage.from_dict(item) for item in raw or []]
        except (KeyError, TypeError, ValueError) as err:
            return Outcome.failure(TranslateExceptionError(f"Invalid supported-languages data: {err}"))
        return Outcome.success(languages)

    async def supports_pair(self, src_lang: object, tgt_lang: object) -> bool:
        """Check whether any listed adapter declares the pair. Codes are normalised first."""
        src: str | None = LangUtils.normalize(src_lang)
        tgt: str | None = LangUtils.normalize(tgt_lang)
        if src is None or tgt is None:
            return False
        for adapter in await self.registry.list_adapters():
            if await self.registry.check_pair(adapter, src, tgt):
                return True
        return False
