from __future__ import annotations

from typing import TYPE_CHECKING, Any

from core.trans.adapters.libretranslate_client import (
    DEFAULT_BASE_URL,
    HTTPTooManyRequests,
    LibreTranslateClient,
    LibreTranslateError,
    LibreTranslateException,
)
from core.trans.interface import (
    NotSupportedLanguagesError,
    TranslateExceptionError,
    TranslationAdapter,
    TranslationRateLimitError,
)
from models.translation_models import DetectionResult, SupportedLanguage
from utils.lang_utils import LangUtils
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config


__all__: list[str] = ["LibreTranslateAdapter"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

# LibreTranslate reports detection confidence on a 0-100 scale.
CONFIDENCE_SCALE: float = 100.0


class LibreTranslateAdapter(TranslationAdapter):
    def __init__(self) -> None:
        super().__init__()
        self.__client: LibreTranslateClient | None = None

    @property
    def _client(self) -> LibreTranslateClient:
        if self.__client is None:
            msg = "The LibreTranslate client is not initialised"
            raise TranslateExceptionError(msg)
        return self.__client

    @staticmethod
    def fetch_adapter_name() -> str:
        return "libretranslate"

    def initialize(self, config: Config) -> None:
        """Create the LibreTranslate client.

        ``BASE_URL`` defaults to the public instance; ``API_KEY`` is optional for
        self-hosted servers.

        Args:
            config (Config): The configuration object.
        """
        logger.debug("'%s' Initialization start", self.__class__.__name__)
        super().initialize(config)
        self.__client = LibreTranslateClient(
            base_url=self.settings.BASE_URL or DEFAULT_BASE_URL,
            api_key=self.get_authentication_key(),
            timeout=config.TRANSLATION.ADAPTER_TIMEOUT,
        )
        logger.debug("LibreTranslate endpoint: '%s'", self._client.base_url)

    @staticmethod
    def _text_format(options: dict[str, Any] | None) -> str:
        return "html" if str((options or {}).get("format", "")).lower() == "html" else "text"

    @staticmethod
    def _convert_error(err: LibreTranslateException) -> TranslateExceptionError:
        if isinstance(err, HTTPTooManyRequests):
            return TranslationRateLimitError("LibreTranslate rate limit reached")
        if isinstance(err, LibreTranslateError) and "not supported" in str(err).lower():
            return NotSupportedLanguagesError(str(err))
        return TranslateExceptionError(f"LibreTranslate request failed: {err}")

    async def _translate(
        self, text: str | list[str], tgt_lang: str, src_lang: str | None, options: dict[str, Any] | None
    ) -> str | list[str]:
        source: str = LangUtils.source_or_auto(src_lang)
        try:
            translated: str | list[str] = await self._client.translate(
                text, source=source, target=tgt_lang, text_format=self._text_format(options)
            )
        except LibreTranslateException as err:
            raise self._convert_error(err) from None
        logger.info("translation completed (%s > %s)", source, tgt_lang)
        return translated

    async def translate(
        self, text: str, tgt_lang: str, src_lang: str | None = None, options: dict[str, Any] | None = None
    ) -> str:
        logger.debug("'text': '%s', 'src_lang': '%s', 'tgt_lang': '%s'", text, src_lang, tgt_lang)
        translated: str | list[str] = await self._translate(text, tgt_lang, src_lang, options)
        if not isinstance(translated, str):
            msg = "LibreTranslate returned an unexpected result type"
            raise TranslateExceptionError(msg)
        return translated

    async def translate_batch(
        self, texts: list[str], src_lang: str | None, tgt_lang: str, options: dict[str, Any] | None = None
    ) -> list[str]:
        """Translate several texts in one request; ``q`` accepts a list."""
        translated: str | list[str] = await self._translate(texts, tgt_lang, src_lang, options)
        if not isinstance(translated, list):
            msg = "LibreTranslate returned an unexpected result type"
            raise TranslateExceptionError(msg)
        return translated

    async def detect_language(self, text: str) -> DetectionResult:
        try:
            candidates: list[dict[str, Any]] = await self._client.detect(text)
        except LibreTranslateException as err:
            raise self._convert_error(err) from None

        if not candidates:
            msg = "LibreTranslate detected no language"
            raise TranslateExceptionError(msg)
        best: dict[str, Any] = candidates[0]
        language: str | None = LangUtils.normalize(best.get("language"))
        if language is None:
            msg = "LibreTranslate detected no language"
            raise TranslateExceptionError(msg)
        confidence: float = float(best.get("confidence", 0.0)) / CONFIDENCE_SCALE
        logger.debug("Detected language: '%s' (%.2f)", language, confidence)
        return DetectionResult(language=language, confidence=confidence)

    async def supported_languages(self) -> list[SupportedLanguage]:
        """List languages with their targets, refetched once the cache TTL elapses."""
        remembered: list[SupportedLanguage] | None = self.remembered_languages()
        if remembered is not None:
            return remembered
        try:
            raw_languages: list[dict[str, Any]] = await self._client.languages()
        except LibreTranslateException as err:
            raise self._convert_error(err) from None

        languages: list[SupportedLanguage] = []
        for item in raw_languages:
            code: str | None = LangUtils.normalize(item.get("code"))
            if code is None:
                continue
            targets: list[str] = []
            for target in item.get("targets", []):
                target_code: str | None = LangUtils.normalize(target)
                if target_code and target_code not in targets:
                    targets.append(target_code)
            languages.append(SupportedLanguage(code=code, name=str(item.get("name", code)), targets=targets))
        return self.remember_languages(languages)

    async def supports_pair(self, src_lang: str, tgt_lang: str) -> bool:
        return self.pair_in_languages(await self.supported_languages(), src_lang, tgt_lang)

    async def is_available(self) -> bool:
        """Available when the server answers the languages endpoint."""
        if self.__client is None:
            return False
        try:
            await self._client.languages()
        except LibreTranslateException as err:
            logger.debug("LibreTranslate health check failed: %s", err)
            return False
        return True

    async def close(self) -> None:
        if self.__client is not None:
            await self.__client.close()
            self.__client = None
        self.forget_languages()
        logger.debug("'%s' process termination", self.__class__.__name__)
