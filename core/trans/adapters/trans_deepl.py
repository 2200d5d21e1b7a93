from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, ClassVar

from deepl import DeepLClient, Language, TextResult
from deepl.exceptions import (
    AuthorizationException,
    ConnectionException,
    DeepLException,
    QuotaExceededException,
    TooManyRequestsException,
)

from core.trans.interface import (
    NotSupportedLanguagesError,
    TranslateExceptionError,
    TranslationAdapter,
    TranslationQuotaExceededError,
    TranslationRateLimitError,
)
from models.translation_models import DetectionResult, SupportedLanguage
from utils.lang_utils import LangUtils
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config


__all__: list[str] = ["DeeplAdapter"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

# DeepL rejects the bare 'EN' and 'PT' target codes.
PREFERRED_TARGET_CODES: dict[str, str] = {"en": "EN-US", "pt": "PT-PT"}
# Target used when translating only to learn the detected source language.
DETECTION_TARGET: str = "en"


class DeeplAdapter(TranslationAdapter):
    _source_codes: ClassVar[dict[str, str]] = {}  # Mapping of source language codes to DeepL's format
    _target_codes: ClassVar[dict[str, str]] = {}  # Mapping of target language codes to DeepL's format

    def __init__(self) -> None:
        super().__init__()
        self.__inst: DeepLClient | None = None
        self._generate_langcode_mappings()

    def _generate_langcode_mappings(self) -> None:
        """Generate language code mappings for DeepL source and target codes.

        Populates the _source_codes and _target_codes class variables from the Language
        constants provided by the DeepL library, keyed by the two-character base code.
        Region-qualified codes win over bare ones for targets.
        """
        language_constants: dict[str, str] = self._get_language_constants(Language)

        for code in language_constants.values():
            # Normalize code to base form (e.g., 'en-US' -> 'en')
            base_code: str = code.split("-")[0].lower()
            DeeplAdapter._source_codes[base_code] = LangUtils.to_api_code(base_code) or base_code
            if "-" in code or base_code not in DeeplAdapter._target_codes:
                DeeplAdapter._target_codes[base_code] = code.upper()

        for base_code, target_code in PREFERRED_TARGET_CODES.items():
            if base_code in DeeplAdapter._target_codes:
                DeeplAdapter._target_codes[base_code] = target_code

        logger.debug("Language code mapping generated for DeepL.")

    def _get_language_constants(self, cls) -> dict[str, str]:
        """Get all uppercase string constants from the given class."""
        return {name: value for name, value in vars(cls).items() if isinstance(value, str) and name.isupper()}

    @property
    def _inst(self) -> DeepLClient:
        if self.__inst is None:
            msg = "The DeepL instance is not initialised"
            raise TranslateExceptionError(msg)
        return self.__inst

    @_inst.setter
    def _inst(self, inst: DeepLClient | None) -> None:
        self.__inst = inst
        if inst is None:
            self.forget_languages()
        logger.debug("'%s': 'set instance'", self.__class__.__name__)

    @staticmethod
    def fetch_adapter_name() -> str:
        return "deepl"

    def initialize(self, config: Config) -> None:
        """Create the DeepL client.

        Authentication happens on the first API call, not here.

        Args:
            config (Config): The configuration object.

        Raises:
            RuntimeError: If no API key is set or the client cannot be created.
        """
        logger.debug("'%s' Initialization start", self.__class__.__name__)
        super().initialize(config)

        auth_key: str = self.get_authentication_key()
        if not auth_key:
            msg = f"No DeepL API key. Set API_KEY in [ADAPTER.deepl] or {self.api_key_env_name()}"
            raise RuntimeError(msg)
        try:
            self._inst = DeepLClient(auth_key, server_url=self.settings.BASE_URL or None)
        except (AttributeError, ValueError) as err:
            logger.critical(err)
            msg = "An error occurred while creating the DeepL client instance"
            raise RuntimeError(msg) from err

    def _to_source_code(self, src_lang: str | None) -> str | None:
        if not src_lang:
            return None
        try:
            return DeeplAdapter._source_codes[src_lang]
        except KeyError:
            msg: str = f"Source language not supported by DeepL: '{src_lang}'"
            raise NotSupportedLanguagesError(msg) from None

    def _to_target_code(self, tgt_lang: str) -> str:
        try:
            return DeeplAdapter._target_codes[tgt_lang]
        except KeyError:
            msg: str = f"Target language not supported by DeepL: '{tgt_lang}'"
            raise NotSupportedLanguagesError(msg) from None

    @staticmethod
    def _build_options(options: dict[str, Any] | None) -> dict[str, Any]:
        """Map the common options onto DeepL keyword arguments ('format': 'html' -> tag_handling)."""
        lib_options: dict[str, Any] = dict(options or {})
        text_format: Any = lib_options.pop("format", None)
        if str(text_format).lower() == "html":
            lib_options["tag_handling"] = "html"
        return lib_options

    async def _translate_text(
        self, text: str | list[str], tgt_lang: str, src_lang: str | None, options: dict[str, Any] | None
    ) -> TextResult | list[TextResult]:
        _src_lang: str | None = self._to_source_code(src_lang)
        _tgt_lang: str = self._to_target_code(tgt_lang)
        try:
            results: TextResult | list[TextResult] = await asyncio.to_thread(
                self._inst.translate_text,
                text,
                source_lang=_src_lang,
                target_lang=_tgt_lang,
                **self._build_options(options),
            )
        except DeepLException as err:
            raise self._convert_error(err) from None
        except (ValueError, TypeError):
            msg = "An anomaly occurred during the translation process at DeepL"
            raise TranslateExceptionError(msg) from None
        logger.info("translation completed (%s > %s)", _src_lang, _tgt_lang)
        return results

    @staticmethod
    def _convert_error(err: DeepLException) -> TranslateExceptionError:
        if isinstance(err, QuotaExceededException):
            return TranslationQuotaExceededError(str(err))
        if isinstance(err, AuthorizationException):
            return TranslateExceptionError("Authorisation failed. Please check your authentication key")
        if isinstance(err, TooManyRequestsException):
            return TranslationRateLimitError("DeepL rate limit reached")
        if isinstance(err, ConnectionException):
            return TranslateExceptionError("An error occurred when connecting to the DeepL server")
        return TranslateExceptionError("An anomaly occurred during the translation process at DeepL")

    async def translate(
        self, text: str, tgt_lang: str, src_lang: str | None = None, options: dict[str, Any] | None = None
    ) -> str:
        logger.debug("'text': '%s', 'src_lang': '%s', 'tgt_lang': '%s'", text, src_lang, tgt_lang)
        results: TextResult | list[TextResult] = await self._translate_text(text, tgt_lang, src_lang, options)
        return self._first_result(results).text

    async def translate_batch(
        self, texts: list[str], src_lang: str | None, tgt_lang: str, options: dict[str, Any] | None = None
    ) -> list[str]:
        """Translate several texts in one request; DeepL accepts a list natively."""
        results: TextResult | list[TextResult] = await self._translate_text(texts, tgt_lang, src_lang, options)
        if isinstance(results, TextResult):
            results = [results]
        return [result.text for result in results]

    async def detect_language(self, text: str) -> DetectionResult:
        """Detect the source language.

        DeepL has no dedicated detection API, so the text is translated and the detected
        source language of the result is reported. DeepL gives no confidence score.
        """
        result: TextResult = self._first_result(
            await self._translate_text(text, DETECTION_TARGET, None, None)
        )
        language: str | None = LangUtils.normalize(result.detected_source_lang)
        if language is None:
            msg = "DeepL did not report a source language"
            raise TranslateExceptionError(msg)
        logger.debug("Detected language: '%s'", language)
        return DetectionResult(language=language, confidence=1.0)

    @staticmethod
    def _first_result(results: TextResult | list[TextResult]) -> TextResult:
        if isinstance(results, TextResult):
            return results
        if isinstance(results, list) and results:
            return results[0]
        msg = "An anomaly occurred during the translation process at DeepL"
        raise TranslateExceptionError(msg)

    async def supported_languages(self) -> list[SupportedLanguage]:
        """List source languages, each able to reach every target language but itself.

        The list is fetched once and reused until the cache TTL elapses.
        """
        remembered: list[SupportedLanguage] | None = self.remembered_languages()
        if remembered is not None:
            return remembered
        try:
            sources = await asyncio.to_thread(self._inst.get_source_languages)
            targets = await asyncio.to_thread(self._inst.get_target_languages)
        except DeepLException as err:
            raise self._convert_error(err) from None

        target_codes: list[str] = []
        for target in targets:
            code: str | None = LangUtils.normalize(target.code)
            if code and code not in target_codes:
                target_codes.append(code)

        languages: list[SupportedLanguage] = []
        for source in sources:
            code = LangUtils.normalize(source.code)
            if code is None or any(entry.code == code for entry in languages):
                continue
            languages.append(
                SupportedLanguage(code=code, name=source.name, targets=[tgt for tgt in target_codes if tgt != code])
            )
        return self.remember_languages(languages)

    async def supports_pair(self, src_lang: str, tgt_lang: str) -> bool:
        return self.pair_in_languages(await self.supported_languages(), src_lang, tgt_lang)

    async def is_available(self) -> bool:
        """Available while the client exists and the character quota is not exhausted."""
        if self.__inst is None:
            return False
        try:
            usage = await asyncio.to_thread(self._inst.get_usage)
        except DeepLException as err:
            raise self._convert_error(err) from None
        return not usage.any_limit_reached

    async def close(self) -> None:
        """Drop the DeepL client instance."""
        self._inst = None
        logger.debug("'%s' process termination", self.__class__.__name__)
