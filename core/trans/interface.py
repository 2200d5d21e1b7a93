"""This module defines the abstract base class for translation adapters and related exceptions.

It includes the capability flags computed when an adapter class is registered, the Outcome
container returned by the router, and the exception hierarchy shared by adapters and router.
"""

from __future__ import annotations

import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from models.config_models import DEFAULT_CACHE_TTL_DAYS, AdapterSettings
from utils.lang_utils import LangUtils
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config
    from models.translation_models import DetectionResult, SupportedLanguage

__all__: list[str] = [
    "AdapterCapabilities",
    "AdapterError",
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
    "UnsupportedOperationError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

T = TypeVar("T")

SECONDS_PER_DAY: int = 86_400


class TranslateExceptionError(Exception):
    """An error occurred during the translation process."""


class EmptyTextError(TranslateExceptionError):
    """The text to translate or analyse is empty or missing."""


class MissingTargetLanguageError(TranslateExceptionError):
    """No target language was given and no default is configured."""


class NoAdaptersAvailableError(TranslateExceptionError):
    """No adapter is loaded, available, or matching the request."""


class NoAdaptersTriedError(TranslateExceptionError):
    """The fallback sequence ended without attempting any adapter."""


class UnsupportedOperationError(TranslateExceptionError):
    """The adapter does not provide the requested optional capability."""


class NotSupportedLanguagesError(TranslateExceptionError):
    """An unsupported language code was specified."""


class TranslationQuotaExceededError(TranslateExceptionError):
    """The translatable character quota has been exceeded."""


class TranslationRateLimitError(TranslateExceptionError):
    """The translation request was rate-limited by the API."""


class AdapterError(TranslateExceptionError):
    """An adapter call failed.

    Attributes:
        adapter_name (str): Name of the adapter that failed.
        reason (BaseException | str): The original failure.
    """

    def __init__(self, adapter_name: str, reason: BaseException | str) -> None:
        self.adapter_name: str = adapter_name
        self.reason: BaseException | str = reason
        detail: str = str(reason) or type(reason).__name__
        super().__init__(f"Adapter '{adapter_name}' failed: {detail}")


@dataclass(frozen=True)
class AdapterCapabilities:
    """Optional capabilities of an adapter class.

    Computed once when the class is defined, from which optional methods it overrides.

    Attributes:
        batch (bool): Provides a native batch translation call.
        detection (bool): Provides language detection.
        languages (bool): Can list its supported languages.
        pair_check (bool): Can report support for a language pair.
        availability_check (bool): Performs its own availability check.
    """

    batch: bool = False
    detection: bool = False
    languages: bool = False
    pair_check: bool = False
    availability_check: bool = False


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Two-armed result of a router operation: either a value or an error.

    Attributes:
        value (T | None): The result on success.
        error (TranslateExceptionError | None): The failure, None on success.
    """

    value: T | None = None
    error: TranslateExceptionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    @classmethod
    def success(cls, value: T) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: TranslateExceptionError) -> Outcome[T]:
        return cls(error=error)


class TranslationAdapter(ABC):
    """Abstract base class for translation adapters.

    An adapter binds one external translation provider. Only ``translate`` is mandatory;
    the remaining operations are optional and raise ``UnsupportedOperationError`` unless
    overridden. Which of them a subclass overrides is recorded in ``capabilities`` at
    class-definition time, so callers never probe methods per call.

    Attributes:
        registered (ClassVar[dict[str, type[TranslationAdapter]]]): Registered adapter classes,
            keyed by their distinguished names.
        capabilities (ClassVar[AdapterCapabilities]): Optional capabilities of the class.
    """

    registered: ClassVar[dict[str, type[TranslationAdapter]]] = {}
    capabilities: ClassVar[AdapterCapabilities] = AdapterCapabilities()

    def __init_subclass__(cls, **kwargs) -> None:
        """Compute the capability flags and register the subclass.

        Adapters returning an empty name are not registered; this allows abstract
        intermediate classes.

        Args:
            **kwargs: Additional keyword arguments passed to parent class.

        Raises:
            TypeError: If the subclass does not provide fetch_adapter_name().
            ValueError: If another adapter already uses the same name.
        """
        super().__init_subclass__(**kwargs)
        if not hasattr(cls, "fetch_adapter_name") or not callable(cls.fetch_adapter_name):
            msg = "Subclasses of TranslationAdapter must implement the static method fetch_adapter_name()."
            raise TypeError(msg)

        cls.capabilities = AdapterCapabilities(
            batch=cls._overrides("translate_batch"),
            detection=cls._overrides("detect_language"),
            languages=cls._overrides("supported_languages"),
            pair_check=cls._overrides("supports_pair"),
            availability_check=cls._overrides("is_available"),
        )

        name = cls.fetch_adapter_name()
        if not isinstance(name, str) or name == "":
            return

        if name in cls.registered:
            msg: str = f"A translation adapter with the name '{name}' is already registered."
            raise ValueError(msg)

        cls.registered[name] = cls

    @classmethod
    def _overrides(cls, method_name: str) -> bool:
        return getattr(cls, method_name) is not getattr(TranslationAdapter, method_name)

    def __init__(self) -> None:
        self._settings: AdapterSettings = AdapterSettings()
        self._languages: list[SupportedLanguage] | None = None
        self._languages_expire_at: float = 0.0
        self._languages_ttl: float = float(DEFAULT_CACHE_TTL_DAYS * SECONDS_PER_DAY)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.adapter_name!r}, priority={self.priority})"

    @property
    def adapter_name(self) -> str:
        return self.fetch_adapter_name()

    @property
    def settings(self) -> AdapterSettings:
        return self._settings

    @property
    def priority(self) -> int:
        """Configured priority. Lower values are tried first."""
        return self._settings.PRIORITY

    @staticmethod
    @abstractmethod
    def fetch_adapter_name() -> str:
        """Fetch the distinguished name of the adapter.

        Must be implemented by subclasses. This method is called during class registration
        in __init_subclass__, so the implementation must be available at subclass definition time.
        The name is also the suffix of the adapter's ``[ADAPTER.<name>]`` configuration section.

        Returns:
            str: The distinguished name of the adapter.
        """
        raise NotImplementedError

    @classmethod
    def fetch_settings(cls, config: Config) -> AdapterSettings:
        """Return this adapter's configuration section, or defaults when it is absent."""
        return config.ADAPTERS.get(cls.fetch_adapter_name(), AdapterSettings())

    @classmethod
    def is_configured(cls, config: Config) -> bool:
        """Check, without any network access, whether the adapter has credentials or an endpoint.

        Args:
            config (Config): Loaded configuration.

        Returns:
            bool: True if an API key or base URL is configured, in the file or the environment.
        """
        settings: AdapterSettings = cls.fetch_settings(config)
        return settings.is_configured or bool(os.getenv(cls.api_key_env_name(), ""))

    @classmethod
    def api_key_env_name(cls) -> str:
        return f"{cls.fetch_adapter_name().upper()}_API_KEY"

    @abstractmethod
    def initialize(self, config: Config) -> None:
        """Initialize the adapter with the given configuration.

        Implementations should call ``super().initialize(config)`` first so that the
        adapter settings are stored.

        Args:
            config (Config): Configuration object.

        Raises:
            RuntimeError: If the adapter cannot be set up.
            TranslateExceptionError: If the provider rejects the setup.
        """
        self._settings = self.fetch_settings(config)
        self._languages_ttl = float(config.TRANSLATION.CACHE_TTL_DAYS * SECONDS_PER_DAY)
        self.forget_languages()

    def remembered_languages(self) -> list[SupportedLanguage] | None:
        """Return the memoised language list, or None once it has expired.

        The memo lives as long as a cache entry (``CACHE_TTL_DAYS``), so a provider whose
        language list changes is picked up after at most one TTL.
        """
        if self._languages is None or time.monotonic() >= self._languages_expire_at:
            self._languages = None
            return None
        return self._languages

    def remember_languages(self, languages: list[SupportedLanguage]) -> list[SupportedLanguage]:
        self._languages = languages
        self._languages_expire_at = time.monotonic() + self._languages_ttl
        return languages

    def forget_languages(self) -> None:
        self._languages = None
        self._languages_expire_at = 0.0

    @abstractmethod
    async def translate(
        self, text: str, tgt_lang: str, src_lang: str | None = None, options: dict[str, Any] | None = None
    ) -> str:
        """Translate input text to the target language.

        Args:
            text (str): Text to be translated.
            tgt_lang (str): Normalised target language code.
            src_lang (str | None): Normalised source language code. If None, auto-detect.
            options (dict[str, Any] | None): Provider options such as ``format``.

        Returns:
            str: Translated text.

        Raises:
            NotSupportedLanguagesError: If the specified language is not supported.
            TranslationQuotaExceededError: If the character quota has been exceeded.
            TranslationRateLimitError: If the request is rate-limited by the API.
            TranslateExceptionError: If translation fails.
        """
        raise NotImplementedError

    async def translate_batch(
        self, texts: list[str], src_lang: str | None, tgt_lang: str, options: dict[str, Any] | None = None
    ) -> list[str]:
        """Translate several texts in one provider call.

        Returns:
            list[str]: Translations in the same order as ``texts``.

        Raises:
            UnsupportedOperationError: If the adapter has no batch call.
        """
        msg = f"'{self.adapter_name}' does not support batch translation"
        raise UnsupportedOperationError(msg)

    async def detect_language(self, text: str) -> DetectionResult:
        """Detect the language of the input text.

        Raises:
            UnsupportedOperationError: If the adapter cannot detect languages.
        """
        msg = f"'{self.adapter_name}' does not support language detection"
        raise UnsupportedOperationError(msg)

    async def supported_languages(self) -> list[SupportedLanguage]:
        """List the languages the provider can translate from, with their targets.

        Raises:
            UnsupportedOperationError: If the adapter cannot list languages.
        """
        msg = f"'{self.adapter_name}' does not support listing languages"
        raise UnsupportedOperationError(msg)

    async def supports_pair(self, src_lang: str, tgt_lang: str) -> bool:
        """Report whether the adapter can translate from ``src_lang`` into ``tgt_lang``.

        Adapters that do not override this support no pair explicitly.
        """
        return False

    async def is_available(self) -> bool:
        """Check whether the adapter can currently serve requests.

        Adapters that do not override this are available as long as they are loaded.
        """
        return True

    async def close(self) -> None:
        """Release resources held by the adapter."""
        return

    def get_authentication_key(self) -> str:
        """Retrieve the API key.

        The configured ``API_KEY`` wins. Otherwise the key is read from an environment
        variable named after the adapter with the suffix "_API_KEY"; for example, the
        "deepl" adapter reads "DEEPL_API_KEY".

        Returns:
            str: The API key, or an empty string if none is set.
        """
        return self._settings.API_KEY or os.getenv(self.api_key_env_name(), "")

    @staticmethod
    def pair_in_languages(languages: list[SupportedLanguage], src_lang: str, tgt_lang: str) -> bool:
        """Check a pair against a supported-languages list, comparing normalised codes."""
        src: str | None = LangUtils.normalize(src_lang)
        tgt: str | None = LangUtils.normalize(tgt_lang)
        return any(
            LangUtils.normalize(entry.code) == src and tgt in {LangUtils.normalize(target) for target in entry.targets}
            for entry in languages
        )
