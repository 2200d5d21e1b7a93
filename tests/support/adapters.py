"""Deterministic in-process adapters for tests.

``EchoAdapter`` implements every optional capability and answers with a predictable
string, recording each call. ``PlainAdapter`` implements translation only.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from core.trans.interface import TranslateExceptionError, TranslationAdapter
from models.config_models import AdapterSettings
from models.translation_models import DetectionResult, SupportedLanguage

if TYPE_CHECKING:
    from models.config_models import Config

__all__: list[str] = ["DEFAULT_LANGUAGES", "EchoAdapter", "EchoSecondaryAdapter", "PlainAdapter", "SlowAdapter"]

DEFAULT_LANGUAGES: list[SupportedLanguage] = [
    SupportedLanguage(code="en", name="English", targets=["es", "fr", "ja"]),
    SupportedLanguage(code="es", name="Spanish", targets=["en"]),
]


def echo(text: str, tgt_lang: str, src_lang: str | None) -> str:
    return f"[{src_lang or 'auto'}->{tgt_lang}] {text}"


class EchoAdapter(TranslationAdapter):
    def __init__(
        self,
        label: str = "echo",
        *,
        fail: bool = False,
        fail_on: set[str] | None = None,
        unavailable: bool = False,
        availability_error: bool = False,
        languages: list[SupportedLanguage] | None = None,
        detected: str = "en",
        confidence: float = 0.95,
        priority: int = 0,
    ) -> None:
        super().__init__()
        self.label: str = label
        self.fail: bool = fail
        self.fail_on: set[str] = fail_on or set()
        self.unavailable: bool = unavailable
        self.availability_error: bool = availability_error
        self.languages: list[SupportedLanguage] = DEFAULT_LANGUAGES if languages is None else languages
        self.detected: str = detected
        self.confidence: float = confidence
        self._settings = AdapterSettings(PRIORITY=priority)
        self.calls: list[tuple[str, Any]] = []
        self.options_seen: list[dict[str, Any] | None] = []
        self.closed: bool = False

    @property
    def adapter_name(self) -> str:
        return self.label

    @staticmethod
    def fetch_adapter_name() -> str:
        return "echo"

    def initialize(self, config: Config) -> None:
        super().initialize(config)

    def _maybe_fail(self, text: str | None = None) -> None:
        if self.fail or (text is not None and text in self.fail_on):
            msg = f"{self.label} failed"
            raise TranslateExceptionError(msg)

    async def translate(
        self, text: str, tgt_lang: str, src_lang: str | None = None, options: dict[str, Any] | None = None
    ) -> str:
        self.calls.append(("translate", text))
        self.options_seen.append(options)
        self._maybe_fail(text)
        return echo(text, tgt_lang, src_lang)

    async def translate_batch(
        self, texts: list[str], src_lang: str | None, tgt_lang: str, options: dict[str, Any] | None = None
    ) -> list[str]:
        self.calls.append(("translate_batch", tuple(texts)))
        for text in texts:
            self._maybe_fail(text)
        return [echo(text, tgt_lang, src_lang) for text in texts]

    async def detect_language(self, text: str) -> DetectionResult:
        self.calls.append(("detect_language", text))
        self._maybe_fail(text)
        return DetectionResult(language=self.detected, confidence=self.confidence)

    async def supported_languages(self) -> list[SupportedLanguage]:
        self.calls.append(("supported_languages", None))
        self._maybe_fail()
        return self.languages

    async def supports_pair(self, src_lang: str, tgt_lang: str) -> bool:
        return self.pair_in_languages(self.languages, src_lang, tgt_lang)

    async def is_available(self) -> bool:
        if self.availability_error:
            msg = f"{self.label} health check exploded"
            raise RuntimeError(msg)
        return not self.unavailable

    async def close(self) -> None:
        self.closed = True

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)


class EchoSecondaryAdapter(EchoAdapter):
    def __init__(self, label: str = "echo_secondary", **kwargs: Any) -> None:
        super().__init__(label, **kwargs)

    @staticmethod
    def fetch_adapter_name() -> str:
        return "echo_secondary"


class PlainAdapter(TranslationAdapter):
    """Translation only: no batch, detection, languages, pair or availability check."""

    def __init__(self, label: str = "plain", *, fail_on: set[str] | None = None) -> None:
        super().__init__()
        self.label: str = label
        self.fail_on: set[str] = fail_on or set()
        self.calls: list[str] = []

    @property
    def adapter_name(self) -> str:
        return self.label

    @staticmethod
    def fetch_adapter_name() -> str:
        return "plain"

    def initialize(self, config: Config) -> None:
        super().initialize(config)

    async def translate(
        self, text: str, tgt_lang: str, src_lang: str | None = None, options: dict[str, Any] | None = None
    ) -> str:
        self.calls.append(text)
        if text in self.fail_on:
            msg = f"{self.label} failed on {text!r}"
            raise TranslateExceptionError(msg)
        return echo(text, tgt_lang, src_lang)


class SlowAdapter(EchoAdapter):
    """Never answers within a short timeout. Not registered."""

    @staticmethod
    def fetch_adapter_name() -> str:
        return ""

    async def translate(
        self, text: str, tgt_lang: str, src_lang: str | None = None, options: dict[str, Any] | None = None
    ) -> str:
        self.calls.append(("translate", text))
        await asyncio.sleep(10)
        return echo(text, tgt_lang, src_lang)
