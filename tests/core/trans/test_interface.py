"""Tests for the adapter base class, capability flags, Outcome and the error types."""

from __future__ import annotations

from typing import Any

import pytest

from core.trans.interface import (
    AdapterCapabilities,
    AdapterError,
    EmptyTextError,
    Outcome,
    TranslateExceptionError,
    TranslationAdapter,
    UnsupportedOperationError,
)
from models.config_models import AdapterSettings, Config
from models.translation_models import SupportedLanguage
from tests.support.adapters import EchoAdapter, PlainAdapter


@pytest.fixture(autouse=True)
def reset_registered(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(TranslationAdapter, "registered", {"plain": PlainAdapter})


def make_adapter_class(name: str) -> type[TranslationAdapter]:
    class NamedAdapter(TranslationAdapter):
        @staticmethod
        def fetch_adapter_name() -> str:
            return name

        def initialize(self, config: Config) -> None:
            super().initialize(config)

        async def translate(
            self, text: str, tgt_lang: str, src_lang: str | None = None, options: dict[str, Any] | None = None
        ) -> str:
            return text

    return NamedAdapter


def test_capabilities_of_full_adapter() -> None:
    assert EchoAdapter.capabilities == AdapterCapabilities(
        batch=True, detection=True, languages=True, pair_check=True, availability_check=True
    )


def test_capabilities_of_translate_only_adapter() -> None:
    assert PlainAdapter.capabilities == AdapterCapabilities()


def test_subclass_is_registered() -> None:
    adapter_class = make_adapter_class("named")
    assert TranslationAdapter.registered["named"] is adapter_class


def test_empty_name_is_not_registered() -> None:
    make_adapter_class("")
    assert "" not in TranslationAdapter.registered


def test_duplicate_name_raises() -> None:
    with pytest.raises(ValueError, match="already registered"):
        make_adapter_class("plain")


@pytest.mark.asyncio
async def test_optional_operations_default_to_unsupported() -> None:
    adapter = PlainAdapter()

    with pytest.raises(UnsupportedOperationError):
        await adapter.translate_batch(["a"], None, "en")
    with pytest.raises(UnsupportedOperationError):
        await adapter.detect_language("a")
    with pytest.raises(UnsupportedOperationError):
        await adapter.supported_languages()
    assert await adapter.supports_pair("en", "es") is False
    assert await adapter.is_available() is True
    assert await adapter.close() is None


def test_initialize_reads_adapter_section() -> None:
    config = Config(ADAPTERS={"plain": AdapterSettings(PRIORITY=4, API_KEY="k")})
    adapter = PlainAdapter()
    adapter.initialize(config)

    assert adapter.priority == 4
    assert adapter.settings.API_KEY == "k"
    assert repr(adapter) == "PlainAdapter(name='plain', priority=4)"


def test_authentication_key_prefers_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLAIN_API_KEY", "from-env")
    adapter = PlainAdapter()

    assert adapter.get_authentication_key() == "from-env"

    adapter.initialize(Config(ADAPTERS={"plain": AdapterSettings(API_KEY="from-config")}))
    assert adapter.get_authentication_key() == "from-config"


def test_is_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PLAIN_API_KEY", raising=False)
    assert PlainAdapter.is_configured(Config()) is False
    assert PlainAdapter.is_configured(Config(ADAPTERS={"plain": AdapterSettings(BASE_URL="http://x")})) is True

    monkeypatch.setenv("PLAIN_API_KEY", "key")
    assert PlainAdapter.is_configured(Config()) is True


def test_pair_in_languages_normalises_codes() -> None:
    languages = [SupportedLanguage(code="EN", name="English", targets=["ES", "fr"])]

    assert TranslationAdapter.pair_in_languages(languages, "en", "es") is True
    assert TranslationAdapter.pair_in_languages(languages, "en-US", "FR") is True
    assert TranslationAdapter.pair_in_languages(languages, "en", "xx") is False
    assert TranslationAdapter.pair_in_languages(languages, "es", "en") is False


def test_outcome_success() -> None:
    outcome: Outcome[str] = Outcome.success("hola")

    assert outcome.ok is True
    assert outcome.error is None
    assert outcome.unwrap() == "hola"


def test_outcome_failure_unwrap_raises() -> None:
    outcome: Outcome[str] = Outcome.failure(EmptyTextError("empty"))

    assert outcome.ok is False
    assert outcome.value is None
    with pytest.raises(EmptyTextError, match="empty"):
        outcome.unwrap()


def test_adapter_error_message() -> None:
    error = AdapterError("deepl", TimeoutError())

    assert isinstance(error, TranslateExceptionError)
    assert error.adapter_name == "deepl"
    assert str(error) == "Adapter 'deepl' failed: TimeoutError"
    assert str(AdapterError("libre", "bad gateway")) == "Adapter 'libre' failed: bad gateway"
