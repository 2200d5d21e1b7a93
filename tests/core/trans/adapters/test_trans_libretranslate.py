from __future__ import annotations

from typing import Any

import pytest

from core.trans.adapters.libretranslate_client import DEFAULT_BASE_URL
from core.trans.adapters.trans_libretranslate import LibreTranslateAdapter
from core.trans.interface import (
    NotSupportedLanguagesError,
    TranslateExceptionError,
    TranslationRateLimitError,
)
from models.config_models import AdapterSettings, Config
from models.translation_models import DetectionResult, SupportedLanguage
from tests.support.http import FakeResponse, FakeSession


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LIBRETRANSLATE_API_KEY", raising=False)


@pytest.fixture
def config() -> Config:
    return Config(ADAPTERS={"libretranslate": AdapterSettings(BASE_URL="http://libre.test", PRIORITY=2)})


@pytest.fixture
def adapter(config: Config, fake_session: FakeSession) -> LibreTranslateAdapter:
    adapter = LibreTranslateAdapter()
    adapter.initialize(config)
    return adapter


def test_initialize_defaults_to_public_instance() -> None:
    adapter = LibreTranslateAdapter()
    adapter.initialize(Config())

    assert adapter._client.base_url == DEFAULT_BASE_URL
    assert adapter._client.api_key == ""


def test_initialize_uses_settings(adapter: LibreTranslateAdapter) -> None:
    assert adapter._client.base_url == "http://libre.test"
    assert adapter._client.timeout == 10.0
    assert adapter.priority == 2


@pytest.mark.asyncio
async def test_translate(adapter: LibreTranslateAdapter, fake_session: FakeSession) -> None:
    translated: str = await adapter.translate("hello", "es", "en")

    assert translated == "hola"
    assert fake_session.requests[0][2] == {"q": "hello", "source": "en", "target": "es", "format": "text"}


@pytest.mark.asyncio
async def test_translate_auto_source_and_html(adapter: LibreTranslateAdapter, fake_session: FakeSession) -> None:
    await adapter.translate("<p>hi</p>", "es", None, {"format": "HTML"})

    assert fake_session.requests[0][2]["source"] == "auto"
    assert fake_session.requests[0][2]["format"] == "html"


@pytest.mark.asyncio
async def test_translate_batch(
    adapter: LibreTranslateAdapter, fake_session: FakeSession, routes: dict[tuple[str, str], Any]
) -> None:
    routes[("POST", "/translate")] = {"translatedText": ["uno", "dos"]}

    translated: list[str] = await adapter.translate_batch(["one", "two"], "en", "es")

    assert translated == ["uno", "dos"]
    assert fake_session.requests[0][2]["q"] == ["one", "two"]


@pytest.mark.asyncio
async def test_translate_rejects_unexpected_shape(
    adapter: LibreTranslateAdapter, routes: dict[tuple[str, str], Any]
) -> None:
    routes[("POST", "/translate")] = {"translatedText": ["uno"]}

    with pytest.raises(TranslateExceptionError):
        await adapter.translate("one", "es", "en")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("response", "expected"),
    [
        (FakeResponse(429, "slow down"), TranslationRateLimitError),
        (FakeResponse(400, '{"error": "xx is not supported"}'), TranslateExceptionError),
        (FakeResponse(200, '{"error": "xx is not supported"}'), NotSupportedLanguagesError),
    ],
)
async def test_translate_converts_errors(
    adapter: LibreTranslateAdapter,
    routes: dict[tuple[str, str], Any],
    response: FakeResponse,
    expected: type[Exception],
) -> None:
    routes[("POST", "/translate")] = response

    with pytest.raises(expected):
        await adapter.translate("hello", "xx", "en")


@pytest.mark.asyncio
async def test_detect_language_scales_confidence(adapter: LibreTranslateAdapter) -> None:
    result: DetectionResult = await adapter.detect_language("hola")

    assert result.language == "es"
    assert result.confidence == pytest.approx(0.87)


@pytest.mark.asyncio
async def test_detect_language_without_candidates(
    adapter: LibreTranslateAdapter, routes: dict[tuple[str, str], Any]
) -> None:
    routes[("POST", "/detect")] = []

    with pytest.raises(TranslateExceptionError):
        await adapter.detect_language("???")


@pytest.mark.asyncio
async def test_supported_languages_are_normalised_and_memoized(
    adapter: LibreTranslateAdapter, fake_session: FakeSession
) -> None:
    languages: list[SupportedLanguage] = await adapter.supported_languages()
    await adapter.supported_languages()

    assert languages == [
        SupportedLanguage(code="en", name="English", targets=["es", "fr", "en"]),
        SupportedLanguage(code="es", name="Spanish", targets=["en"]),
        SupportedLanguage(code="zh", name="Chinese", targets=["en"]),
    ]
    assert len(fake_session.requests) == 1


@pytest.mark.asyncio
async def test_supported_languages_are_refetched_after_cache_ttl(
    adapter: LibreTranslateAdapter, fake_session: FakeSession, routes: dict[tuple[str, str], Any]
) -> None:
    await adapter.supported_languages()
    routes[("GET", "/languages")] = [{"code": "ja", "name": "Japanese", "targets": ["en"]}]

    assert await adapter.supports_pair("ja", "en") is False

    adapter._languages_expire_at -= adapter._languages_ttl

    assert await adapter.supports_pair("ja", "en") is True
    assert len(fake_session.requests) == 2


@pytest.mark.asyncio
async def test_supports_pair(adapter: LibreTranslateAdapter) -> None:
    assert await adapter.supports_pair("zh", "en") is True
    assert await adapter.supports_pair("es", "fr") is False


@pytest.mark.asyncio
async def test_is_available(adapter: LibreTranslateAdapter, routes: dict[tuple[str, str], Any]) -> None:
    assert await adapter.is_available() is True

    routes[("GET", "/languages")] = FakeResponse(503, "maintenance")
    assert await adapter.is_available() is False


@pytest.mark.asyncio
async def test_is_available_without_client() -> None:
    assert await LibreTranslateAdapter().is_available() is False


@pytest.mark.asyncio
async def test_close(adapter: LibreTranslateAdapter, fake_session: FakeSession) -> None:
    await adapter.translate("hello", "es", "en")

    await adapter.close()

    assert fake_session.closed is True
    with pytest.raises(TranslateExceptionError):
        _ = adapter._client
