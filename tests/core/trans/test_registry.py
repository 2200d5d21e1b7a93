"""Tests for AdapterRegistry: loading, ordering, availability and pair selection."""

from __future__ import annotations

import asyncio

import pytest

from core.trans.interface import TranslateExceptionError, TranslationAdapter
from core.trans.registry import AdapterRegistry
from models.config_models import AdapterSettings, Config
from models.translation_models import AdapterDescriptor, SupportedLanguage
from tests.support.adapters import EchoAdapter, EchoSecondaryAdapter, PlainAdapter


class BrokenSetupAdapter(EchoAdapter):
    @staticmethod
    def fetch_adapter_name() -> str:
        return ""

    def initialize(self, config: Config) -> None:
        msg = "missing credentials"
        raise RuntimeError(msg)


class RejectedSetupAdapter(EchoAdapter):
    @staticmethod
    def fetch_adapter_name() -> str:
        return ""

    def initialize(self, config: Config) -> None:
        msg = "provider rejected the key"
        raise TranslateExceptionError(msg)


class ClosingFailsAdapter(EchoAdapter):
    @staticmethod
    def fetch_adapter_name() -> str:
        return ""

    async def close(self) -> None:
        msg = "already closed"
        raise RuntimeError(msg)


@pytest.fixture(autouse=True)
def reset_registered(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        TranslationAdapter,
        "registered",
        {"echo": EchoAdapter, "echo_secondary": EchoSecondaryAdapter, "plain": PlainAdapter},
    )


@pytest.fixture
def config() -> Config:
    config = Config()
    config.TRANSLATION.ADAPTER_TIMEOUT = 0.2
    return config


@pytest.mark.asyncio
async def test_initialize_loads_every_registered_adapter(config: Config) -> None:
    registry = AdapterRegistry(config)
    await registry.initialize()

    assert [adapter.adapter_name for adapter in registry.loaded] == ["echo", "echo_secondary", "plain"]


@pytest.mark.asyncio
async def test_initialize_restricted_by_configuration(config: Config) -> None:
    config.TRANSLATION.ADAPTERS = ["plain", "unknown"]
    registry = AdapterRegistry(config)
    await registry.initialize()

    assert [adapter.adapter_name for adapter in registry.loaded] == ["plain"]
    assert registry.get("echo") is None


@pytest.mark.asyncio
async def test_initialize_skips_adapters_failing_setup(config: Config, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        TranslationAdapter,
        "registered",
        {"broken": BrokenSetupAdapter, "rejected": RejectedSetupAdapter, "echo": EchoAdapter},
    )
    registry = AdapterRegistry(config)
    await registry.initialize()

    assert [adapter.adapter_name for adapter in registry.loaded] == ["echo"]


@pytest.mark.asyncio
async def test_initialize_applies_adapter_settings(config: Config) -> None:
    config.ADAPTERS["echo"] = AdapterSettings(PRIORITY=7, API_KEY="secret")
    registry = AdapterRegistry(config)
    await registry.initialize()

    echo = registry.get("echo")
    assert echo is not None
    assert echo.priority == 7
    assert echo.get_authentication_key() == "secret"


@pytest.mark.asyncio
async def test_list_adapters_sorted_by_priority(config: Config) -> None:
    config.ADAPTERS["echo"] = AdapterSettings(PRIORITY=5)
    config.ADAPTERS["plain"] = AdapterSettings(PRIORITY=-1)
    registry = AdapterRegistry(config)
    await registry.initialize()

    listed = await registry.list_adapters()

    assert [adapter.adapter_name for adapter in listed] == ["plain", "echo_secondary", "echo"]


@pytest.mark.asyncio
async def test_list_adapters_drops_unavailable(config: Config) -> None:
    registry = AdapterRegistry(config)
    down = EchoAdapter("down", unavailable=True)
    broken = EchoAdapter("broken", availability_error=True)
    up = EchoAdapter("up")

    with registry.use_adapters([down, broken, up]):
        listed = await registry.list_adapters()

    assert listed == [up]


@pytest.mark.asyncio
async def test_override_resolves_names_and_resets(config: Config) -> None:
    registry = AdapterRegistry(config)
    await registry.initialize()
    extra = EchoAdapter("extra")

    with registry.use_adapters(["plain", extra, "missing"]):
        assert AdapterRegistry.current_override() == ("plain", extra, "missing")
        listed = await registry.list_adapters()

    assert [adapter.adapter_name for adapter in listed] == ["plain", "extra"]
    assert AdapterRegistry.current_override() is None


@pytest.mark.asyncio
async def test_availability_check_timeout(config: Config) -> None:
    class HangingAdapter(EchoAdapter):
        @staticmethod
        def fetch_adapter_name() -> str:
            return ""

        async def is_available(self) -> bool:
            await asyncio.sleep(10)
            return True

    config.TRANSLATION.ADAPTER_TIMEOUT = 0.05
    registry = AdapterRegistry(config)

    assert await registry.is_adapter_available(HangingAdapter("hanging")) is False


@pytest.mark.asyncio
async def test_adapter_without_availability_check_is_available(config: Config) -> None:
    registry = AdapterRegistry(config)
    assert await registry.is_adapter_available(PlainAdapter()) is True


@pytest.mark.asyncio
async def test_find_adapters_for_pair(config: Config) -> None:
    registry = AdapterRegistry(config)
    german = EchoAdapter("german", languages=[SupportedLanguage(code="de", name="German", targets=["en"])])
    default = EchoAdapter("default")
    plain = PlainAdapter()

    with registry.use_adapters([german, default, plain]):
        assert await registry.find_adapters_for_pair("de", "en") == [german]
        assert await registry.find_adapters_for_pair("en", "es") == [default]
        assert await registry.find_adapters_for_pair("ko", "en") == [german, default, plain]
        assert await registry.find_adapters_for_pair(None, "en") == [german, default, plain]


@pytest.mark.asyncio
async def test_find_adapters_for_pair_with_forced_adapter(config: Config) -> None:
    registry = AdapterRegistry(config)
    await registry.initialize()

    forced = await registry.find_adapters_for_pair("en", "es", forced="plain")
    unknown = await registry.find_adapters_for_pair("en", "es", forced="missing")

    assert [adapter.adapter_name for adapter in forced] == ["plain"]
    assert unknown == []


@pytest.mark.asyncio
async def test_check_pair_without_capability(config: Config) -> None:
    registry = AdapterRegistry(config)
    assert await registry.check_pair(PlainAdapter(), "en", "es") is False


@pytest.mark.asyncio
async def test_describe(config: Config) -> None:
    config.ADAPTERS["plain"] = AdapterSettings(PRIORITY=3)
    registry = AdapterRegistry(config)
    await registry.initialize()

    descriptors = await registry.describe()

    assert descriptors == [
        AdapterDescriptor(name="echo", priority=0, available=True),
        AdapterDescriptor(name="echo_secondary", priority=0, available=True),
        AdapterDescriptor(name="plain", priority=3, available=True),
    ]


def test_any_adapter_configured(config: Config, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ECHO_API_KEY", "ECHO_SECONDARY_API_KEY", "PLAIN_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    registry = AdapterRegistry(config)
    assert registry.any_adapter_configured() is False

    config.ADAPTERS["plain"] = AdapterSettings(BASE_URL="http://localhost:5000")
    assert registry.any_adapter_configured() is True


@pytest.mark.asyncio
async def test_shutdown_closes_adapters(config: Config, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(TranslationAdapter, "registered", {"failing": ClosingFailsAdapter, "echo": EchoAdapter})
    registry = AdapterRegistry(config)
    await registry.initialize()
    echo = registry.get("echo")

    await registry.shutdown()

    assert isinstance(echo, EchoAdapter)
    assert echo.closed is True
    assert registry.loaded == []
