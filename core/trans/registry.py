# ruff: noqa: BLE001
"""Adapter registry.

Loads the registered translation adapters, filters them by availability, orders them by
priority, and narrows them down for a language pair. A call-scoped override, held in a
context variable, can replace the loaded universe for the duration of a ``with`` block.
"""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, TypeAlias

from core.trans.adapters import DeeplAdapter, LibreTranslateAdapter  # noqa: F401
from core.trans.interface import TranslateExceptionError, TranslationAdapter
from models.translation_models import AdapterDescriptor
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterable, Iterator

    from models.config_models import Config

__all__: list[str] = ["AdapterRef", "AdapterRegistry"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

AdapterRef: TypeAlias = str | TranslationAdapter

_adapter_override: ContextVar[tuple[AdapterRef, ...] | None] = ContextVar("adapter_override", default=None)


class AdapterRegistry:
    """Registry of loaded translation adapters.

    Args:
        config (Config): Configuration used to initialise adapters.
    """

    def __init__(self, config: Config) -> None:
        self.config: Config = config
        self._instances: dict[str, TranslationAdapter] = {}
        logger.debug("Registered translation adapters: %s", TranslationAdapter.registered)

    @property
    def timeout(self) -> float:
        return self.config.TRANSLATION.ADAPTER_TIMEOUT

    @property
    def loaded(self) -> list[TranslationAdapter]:
        """Loaded adapter instances in load order."""
        return list(self._instances.values())

    async def initialize(self) -> None:
        """Instantiate and initialise the registered adapters.

        ``TRANSLATION.ADAPTERS`` restricts which adapters are loaded; when empty, every
        registered adapter is loaded. Adapters failing to initialise are skipped.
        """
        logger.info("AdapterRegistry initialization started")
        self._instances.clear()

        names: list[str] = self.config.TRANSLATION.ADAPTERS or list(TranslationAdapter.registered)
        for _name in names:
            _cls: type[TranslationAdapter] | None = TranslationAdapter.registered.get(_name)
            if _cls is None:
                logger.critical("Translation adapter class not found: '%s'", _name)
                continue
            try:
                _instance: TranslationAdapter = _cls()
                _instance.initialize(self.config)
            except RuntimeError as err:
                logger.critical("RuntimeError in '%s' adapter setup: %s", _name, err)
                continue
            except TranslateExceptionError as err:
                logger.critical("Exception in '%s' adapter setup: %s", _name, err)
                continue
            self._instances[_name] = _instance
            logger.info("Translation adapter initialized: '%s' (priority=%d)", _name, _instance.priority)
            logger.debug("Adapter capabilities: %s", _cls.capabilities)

    def get(self, name: str) -> TranslationAdapter | None:
        return self._instances.get(name)

    def resolve(self, ref: AdapterRef) -> TranslationAdapter | None:
        """Resolve a name against the loaded adapters. Instances are returned as they are."""
        if isinstance(ref, TranslationAdapter):
            return ref
        adapter: TranslationAdapter | None = self._instances.get(ref)
        if adapter is None:
            logger.warning("Adapter '%s' is not loaded", ref)
        return adapter

    @contextmanager
    def use_adapters(self, adapters: Iterable[AdapterRef]) -> Iterator[None]:
        """Replace the adapter universe for the current context.

        The override applies to the calling task and to tasks created inside the block;
        concurrent tasks outside it are unaffected. Adapters are used in the given order
        and are still filtered by availability. An empty list leaves the loaded adapters in use.

        Args:
            adapters (Iterable[AdapterRef]): Adapter names or instances.
        """
        token = _adapter_override.set(tuple(adapters))
        try:
            yield
        finally:
            _adapter_override.reset(token)

    @staticmethod
    def current_override() -> tuple[AdapterRef, ...] | None:
        return _adapter_override.get()

    async def is_adapter_available(self, adapter: TranslationAdapter) -> bool:
        """Check availability. A check that raises or times out counts as unavailable."""
        if not adapter.capabilities.availability_check:
            return True
        try:
            async with asyncio.timeout(self.timeout):
                return bool(await adapter.is_available())
        except TimeoutError:
            logger.warning("Availability check for '%s' timed out", adapter.adapter_name)
        except Exception as err:
            logger.warning("Availability check for '%s' failed: %s", adapter.adapter_name, err)
        return False

    async def list_adapters(self) -> list[TranslationAdapter]:
        """Return the usable adapters in the order they should be tried.

        With a non-empty override in place, its adapters are used in caller order. Otherwise the
        loaded adapters are sorted by priority (ascending, stable). Either way, unavailable
        adapters are dropped.

        Returns:
            list[TranslationAdapter]: Ordered, available adapters.
        """
        override: tuple[AdapterRef, ...] | None = self.current_override()
        candidates: list[TranslationAdapter]
        if override:
            candidates = [adapter for ref in override if (adapter := self.resolve(ref)) is not None]
        else:
            candidates = sorted(self._instances.values(), key=lambda adapter: adapter.priority)

        available: list[TranslationAdapter] = [
            adapter for adapter in candidates if await self.is_adapter_available(adapter)
        ]
        logger.debug("Listed adapters: %s", [adapter.adapter_name for adapter in available])
        return available

    async def check_pair(self, adapter: TranslationAdapter, src_lang: str, tgt_lang: str) -> bool:
        """Ask an adapter about a pair. No capability, an error or a timeout all mean False."""
        if not adapter.capabilities.pair_check:
            return False
        try:
            async with asyncio.timeout(self.timeout):
                return bool(await adapter.supports_pair(src_lang, tgt_lang))
        except Exception as err:
            logger.debug("Pair check '%s->%s' on '%s' failed: %r", src_lang, tgt_lang, adapter.adapter_name, err)
            return False

    async def find_adapters_for_pair(
        self, src_lang: str | None, tgt_lang: str, forced: AdapterRef | None = None
    ) -> list[TranslationAdapter]:
        """Select the candidate adapters for a translation.

        - A forced adapter is used alone, regardless of priority or pair support. An
          unknown name yields an empty list.
        - With a known source language, only adapters supporting the pair are kept; if
          none does, the full list is returned so untested adapters still get a chance.
        - Without a source language, the full list is returned.

        Args:
            src_lang (str | None): Normalised source language, None when auto-detecting.
            tgt_lang (str): Normalised target language.
            forced (AdapterRef | None): Adapter name or instance chosen by the caller.

        Returns:
            list[TranslationAdapter]: Ordered candidates.
        """
        if forced is not None:
            adapter: TranslationAdapter | None = self.resolve(forced)
            return [adapter] if adapter is not None else []

        adapters: list[TranslationAdapter] = await self.list_adapters()
        if src_lang is None:
            return adapters

        matching: list[TranslationAdapter] = [
            adapter for adapter in adapters if await self.check_pair(adapter, src_lang, tgt_lang)
        ]
        if not matching:
            logger.debug("No adapter declares '%s->%s'; using all adapters", src_lang, tgt_lang)
            return adapters
        return matching

    async def describe(self) -> list[AdapterDescriptor]:
        """Describe every loaded adapter, with availability checked now."""
        return [
            AdapterDescriptor(
                name=adapter.adapter_name,
                priority=adapter.priority,
                available=await self.is_adapter_available(adapter),
            )
            for adapter in sorted(self._instances.values(), key=lambda adapter: adapter.priority)
        ]

    def any_adapter_configured(self) -> bool:
        """Check, without network access, whether any registered adapter has a key or endpoint configured."""
        return any(_cls.is_configured(self.config) for _cls in TranslationAdapter.registered.values())

    async def shutdown(self) -> None:
        """Close every loaded adapter."""
        for _name, _instance in self._instances.items():
            try:
                await _instance.close()
                logger.info("Translation adapter closed: '%s'", _name)
            except Exception as err:
                logger.error("Error closing adapter '%s': %s", _name, err)
        self._instances.clear()
