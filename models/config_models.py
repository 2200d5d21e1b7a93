"""Configuration data models for the translation router.

Each dataclass mirrors one section of the INI configuration file. Field names are the
upper-case keys used in the file; defaults apply to keys that are not present.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

__all__: list[str] = [
    "ADAPTER_SECTION_PREFIX",
    "DEFAULT_CACHE_TTL_DAYS",
    "AdapterSettings",
    "Cache",
    "Config",
    "General",
    "Translation",
]

DEFAULT_CACHE_TTL_DAYS: Final[int] = 15
ADAPTER_SECTION_PREFIX: Final[str] = "ADAPTER."


@dataclass
class General:
    DEBUG: bool = False
    LOG_FILE: str = ""
    LOG_LEVEL: str = "INFO"


@dataclass
class Translation:
    DEFAULT_TARGET_LANGUAGE: str = "en"
    CACHE_TTL_DAYS: int = DEFAULT_CACHE_TTL_DAYS
    ADAPTER_TIMEOUT: float = 10.0
    # Restricts which registered adapters are loaded. Empty loads all of them.
    ADAPTERS: list[str] = field(default_factory=list)


@dataclass
class Cache:
    BACKEND: str = "memory"
    PATH: str = "translation_cache.db"


@dataclass
class AdapterSettings:
    """Per-adapter settings, read from an ``[ADAPTER.<name>]`` section.

    Attributes:
        PRIORITY (int): Lower values are tried first.
        API_KEY (str): Provider API key, empty if not configured.
        BASE_URL (str): Provider endpoint, empty to use the client default.
    """

    PRIORITY: int = 0
    API_KEY: str = ""
    BASE_URL: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.API_KEY) or bool(self.BASE_URL)


@dataclass
class Config:
    GENERAL: General = field(default_factory=General)
    TRANSLATION: Translation = field(default_factory=Translation)
    CACHE: Cache = field(default_factory=Cache)
    ADAPTERS: dict[str, AdapterSettings] = field(default_factory=dict)
