"""Models for translation-related data.

Defines the per-call request, detection results, supported-language entries and the
adapter descriptors reported by the registry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from dataclasses_json import DataClassJsonMixin, dataclass_json

if TYPE_CHECKING:
    from core.trans.interface import TranslationAdapter

__all__: list[str] = ["AdapterDescriptor", "DetectionResult", "SupportedLanguage", "TranslationRequest"]


@dataclass
class TranslationRequest:
    """A normalised translation request, built fresh for every router call.

    Attributes:
        text (str): Text to translate. Never empty.
        src_lang (str | None): Normalised source language code, None for auto-detection.
        tgt_lang (str): Normalised target language code.
        options (dict[str, Any]): Options passed through to the adapter (e.g. ``format``).
        adapter (str | TranslationAdapter | None): Adapter forced by the caller, if any.
    """

    text: str
    src_lang: str | None
    tgt_lang: str
    options: dict[str, Any] = field(default_factory=dict)
    adapter: str | TranslationAdapter | None = None


@dataclass(frozen=True)
class DetectionResult:
    """Language detection result.

    Attributes:
        language (str): Detected language code.
        confidence (float): Detection confidence (0.0 to 1.0).
    """

    language: str
    confidence: float = 1.0


@dataclass_json
@dataclass
class SupportedLanguage(DataClassJsonMixin):
    """A language an adapter can translate from, with the languages it can translate into.

    Attributes:
        code (str): Source language code.
        name (str): Human readable language name.
        targets (list[str]): Target language codes reachable from ``code``.
    """

    code: str
    name: str
    targets: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AdapterDescriptor:
    """Snapshot of an adapter's registry state. Recomputed on every query.

    Attributes:
        name (str): Adapter name.
        priority (int): Configured priority (lower is tried first).
        available (bool): Result of the availability check at query time.
    """

    name: str
    priority: int = 0
    available: bool = True
