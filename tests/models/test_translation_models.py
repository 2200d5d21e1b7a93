from __future__ import annotations

import pytest

from models.cache_models import CacheEntry
from models.config_models import AdapterSettings
from models.translation_models import DetectionResult, SupportedLanguage


def test_supported_language_json_round_trip() -> None:
    language = SupportedLanguage(code="en", name="English", targets=["es", "fr"])

    assert language.to_dict() == {"code": "en", "name": "English", "targets": ["es", "fr"]}
    assert SupportedLanguage.from_dict({"code": "ja", "name": "Japanese"}, infer_missing=True).targets == []
    assert SupportedLanguage.from_json(language.to_json()) == language


def test_detection_result_defaults_to_full_confidence() -> None:
    result = DetectionResult(language="fr")

    assert result.confidence == 1.0
    with pytest.raises(AttributeError):
        result.language = "es"  # type: ignore[misc]


def test_cache_entry_expiry_boundary() -> None:
    entry = CacheEntry(key="translation::lang::1", value="en", created_at=0, expires_at=100)

    assert entry.is_expired(99) is False
    assert entry.is_expired(100) is True


@pytest.mark.parametrize(
    ("settings", "expected"),
    [
        (AdapterSettings(), False),
        (AdapterSettings(API_KEY="key"), True),
        (AdapterSettings(BASE_URL="http://localhost:5000"), True),
        (AdapterSettings(PRIORITY=3), False),
    ],
)
def test_adapter_settings_is_configured(settings: AdapterSettings, expected: bool) -> None:
    assert settings.is_configured is expected
