from __future__ import annotations

from typing import Any

import pytest

from core.trans.adapters import libretranslate_client
from tests.support.http import FakeSession


@pytest.fixture
def routes() -> dict[tuple[str, str], Any]:
    return {
        ("POST", "/translate"): {"translatedText": "hola"},
        ("POST", "/detect"): [{"language": "es", "confidence": 87.0}, {"language": "pt", "confidence": 10.0}],
        ("GET", "/languages"): [
            {"code": "en", "name": "English", "targets": ["es", "fr", "en"]},
            {"code": "es", "name": "Spanish", "targets": ["en"]},
            {"code": "zh-Hans", "name": "Chinese", "targets": ["en"]},
        ],
    }


@pytest.fixture
def fake_session(monkeypatch: pytest.MonkeyPatch, routes: dict[tuple[str, str], Any]) -> FakeSession:
    session = FakeSession(routes)
    monkeypatch.setattr(libretranslate_client.aiohttp, "ClientSession", lambda: session)
    return session
