from __future__ import annotations

from enum import Enum, StrEnum

import pytest

from utils.lang_utils import LangUtils


class Lang(StrEnum):
    JAPANESE = "JA"


class NumberedLang(Enum):
    EN = 1


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("en", "en"),
        ("EN", "en"),
        ("en-US", "en"),
        ("zho", "zh"),
        ("e", "e"),
        ("", None),
        (None, None),
        (Lang.JAPANESE, "ja"),
        (NumberedLang.EN, "en"),
    ],
)
def test_normalize(code: object, expected: str | None) -> None:
    assert LangUtils.normalize(code) == expected


@pytest.mark.parametrize("code", ["pt-BR", "EN", "x", Lang.JAPANESE])
def test_normalize_is_idempotent(code: object) -> None:
    once = LangUtils.normalize(code)
    assert LangUtils.normalize(once) == once


def test_normalize_returns_plain_str_for_str_enum() -> None:
    assert type(LangUtils.normalize(Lang.JAPANESE)) is str


def test_source_or_auto() -> None:
    assert LangUtils.source_or_auto(None) == "auto"
    assert LangUtils.source_or_auto("") == "auto"
    assert LangUtils.source_or_auto("fr") == "fr"


def test_to_api_code() -> None:
    assert LangUtils.to_api_code("ja") == "JA"
    assert LangUtils.to_api_code(None) is None
