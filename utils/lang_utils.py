"""Language code normalisation.

All language codes that cross the router are canonicalised to a lowercase two-character
form (ISO 639-1 style). No validation against a real ISO list is performed: any
two-character residue is accepted, and longer codes such as 'pt-BR' or 'zho' are truncated.
"""

from __future__ import annotations

from enum import Enum
from typing import Final

__all__: list[str] = ["LangUtils"]

LANG_CODE_LENGTH: Final[int] = 2
AUTO_DETECT: Final[str] = "auto"


class LangUtils:
    """Static helpers for language codes."""

    @staticmethod
    def normalize(code: object) -> str | None:
        """Canonicalise a language code.

        - None (or an empty string) returns None, meaning "auto-detect".
        - Strings are lowercased and truncated to the first two characters.
        - Enum members are converted to their string value (their name when the value is
          not a string) and then normalised.
        - Any other object is converted with str() and normalised.

        The operation is idempotent: ``normalize(normalize(x)) == normalize(x)``.

        Args:
            code (object): The language code to normalise.

        Returns:
            str | None: The two-character lowercase code, or None.
        """
        if code is None:
            return None
        if isinstance(code, Enum) and not isinstance(code, str):
            code = code.value if isinstance(code.value, str) else code.name
        # StrEnum members are str instances; lower() already returns a plain str for them.
        text: str = code if isinstance(code, str) else str(code)
        normalized: str = text.lower()[:LANG_CODE_LENGTH]
        return normalized or None

    @staticmethod
    def source_or_auto(code: str | None) -> str:
        """Return the source code, or 'auto' when the source is to be detected."""
        return code or AUTO_DETECT

    @staticmethod
    def to_api_code(code: str | None) -> str | None:
        """Upper-case a code for APIs that expect 'EN' rather than 'en'."""
        return code.upper() if code else None
