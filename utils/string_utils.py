from __future__ import annotations

import hashlib
import unicodedata

__all__: list[str] = ["StringUtils"]


class StringUtils:
    """Utility class for string handling shared by the router and the cache.

    Provides static methods for blank checks, Unicode normalisation and
    the content hash used in cache keys.
    """

    @staticmethod
    def is_blank(value: object) -> bool:
        """Check whether a value is missing, not a string, or an empty string.

        Whitespace-only strings are not blank: they are valid (if unusual) input to translate.

        Args:
            value (object): The value to check.

        Returns:
            bool: True if the value cannot be translated, False otherwise.
        """
        return not isinstance(value, str) or value == ""

    @staticmethod
    def normalize_text(text: str) -> str:
        """Normalize text using Unicode NFC normalization.

        Args:
            text (str): Text to normalize.

        Returns:
            str: Normalized text.
        """
        return unicodedata.normalize("NFC", text)

    @staticmethod
    def hash_text(text: str) -> str:
        """Generate the SHA-256 content hash used to address cached results.

        The text is NFC-normalised first, so canonically equivalent strings share a hash.

        Args:
            text (str): Source text.

        Returns:
            str: Hexadecimal SHA-256 digest.
        """
        normalized: str = StringUtils.normalize_text(text)
        return hashlib.sha256(normalized.encode("utf-8")).hexdigest()
