"""Translation adapter implementations.

This package contains concrete implementations of TranslationAdapter for external
translation services. Importing it registers the adapters.

Modules:
- DeeplAdapter: Adapter for the DeepL API, through the deepl client library.
- LibreTranslateAdapter: Adapter for LibreTranslate servers.
- LibreTranslateClient: Asynchronous HTTP client used by LibreTranslateAdapter.
"""

from core.trans.adapters.libretranslate_client import (
    DEFAULT_BASE_URL,
    HTTPConnectionError,
    HTTPError,
    HTTPTimeoutError,
    LibreTranslateClient,
    LibreTranslateError,
    ResponseFormatError,
)
from core.trans.adapters.trans_deepl import DeeplAdapter
from core.trans.adapters.trans_libretranslate import LibreTranslateAdapter

__all__: list[str] = [
    "DEFAULT_BASE_URL",
    "DeeplAdapter",
    "HTTPConnectionError",
    "HTTPError",
    "HTTPTimeoutError",
    "LibreTranslateAdapter",
    "LibreTranslateClient",
    "LibreTranslateError",
    "ResponseFormatError",
]
