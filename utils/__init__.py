"""Utility modules for the translation router.

This package provides utility functions for logging, string hashing and
language code normalisation.
"""

from utils.lang_utils import LangUtils
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

__all__: list[str] = ["LangUtils", "LoggerUtils", "StringUtils"]
