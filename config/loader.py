"""Configuration file loader and validator.

Handles reading, formatting, and validating settings from the INI configuration file.
Raises exceptions for any issues encountered during loading.
"""

from __future__ import annotations

import ast
import configparser
from configparser import ConfigParser
from dataclasses import fields
from pathlib import Path
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

from models.config_models import ADAPTER_SECTION_PREFIX, AdapterSettings, Config
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable
    from dataclasses import Field as DataclassField
else:
    from dataclasses import Field as DataclassField

__all__: list[str] = [
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigTypeError",
    "ConfigValueError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

KNOWN_ADAPTERS: list[str] = ["deepl", "libretranslate"]
ALLOWED_CACHE_BACKENDS: list[str] = ["memory", "sqlite"]
ALLOWED_LOG_LEVELS: list[str] = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ConfigLoaderError(Exception):
    """An error occurred while processing the configuration file."""


class ConfigFileNotFoundError(ConfigLoaderError):
    """The specified configuration file does not exist."""


class ConfigFormatError(ConfigLoaderError):
    """The configuration file is not formatted correctly."""


class ConfigValueError(ConfigFormatError):
    """The configuration file contains an invalid value."""


class ConfigTypeError(ConfigFormatError):
    """The configuration file contains an invalid type."""


class ConfigLoader:
    """Handles loading and validation of configuration settings.

    This class reads the configuration file, applies formatting rules, and validates settings.
    It raises exceptions for any issues encountered during the loading process.

    Fixed sections (GENERAL, TRANSLATION, CACHE) map onto the dataclasses in
    ``models.config_models``. Every ``[ADAPTER.<name>]`` section is read into an
    ``AdapterSettings`` entry of ``Config.ADAPTERS`` keyed by the lowercase adapter name.

    Args:
        config_filename (str): INI file name to load.
        script_name (str): Executing script name, used in error messaging.
        debug (bool): Optional override enabling debug logging.
        log_level (str): Optional override for GENERAL.LOG_LEVEL.

    Raises:
        ConfigFileNotFoundError: If the configuration file does not exist.
        ConfigFormatError: If the file cannot be parsed or contains invalid values/types.
    """

    def __init__(
        self,
        *,
        config_filename: str,
        script_name: str,
        **args,
    ) -> None:
        config_path = Path(config_filename)
        msg: str
        if not config_path.exists():
            msg = (
                f"Configuration file '{config_filename}' not found. "
                f"Please create '{config_filename}' in the same directory as '{script_name}'."
            )
            raise ConfigFileNotFoundError(msg)

        # Option keys are matched against the upper-case dataclass field names.
        parser: ConfigParser = ConfigParser()
        parser.optionxform = str.upper  # type: ignore[assignment,method-assign]

        try:
            parser.read(config_filename, encoding="utf-8")
        except configparser.Error as err:
            msg = f"Failed to parse configuration file '{config_filename}': {err}"
            raise ConfigFormatError(msg) from None

        self.config = Config()
        self._convert_settings(parser)
        self.config.ADAPTERS = self._get_adapter_settings(parser)
        # Apply command-line argument overrides
        if args.get("debug", False):
            self.config.GENERAL.DEBUG = True
        if args.get("log_level") is not None:
            self.config.GENERAL.LOG_LEVEL = str(args["log_level"]).upper()
        self._validate_settings()

    def _convert_settings(self, parser: ConfigParser) -> None:
        """Convert configuration settings from the parser to the Config object.

        This method iterates through each fixed section in the Config object,
        applying the appropriate formatting based on the field type.

        Args:
            parser (ConfigParser): Parsed INI data.

        Raises:
            ConfigFormatError: If a value cannot be parsed or coerced to the expected type.
        """
        formatter = _ConfigFormatter(parser)
        for section in fields(self.config):
            # ADAPTERS is assembled from the ADAPTER.<name> sections afterwards.
            if section.name == "ADAPTERS":
                continue
            self._convert_section_field(parser, formatter, section.name, getattr(self.config, section.name))

    def _convert_section_field(
        self, parser: ConfigParser, formatter: _ConfigFormatter, section_name: str, target: Any
    ) -> None:
        """Convert all fields in a configuration section.

        Iterates through each field of ``target``, formats its value from the INI parser,
        and assigns it to the corresponding attribute.

        Args:
            parser (ConfigParser): Parsed INI data.
            formatter (_ConfigFormatter): Formatter used to coerce string values to typed values.
            section_name (str): INI section name to read from.
            target (Any): Dataclass instance receiving the values.

        Raises:
            ConfigFormatError: If a value fails to format correctly.
        """
        if not parser.has_section(section_name):
            logger.debug("Skipping undefined section: '%s'", section_name)
            return

        for key in fields(target):
            if not parser.has_option(section_name, key.name):
                logger.debug("Skipping undefined setting: '%s.%s'", section_name, key.name)
                continue

            formatted_value = formatter.apply_format(section_name, target, key)
            setattr(target, key.name, formatted_value)

    def _get_adapter_settings(self, parser: ConfigParser) -> dict[str, AdapterSettings]:
        """Build per-adapter settings from every ``[ADAPTER.<name>]`` section.

        Args:
            parser (ConfigParser): Parsed INI data.

        Returns:
            dict[str, AdapterSettings]: Settings keyed by lowercase adapter name.

        Raises:
            ConfigValueError: If an adapter section has no name or is defined twice.
        """
        formatter = _ConfigFormatter(parser)
        adapters: dict[str, AdapterSettings] = {}
        for section_name in parser.sections():
            if not section_name.upper().startswith(ADAPTER_SECTION_PREFIX):
                continue

            adapter_name: str = section_name[len(ADAPTER_SECTION_PREFIX) :].strip().lower()
            if not adapter_name:
                msg = f"Adapter section '{section_name}' has no adapter name"
                raise ConfigValueError(msg)
            if adapter_name in adapters:
                msg = f"Adapter '{adapter_name}' is configured more than once"
                raise ConfigValueError(msg)

            settings = AdapterSettings()
            self._convert_section_field(parser, formatter, section_name, settings)
            adapters[adapter_name] = settings
            logger.debug("Loaded settings for adapter '%s' (priority=%d)", adapter_name, settings.PRIORITY)
        return adapters

    def _validate_settings(self) -> None:
        """Validate logging, translation, cache, and adapter settings.

        Raises:
            ConfigFormatError: If validation fails for any setting.
        """
        try:
            self._inspect_defined_item("TRANSLATION", "ADAPTERS", KNOWN_ADAPTERS)
            self._validate_choice("CACHE", "BACKEND", ALLOWED_CACHE_BACKENDS)
            self._validate_choice("GENERAL", "LOG_LEVEL", ALLOWED_LOG_LEVELS)
            self._validate_positive("TRANSLATION", "CACHE_TTL_DAYS")
            self._validate_positive("TRANSLATION", "ADAPTER_TIMEOUT")
            self._validate_target_language()
            for adapter_name, settings in self.config.ADAPTERS.items():
                self._validate_base_url(adapter_name, settings)
        except (NameError, SyntaxError, AttributeError, TypeError) as err:
            msg: str = f"Invalid configuration value: {err}"
            raise ConfigFormatError(msg) from None

    def _inspect_defined_item(self, section_name: str, key_name: str, defined_list: list[str]) -> None:
        """Verify that configuration values match known options.

        Logs warnings for unrecognized values but does not raise exceptions, so that
        third-party adapters can still be enabled by name.

        Args:
            section_name (str): Section name in the config model.
            key_name (str): Field name to inspect.
            defined_list (list[str]): Known values.

        Raises:
            ConfigTypeError: If the configured value is neither list nor str.
        """
        value: str | list[str] = getattr(getattr(self.config, section_name), key_name)
        field_name: str = f"{section_name}.{key_name}"

        if isinstance(value, (list, str)):
            values: list[str] = value if isinstance(value, list) else [value]
            for val in values:
                if val not in defined_list:
                    logger.warning("Unknown value '%s' is set for '%s'", val, field_name)
            setattr(getattr(self.config, section_name), key_name, [str(val).lower() for val in values])
        else:
            msg: str = f"Unsupported type used for '{field_name}': {type(value)}"
            raise ConfigTypeError(msg)

    def _validate_choice(self, section_name: str, key_name: str, allowed: list[str]) -> None:
        """Validate that a string setting is one of the allowed values (case-insensitive).

        Raises:
            ConfigValueError: If the value is not allowed.
        """
        value: str = getattr(getattr(self.config, section_name), key_name)
        field_name: str = f"{section_name}.{key_name}"
        allowed_map: dict[str, str] = {item.lower(): item for item in allowed}

        if not isinstance(value, str) or value.lower() not in allowed_map:
            msg: str = f"Unsupported value used for '{field_name}': {value}"
            raise ConfigValueError(msg)
        setattr(getattr(self.config, section_name), key_name, allowed_map[value.lower()])

    def _validate_positive(self, section_name: str, key_name: str) -> None:
        """Validate that a numeric setting is greater than zero.

        Raises:
            ConfigValueError: If the value is zero or negative.
        """
        value: float = getattr(getattr(self.config, section_name), key_name)
        if value <= 0:
            msg: str = f"'{section_name}.{key_name}' must be greater than zero: {value}"
            raise ConfigValueError(msg)

    def _validate_target_language(self) -> None:
        """Warn when the default target language is not a two-letter code.

        Longer codes are accepted but will be truncated by the language normaliser.
        """
        value: str = self.config.TRANSLATION.DEFAULT_TARGET_LANGUAGE
        if value and len(value) != 2:
            logger.warning(
                "'TRANSLATION.DEFAULT_TARGET_LANGUAGE' is '%s'; it will be truncated to '%s'",
                value,
                value.lower()[:2],
            )

    def _validate_base_url(self, adapter_name: str, settings: AdapterSettings) -> None:
        """Validate that a configured base URL uses http or https.

        Raises:
            ConfigValueError: If the URL scheme or host is invalid.
        """
        if not settings.BASE_URL:
            return
        parsed = urlparse(settings.BASE_URL)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            msg: str = f"Invalid BASE_URL for adapter '{adapter_name}': {settings.BASE_URL}"
            raise ConfigValueError(msg)


class _ConfigFormatter:
    """Converts INI string values to typed Python objects (bool, int, float, str, list)."""

    def __init__(self, parser: ConfigParser) -> None:
        self.parser: ConfigParser = parser

    def apply_format(self, section_name: str, target: Any, key: DataclassField[Any]) -> Any:
        """Convert INI value to the expected Python type based on the dataclass field type.

        Args:
            section_name (str): INI section containing the key.
            target (Any): Dataclass instance whose current value decides the type.
            key (DataclassField[Any]): Target field within the section.

        Returns:
            Any: Parsed value coerced to the type declared in the config dataclass.

        Raises:
            ConfigValueError: If a value cannot be coerced to the expected type.
            ConfigFormatError: If literal evaluation fails due to invalid syntax.
            ConfigTypeError: If an unexpected type is encountered during coercion.
        """
        formatters: dict[type[bool | int | float], Callable[[str, str], bool | int | float]] = {
            bool: self.parse_as_boolean,
            int: self.parse_as_integer,
            float: self.parse_as_float,
        }

        formatter: Callable[[str, str], bool | int | float] | None = formatters.get(type(getattr(target, key.name)))
        if formatter:
            try:
                return formatter(section_name, key.name)
            except ValueError as err:
                msg = f"Invalid value for {section_name}.{key.name}: {err}"
                raise ConfigValueError(msg) from err
            except TypeError as err:
                msg = f"Invalid value for {section_name}.{key.name}: {err}"
                raise ConfigTypeError(msg) from err

        value_str: str = self.parser.get(section_name, key.name)
        try:
            value: Any = ast.literal_eval(value_str)
        except ValueError as err:
            msg = f"Invalid literal for {section_name}.{key.name}: {value_str}"
            raise ConfigValueError(msg) from err
        except SyntaxError as err:
            msg = f"Invalid literal for {section_name}.{key.name}: {value_str}"
            raise ConfigFormatError(msg) from err

        expected: type = type(getattr(target, key.name))
        if not isinstance(value, expected):
            msg = f"Expected {expected.__name__} for {section_name}.{key.name}, got {type(value).__name__}"
            raise ConfigTypeError(msg)
        return value

    def parse_as_float(self, section_name: str, key_name: str) -> float:
        """Convert INI string to float."""
        value: str = self.parser.get(section_name, key_name)
        for char in ("'", '"'):
            value = value.removeprefix(char).removesuffix(char)
        return float(value)

    def parse_as_integer(self, section_name: str, key_name: str) -> int:
        """Convert INI string to integer."""
        value: str = self.parser.get(section_name, key_name)
        for char in ("'", '"'):
            value = value.removeprefix(char).removesuffix(char)
        return int(float(value))

    def parse_as_boolean(self, section_name: str, key_name: str) -> bool:
        """Convert INI string to boolean."""
        return self.parser.getboolean(section_name, key_name)
