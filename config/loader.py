"""Configuration file loader and validator.

Reads the INI configuration file, applies environment variable overrides and builds the frozen
Config object. Raises exceptions for any issues encountered during loading.
"""

from __future__ import annotations

import ast
import configparser
import os
import re
from configparser import ConfigParser
from dataclasses import fields
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from models.config_models import CacheSettings, Config, General, TranslationSettings
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable, Mapping

__all__: list[str] = [
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigLoaderError",
    "ConfigTypeError",
    "ConfigValueError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

ALLOWED_SERVICE_TYPES: Final[list[str]] = ["deeplx", "baidu", "youdao", "google", "custom"]

_SECTIONS: Final[dict[str, type]] = {
    "GENERAL": General,
    "TRANSLATION": TranslationSettings,
    "CACHE": CacheSettings,
}

# Environment variable -> (section, key). Earlier variables win when several are set.
_ENV_OVERRIDES: Final[list[tuple[tuple[str, ...], str, str]]] = [
    (("TRANSLATION_SERVICE", "DEEPLX_SERVICE"), "TRANSLATION", "SERVICE_TYPE"),
    (("TRANSLATION_API_KEY", "DEEPLX_API_KEY"), "TRANSLATION", "API_KEY"),
    (("TRANSLATION_BASE_URL", "DEEPLX_BASE_URL"), "TRANSLATION", "BASE_URL"),
    (("TRANSLATION_MODEL", "DEEPLX_MODEL"), "TRANSLATION", "MODEL"),
    (("CACHE_ENABLED",), "CACHE", "ENABLED"),
    (("CACHE_ADDR",), "CACHE", "ADDR"),
    (("CACHE_PASSWORD",), "CACHE", "PASSWORD"),
    (("CACHE_DB",), "CACHE", "DB"),
    (("CACHE_TTL",), "CACHE", "TTL"),
    (("CACHE_SHARE_ACROSS_SERVICES",), "CACHE", "SHARE_ACROSS_SERVICES"),
]

_DURATION_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$", re.IGNORECASE)
_DURATION_UNITS: Final[dict[str, float]] = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


class ConfigLoaderError(Exception):
    """An error occurred while processing the configuration."""


class ConfigFileNotFoundError(ConfigLoaderError):
    """The specified configuration file does not exist."""


class ConfigFormatError(ConfigLoaderError):
    """The configuration file is not formatted correctly."""


class ConfigValueError(ConfigFormatError):
    """The configuration contains an invalid value."""


class ConfigTypeError(ConfigFormatError):
    """The configuration contains an invalid type."""


class ConfigLoader:
    """Handles loading and validation of configuration settings.

    Values are resolved in this order: dataclass defaults, INI file, environment variables,
    keyword overrides.

    Args:
        config_filename (str | None): INI file to load. None skips the file and uses defaults.
        env (Mapping[str, str] | None): Environment to read overrides from. Defaults to os.environ.
        **args: Keyword overrides. Supported: 'debug' (bool), 'api_key' (str).

    Raises:
        ConfigFileNotFoundError: If a file name is given and the file does not exist.
        ConfigFormatError: If the file cannot be parsed or contains invalid values/types.
    """

    def __init__(
        self,
        *,
        config_filename: str | None = None,
        env: Mapping[str, str] | None = None,
        **args,
    ) -> None:
        parser: ConfigParser = ConfigParser()

        if config_filename is not None:
            if not Path(config_filename).exists():
                msg: str = f"Configuration file '{config_filename}' not found."
                raise ConfigFileNotFoundError(msg)
            try:
                parser.read(config_filename, encoding="utf-8")
            except configparser.Error as err:
                msg = f"Failed to parse configuration file '{config_filename}': {err}"
                raise ConfigFormatError(msg) from None

        formatter = _ConfigFormatter()
        self._values: dict[str, dict[str, Any]] = {name: {} for name in _SECTIONS}
        self._convert_settings(parser, formatter)
        self._apply_env_overrides(os.environ if env is None else env, formatter)

        if args.get("debug", False):
            self._values["GENERAL"]["DEBUG"] = True
        if args.get("api_key"):
            self._values["TRANSLATION"]["API_KEY"] = args["api_key"]

        self.config: Config = Config(
            GENERAL=General(**self._values["GENERAL"]),
            TRANSLATION=TranslationSettings(**self._values["TRANSLATION"]),
            CACHE=CacheSettings(**self._values["CACHE"]),
        )
        self._validate_settings()

    def _convert_settings(self, parser: ConfigParser, formatter: _ConfigFormatter) -> None:
        """Collect typed values for every known section field present in the INI data.

        Raises:
            ConfigFormatError: If a value cannot be coerced to the expected type.
        """
        for section_name, section_cls in _SECTIONS.items():
            if not parser.has_section(section_name):
                logger.debug("Skipping undefined section: '%s'", section_name)
                continue
            for key in fields(section_cls):
                if not parser.has_option(section_name, key.name):
                    logger.debug("Skipping undefined setting: '%s.%s'", section_name, key.name)
                    continue
                raw: str = parser.get(section_name, key.name)
                self._values[section_name][key.name] = formatter.apply_format(
                    f"{section_name}.{key.name}", key.default, raw
                )

        for section_name in parser.sections():
            if section_name not in _SECTIONS:
                logger.warning("Unknown configuration section '%s' ignored", section_name)

    def _apply_env_overrides(self, env: Mapping[str, str], formatter: _ConfigFormatter) -> None:
        """Apply environment variable overrides on top of the file values."""
        for names, section_name, key_name in _ENV_OVERRIDES:
            raw: str = next((env[n].strip() for n in names if env.get(n, "").strip()), "")
            if not raw:
                continue
            default: Any = getattr(_SECTIONS[section_name](), key_name)
            self._values[section_name][key_name] = formatter.apply_format(
                f"{section_name}.{key_name}", default, raw, quoted=False
            )
            logger.debug("Setting '%s.%s' overridden from environment", section_name, key_name)

    def _validate_settings(self) -> None:
        """Validate value ranges and known identifiers.

        Raises:
            ConfigValueError: If a numeric setting is out of range.
        """
        self._inspect_defined_item(self.config.TRANSLATION.SERVICE_TYPE.lower(), "TRANSLATION.SERVICE_TYPE")

        if self.config.CACHE.TTL < 0:
            msg: str = f"'CACHE.TTL' must not be negative: {self.config.CACHE.TTL}"
            raise ConfigValueError(msg)
        if self.config.TRANSLATION.MAX_RETRIES < 0:
            msg = f"'TRANSLATION.MAX_RETRIES' must not be negative: {self.config.TRANSLATION.MAX_RETRIES}"
            raise ConfigValueError(msg)

    def _inspect_defined_item(self, value: str, field_name: str) -> None:
        """Log a warning for unrecognized values but do not raise."""
        if value not in ALLOWED_SERVICE_TYPES:
            logger.warning("Unknown value '%s' is set for '%s'", value, field_name)

    def validate_for_translation(self) -> None:
        """Check the settings needed to reach the upstream provider.

        Raises:
            ConfigValueError: If the API key is not set.
        """
        if not self.config.TRANSLATION.API_KEY.strip():
            msg = "'TRANSLATION.API_KEY' is not set"
            raise ConfigValueError(msg)


class _ConfigFormatter:
    """Converts INI string values to typed Python objects (bool, int, float, str)."""

    def apply_format(self, field_name: str, default: Any, raw: str, *, quoted: bool = True) -> Any:
        """Convert a raw string to the type of the field default.

        Args:
            field_name (str): 'SECTION.KEY', used in error messages.
            default (Any): Field default; its type selects the conversion.
            raw (str): Raw value from the INI file or environment.
            quoted (bool): Strings may be written as Python literals (INI style).

        Returns:
            Any: Parsed value.

        Raises:
            ConfigValueError: If the value cannot be coerced to the expected type.
            ConfigFormatError: If literal evaluation fails due to invalid syntax.
        """
        formatters: dict[type, Callable[[str], Any]] = {
            bool: self.parse_as_boolean,
            int: self.parse_as_integer,
            float: self.parse_as_seconds,
        }

        formatter: Callable[[str], Any] | None = formatters.get(type(default))
        if formatter:
            try:
                return formatter(raw)
            except ValueError as err:
                msg = f"Invalid value for {field_name}: {err}"
                raise ConfigValueError(msg) from err

        value_str: str = raw.strip()
        if not quoted or not value_str or value_str[0] not in ("'", '"'):
            return value_str
        try:
            value: Any = ast.literal_eval(value_str)
        except ValueError as err:
            msg = f"Invalid literal for {field_name}: {value_str}"
            raise ConfigValueError(msg) from err
        except SyntaxError as err:
            msg = f"Invalid literal for {field_name}: {value_str}"
            raise ConfigFormatError(msg) from err
        if not isinstance(value, str):
            msg = f"Unsupported type used for '{field_name}': {type(value)}"
            raise ConfigTypeError(msg)
        return value

    @staticmethod
    def _unquote(value: str) -> str:
        value = value.strip()
        for char in ("'", '"'):
            value = value.removeprefix(char).removesuffix(char)
        return value

    def parse_as_seconds(self, raw: str) -> float:
        """Convert a number of seconds or a duration such as '24h', '30m', '1.5s', '200ms'."""
        value: str = self._unquote(raw)
        match: re.Match[str] | None = _DURATION_PATTERN.match(value)
        if match is None:
            msg: str = f"could not convert '{value}' to seconds"
            raise ValueError(msg)
        number, unit = match.groups()
        return float(number) * _DURATION_UNITS[(unit or "s").lower()]

    def parse_as_integer(self, raw: str) -> int:
        return int(float(self._unquote(raw)))

    def parse_as_boolean(self, raw: str) -> bool:
        """Accept the ConfigParser boolean words (1/0, yes/no, true/false, on/off). Empty is False."""
        value: str = self._unquote(raw).lower()
        if not value:
            return False
        if value not in ConfigParser.BOOLEAN_STATES:
            msg: str = f"not a boolean: '{value}'"
            raise ValueError(msg)
        return ConfigParser.BOOLEAN_STATES[value]


if __name__ == "__main__":
    import pprint

    pprint.pprint(ConfigLoader(config_filename="translate.ini").config, indent=1, width=100)
