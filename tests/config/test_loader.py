from __future__ import annotations

from textwrap import dedent
from typing import TYPE_CHECKING

import pytest

from config.loader import (
    ConfigFileNotFoundError,
    ConfigFormatError,
    ConfigLoader,
    ConfigTypeError,
    ConfigValueError,
)
from models.config_models import CacheSettings, TranslationSettings

if TYPE_CHECKING:
    from pathlib import Path


def _write_ini(tmp_path: Path, content: str) -> Path:
    ini_path: Path = tmp_path / "translate.ini"
    ini_path.write_text(dedent(content), encoding="utf-8")
    return ini_path


def test_config_loader_raises_for_missing_file(tmp_path: Path) -> None:
    ini_path: Path = tmp_path / "missing.ini"
    with pytest.raises(ConfigFileNotFoundError):
        ConfigLoader(config_filename=str(ini_path), env={})


def test_config_loader_uses_defaults_without_file() -> None:
    loader = ConfigLoader(env={})

    assert loader.config.TRANSLATION == TranslationSettings()
    assert loader.config.CACHE == CacheSettings()
    assert loader.config.TRANSLATION.TIMEOUT == 10.0
    assert loader.config.TRANSLATION.MAX_RETRIES == 2
    assert loader.config.CACHE.ASYNC_WRITE_TIMEOUT == 5.0


def test_config_loader_reads_typed_values(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [GENERAL]
        DEBUG = yes

        [TRANSLATION]
        SERVICE_TYPE = deeplx
        API_KEY = "sk-abc"
        BASE_URL = https://example.com/translate/
        TIMEOUT = 1500ms
        MAX_RETRIES = 3
        RETRY_STEP = 0.5

        [CACHE]
        ENABLED = true
        ADDR = redis:6380
        DB = 2
        TTL = 24h
        SHARE_ACROSS_SERVICES = off
        """,
    )

    config = ConfigLoader(config_filename=str(ini_path), env={}).config

    assert config.GENERAL.DEBUG is True
    assert config.TRANSLATION.API_KEY == "sk-abc"
    assert config.TRANSLATION.BASE_URL == "https://example.com/translate/"
    assert config.TRANSLATION.TIMEOUT == pytest.approx(1.5)
    assert config.TRANSLATION.MAX_RETRIES == 3
    assert config.TRANSLATION.RETRY_STEP == pytest.approx(0.5)
    assert config.CACHE.ENABLED is True
    assert config.CACHE.ADDR == "redis:6380"
    assert config.CACHE.DB == 2
    assert config.CACHE.TTL == pytest.approx(86400.0)
    assert config.CACHE.SHARE_ACROSS_SERVICES is False


def test_environment_overrides_file_values(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        API_KEY = "sk-file"
        MODEL = "file-model"

        [CACHE]
        TTL = 10
        """,
    )
    env: dict[str, str] = {
        "DEEPLX_API_KEY": "sk-env",
        "TRANSLATION_MODEL": "env-model",
        "DEEPLX_MODEL": "ignored-model",
        "CACHE_ENABLED": "1",
        "CACHE_TTL": "30m",
        "CACHE_DB": "4",
    }

    config = ConfigLoader(config_filename=str(ini_path), env=env).config

    assert config.TRANSLATION.API_KEY == "sk-env"
    assert config.TRANSLATION.MODEL == "env-model"
    assert config.CACHE.ENABLED is True
    assert config.CACHE.TTL == pytest.approx(1800.0)
    assert config.CACHE.DB == 4


def test_keyword_overrides_win(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        API_KEY = "sk-file"
        """,
    )

    config = ConfigLoader(config_filename=str(ini_path), env={}, api_key="sk-arg", debug=True).config

    assert config.TRANSLATION.API_KEY == "sk-arg"
    assert config.GENERAL.DEBUG is True


def test_config_is_immutable() -> None:
    config = ConfigLoader(env={}).config

    with pytest.raises(AttributeError):
        config.CACHE.TTL = 5.0  # type: ignore[misc]


def test_invalid_number_raises_value_error(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        TIMEOUT = soon
        """,
    )

    with pytest.raises(ConfigValueError):
        ConfigLoader(config_filename=str(ini_path), env={})


def test_invalid_boolean_raises_value_error() -> None:
    with pytest.raises(ConfigValueError):
        ConfigLoader(env={"CACHE_ENABLED": "maybe"})


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("yes", True),
        ("On", True),
        ("'1'", True),
        ("TRUE", True),
        ("no", False),
        ("off", False),
        ("0", False),
        ("", False),
    ],
)
def test_parse_as_boolean_accepts_configparser_words(raw: str, expected: bool) -> None:
    assert ConfigLoader(env={}).parse_as_boolean(raw) is expected


@pytest.mark.parametrize("raw", ["maybe", "t", "y", "2", "enabled"])
def test_parse_as_boolean_rejects_other_words(raw: str) -> None:
    with pytest.raises(ValueError, match="not a boolean"):
        ConfigLoader(env={}).parse_as_boolean(raw)


def test_negative_retry_count_is_rejected(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        MAX_RETRIES = -1
        """,
    )

    with pytest.raises(ConfigValueError):
        ConfigLoader(config_filename=str(ini_path), env={})


def test_non_string_literal_raises_type_error(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        MODEL = 'a', 'b'
        """,
    )

    with pytest.raises(ConfigTypeError):
        ConfigLoader(config_filename=str(ini_path), env={})


def test_malformed_file_raises_format_error(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        API_KEY = "sk-no-section"
        """,
    )

    with pytest.raises(ConfigFormatError):
        ConfigLoader(config_filename=str(ini_path), env={})


def test_unknown_service_type_only_warns(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        SERVICE_TYPE = babelfish
        """,
    )

    config = ConfigLoader(config_filename=str(ini_path), env={}).config

    assert config.TRANSLATION.SERVICE_TYPE == "babelfish"
    assert any("babelfish" in rec.getMessage() for rec in caplog.records)


def test_validate_for_translation_requires_api_key() -> None:
    with pytest.raises(ConfigValueError):
        ConfigLoader(env={}).validate_for_translation()

    ConfigLoader(env={"TRANSLATION_API_KEY": "sk-ok"}).validate_for_translation()


def test_config_type_error_is_a_format_error() -> None:
    assert issubclass(ConfigTypeError, ConfigFormatError)
