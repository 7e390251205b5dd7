"""Utility modules for the translation gateway.

This package provides logging set-up and language code helpers.
"""

from utils.lang_utils import LangUtils
from utils.logger_utils import LoggerUtils

__all__: list[str] = ["LangUtils", "LoggerUtils"]
