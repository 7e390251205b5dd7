"""Models for cached translation data.

Defines the persisted CachedEntry shape and its format version. Entries are written once and
never repaired: an entry carrying a different version is ignored and treated as a miss.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, Final

from dataclasses_json import DataClassJsonMixin, config, dataclass_json

__all__: list[str] = ["CACHE_FORMAT_VERSION", "CachedEntry", "CachedEntryFormatError"]

# Increment when the persisted shape changes.
CACHE_FORMAT_VERSION: Final[int] = 1
# Entries written before the version field existed.
_UNVERSIONED: Final[int] = 0


class CachedEntryFormatError(ValueError):
    """A cached payload could not be decoded into a CachedEntry."""


def _decode_alternatives(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        msg: str = f"'alternatives' is not a list: {type(value).__name__}"
        raise TypeError(msg)
    return tuple(str(a) for a in value)


@dataclass_json
@dataclass(frozen=True)
class CachedEntry(DataClassJsonMixin):
    """Translation result as stored in the external cache.

    Attributes:
        original_text (str): Text before translation.
        source_lang (str): Detected (or requested) source language.
        target_lang (str): Target language code.
        translated_text (str): Primary translation.
        service (str): Name of the provider that produced the translation.
        alternatives (tuple[str, ...]): Alternative translations, excluding the primary one.
        model (str): Model identifier, if any.
        cached_at (int): Write time in epoch milliseconds.
        version (int): Format version of this entry.
    """

    original_text: str = ""
    source_lang: str = ""
    target_lang: str = ""
    translated_text: str = ""
    service: str = ""
    alternatives: tuple[str, ...] = field(
        default_factory=tuple,
        metadata=config(exclude=lambda v: not v, decoder=_decode_alternatives),
    )
    model: str = field(default="", metadata=config(exclude=lambda v: not v))
    cached_at: int = 0
    version: int = CACHE_FORMAT_VERSION

    def __post_init__(self) -> None:
        for name in ("original_text", "source_lang", "target_lang", "translated_text", "service", "model"):
            if not isinstance(getattr(self, name), str):
                msg: str = f"'{name}' is not a string"
                raise TypeError(msg)
        if not isinstance(self.alternatives, tuple):
            msg = "'alternatives' is not a tuple"
            raise TypeError(msg)
        for name in ("cached_at", "version"):
            value: Any = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                msg = f"'{name}' is not an integer"
                raise TypeError(msg)

    @staticmethod
    def now_millis() -> int:
        return time.time_ns() // 1_000_000

    @property
    def is_current(self) -> bool:
        return self.version == CACHE_FORMAT_VERSION

    def to_bytes(self) -> bytes:
        return self.to_json(ensure_ascii=False).encode("utf-8")

    @classmethod
    def from_bytes(cls, payload: bytes) -> CachedEntry:
        """Decode a stored payload.

        Missing string fields decode as empty strings and a missing version as 0, so that
        entries written by an older format never pass the version check.

        Raises:
            CachedEntryFormatError: If the payload is not valid JSON or has the wrong shape.
        """
        try:
            data: Any = json.loads(payload)
        except ValueError as err:
            msg: str = f"cached payload is not valid JSON: {err}"
            raise CachedEntryFormatError(msg) from err

        if not isinstance(data, dict):
            msg = f"cached payload is not an object: {type(data).__name__}"
            raise CachedEntryFormatError(msg)

        data.setdefault("version", _UNVERSIONED)
        try:
            return cls.from_dict(data, infer_missing=True)
        except (KeyError, TypeError, ValueError) as err:
            msg = f"cached payload has an invalid field: {err}"
            raise CachedEntryFormatError(msg) from err
