"""Models for translation requests and upstream results.

Defines the immutable TranslationRequest handed to providers, the FieldToken set that selects
optional response blocks, and the TranslationOutcome produced by one logical upstream call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from dataclasses_json import DataClassJsonMixin, config, dataclass_json

__all__: list[str] = [
    "DEFAULT_FIELDS",
    "FIELD_ALIASES",
    "FieldToken",
    "TranslationOutcome",
    "TranslationRequest",
    "UpstreamPayload",
]


class FieldToken(StrEnum):
    """Requested data blocks, using the Google 'dt' wire codes."""

    TRANSLATE = "t"
    ROMANIZE = "rm"
    DICTIONARY = "bd"
    SPELLCHECK = "qca"
    EXAMPLES = "ex"


DEFAULT_FIELDS: frozenset[str] = frozenset({FieldToken.TRANSLATE.value})

# Long names accepted in place of the wire codes.
FIELD_ALIASES: dict[str, str] = {
    "translate": FieldToken.TRANSLATE.value,
    "romanize": FieldToken.ROMANIZE.value,
    "dictionary": FieldToken.DICTIONARY.value,
    "spellcheck": FieldToken.SPELLCHECK.value,
    "examples": FieldToken.EXAMPLES.value,
}


@dataclass(frozen=True)
class TranslationRequest:
    """A single translation request.

    Attributes:
        text (str): Text to translate.
        target_lang (str): Target language code. Must not be empty.
        source_lang (str): Source language code. Empty or 'auto' lets the provider detect it.
        fields (frozenset[str]): Requested field tokens (see FieldToken), as wire codes or long names
            such as "translate". Empty means translation only.
        model (str): Optional model identifier forwarded to the provider.
    """

    text: str
    target_lang: str
    source_lang: str = ""
    fields: frozenset[str] = DEFAULT_FIELDS
    model: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.target_lang, str) or not self.target_lang.strip():
            msg = "target language must not be empty"
            raise ValueError(msg)
        # plain wire codes, so FieldToken members, codes and long names compare alike
        object.__setattr__(self, "fields", frozenset(FIELD_ALIASES.get(str(f), str(f)) for f in self.fields))
        if not self.fields:
            object.__setattr__(self, "fields", DEFAULT_FIELDS)

    def wants(self, token: FieldToken) -> bool:
        return token.value in self.fields


def _decode_alternatives(value: Any) -> list[str]:
    if not isinstance(value, list):
        msg: str = "'alternatives' is not a list"
        raise TypeError(msg)
    return [str(a) for a in value if a]


@dataclass_json
@dataclass
class UpstreamPayload(DataClassJsonMixin):
    """Decoded DeepLX response body, kept for diagnostics and provider-native alternatives."""

    data: str = ""
    source_lang: str = ""
    target_lang: str = ""
    alternatives: list[str] = field(default_factory=list, metadata=config(decoder=_decode_alternatives))
    code: int = 0
    id: int = 0
    method: str = ""

    @classmethod
    def from_body(cls, body: Any) -> UpstreamPayload:
        """Build a payload from the decoded JSON body. Null fields count as absent.

        Raises:
            TypeError: If the body is not a JSON object or a field has the wrong type.
        """
        if not isinstance(body, dict):
            msg: str = f"unexpected response body type: {type(body).__name__}"
            raise TypeError(msg)
        cleaned: dict[str, Any] = {k: v for k, v in body.items() if v is not None}
        # from_dict would coerce a non-string translation to text
        if not isinstance(cleaned.get("data", ""), str):
            msg = "'data' is not a string"
            raise TypeError(msg)
        return cls.from_dict(cleaned, infer_missing=True)


@dataclass
class TranslationOutcome:
    """Result of one logical upstream translation (all attempts included).

    Exactly one of translated_text / error_message is meaningful, selected by success.

    Attributes:
        success (bool): Whether the provider returned a translation.
        translated_text (str): Translated text on success.
        source_lang (str): Source language reported by the provider.
        target_lang (str): Target language reported by the provider.
        error_message (str): Last observed error on failure.
        raw (UpstreamPayload | None): Decoded provider payload on success.
        cancelled (bool): The caller's deadline fired before an attempt could start.
        retryable (bool): The last failure was transient and retries were exhausted.
    """

    success: bool
    translated_text: str = ""
    source_lang: str = ""
    target_lang: str = ""
    error_message: str = ""
    raw: UpstreamPayload | None = None
    cancelled: bool = False
    retryable: bool = False

    @classmethod
    def failure(cls, message: str, *, cancelled: bool = False, retryable: bool = False) -> TranslationOutcome:
        return cls(success=False, error_message=message, cancelled=cancelled, retryable=retryable)
