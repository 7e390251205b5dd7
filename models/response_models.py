"""Canonical response schema returned to every caller.

The shape follows the Google Translate 'single' endpoint so that existing clients (browser
extensions and similar) can consume it unchanged. Field presence is part of the contract:
blocks that were not requested are omitted from the JSON, never emitted empty.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from dataclasses_json import DataClassJsonMixin, Exclude, config, dataclass_json

__all__: list[str] = [
    "Alternative",
    "AlternativeTranslation",
    "CanonicalResponse",
    "DictEntry",
    "Dictionary",
    "Example",
    "Examples",
    "LabelInfo",
    "LanguageDetectionResult",
    "Sentence",
    "SpellCheck",
]


def _is_empty(value: Any) -> bool:
    return not value


def _is_none(value: Any) -> bool:
    return value is None


# every sentence field is optional on the wire
_OPTIONAL: dict[str, dict] = config(exclude=_is_empty)


@dataclass_json
@dataclass
class Sentence(DataClassJsonMixin):
    orig: str = field(default="", metadata=_OPTIONAL)
    trans: str = field(default="", metadata=_OPTIONAL)
    backend: int = field(default=0, metadata=_OPTIONAL)
    src_translit: str = field(default="", metadata=_OPTIONAL)
    translit: str = field(default="", metadata=_OPTIONAL)


@dataclass_json
@dataclass
class DictEntry(DataClassJsonMixin):
    word: str
    reverse_translation: list[str] = field(default_factory=list)
    score: float = 0.0


@dataclass_json
@dataclass
class Dictionary(DataClassJsonMixin):
    pos: str
    entry: list[DictEntry] = field(default_factory=list)


@dataclass_json
@dataclass
class SpellCheck(DataClassJsonMixin):
    spell_res: str


@dataclass_json
@dataclass
class LanguageDetectionResult(DataClassJsonMixin):
    """Detected languages with their confidences. Both lists always have the same length."""

    srclangs: list[str] = field(default_factory=list)
    srclangs_confidences: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.srclangs) != len(self.srclangs_confidences):
            msg: str = (
                f"srclangs and srclangs_confidences differ in length "
                f"({len(self.srclangs)} != {len(self.srclangs_confidences)})"
            )
            raise ValueError(msg)

    @classmethod
    def single(cls, lang: str, confidence: float) -> LanguageDetectionResult:
        return cls(srclangs=[lang], srclangs_confidences=[confidence])


@dataclass_json
@dataclass
class Alternative(DataClassJsonMixin):
    word_postproc: str
    score: float = 0.0
    has_preceding_space: bool = False
    attach_to_next_token: bool = False


@dataclass_json
@dataclass
class AlternativeTranslation(DataClassJsonMixin):
    src_phrase: str
    raw_src_segment: str = ""
    alternative: list[Alternative] = field(default_factory=list)


@dataclass_json
@dataclass
class LabelInfo(DataClassJsonMixin):
    subject: list[str] = field(default_factory=list)


@dataclass_json
@dataclass
class Example(DataClassJsonMixin):
    text: str
    source_type: int = 0
    label_info: LabelInfo | None = field(default=None, metadata=config(exclude=_is_none))


@dataclass_json
@dataclass
class Examples(DataClassJsonMixin):
    example: list[Example] = field(default_factory=list)


@dataclass_json
@dataclass
class CanonicalResponse(DataClassJsonMixin):
    """Provider-agnostic translation response.

    to_dict() and to_json() produce the on-wire shape: empty lists and absent blocks are left out.

    Attributes:
        src (str): Detected source language.
        sentences (list[Sentence]): Sentence pairs, then transliteration rows if requested.
        dict (list[Dictionary]): Dictionary entries ('bd').
        spell (SpellCheck | None): Spell-check suggestion ('qca').
        ld_result (LanguageDetectionResult | None): Language-detection block.
        alternative_translations (list[AlternativeTranslation]): Alternative candidates ('bd').
        examples (Examples | None): Example sentences ('ex').
        degraded (bool): The upstream failed and the original text was echoed back.
            Internal marker, never serialised.
    """

    src: str = ""
    sentences: list[Sentence] = field(default_factory=list, metadata=config(exclude=_is_empty))
    dict: list[Dictionary] = field(default_factory=list, metadata=config(exclude=_is_empty))
    spell: SpellCheck | None = field(default=None, metadata=config(exclude=_is_none))
    ld_result: LanguageDetectionResult | None = field(default=None, metadata=config(exclude=_is_none))
    alternative_translations: list[AlternativeTranslation] = field(
        default_factory=list, metadata=config(exclude=_is_empty)
    )
    examples: Examples | None = field(default=None, metadata=config(exclude=_is_none))
    degraded: bool = field(default=False, compare=False, repr=False, metadata=config(exclude=Exclude.ALWAYS))

    @property
    def translated_text(self) -> str:
        """All sentence translations joined in order."""
        return "".join(s.trans for s in self.sentences)
