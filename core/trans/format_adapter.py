"""Conversion of upstream outcomes into the canonical, Google-style response.

Only the translation sentence and the language detection block come from the provider. The
transliteration, dictionary, spell-check and example blocks are synthesised best-effort
placeholders so that clients expecting those keys keep working; they carry no linguistic data
beyond what the translation itself provides.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from models.response_models import (
    Alternative,
    AlternativeTranslation,
    CanonicalResponse,
    DictEntry,
    Dictionary,
    Examples,
    LanguageDetectionResult,
    Sentence,
    SpellCheck,
)
from models.translation_models import FieldToken
from utils.lang_utils import LangUtils
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterable

    from models.cache_models import CachedEntry
    from models.translation_models import TranslationOutcome

__all__: list[str] = ["FormatAdapter"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DETECTION_CONFIDENCE: Final[float] = 0.99
DEGRADED_CONFIDENCE: Final[float] = 0.5
DICTIONARY_SCORE: Final[float] = 0.95
PRIMARY_ALTERNATIVE_SCORE: Final[float] = 1.0
TRANSLATION_BACKEND: Final[int] = 1
DICTIONARY_POS: Final[str] = "translation"


class FormatAdapter:
    """Builds CanonicalResponse objects. Stateless; all methods are static."""

    @staticmethod
    def build_response(original_text: str, outcome: TranslationOutcome, fields: Iterable[str]) -> CanonicalResponse:
        """Build the response for a successful upstream outcome.

        Blocks are emitted only for requested field tokens:
            - 't': the sentence pair (orig, trans).
            - 'rm': a transliteration row. Synthetic: the original text and its upper-cased form.
            - 'bd': a one-entry dictionary and the alternative candidates. The dictionary is
              synthetic; the alternatives are the primary translation followed by any the
              provider returned.
            - 'qca': a spell-check block echoing the trimmed original. Synthetic.
            - 'ex': an empty example list. Synthetic.

        Args:
            original_text (str): Text sent to the provider.
            outcome (TranslationOutcome): Successful outcome from the upstream client.
            fields (Iterable[str]): Requested field tokens.

        Returns:
            CanonicalResponse: The response. ld_result is always set.
        """
        requested: frozenset[str] = frozenset(fields)
        src: str = LangUtils.normalize_language_code(outcome.source_lang)
        if not src:
            src = LangUtils.detect_language(original_text)
            logger.debug("Provider did not report a source language, detected '%s'", src)

        translated: str = outcome.translated_text
        response = CanonicalResponse(src=src, ld_result=LanguageDetectionResult.single(src, DETECTION_CONFIDENCE))

        if LangUtils.includes(requested, FieldToken.TRANSLATE.value):
            response.sentences.append(Sentence(orig=original_text, trans=translated, backend=TRANSLATION_BACKEND))

        if LangUtils.includes(requested, FieldToken.ROMANIZE.value):
            response.sentences.append(Sentence(src_translit=original_text, translit=original_text.upper()))

        if LangUtils.includes(requested, FieldToken.DICTIONARY.value):
            response.dict = [
                Dictionary(
                    pos=DICTIONARY_POS,
                    entry=[DictEntry(word=translated, reverse_translation=[original_text], score=DICTIONARY_SCORE)],
                )
            ]
            native: list[str] = outcome.raw.alternatives if outcome.raw is not None else []
            response.alternative_translations = FormatAdapter._build_alternatives(original_text, translated, native)

        if LangUtils.includes(requested, FieldToken.SPELLCHECK.value):
            response.spell = SpellCheck(spell_res=original_text.strip())

        if LangUtils.includes(requested, FieldToken.EXAMPLES.value):
            response.examples = Examples(example=[])

        return response

    @staticmethod
    def _build_alternatives(original_text: str, translated: str, native: list[str]) -> list[AlternativeTranslation]:
        candidates: list[str] = []
        for text in (translated, *native):
            if text and text not in candidates:
                candidates.append(text)
        if not candidates:
            return []

        # scores decrease with rank, the primary translation first
        step: float = PRIMARY_ALTERNATIVE_SCORE / len(candidates)
        alternatives: list[Alternative] = [
            Alternative(word_postproc=text, score=round(PRIMARY_ALTERNATIVE_SCORE - i * step, 4))
            for i, text in enumerate(candidates)
        ]
        return [
            AlternativeTranslation(src_phrase=original_text, raw_src_segment=original_text, alternative=alternatives)
        ]

    @staticmethod
    def build_cached_response(entry: CachedEntry) -> CanonicalResponse:
        """Rebuild a response from a cache entry.

        Only the sentence pair, the alternatives and the language blocks are stored, so the
        dictionary, spell-check, example and transliteration blocks are never present on a hit.
        """
        src: str = entry.source_lang
        response = CanonicalResponse(
            src=src,
            sentences=[Sentence(orig=entry.original_text, trans=entry.translated_text, backend=TRANSLATION_BACKEND)],
            ld_result=LanguageDetectionResult.single(src, DETECTION_CONFIDENCE),
        )
        if entry.alternatives:
            response.alternative_translations = [
                AlternativeTranslation(
                    src_phrase=entry.original_text,
                    alternative=[Alternative(word_postproc=text) for text in entry.alternatives],
                )
            ]
        return response

    @staticmethod
    def build_degraded_response(text: str, source_lang: str = "") -> CanonicalResponse:
        """Build the best-effort echo returned when the upstream rejected a request.

        Args:
            text (str): Original text, echoed as the translation.
            source_lang (str): Requested source language. Empty or 'auto' runs the heuristic.

        Returns:
            CanonicalResponse: A single sentence pair with a low detection confidence,
                marked as degraded.
        """
        src: str = LangUtils.detect_language(text, source_lang)
        return CanonicalResponse(
            src=src,
            sentences=[Sentence(orig=text, trans=text)],
            ld_result=LanguageDetectionResult.single(src, DEGRADED_CONFIDENCE),
            degraded=True,
        )
