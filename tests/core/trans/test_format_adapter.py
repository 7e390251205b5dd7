from __future__ import annotations

import pytest

from core.trans.format_adapter import FormatAdapter
from models.cache_models import CachedEntry
from models.translation_models import DEFAULT_FIELDS, FieldToken, TranslationOutcome, UpstreamPayload

ALL_FIELDS: frozenset[str] = frozenset(token.value for token in FieldToken)


def _outcome(text: str = "Hallo", source: str = "EN", alternatives: list[str] | None = None) -> TranslationOutcome:
    payload = UpstreamPayload(data=text, source_lang=source, alternatives=alternatives or [])
    return TranslationOutcome(success=True, translated_text=text, source_lang=source, raw=payload)


def test_default_fields_yield_sentence_only() -> None:
    response = FormatAdapter.build_response("Hello", _outcome(), DEFAULT_FIELDS)

    assert response.to_dict() == {
        "src": "en",
        "sentences": [{"orig": "Hello", "trans": "Hallo", "backend": 1}],
        "ld_result": {"srclangs": ["en"], "srclangs_confidences": [0.99]},
    }


def test_all_fields_yield_every_block() -> None:
    response = FormatAdapter.build_response("  Hello ", _outcome(), ALL_FIELDS)
    data = response.to_dict()

    assert set(data) == {"src", "sentences", "dict", "spell", "ld_result", "alternative_translations", "examples"}
    assert data["sentences"][1] == {"src_translit": "  Hello ", "translit": "  HELLO "}
    assert data["dict"] == [
        {"pos": "translation", "entry": [{"word": "Hallo", "reverse_translation": ["  Hello "], "score": 0.95}]}
    ]
    assert data["spell"] == {"spell_res": "Hello"}
    assert data["examples"] == {"example": []}


def test_romanize_without_translate_has_no_sentence_pair() -> None:
    response = FormatAdapter.build_response("Hello", _outcome(), frozenset({FieldToken.ROMANIZE.value}))

    assert len(response.sentences) == 1
    assert response.sentences[0].trans == ""
    assert response.sentences[0].translit == "HELLO"


def test_alternatives_rank_primary_first_without_duplicates() -> None:
    outcome: TranslationOutcome = _outcome("Hallo", alternatives=["Servus", "Hallo", "Moin"])

    response = FormatAdapter.build_response("Hello", outcome, frozenset({FieldToken.DICTIONARY.value}))

    block = response.alternative_translations[0]
    assert block.src_phrase == "Hello"
    assert block.raw_src_segment == "Hello"
    assert [(a.word_postproc, a.score) for a in block.alternative] == [
        ("Hallo", 1.0),
        ("Servus", pytest.approx(0.6667)),
        ("Moin", pytest.approx(0.3333)),
    ]


def test_provider_language_is_normalised() -> None:
    response = FormatAdapter.build_response("Hello", _outcome(source="EN-US"), DEFAULT_FIELDS)

    assert response.src == "en"
    assert response.ld_result is not None
    assert response.ld_result.srclangs == ["en"]


def test_missing_provider_language_uses_heuristic() -> None:
    response = FormatAdapter.build_response("こんにちは", _outcome(source=""), DEFAULT_FIELDS)

    assert response.src == "ja"


def test_cached_response_matches_fresh_default_response() -> None:
    fresh = FormatAdapter.build_response("Hello", _outcome(), DEFAULT_FIELDS)
    entry = CachedEntry(
        original_text="Hello",
        source_lang=fresh.src,
        target_lang="de",
        translated_text="Hallo",
        service="DeepLX",
        cached_at=CachedEntry.now_millis(),
    )

    assert FormatAdapter.build_cached_response(entry) == fresh


def test_cached_response_keeps_alternatives() -> None:
    entry = CachedEntry(
        original_text="Hello",
        source_lang="en",
        target_lang="de",
        translated_text="Hallo",
        alternatives=("Servus",),
        service="DeepLX",
        cached_at=1,
    )

    response = FormatAdapter.build_cached_response(entry)

    assert response.translated_text == "Hallo"
    assert [a.word_postproc for a in response.alternative_translations[0].alternative] == ["Servus"]
    assert response.dict == []


def test_degraded_response_echoes_text() -> None:
    response = FormatAdapter.build_degraded_response("안녕하세요")

    assert response.degraded is True
    assert response.src == "ko"
    assert response.translated_text == "안녕하세요"
    assert response.to_dict()["ld_result"] == {"srclangs": ["ko"], "srclangs_confidences": [0.5]}


def test_degraded_response_prefers_requested_source() -> None:
    assert FormatAdapter.build_degraded_response("Hello", "DE").src == "de"
