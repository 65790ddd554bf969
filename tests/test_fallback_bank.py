import pytest

from codeleap.fallback_bank import (
    FALLBACK_BANK,
    FallbackEntry,
    fallback_payload,
    resolve_bucket,
    select_fallback,
)
from codeleap.schemas import Difficulty, Language


def test_every_language_difficulty_pair_has_entries() -> None:
    for language in Language:
        for difficulty in Difficulty:
            entries = FALLBACK_BANK[language][difficulty]
            assert entries, f"empty bucket {language}/{difficulty}"
            for entry in entries:
                assert entry.code.strip()
                assert entry.explanation.strip()
                assert isinstance(entry.correct, bool)


def test_bank_has_both_verdicts() -> None:
    verdicts = {e.correct for lang in FALLBACK_BANK.values() for bucket in lang.values() for e in bucket}
    assert verdicts == {True, False}


@pytest.mark.parametrize("language", list(Language))
@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_selection_is_seed_modulo_size(language: Language, difficulty: Difficulty) -> None:
    entries = FALLBACK_BANK[language][difficulty]
    for seed in (0, 1, 2, 7, 1_700_000_000_123):
        picked = select_fallback(language, difficulty, seed)
        assert picked is entries[seed % len(entries)]
        assert select_fallback(language, difficulty, seed) is picked


def test_string_inputs_are_normalized() -> None:
    assert select_fallback("JS", "Advanced", 0) is FALLBACK_BANK[Language.JAVASCRIPT][Difficulty.HARD][0]


@pytest.mark.parametrize("difficulty", [None, "", "impossible", 42])
def test_unknown_difficulty_uses_easy_bucket(difficulty) -> None:
    easy = FALLBACK_BANK[Language.CSS][Difficulty.EASY]
    assert select_fallback("css", difficulty, 4) is easy[4 % len(easy)]


def test_empty_or_missing_bucket_uses_easy_bucket() -> None:
    easy = (FallbackEntry(code="a", correct=True, explanation="e1"), FallbackEntry(code="b", correct=False, explanation="e2"))
    catalog = {
        Language.JAVASCRIPT: {Difficulty.EASY: easy, Difficulty.MEDIUM: ()},
    }
    assert select_fallback(Language.JAVASCRIPT, Difficulty.MEDIUM, 1, catalog) is easy[1]
    assert select_fallback(Language.JAVASCRIPT, Difficulty.HARD, 2, catalog) is easy[0]


def test_unknown_language_uses_default_bucket() -> None:
    assert resolve_bucket("ruby", "hard") == (Language.JAVASCRIPT, Difficulty.EASY)
    assert select_fallback("ruby", "hard", 0) is FALLBACK_BANK[Language.JAVASCRIPT][Difficulty.EASY][0]


def test_negative_seed_still_selects() -> None:
    entries = FALLBACK_BANK[Language.HTML][Difficulty.EASY]
    assert select_fallback("html", "easy", -1) is entries[-1 % len(entries)]


def test_payload_uses_templates_when_entry_is_terse() -> None:
    entry = FALLBACK_BANK[Language.CSS][Difficulty.MEDIUM][0]
    assert entry.problem is None
    payload = fallback_payload(entry, Language.CSS, Difficulty.MEDIUM)
    assert payload["problem"] == "Is this CSS code correct?"
    assert payload["codeExplanation"] == "This CSS demonstrates medium-level styling concepts."
    assert payload["isCorrect"] is entry.correct
    assert payload["explanation"] == entry.explanation


def test_payload_keeps_authored_texts() -> None:
    entry = next(e for e in FALLBACK_BANK[Language.JAVASCRIPT][Difficulty.HARD] if e.problem)
    payload = fallback_payload(entry, Language.JAVASCRIPT, Difficulty.HARD)
    assert payload["problem"] == entry.problem
    assert payload["codeExplanation"] == entry.code_explanation
    assert payload["additionalInfo"] == entry.additional_info


def test_entries_are_immutable() -> None:
    entry = FALLBACK_BANK[Language.HTML][Difficulty.HARD][0]
    with pytest.raises(AttributeError):
        entry.correct = False  # type: ignore[misc]
