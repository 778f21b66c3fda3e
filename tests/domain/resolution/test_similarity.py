from __future__ import annotations

import pytest

from cinesource.domain.resolution import normalize_text, text_similarity


def test_normalize_text_folds_case_accents_and_punctuation() -> None:
    assert normalize_text("  Amélie:   Le Fabuleux Destin! ") == "amelie le fabuleux destin"


@pytest.mark.parametrize(
    ("left", "right"),
    [("Léon", "Leon"), ("The Matrix", "the  matrix"), ("Heat!", "heat")],
)
def test_equivalent_texts_are_identical(left: str, right: str) -> None:
    assert text_similarity(left, right) == 1.0


def test_reordered_words_score_through_token_overlap() -> None:
    assert text_similarity("Mann, Michael", "Michael Mann") == 1.0


def test_unrelated_texts_score_low() -> None:
    assert text_similarity("Michael Mann", "Kathryn Bigelow") < 0.5


def test_blank_texts() -> None:
    assert text_similarity("", "  ") == 1.0
    assert text_similarity("", "Heat") == 0.0


def test_similarity_is_symmetric() -> None:
    left, right = "Heat", "Heat Wave"

    assert text_similarity(left, right) == text_similarity(right, left)
